import sys
from pathlib import Path

# -------------------------------------------------------------------
# Make the packages importable BEFORE importing any project code:
#   parents[1] holds ormd_engine/, parents[2] (repo root) holds ormd_agents/.
# -------------------------------------------------------------------
PKG_ROOT = Path(__file__).resolve().parents[1]
ROOT = Path(__file__).resolve().parents[2]
for p in (ROOT, PKG_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

import pytest  # noqa: E402

from ormd_engine.runtime.in_memory_store import InMemoryContextStore  # noqa: E402
from ormd_engine.testing.stubs import make_document as _make_document  # noqa: E402
from ormd_engine.testing.stubs import ormd_text  # noqa: E402

EXAMPLE_TEXT = "<!-- ormd:0.1 -->\n---\ntitle: X\ndates:\n  created: '2024-01-01T00:00:00Z'\n---\n\nBody"


@pytest.fixture
def valid_ormd_text() -> str:
    return EXAMPLE_TEXT


@pytest.fixture
def store():
    s = InMemoryContextStore()
    yield s
    s.close()


@pytest.fixture
def make_document():
    """
    Returns a factory building an OrmdDocument directly (no parser),
    so validator tests can start from any frontmatter shape.
    """
    return _make_document


@pytest.fixture
def make_text():
    return ormd_text
