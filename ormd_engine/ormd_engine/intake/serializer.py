from __future__ import annotations

from typing import Any, Mapping

import yaml

from ormd_engine.models.document import OrmdDocument
from ormd_engine.models.types import ORMD_DEFAULT_VERSION


def dump_frontmatter(frontmatter: Mapping[str, Any]) -> str:
    """
    YAML block body (no delimiters). Key order is preserved; long lines are not folded.
    """
    return yaml.safe_dump(
        dict(frontmatter),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        indent=2,
        width=float("inf"),
    )


def render(frontmatter: Mapping[str, Any], content: str, *, version: str = ORMD_DEFAULT_VERSION) -> str:
    return f"<!-- ormd:{version} -->\n---\n{dump_frontmatter(frontmatter)}---\n\n{content}"


def serialize(document: OrmdDocument) -> str:
    """
    Inverse of parse(). Round-trips at the decoded-frontmatter level, not byte level.
    """
    return render(document.frontmatter, document.content)
