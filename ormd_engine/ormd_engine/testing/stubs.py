from __future__ import annotations

from typing import Any, Mapping, Optional

from ormd_engine.intake.serializer import render
from ormd_engine.models.document import OrmdDocument

CREATED = "2024-01-01T00:00:00Z"
MODIFIED = "2024-01-02T12:30:00Z"


def minimal_frontmatter(title: str = "Test Document", **extra: Any) -> dict[str, Any]:
    fm: dict[str, Any] = {"title": title, "dates": {"created": CREATED}}
    fm.update(extra)
    return fm


def full_frontmatter(title: str = "Context Engineering Notes") -> dict[str, Any]:
    """
    Deterministic frontmatter exercising every optional block the projector reads.
    """
    return {
        "title": title,
        "authors": [{"id": "ai.assistant", "display": "Assistant", "role": "drafter"}],
        "dates": {"created": CREATED, "modified": MODIFIED},
        "links": [{"id": "l1", "rel": "supports", "to": "#evidence"}],
        "context": {
            "lineage": {
                "source": "urn:ormd:notes-v1",
                "parent_docs": ["urn:ormd:outline"],
                "derivation_method": "extraction",
                "confidence_inheritance": "degraded",
            },
            "resolution": {"confidence": "validated", "evidence_strength": "strong"},
        },
        "status": "active",
        "version": "2.0",
        "keywords": ["ormd", "context"],
    }


def ormd_text(
    frontmatter: Optional[Mapping[str, Any]] = None,
    body: str = "# Heading\n\nBody text.",
    *,
    with_version: bool = True,
) -> str:
    text = render(frontmatter if frontmatter is not None else minimal_frontmatter(), body)
    if not with_version:
        # drop the leading version comment line
        text = text.split("\n", 1)[1]
    return text


def make_document(
    frontmatter: Optional[Mapping[str, Any]] = None,
    content: str = "Body text.",
) -> OrmdDocument:
    """
    Build a document directly, bypassing the parser (for validator tests).
    """
    fm = dict(frontmatter) if frontmatter is not None else minimal_frontmatter()
    return OrmdDocument(frontmatter=fm, content=content, raw=render(fm, content))
