# ormd_engine/ormd_engine/models/document.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional, Sequence


def _merge_meta(base: Mapping[str, Any], patch: Mapping[str, Any]) -> Mapping[str, Any]:
    if not patch:
        return dict(base)
    out = dict(base)
    out.update(patch)
    return out


def _as_tuple_or_none(seq: Optional[Sequence[str]]) -> Optional[tuple[str, ...]]:
    # Empty lists collapse to None: "absent" and "empty" read the same to callers.
    if not seq:
        return None
    return tuple(seq)


@dataclass(frozen=True)
class OrmdDocument:
    """
    A parsed ORMD document.

    - frontmatter: decoded YAML mapping (unknown keys preserved, not validated)
    - content: markdown body after the closing delimiter, stripped
    - raw: the exact text handed to the parser (source of truth for re-export)

    Never mutated in place; use with_frontmatter / with_content.
    """
    frontmatter: Mapping[str, Any] = field(default_factory=dict)
    content: str = ""
    raw: str = ""

    # -----------------------
    # Aliases
    # -----------------------

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self.frontmatter

    @property
    def body(self) -> str:
        return self.content

    @property
    def raw_text(self) -> str:
        return self.raw

    # -----------------------
    # Frontmatter accessors
    # -----------------------

    @property
    def title(self) -> Optional[str]:
        return self.frontmatter.get("title")

    @property
    def dates(self) -> Mapping[str, Any]:
        dates = self.frontmatter.get("dates")
        return dates if isinstance(dates, Mapping) else {}

    @property
    def context(self) -> Mapping[str, Any]:
        ctx = self.frontmatter.get("context")
        return ctx if isinstance(ctx, Mapping) else {}

    @property
    def lineage(self) -> Optional[Mapping[str, Any]]:
        lin = self.context.get("lineage")
        return lin if isinstance(lin, Mapping) else None

    @property
    def resolution(self) -> Mapping[str, Any]:
        res = self.context.get("resolution")
        return res if isinstance(res, Mapping) else {}

    @property
    def confidence(self) -> Optional[str]:
        return self.resolution.get("confidence")

    @property
    def status(self) -> Optional[str]:
        return self.frontmatter.get("status")

    # -----------------------
    # Immutability helpers
    # -----------------------

    def with_frontmatter(self, **patch: Any) -> "OrmdDocument":
        return replace(self, frontmatter=_merge_meta(self.frontmatter, patch))

    def with_content(self, content: str) -> "OrmdDocument":
        return replace(self, content=content)


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of parse(): either a document or a list of errors.

    errors / warnings are None when there are none, never empty tuples.
    """
    success: bool
    data: Optional[OrmdDocument] = None
    errors: Optional[Sequence[str]] = None
    warnings: Optional[Sequence[str]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", _as_tuple_or_none(self.errors))
        object.__setattr__(self, "warnings", _as_tuple_or_none(self.warnings))

    @property
    def document(self) -> Optional[OrmdDocument]:
        return self.data


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: Optional[Sequence[str]] = None
    warnings: Optional[Sequence[str]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", _as_tuple_or_none(self.errors))
        object.__setattr__(self, "warnings", _as_tuple_or_none(self.warnings))

    @property
    def ok(self) -> bool:
        return self.valid
