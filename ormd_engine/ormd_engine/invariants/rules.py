from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from ormd_engine.models.document import OrmdDocument
from ormd_engine.models.types import (
    ConfidenceLevel,
    DocumentStatus,
    EvidenceStrength,
    enum_values,
)
from ormd_engine.invariants.bundle_schema import validate_timestamp


@dataclass(frozen=True)
class InvariantViolation:
    rule: str
    message: str
    severity: str = "error"  # "error" | "warning"

    @property
    def is_warning(self) -> bool:
        return self.severity == "warning"


Rule = Callable[[OrmdDocument], Sequence[InvariantViolation]]


VALID_CONFIDENCE = enum_values(ConfidenceLevel)
VALID_EVIDENCE_STRENGTH = enum_values(EvidenceStrength)
VALID_STATUS = enum_values(DocumentStatus)

LINK_REQUIRED_FIELDS = ("id", "rel", "to")
AUTHOR_REQUIRED_FIELDS = ("id", "display")


def _in_enum(value: Any, allowed: frozenset) -> bool:
    return isinstance(value, str) and value in allowed


def _has_fields(entry: Any, required: Sequence[str]) -> bool:
    return isinstance(entry, Mapping) and all(entry.get(f) for f in required)


# ---------------------------
# Required fields
# ---------------------------

def require_title(document: OrmdDocument) -> Sequence[InvariantViolation]:
    title = document.frontmatter.get("title")
    if title is None or not str(title).strip():
        return (
            InvariantViolation(
                rule="title_required",
                message="Title is required and cannot be empty",
            ),
        )
    return tuple()


def require_created_date(document: OrmdDocument) -> Sequence[InvariantViolation]:
    if not document.dates.get("created"):
        return (
            InvariantViolation(
                rule="created_date_required",
                message="Created date is required",
            ),
        )
    return tuple()


def require_calendar_valid_dates(document: OrmdDocument) -> Sequence[InvariantViolation]:
    """
    Stricter than parse(): 2024-02-30T00:00:00Z matches the pattern but is not a date.
    Opt-in via validate_document(strict_dates=True).
    """
    violations: list[InvariantViolation] = []
    for key in ("created", "modified"):
        value = document.dates.get(key)
        if value and not validate_timestamp(value):
            violations.append(
                InvariantViolation(
                    rule="date_calendar_valid",
                    message=f"Invalid calendar date for dates.{key}: {value}",
                )
            )
    return tuple(violations)


# ---------------------------
# Enumerations
# ---------------------------

def require_valid_confidence(document: OrmdDocument) -> Sequence[InvariantViolation]:
    confidence = document.resolution.get("confidence")
    if confidence and not _in_enum(confidence, VALID_CONFIDENCE):
        return (
            InvariantViolation(
                rule="confidence_enum",
                message=f"Invalid confidence level: {confidence}",
            ),
        )
    return tuple()


def require_valid_evidence_strength(document: OrmdDocument) -> Sequence[InvariantViolation]:
    strength = document.resolution.get("evidence_strength")
    if strength and not _in_enum(strength, VALID_EVIDENCE_STRENGTH):
        return (
            InvariantViolation(
                rule="evidence_strength_enum",
                message=f"Invalid evidence strength: {strength}",
            ),
        )
    return tuple()


def require_valid_status(document: OrmdDocument) -> Sequence[InvariantViolation]:
    status = document.frontmatter.get("status")
    if status and not _in_enum(status, VALID_STATUS):
        return (
            InvariantViolation(
                rule="status_enum",
                message=f"Invalid status: {status}",
            ),
        )
    return tuple()


# ---------------------------
# List entries
# ---------------------------

def require_complete_links(document: OrmdDocument) -> Sequence[InvariantViolation]:
    """
    Every link needs id, rel and to. rel is open-ended: any non-empty string.
    """
    links = document.frontmatter.get("links")
    if not links:
        return tuple()
    if not isinstance(links, list):
        return (InvariantViolation(rule="links_shape", message="links must be a list"),)

    violations: list[InvariantViolation] = []
    for idx, link in enumerate(links):
        if not _has_fields(link, LINK_REQUIRED_FIELDS):
            violations.append(
                InvariantViolation(
                    rule="link_fields",
                    message=f"Link {idx}: missing required fields (id, rel, to)",
                )
            )
    return tuple(violations)


def require_complete_authors(document: OrmdDocument) -> Sequence[InvariantViolation]:
    authors = document.frontmatter.get("authors")
    if not authors:
        return tuple()
    if not isinstance(authors, list):
        return (InvariantViolation(rule="authors_shape", message="authors must be a list"),)

    violations: list[InvariantViolation] = []
    for idx, author in enumerate(authors):
        if not _has_fields(author, AUTHOR_REQUIRED_FIELDS):
            violations.append(
                InvariantViolation(
                    rule="author_fields",
                    message=f"Author {idx}: missing required fields (id, display)",
                )
            )
    return tuple(violations)


# ---------------------------
# Content
# ---------------------------

def warn_empty_content(document: OrmdDocument) -> Sequence[InvariantViolation]:
    if not (document.content or "").strip():
        return (
            InvariantViolation(
                rule="content_empty",
                message="Document content is empty",
                severity="warning",
            ),
        )
    return tuple()


# Order matters: messages are reported in this order.
DOCUMENT_RULES: Sequence[Rule] = (
    require_title,
    require_created_date,
    require_valid_confidence,
    require_valid_evidence_strength,
    require_valid_status,
    require_complete_links,
    require_complete_authors,
    warn_empty_content,
)


def collect_violations(
    document: OrmdDocument,
    rules: Sequence[Rule] = DOCUMENT_RULES,
) -> Sequence[InvariantViolation]:
    out: list[InvariantViolation] = []
    for rule in rules:
        out.extend(rule(document))
    return tuple(out)
