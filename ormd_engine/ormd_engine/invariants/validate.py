from __future__ import annotations

import logging
from typing import Sequence

from ormd_engine.models.document import OrmdDocument, ValidationResult

from .bundle_schema import validate_bundle_id, validate_context_bundle, validate_timestamp
from .rules import (
    DOCUMENT_RULES,
    InvariantViolation,
    Rule,
    collect_violations,
    require_calendar_valid_dates,
)

logger = logging.getLogger(__name__)


def report_from_violations(violations: Sequence[InvariantViolation]) -> ValidationResult:
    errors = [v.message for v in violations if not v.is_warning]
    warnings = [v.message for v in violations if v.is_warning]
    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def validate_document(
    document: OrmdDocument,
    *,
    strict_dates: bool = False,
    rules: Sequence[Rule] = DOCUMENT_RULES,
) -> ValidationResult:
    """
    Semantic re-check of an already-parsed document. Never raises for a
    well-formed-but-wrong document; every violation is reported at once.

    strict_dates adds calendar validity on top of the lexical date check.
    """
    active = tuple(rules) + ((require_calendar_valid_dates,) if strict_dates else ())
    report = report_from_violations(collect_violations(document, active))
    if not report.valid:
        logger.debug("validate: %d error(s) for %r", len(report.errors or ()), document.title)
    return report


validate = validate_document


__all__ = [
    "InvariantViolation",
    "report_from_violations",
    "validate",
    "validate_document",
    "validate_context_bundle",
    "validate_bundle_id",
    "validate_timestamp",
]
