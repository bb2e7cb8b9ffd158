from .rules import InvariantViolation, collect_violations
from .validate import (
    validate,
    validate_bundle_id,
    validate_context_bundle,
    validate_document,
    validate_timestamp,
)

__all__ = [
    "InvariantViolation",
    "collect_violations",
    "validate",
    "validate_bundle_id",
    "validate_context_bundle",
    "validate_document",
    "validate_timestamp",
]
