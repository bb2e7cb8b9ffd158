"""
ORMD context engine.

    text --parse--> OrmdDocument --validate--> ValidationResult
                         |
                         +--to_context_bundle--> ContextBundle --store--> ContextStore
"""
from .errors import (
    ConflictError,
    NotFoundError,
    OrmdError,
    OrmdParseError,
    OrmdValidationError,
    StorageError,
    StoreClosedError,
)
from .intake import parse, serialize, to_context_bundle
from .invariants import validate, validate_context_bundle
from .models import ContextBundle, OrmdDocument, ParseResult, ValidationResult

__version__ = "0.1.0"

__all__ = [
    "ConflictError",
    "NotFoundError",
    "OrmdError",
    "OrmdParseError",
    "OrmdValidationError",
    "StorageError",
    "StoreClosedError",
    "parse",
    "serialize",
    "to_context_bundle",
    "validate",
    "validate_context_bundle",
    "ContextBundle",
    "OrmdDocument",
    "ParseResult",
    "ValidationResult",
]
