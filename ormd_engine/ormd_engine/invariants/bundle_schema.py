# ormd_engine/ormd_engine/invariants/bundle_schema.py
"""
JSON Schema for the ContextBundle wire format.

Projection never validates its own output; callers that hand a bundle to
another system (CLI convert, storage import) check it here.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Union

from jsonschema import Draft7Validator

from ormd_engine.models.bundle import ContextBundle
from ormd_engine.models.document import ValidationResult
from ormd_engine.models.types import ISO8601_PATTERN

# Generated ids are upper-cased; this is the strict form.
STRICT_BUNDLE_ID = re.compile(r"^urn:cb:[A-Z0-9]+\Z")


def _str() -> Dict[str, Any]:
    return {"type": "string"}


def _str_list() -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}}


CONTEXT_BUNDLE_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "ContextBundle",
    "type": "object",
    "properties": {
        "id": {"type": "string", "pattern": "^urn:cb:"},
        "version": _str(),
        "created": _str(),
        "content": {
            "type": "object",
            "properties": {"type": _str(), "data": _str(), "encoding": _str()},
            "required": ["type", "data"],
            "additionalProperties": False,
        },
        "frame": {
            "type": "object",
            "properties": {
                "type": _str(),
                "perspective": _str(),
                "domain": _str(),
                "scope": {"type": "string", "enum": ["local", "global", "federated"]},
            },
            "required": ["type"],
            "additionalProperties": False,
        },
        "lineage": {
            "type": "object",
            "properties": {
                "source_type": _str(),
                "source_id": _str(),
                "parent_bundles": _str_list(),
                "derivation": {"type": "string", "enum": ["synthesis", "extraction", "translation", "evolution"]},
                "confidence_flow": {"type": "string", "enum": ["preserved", "degraded", "enhanced"]},
            },
            "required": ["source_type", "source_id", "derivation", "confidence_flow"],
            "additionalProperties": False,
        },
        "policy": {
            "type": "object",
            "properties": {
                "access_level": {"type": "string", "enum": ["public", "private", "restricted"]},
                "usage_rights": _str(),
                "retention_period": _str(),
                "privacy_constraints": _str_list(),
            },
            "required": ["access_level"],
            "additionalProperties": False,
        },
        "resolution": {
            "type": "object",
            "properties": {
                "confidence": {"type": "string", "enum": ["exploratory", "working", "validated"]},
                "evidence_strength": {"type": "string", "enum": ["weak", "moderate", "strong"]},
                "uncertainty_bounds": {
                    "type": "object",
                    "properties": {"temporal": _str(), "domain": _str(), "precision": _str()},
                    "additionalProperties": False,
                },
                "validation_status": _str(),
            },
            "required": ["confidence"],
            "additionalProperties": False,
        },
        "explain": {
            "type": "object",
            "properties": {
                "reasoning_trace": _str_list(),
                "evidence_summary": {
                    "type": "object",
                    "properties": {
                        "support_count": {"type": "number"},
                        "contradiction_count": {"type": "number"},
                        "uncertainty_factors": _str_list(),
                    },
                    "additionalProperties": False,
                },
                "methodology": _str(),
            },
            "additionalProperties": False,
        },
    },
    "required": ["id", "version", "content", "frame", "resolution"],
    "additionalProperties": False,
}

_VALIDATOR = Draft7Validator(CONTEXT_BUNDLE_SCHEMA)


def _error_path(error: Any) -> str:
    if not error.absolute_path:
        return "root"
    return "/" + "/".join(str(p) for p in error.absolute_path)


def validate_context_bundle(bundle: Union[ContextBundle, Mapping[str, Any]]) -> ValidationResult:
    """
    Report every schema violation at once, as "<path>: <message>".
    """
    payload = bundle.to_dict() if isinstance(bundle, ContextBundle) else dict(bundle)
    errors: List[str] = [
        f"{_error_path(e)}: {e.message}"
        for e in sorted(_VALIDATOR.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path])
    ]
    return ValidationResult(valid=not errors, errors=errors)


def validate_bundle_id(bundle_id: str) -> bool:
    return isinstance(bundle_id, str) and STRICT_BUNDLE_ID.match(bundle_id) is not None


def validate_timestamp(timestamp: str) -> bool:
    """
    Lexical ISO-8601 pattern AND a real calendar instant.
    """
    if not isinstance(timestamp, str) or not ISO8601_PATTERN.match(timestamp):
        return False
    try:
        datetime.fromisoformat(timestamp.rstrip("Z"))
    except ValueError:
        return False
    return True
