from __future__ import annotations

import random
import re
import time
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet
from uuid import uuid4


# ============================================================
# types.py (kernel scalars + taxonomies)
# ============================================================

def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """UTC now as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return now_utc().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex}"


_B36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_B36[r])
    return "".join(reversed(out))


def new_bundle_ulid() -> str:
    """
    ULID-like identifier: base-36 millisecond timestamp + random base-36 suffix.

    Not cryptographically secure and not a strong uniqueness guarantee.
    """
    timestamp = _base36(int(time.time() * 1000))
    suffix = "".join(random.choice(_B36) for _ in range(13))
    return f"{timestamp}{suffix}".upper()


# ---------------------------
# Patterns
# ---------------------------

ORMD_VERSION_COMMENT = re.compile(r"^<!--\s*ormd:(\d+\.\d+)\s*-->")
ORMD_DEFAULT_VERSION = "0.1"

ISO8601_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{3})?Z?\Z")

BUNDLE_ID_PREFIX = "urn:cb:"
BUNDLE_ID_PATTERN = re.compile(r"^urn:cb:[A-Za-z0-9]+\Z")


# ---------------------------
# Enumerations
# ---------------------------

class ConfidenceLevel(str, Enum):
    EXPLORATORY = "exploratory"
    WORKING = "working"
    VALIDATED = "validated"


class EvidenceStrength(str, Enum):
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"


class DocumentStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"
    DEPRECATED = "deprecated"


class DerivationMethod(str, Enum):
    SYNTHESIS = "synthesis"
    EXTRACTION = "extraction"
    TRANSLATION = "translation"
    EVOLUTION = "evolution"


class ConfidenceFlow(str, Enum):
    PRESERVED = "preserved"
    DEGRADED = "degraded"
    ENHANCED = "enhanced"


class FrameScope(str, Enum):
    LOCAL = "local"
    GLOBAL = "global"
    FEDERATED = "federated"


class AccessLevel(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    RESTRICTED = "restricted"


def enum_values(enum_cls: type[Enum]) -> FrozenSet[str]:
    return frozenset(m.value for m in enum_cls)


# Link relationships are open-ended: these are suggestions, any string is accepted.
STRUCTURAL_RELATIONSHIPS = ("extends", "implements", "derives_from", "supersedes")
LOGICAL_RELATIONSHIPS = ("supports", "contradicts", "complements", "contextualizes")
TEMPORAL_RELATIONSHIPS = ("precedes", "follows", "concurrent", "cyclical")

SUGGESTED_LINK_RELATIONSHIPS: FrozenSet[str] = frozenset(
    STRUCTURAL_RELATIONSHIPS + LOGICAL_RELATIONSHIPS + TEMPORAL_RELATIONSHIPS
)


def is_suggested_relationship(rel: str) -> bool:
    return rel in SUGGESTED_LINK_RELATIONSHIPS
