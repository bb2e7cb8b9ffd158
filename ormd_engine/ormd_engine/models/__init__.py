"""
Core kernel models.

Text → OrmdDocument → ContextBundle
"""

from .types import (
    AccessLevel,
    ConfidenceFlow,
    ConfidenceLevel,
    DerivationMethod,
    DocumentStatus,
    EvidenceStrength,
    FrameScope,
    SUGGESTED_LINK_RELATIONSHIPS,
    new_bundle_ulid,
    new_id,
    now_iso,
    now_utc,
)

from .document import OrmdDocument, ParseResult, ValidationResult
from .bundle import (
    BundleContent,
    BundleExplain,
    BundleFrame,
    BundleLineage,
    BundlePolicy,
    BundleResolution,
    ContextBundle,
    EvidenceSummary,
    UncertaintyBounds,
)

__all__ = [
    "AccessLevel",
    "ConfidenceFlow",
    "ConfidenceLevel",
    "DerivationMethod",
    "DocumentStatus",
    "EvidenceStrength",
    "FrameScope",
    "SUGGESTED_LINK_RELATIONSHIPS",
    "new_bundle_ulid",
    "new_id",
    "now_iso",
    "now_utc",
    "OrmdDocument",
    "ParseResult",
    "ValidationResult",
    "BundleContent",
    "BundleExplain",
    "BundleFrame",
    "BundleLineage",
    "BundlePolicy",
    "BundleResolution",
    "ContextBundle",
    "EvidenceSummary",
    "UncertaintyBounds",
]
