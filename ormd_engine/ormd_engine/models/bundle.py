# ormd_engine/ormd_engine/models/bundle.py

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple


def _scalar(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _opt_tuple(seq: Optional[Sequence[Any]]) -> Optional[Tuple[Any, ...]]:
    if seq is None:
        return None
    return tuple(seq)


def _to_wire(obj: Any) -> Any:
    """Dataclass -> plain dict, dropping None fields (absent on the wire)."""
    if is_dataclass(obj):
        out: Dict[str, Any] = {}
        for f in fields(obj):
            v = getattr(obj, f.name)
            if v is None:
                continue
            out[f.name] = _to_wire(v)
        return out
    if isinstance(obj, (list, tuple)):
        return [_to_wire(v) for v in obj]
    return _scalar(obj)


class _WireMixin:
    def to_dict(self) -> Dict[str, Any]:
        return _to_wire(self)


@dataclass(frozen=True)
class BundleContent(_WireMixin):
    type: str
    data: str
    encoding: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "BundleContent":
        return cls(type=d["type"], data=d["data"], encoding=d.get("encoding"))


@dataclass(frozen=True)
class BundleFrame(_WireMixin):
    type: str
    perspective: Optional[str] = None
    domain: Optional[str] = None
    scope: Optional[str] = None  # local | global | federated

    def __post_init__(self) -> None:
        object.__setattr__(self, "scope", _scalar(self.scope))

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "BundleFrame":
        return cls(
            type=d["type"],
            perspective=d.get("perspective"),
            domain=d.get("domain"),
            scope=d.get("scope"),
        )


@dataclass(frozen=True)
class BundleLineage(_WireMixin):
    source_type: str
    source_id: str
    derivation: str = "synthesis"
    confidence_flow: str = "preserved"
    parent_bundles: Optional[Sequence[str]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "derivation", _scalar(self.derivation))
        object.__setattr__(self, "confidence_flow", _scalar(self.confidence_flow))
        object.__setattr__(self, "parent_bundles", _opt_tuple(self.parent_bundles))

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "BundleLineage":
        return cls(
            source_type=d["source_type"],
            source_id=d["source_id"],
            derivation=d.get("derivation", "synthesis"),
            confidence_flow=d.get("confidence_flow", "preserved"),
            parent_bundles=d.get("parent_bundles"),
        )


@dataclass(frozen=True)
class BundlePolicy(_WireMixin):
    access_level: str = "public"  # public | private | restricted
    usage_rights: Optional[str] = None
    retention_period: Optional[str] = None
    privacy_constraints: Optional[Sequence[str]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "access_level", _scalar(self.access_level))
        object.__setattr__(self, "privacy_constraints", _opt_tuple(self.privacy_constraints))

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "BundlePolicy":
        return cls(
            access_level=d["access_level"],
            usage_rights=d.get("usage_rights"),
            retention_period=d.get("retention_period"),
            privacy_constraints=d.get("privacy_constraints"),
        )


@dataclass(frozen=True)
class UncertaintyBounds(_WireMixin):
    temporal: Optional[str] = None
    domain: Optional[str] = None
    precision: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "UncertaintyBounds":
        return cls(temporal=d.get("temporal"), domain=d.get("domain"), precision=d.get("precision"))


@dataclass(frozen=True)
class BundleResolution(_WireMixin):
    confidence: str = "working"
    evidence_strength: Optional[str] = None
    uncertainty_bounds: Optional[UncertaintyBounds] = None
    validation_status: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", _scalar(self.confidence))
        object.__setattr__(self, "evidence_strength", _scalar(self.evidence_strength))
        object.__setattr__(self, "validation_status", _scalar(self.validation_status))

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "BundleResolution":
        bounds = d.get("uncertainty_bounds")
        return cls(
            confidence=d["confidence"],
            evidence_strength=d.get("evidence_strength"),
            uncertainty_bounds=UncertaintyBounds.from_dict(bounds) if bounds is not None else None,
            validation_status=d.get("validation_status"),
        )


@dataclass(frozen=True)
class EvidenceSummary(_WireMixin):
    support_count: Optional[int] = None
    contradiction_count: Optional[int] = None
    uncertainty_factors: Optional[Sequence[str]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "uncertainty_factors", _opt_tuple(self.uncertainty_factors))

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "EvidenceSummary":
        return cls(
            support_count=d.get("support_count"),
            contradiction_count=d.get("contradiction_count"),
            uncertainty_factors=d.get("uncertainty_factors"),
        )


@dataclass(frozen=True)
class BundleExplain(_WireMixin):
    reasoning_trace: Optional[Sequence[str]] = None
    evidence_summary: Optional[EvidenceSummary] = None
    methodology: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "reasoning_trace", _opt_tuple(self.reasoning_trace))

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "BundleExplain":
        summary = d.get("evidence_summary")
        return cls(
            reasoning_trace=d.get("reasoning_trace"),
            evidence_summary=EvidenceSummary.from_dict(summary) if summary is not None else None,
            methodology=d.get("methodology"),
        )


@dataclass(frozen=True)
class ContextBundle(_WireMixin):
    """
    Canonical envelope a document is projected into for storage and exchange.

    Always present: id, version, content.{type,data}, frame.type, resolution.confidence.
    Optional sections must satisfy their own required fields when present
    (checked by invariants.bundle_schema, not here).

    Immutable: updates are new bundles via with_updates().
    """
    id: str
    content: BundleContent
    frame: BundleFrame
    resolution: BundleResolution = field(default_factory=BundleResolution)
    version: str = "1.0"
    created: Optional[str] = None
    lineage: Optional[BundleLineage] = None
    policy: Optional[BundlePolicy] = None
    explain: Optional[BundleExplain] = None

    def to_dict(self) -> Dict[str, Any]:
        # Stable wire order: id, version, created, content, frame, lineage, policy, resolution, explain
        d = _to_wire(self)
        order = ("id", "version", "created", "content", "frame", "lineage", "policy", "resolution", "explain")
        return {k: d[k] for k in order if k in d}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ContextBundle":
        lineage = d.get("lineage")
        policy = d.get("policy")
        explain = d.get("explain")
        return cls(
            id=d["id"],
            version=d.get("version", "1.0"),
            created=d.get("created"),
            content=BundleContent.from_dict(d["content"]),
            frame=BundleFrame.from_dict(d["frame"]),
            resolution=BundleResolution.from_dict(d["resolution"]),
            lineage=BundleLineage.from_dict(lineage) if lineage is not None else None,
            policy=BundlePolicy.from_dict(policy) if policy is not None else None,
            explain=BundleExplain.from_dict(explain) if explain is not None else None,
        )

    # -----------------------
    # Immutability helpers
    # -----------------------

    def with_updates(self, **updates: Any) -> "ContextBundle":
        """
        Shallow merge. Section values may be dataclasses or wire dicts.
        """
        coerced: Dict[str, Any] = {}
        for key, value in updates.items():
            if isinstance(value, Mapping):
                value = _SECTION_TYPES[key].from_dict(value) if key in _SECTION_TYPES else value
            coerced[key] = value
        return replace(self, **coerced)

    def with_policy(self, policy: Optional[BundlePolicy]) -> "ContextBundle":
        return replace(self, policy=policy)

    def with_lineage(self, lineage: Optional[BundleLineage]) -> "ContextBundle":
        return replace(self, lineage=lineage)

    def with_explain(self, explain: Optional[BundleExplain]) -> "ContextBundle":
        return replace(self, explain=explain)


_SECTION_TYPES: Mapping[str, Any] = {
    "content": BundleContent,
    "frame": BundleFrame,
    "resolution": BundleResolution,
    "lineage": BundleLineage,
    "policy": BundlePolicy,
    "explain": BundleExplain,
}
