"""
OrmdDocument → ContextBundle projection.

Pure and total: assumes the document already passed parse(); applies defaults
instead of rejecting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ormd_engine.models.bundle import (
    BundleContent,
    BundleFrame,
    BundleLineage,
    BundlePolicy,
    BundleResolution,
    ContextBundle,
)
from ormd_engine.models.document import OrmdDocument
from ormd_engine.models.types import BUNDLE_ID_PREFIX, new_bundle_ulid


@dataclass(frozen=True)
class ProjectionPolicy:
    """
    Projection defaults. The zero-arg instance reproduces the fixed envelope:
    frame ormd.document/local, confidence "working", public cc-by-sa-4.0 policy.
    """
    frame_type: str = "ormd.document"
    frame_scope: str = "local"
    default_confidence: str = "working"
    default_version: str = "1.0"
    access_level: str = "public"
    usage_rights: Optional[str] = "cc-by-sa-4.0"
    lineage_source_type: str = "ormd"


DEFAULT_PROJECTION = ProjectionPolicy()


def generate_bundle_id() -> str:
    return f"{BUNDLE_ID_PREFIX}{new_bundle_ulid()}"


def _parent_docs(value: Any) -> Optional[Sequence[str]]:
    # a single parent may be written as a bare string
    if value is None or isinstance(value, (list, tuple)):
        return value
    return [str(value)]


def _lineage(document: OrmdDocument, policy: ProjectionPolicy) -> Optional[BundleLineage]:
    lin = document.lineage
    if lin is None:
        return None
    return BundleLineage(
        source_type=policy.lineage_source_type,
        source_id=lin.get("source") or "unknown",
        parent_bundles=_parent_docs(lin.get("parent_docs")),
        derivation=lin.get("derivation_method") or "synthesis",
        confidence_flow=lin.get("confidence_inheritance") or "preserved",
    )


def to_context_bundle(
    document: OrmdDocument,
    bundle_id: Optional[str] = None,
    *,
    policy: Optional[ProjectionPolicy] = None,
) -> ContextBundle:
    """
    content.data carries the whole raw text (frontmatter included), not just the body.
    Deterministic when bundle_id is given.
    """
    p = policy or DEFAULT_PROJECTION
    fm = document.frontmatter
    res = document.resolution

    # unquoted `version: 2.0` decodes as a float
    version = fm.get("version")

    return ContextBundle(
        id=bundle_id or generate_bundle_id(),
        version=str(version) if version else p.default_version,
        created=document.dates.get("created"),
        content=BundleContent(type="text/markdown", data=document.raw, encoding="utf-8"),
        frame=BundleFrame(type=p.frame_type, scope=p.frame_scope),
        resolution=BundleResolution(
            confidence=res.get("confidence") or p.default_confidence,
            evidence_strength=res.get("evidence_strength"),
            validation_status=fm.get("status"),
        ),
        lineage=_lineage(document, p),
        policy=BundlePolicy(access_level=p.access_level, usage_rights=p.usage_rights),
    )


# short alias
to_bundle = to_context_bundle
