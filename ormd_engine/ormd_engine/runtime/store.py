from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Sequence, runtime_checkable

from ormd_engine.models.bundle import ContextBundle


# ---------------------------
# Stored forms
# ---------------------------

@dataclass(frozen=True)
class StoredContextBundle:
    """
    A ContextBundle plus the index fields the store derives on every write.
    """
    bundle: ContextBundle
    indexed_at: str
    search_text: str
    tags: Sequence[str] = field(default_factory=tuple)
    rev: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", tuple(self.tags))

    @property
    def id(self) -> str:
        return self.bundle.id

    # Read-through to the bundle so callers can treat this as a bundle.
    def __getattr__(self, name: str) -> Any:
        if name == "bundle":
            raise AttributeError(name)
        return getattr(self.bundle, name)

    def to_dict(self) -> Dict[str, Any]:
        d = self.bundle.to_dict()
        d["_id"] = self.bundle.id
        if self.rev is not None:
            d["_rev"] = self.rev
        d["indexed_at"] = self.indexed_at
        d["search_text"] = self.search_text
        d["tags"] = list(self.tags)
        return d

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "StoredContextBundle":
        bundle_fields = {k: v for k, v in d.items() if k not in _INDEX_KEYS}
        return cls(
            bundle=ContextBundle.from_dict(bundle_fields),
            indexed_at=d.get("indexed_at", ""),
            search_text=d.get("search_text", ""),
            tags=d.get("tags", ()),
            rev=d.get("_rev"),
        )


_INDEX_KEYS = frozenset({"_id", "_rev", "indexed_at", "search_text", "tags"})


@dataclass(frozen=True)
class RelationshipIndex:
    """
    Directed, typed, weighted edge between two bundle ids. strength is a 0–1 score.
    """
    id: str
    source_id: str
    target_id: str
    relationship: str
    strength: float
    created_at: str
    metadata: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        if not (0.0 <= self.strength <= 1.0):
            raise ValueError("RelationshipIndex.strength must be between 0.0 and 1.0")

    def touches(self, bundle_id: str) -> bool:
        return bundle_id in (self.source_id, self.target_id)

    def other_end(self, bundle_id: str) -> str:
        return self.target_id if self.source_id == bundle_id else self.source_id

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "source_id": self.source_id,
            "target_id": self.target_id,
            "relationship": self.relationship,
            "strength": self.strength,
            "created_at": self.created_at,
        }
        if self.metadata is not None:
            d["metadata"] = dict(self.metadata)
        return d

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "RelationshipIndex":
        return cls(
            id=d["id"],
            source_id=d["source_id"],
            target_id=d["target_id"],
            relationship=d["relationship"],
            strength=float(d.get("strength", 1.0)),
            created_at=d.get("created_at", ""),
            metadata=d.get("metadata"),
        )


# ---------------------------
# Queries
# ---------------------------

@dataclass(frozen=True)
class ContextQuery:
    search: Optional[str] = None

    tags: Sequence[str] = field(default_factory=tuple)
    content_type: Optional[str] = None
    confidence: Optional[str] = None  # exploratory | working | validated

    created_after: Optional[str] = None
    created_before: Optional[str] = None

    related_to: Optional[str] = None
    relationship_type: Optional[str] = None

    limit: int = 50
    skip: int = 0

    sort_by: Optional[str] = None  # created | modified | relevance
    sort_order: str = "asc"

    def has_filters(self) -> bool:
        return bool(
            self.tags
            or self.content_type
            or self.confidence
            or self.created_after
            or self.created_before
        )


@dataclass(frozen=True)
class ContextQueryResult:
    bundles: Sequence[StoredContextBundle]
    total_count: int
    relationships: Sequence[RelationshipIndex] = field(default_factory=tuple)
    query_time_ms: float = 0.0


@dataclass(frozen=True)
class StorageStats:
    total_bundles: int
    total_relationships: int
    storage_size_bytes: int
    last_sync: Optional[str]
    database_version: str


@dataclass(frozen=True)
class StorageConfig:
    """
    Store configuration. sync_url / encryption_key are accepted for interface
    compatibility; the in-memory store ignores them.
    """
    database_name: str = "ormd"
    auto_compact: bool = False
    sync_url: Optional[str] = None
    encryption_key: Optional[str] = None


# ---------------------------
# Protocol
# ---------------------------

@runtime_checkable
class ContextStoreProtocol(Protocol):
    """
    Storage collaborator for context bundles.

    - Bundles are keyed by bundle.id
    - Relationship edges are kept alongside and removed with their endpoints
    """

    def store(self, bundle: ContextBundle) -> StoredContextBundle:
        ...

    def get(self, bundle_id: str) -> Optional[StoredContextBundle]:
        ...

    def update(self, bundle_id: str, updates: Optional[Mapping[str, Any]] = None, **fields: Any) -> StoredContextBundle:
        ...

    def delete(self, bundle_id: str) -> bool:
        ...

    def store_batch(self, bundles: Iterable[ContextBundle]) -> Sequence[StoredContextBundle]:
        ...

    def query(self, query: ContextQuery) -> ContextQueryResult:
        ...

    def search(self, text: str, limit: int = 20) -> Sequence[StoredContextBundle]:
        ...

    def add_relationship(
        self,
        source: str,
        target: str,
        relationship: str,
        strength: float = 1.0,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> RelationshipIndex:
        ...

    def get_relationships(self, bundle_id: str) -> Sequence[RelationshipIndex]:
        ...

    def find_related(self, bundle_id: str, relationship: Optional[str] = None) -> Sequence[StoredContextBundle]:
        ...

    def compact(self) -> None:
        ...

    def get_stats(self) -> StorageStats:
        ...

    def export(self) -> str:
        ...

    def import_data(self, data: str) -> int:
        ...

    def close(self) -> None:
        ...


# ---------------------------
# Index derivation
# ---------------------------

def extract_search_text(bundle: ContextBundle) -> str:
    parts = [
        bundle.content.data,
        bundle.frame.type or "",
        bundle.frame.perspective or "",
        bundle.frame.domain or "",
    ]
    return " ".join(p for p in parts if p).lower()


def extract_tags(bundle: ContextBundle) -> Sequence[str]:
    tags: list[str] = []

    def _add(tag: str) -> None:
        if tag not in tags:
            tags.append(tag)

    _add(bundle.content.type)
    _add(bundle.frame.type)
    if bundle.frame.scope:
        _add(f"scope:{bundle.frame.scope}")
    if bundle.resolution is not None and bundle.resolution.confidence:
        _add(f"confidence:{bundle.resolution.confidence}")
    if bundle.frame.domain:
        _add(f"domain:{bundle.frame.domain}")
    return tuple(tags)
