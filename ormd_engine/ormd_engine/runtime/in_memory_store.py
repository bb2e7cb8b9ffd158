from __future__ import annotations

import json
import logging
import time
from threading import RLock
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
from uuid import uuid4

from ormd_engine.errors import ConflictError, NotFoundError, StoreClosedError
from ormd_engine.models.bundle import ContextBundle
from ormd_engine.models.types import now_iso

from .store import (
    ContextQuery,
    ContextQueryResult,
    RelationshipIndex,
    StorageConfig,
    StorageStats,
    StoredContextBundle,
    extract_search_text,
    extract_tags,
)

logger = logging.getLogger(__name__)

DATABASE_VERSION = "1.0.0"


def _next_rev(prev: Optional[str]) -> str:
    n = 0
    if prev:
        head = prev.split("-", 1)[0]
        n = int(head) if head.isdigit() else 0
    return f"{n + 1}-{uuid4().hex}"


def _index(bundle: ContextBundle, prev_rev: Optional[str] = None) -> StoredContextBundle:
    return StoredContextBundle(
        bundle=bundle,
        indexed_at=now_iso(),
        search_text=extract_search_text(bundle),
        tags=extract_tags(bundle),
        rev=_next_rev(prev_rev),
    )


class InMemoryContextStore:
    """
    In-process document store for context bundles.

    Search is a linear substring scan over search_text (no inverted index).
    Insertion order is preserved and is the default result order.
    """

    def __init__(self, config: Optional[StorageConfig] = None) -> None:
        self.config = config or StorageConfig()
        self._lock = RLock()
        self._bundles: Dict[str, StoredContextBundle] = {}
        self._relationships: Dict[str, RelationshipIndex] = {}
        self._closed = False
        logger.debug("opened context store %r", self.config.database_name)

    # -----------------------
    # Internals
    # -----------------------

    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosedError(f"Context store is closed: {self.config.database_name}")

    # -----------------------
    # CRUD
    # -----------------------

    def store(self, bundle: ContextBundle) -> StoredContextBundle:
        with self._lock:
            self._check_open()
            if bundle.id in self._bundles:
                raise ConflictError(bundle.id)
            stored = _index(bundle)
            self._bundles[bundle.id] = stored
        logger.info("stored context bundle %s", bundle.id)
        return stored

    def get(self, bundle_id: str) -> Optional[StoredContextBundle]:
        with self._lock:
            self._check_open()
            return self._bundles.get(bundle_id)

    def must_get(self, bundle_id: str) -> StoredContextBundle:
        stored = self.get(bundle_id)
        if stored is None:
            raise NotFoundError(bundle_id)
        return stored

    def update(
        self,
        bundle_id: str,
        updates: Optional[Mapping[str, Any]] = None,
        **fields: Any,
    ) -> StoredContextBundle:
        """
        Shallow-merge updates into a new bundle and re-derive the index fields.
        """
        patch: Dict[str, Any] = dict(updates or {})
        patch.update(fields)
        if patch.get("id", bundle_id) != bundle_id:
            raise ValueError("update() cannot change a bundle id")
        patch.pop("id", None)

        with self._lock:
            self._check_open()
            existing = self._bundles.get(bundle_id)
            if existing is None:
                raise NotFoundError(bundle_id)
            merged = existing.bundle.with_updates(**patch)
            stored = _index(merged, prev_rev=existing.rev)
            self._bundles[bundle_id] = stored
        logger.info("updated context bundle %s (rev %s)", bundle_id, stored.rev)
        return stored

    def delete(self, bundle_id: str) -> bool:
        with self._lock:
            self._check_open()
            if self._bundles.pop(bundle_id, None) is None:
                return False
            dropped = [rid for rid, rel in self._relationships.items() if rel.touches(bundle_id)]
            for rid in dropped:
                del self._relationships[rid]
        logger.info("deleted context bundle %s (%d relationship(s))", bundle_id, len(dropped))
        if self.config.auto_compact:
            self.compact()
        return True

    def store_batch(self, bundles: Iterable[ContextBundle]) -> Sequence[StoredContextBundle]:
        items = list(bundles)
        with self._lock:
            self._check_open()
            seen: set[str] = set()
            for b in items:
                if b.id in self._bundles or b.id in seen:
                    raise ConflictError(b.id)
                seen.add(b.id)
            out = [_index(b) for b in items]
            for stored in out:
                self._bundles[stored.id] = stored
        logger.info("stored %d context bundle(s) in batch", len(out))
        return tuple(out)

    # -----------------------
    # Query
    # -----------------------

    def search(self, text: str, limit: int = 20) -> Sequence[StoredContextBundle]:
        term = (text or "").lower()
        with self._lock:
            self._check_open()
            matches = [s for s in self._bundles.values() if s.search_text and term in s.search_text]
        return tuple(matches[:limit])

    def query(self, query: ContextQuery) -> ContextQueryResult:
        started = time.perf_counter()

        with self._lock:
            self._check_open()
            docs: List[StoredContextBundle] = list(self._bundles.values())

        if query.tags:
            wanted = set(query.tags)
            docs = [d for d in docs if wanted.intersection(d.tags)]
        if query.content_type:
            docs = [d for d in docs if d.bundle.content.type == query.content_type]
        if query.confidence:
            docs = [d for d in docs if d.bundle.resolution.confidence == query.confidence]
        if query.created_after:
            docs = [d for d in docs if d.bundle.created and d.bundle.created >= query.created_after]
        if query.created_before:
            docs = [d for d in docs if d.bundle.created and d.bundle.created <= query.created_before]
        if query.search:
            term = query.search.lower()
            docs = [d for d in docs if d.search_text and term in d.search_text]

        if query.sort_by:
            if query.sort_by == "created":
                key = lambda d: d.bundle.created or ""  # noqa: E731
            else:
                key = lambda d: d.indexed_at  # noqa: E731
            docs.sort(key=key, reverse=(query.sort_order == "desc"))

        page = docs[query.skip: query.skip + query.limit]

        relationships: Sequence[RelationshipIndex] = ()
        if query.related_to:
            relationships = tuple(
                r for r in self.get_relationships(query.related_to)
                if not query.relationship_type or r.relationship == query.relationship_type
            )

        return ContextQueryResult(
            bundles=tuple(page),
            total_count=len(page),
            relationships=relationships,
            query_time_ms=(time.perf_counter() - started) * 1000.0,
        )

    # -----------------------
    # Relationships
    # -----------------------

    def add_relationship(
        self,
        source: str,
        target: str,
        relationship: str,
        strength: float = 1.0,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> RelationshipIndex:
        rel = RelationshipIndex(
            id=str(uuid4()),
            source_id=source,
            target_id=target,
            relationship=relationship,
            strength=strength,
            created_at=now_iso(),
            metadata=dict(metadata) if metadata else None,
        )
        with self._lock:
            self._check_open()
            self._relationships[rel.id] = rel
        logger.debug("relationship %s: %s --%s--> %s", rel.id, source, relationship, target)
        return rel

    def get_relationships(self, bundle_id: str) -> Sequence[RelationshipIndex]:
        with self._lock:
            self._check_open()
            return tuple(r for r in self._relationships.values() if r.touches(bundle_id))

    def find_related(self, bundle_id: str, relationship: Optional[str] = None) -> Sequence[StoredContextBundle]:
        related_ids = [
            r.other_end(bundle_id)
            for r in self.get_relationships(bundle_id)
            if not relationship or r.relationship == relationship
        ]
        with self._lock:
            out: List[StoredContextBundle] = []
            for rid in dict.fromkeys(related_ids):
                stored = self._bundles.get(rid)
                if stored is not None:
                    out.append(stored)
        return tuple(out)

    # -----------------------
    # Maintenance
    # -----------------------

    def compact(self) -> None:
        # Only the head revision is ever kept in memory; nothing to reclaim.
        with self._lock:
            self._check_open()
        logger.debug("compacted context store %r", self.config.database_name)

    def get_stats(self) -> StorageStats:
        with self._lock:
            self._check_open()
            size = sum(len(json.dumps(s.to_dict())) for s in self._bundles.values())
            size += sum(len(json.dumps(r.to_dict())) for r in self._relationships.values())
            return StorageStats(
                total_bundles=len(self._bundles),
                total_relationships=len(self._relationships),
                storage_size_bytes=size,
                last_sync=None,
                database_version=DATABASE_VERSION,
            )

    def export(self) -> str:
        with self._lock:
            self._check_open()
            payload = {
                "version": DATABASE_VERSION,
                "exported_at": now_iso(),
                "contexts": [s.to_dict() for s in self._bundles.values()],
                "relationships": [r.to_dict() for r in self._relationships.values()],
            }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def import_data(self, data: str) -> int:
        """
        Restore from export(). Existing ids are overwritten. Returns the number of contexts imported.
        """
        payload = json.loads(data)
        contexts = [StoredContextBundle.from_dict(c) for c in payload.get("contexts") or ()]
        relationships = [RelationshipIndex.from_dict(r) for r in payload.get("relationships") or ()]

        with self._lock:
            self._check_open()
            for stored in contexts:
                self._bundles[stored.id] = stored
            for rel in relationships:
                self._relationships[rel.id] = rel
        logger.info("imported %d context(s), %d relationship(s)", len(contexts), len(relationships))
        return len(contexts)

    def close(self) -> None:
        with self._lock:
            self._closed = True
        logger.debug("closed context store %r", self.config.database_name)
