"""
Runtime layer (storage, pipeline wiring).

Document and bundle models live in ormd_engine.models.
"""
from .store import (
    ContextQuery,
    ContextQueryResult,
    ContextStoreProtocol,
    RelationshipIndex,
    StorageConfig,
    StorageStats,
    StoredContextBundle,
)
from .in_memory_store import InMemoryContextStore
from .pipeline import IngestReport, OrmdPipeline, PipelineConfig

__all__ = [
    "ContextQuery",
    "ContextQueryResult",
    "ContextStoreProtocol",
    "RelationshipIndex",
    "StorageConfig",
    "StorageStats",
    "StoredContextBundle",
    "InMemoryContextStore",
    "IngestReport",
    "OrmdPipeline",
    "PipelineConfig",
]
