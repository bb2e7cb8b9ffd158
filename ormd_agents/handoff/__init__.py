from .manager import HandoffManager, extract_handoff_context, render_handoff_markdown
from .types import (
    AgentType,
    ArtifactStatus,
    ArtifactType,
    DateRange,
    DecisionConfidence,
    HandoffAgent,
    HandoffArtifact,
    HandoffContext,
    HandoffDecision,
    HandoffDocument,
    HandoffIssue,
    HandoffQuery,
    HandoffReason,
    HandoffSession,
    IssueSeverity,
    SessionStatus,
    SystemState,
)

__all__ = [
    "HandoffManager",
    "extract_handoff_context",
    "render_handoff_markdown",
    "AgentType",
    "ArtifactStatus",
    "ArtifactType",
    "DateRange",
    "DecisionConfidence",
    "HandoffAgent",
    "HandoffArtifact",
    "HandoffContext",
    "HandoffDecision",
    "HandoffDocument",
    "HandoffIssue",
    "HandoffQuery",
    "HandoffReason",
    "HandoffSession",
    "IssueSeverity",
    "SessionStatus",
    "SystemState",
]
