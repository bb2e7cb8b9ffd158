"""
Handoff records: what one agent session leaves behind for the next.

Everything here is immutable; the manager replaces records instead of
mutating them. to_dict() output is JSON/YAML-safe (lists, plain strings).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ormd_engine.models.types import new_id, now_iso


class AgentType(str, Enum):
    HUMAN = "human"
    AI = "ai"
    SYSTEM = "system"


class DecisionConfidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ArtifactType(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    COMMIT = "commit"
    COMMAND = "command"
    URL = "url"
    OTHER = "other"


class ArtifactStatus(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    REFERENCED = "referenced"


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    BLOCKER = "blocker"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    HANDOFF_PENDING = "handoff_pending"
    COMPLETED = "completed"


class HandoffReason(str, Enum):
    SESSION_END = "session_end"
    AGENT_SWITCH = "agent_switch"
    ESCALATION = "escalation"
    COMPLETION = "completion"


def _as_tuple(seq: Optional[Sequence[Any]]) -> Tuple[Any, ...]:
    return tuple(seq) if seq else ()


def _drop_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


# ---------------------------
# Leaf records
# ---------------------------

@dataclass(frozen=True)
class HandoffAgent:
    id: str
    type: AgentType
    display: str
    model: Optional[str] = None
    version: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", AgentType(self.type))

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {"id": self.id, "display": self.display, "type": self.type.value, "model": self.model, "version": self.version}
        )

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "HandoffAgent":
        return cls(
            id=d["id"],
            type=d.get("type", AgentType.AI.value),
            display=d.get("display", d["id"]),
            model=d.get("model"),
            version=d.get("version"),
        )


@dataclass(frozen=True)
class HandoffDecision:
    description: str
    rationale: str
    confidence: DecisionConfidence
    alternatives_considered: Sequence[str] = field(default_factory=tuple)
    id: str = field(default_factory=lambda: new_id("dec"))
    timestamp: str = field(default_factory=now_iso)

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", DecisionConfidence(self.confidence))
        object.__setattr__(self, "alternatives_considered", _as_tuple(self.alternatives_considered))

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "rationale": self.rationale,
            "confidence": self.confidence.value,
            "timestamp": self.timestamp,
        }
        if self.alternatives_considered:
            d["alternatives_considered"] = list(self.alternatives_considered)
        return d

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "HandoffDecision":
        return cls(
            id=d["id"],
            description=d["description"],
            rationale=d.get("rationale", ""),
            confidence=d.get("confidence", DecisionConfidence.MEDIUM.value),
            alternatives_considered=d.get("alternatives_considered") or (),
            timestamp=d.get("timestamp", ""),
        )


@dataclass(frozen=True)
class HandoffArtifact:
    type: ArtifactType
    path: str
    description: str
    status: ArtifactStatus
    id: str = field(default_factory=lambda: new_id("art"))

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", ArtifactType(self.type))
        object.__setattr__(self, "status", ArtifactStatus(self.status))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "path": self.path,
            "description": self.description,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "HandoffArtifact":
        return cls(
            id=d["id"],
            type=d.get("type", ArtifactType.OTHER.value),
            path=d.get("path", ""),
            description=d.get("description", ""),
            status=d.get("status", ArtifactStatus.REFERENCED.value),
        )


@dataclass(frozen=True)
class HandoffIssue:
    description: str
    severity: IssueSeverity
    context: Optional[str] = None
    suggested_approach: Optional[str] = None
    id: str = field(default_factory=lambda: new_id("iss"))

    def __post_init__(self) -> None:
        object.__setattr__(self, "severity", IssueSeverity(self.severity))

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "description": self.description,
                "severity": self.severity.value,
                "context": self.context,
                "suggested_approach": self.suggested_approach,
            }
        )

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "HandoffIssue":
        return cls(
            id=d["id"],
            description=d["description"],
            severity=d.get("severity", IssueSeverity.MEDIUM.value),
            context=d.get("context"),
            suggested_approach=d.get("suggested_approach"),
        )


@dataclass(frozen=True)
class SystemState:
    working_directory: str = field(default_factory=os.getcwd)
    git_branch: Optional[str] = None
    git_commit: Optional[str] = None
    environment_notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "working_directory": self.working_directory,
                "git_branch": self.git_branch,
                "git_commit": self.git_commit,
                "environment_notes": self.environment_notes,
            }
        )

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "SystemState":
        return cls(
            working_directory=d.get("working_directory", ""),
            git_branch=d.get("git_branch"),
            git_commit=d.get("git_commit"),
            environment_notes=d.get("environment_notes"),
        )


# ---------------------------
# Session context
# ---------------------------

_CONTEXT_SEQUENCES = (
    "objectives_completed",
    "objectives_partial",
    "objectives_not_started",
    "decisions",
    "artifacts",
    "unresolved_issues",
    "recommended_next_steps",
    "important_constraints",
)


@dataclass(frozen=True)
class HandoffContext:
    """
    Everything the next agent needs: progress, decisions, state, open issues.

    Embedded verbatim (as JSON) in the rendered handoff document so it can be
    recovered exactly by load_handoff().
    """
    session_id: str = field(default_factory=lambda: new_id("ctx"))
    session_start: str = field(default_factory=now_iso)
    parent_session_id: Optional[str] = None
    session_end: Optional[str] = None

    summary: str = ""
    objectives_completed: Sequence[str] = field(default_factory=tuple)
    objectives_partial: Sequence[str] = field(default_factory=tuple)
    objectives_not_started: Sequence[str] = field(default_factory=tuple)

    decisions: Sequence[HandoffDecision] = field(default_factory=tuple)
    system_state: SystemState = field(default_factory=SystemState)
    artifacts: Sequence[HandoffArtifact] = field(default_factory=tuple)
    unresolved_issues: Sequence[HandoffIssue] = field(default_factory=tuple)

    recommended_next_steps: Sequence[str] = field(default_factory=tuple)
    context_notes: str = ""
    important_constraints: Sequence[str] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for name in _CONTEXT_SEQUENCES:
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))
        if isinstance(self.system_state, Mapping):
            object.__setattr__(self, "system_state", SystemState.from_dict(self.system_state))
        object.__setattr__(self, "decisions", tuple(_coerce(HandoffDecision, x) for x in self.decisions))
        object.__setattr__(self, "artifacts", tuple(_coerce(HandoffArtifact, x) for x in self.artifacts))
        object.__setattr__(self, "unresolved_issues", tuple(_coerce(HandoffIssue, x) for x in self.unresolved_issues))

    def updated(self, **updates: Any) -> "HandoffContext":
        unknown = set(updates) - {f.name for f in fields(self)}
        if unknown:
            raise TypeError(f"Unknown HandoffContext field(s): {sorted(unknown)}")
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "session_id": self.session_id,
                "parent_session_id": self.parent_session_id,
                "session_start": self.session_start,
                "session_end": self.session_end,
                "summary": self.summary,
                "objectives_completed": list(self.objectives_completed),
                "objectives_partial": list(self.objectives_partial),
                "objectives_not_started": list(self.objectives_not_started),
                "decisions": [d.to_dict() for d in self.decisions],
                "system_state": self.system_state.to_dict(),
                "artifacts": [a.to_dict() for a in self.artifacts],
                "unresolved_issues": [i.to_dict() for i in self.unresolved_issues],
                "recommended_next_steps": list(self.recommended_next_steps),
                "context_notes": self.context_notes,
                "important_constraints": list(self.important_constraints),
            }
        )

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "HandoffContext":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in known})


def _coerce(cls: Any, value: Any) -> Any:
    return cls.from_dict(value) if isinstance(value, Mapping) else value


# ---------------------------
# Session / document
# ---------------------------

@dataclass(frozen=True)
class HandoffSession:
    current_agent: HandoffAgent
    context: HandoffContext
    id: str = field(default_factory=lambda: new_id("sess"))
    start_time: str = field(default_factory=now_iso)
    end_time: Optional[str] = None
    agents: Sequence[HandoffAgent] = field(default_factory=tuple)
    status: SessionStatus = SessionStatus.ACTIVE

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", SessionStatus(self.status))
        agents = _as_tuple(self.agents) or (self.current_agent,)
        object.__setattr__(self, "agents", agents)

    def with_context(self, context: HandoffContext) -> "HandoffSession":
        return replace(self, context=context)

    def completed(self) -> "HandoffSession":
        return replace(self, status=SessionStatus.COMPLETED, end_time=now_iso())


@dataclass(frozen=True)
class HandoffDocument:
    """
    A rendered handoff: ORMD frontmatter, markdown body, and the recovered context.
    """
    frontmatter: Mapping[str, Any]
    content: str
    handoff_context: HandoffContext

    @property
    def title(self) -> str:
        return self.frontmatter.get("title", "")

    @property
    def handoff(self) -> Mapping[str, Any]:
        return self.frontmatter.get("handoff") or {}


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str


@dataclass(frozen=True)
class HandoffQuery:
    session_id: Optional[str] = None
    agent_id: Optional[str] = None
    date_range: Optional[DateRange] = None
    contains_artifacts: Sequence[str] = field(default_factory=tuple)
    has_unresolved_issues: Optional[bool] = None
    status: Sequence[str] = field(default_factory=tuple)
