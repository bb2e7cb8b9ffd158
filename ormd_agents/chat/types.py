from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Sequence

from ormd_engine.models.types import new_id, now_iso

from ormd_agents.handoff.types import HandoffAgent

# A chat participant carries the same identity fields as a handoff agent.
ChatParticipant = HandoffAgent


class ChatStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class MessageContext:
    handoff_id: Optional[str] = None
    session_id: Optional[str] = None
    decision_ids: Sequence[str] = field(default_factory=tuple)
    artifact_ids: Sequence[str] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "decision_ids", tuple(self.decision_ids))
        object.__setattr__(self, "artifact_ids", tuple(self.artifact_ids))


@dataclass(frozen=True)
class ChatMessage:
    sender: ChatParticipant
    content: str
    context: Optional[MessageContext] = None
    id: str = field(default_factory=lambda: new_id("msg"))
    timestamp: str = field(default_factory=now_iso)


@dataclass(frozen=True)
class ChatSession:
    title: str
    participants: Sequence[ChatParticipant]
    id: str = field(default_factory=lambda: new_id("chat"))
    created: str = field(default_factory=now_iso)
    messages: Sequence[ChatMessage] = field(default_factory=tuple)
    handoff_session_id: Optional[str] = None
    status: ChatStatus = ChatStatus.ACTIVE

    def __post_init__(self) -> None:
        object.__setattr__(self, "participants", tuple(self.participants))
        object.__setattr__(self, "messages", tuple(self.messages))
        object.__setattr__(self, "status", ChatStatus(self.status))

    def with_message(self, message: ChatMessage) -> "ChatSession":
        return replace(self, messages=(*self.messages, message))

    def with_participant(self, participant: ChatParticipant) -> "ChatSession":
        if any(p.id == participant.id for p in self.participants):
            return self
        return replace(self, participants=(*self.participants, participant))

    @property
    def short_id(self) -> str:
        return self.id.rsplit("_", 1)[-1][:8]
