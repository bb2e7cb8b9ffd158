from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Union

from ormd_engine.intake.serializer import render
from ormd_engine.models.types import now_iso
from ormd_engine.runtime.store import ContextStoreProtocol

from ormd_agents.errors import NoActiveSessionError
from ormd_agents.handoff.manager import HandoffManager
from ormd_agents.handoff.types import (
    AgentType,
    ArtifactStatus,
    ArtifactType,
    DecisionConfidence,
    HandoffAgent,
    HandoffArtifact,
    HandoffReason,
)

from .types import ChatMessage, ChatParticipant, ChatSession, ChatStatus, MessageContext

logger = logging.getLogger(__name__)

SYSTEM = ChatParticipant(id="system", type=AgentType.SYSTEM, display="System")
DECISION_TRACKER = ChatParticipant(id="system", type=AgentType.SYSTEM, display="Decision Tracker")
HANDOFF_SYSTEM = ChatParticipant(id="system", type=AgentType.SYSTEM, display="Handoff System")

# Fields that describe the session itself rather than the work; never carried over.
_SESSION_FIELDS = frozenset({"session_id", "session_start", "session_end", "parent_session_id"})


class ChatManager:
    """
    A chat session that records decisions and hands off between agents.

    The first AI message opens a handoff session; from then on decisions and
    handoffs flow through the embedded HandoffManager.
    """

    def __init__(self, store: ContextStoreProtocol) -> None:
        self.store = store
        self.handoffs = HandoffManager(store)
        self._session: Optional[ChatSession] = None

    @property
    def current_session(self) -> Optional[ChatSession]:
        return self._session

    def _require_session(self) -> ChatSession:
        if self._session is None:
            raise NoActiveSessionError("No active chat session")
        return self._session

    def _require_handoff_session(self) -> ChatSession:
        session = self._session
        if session is None or not session.handoff_session_id:
            raise NoActiveSessionError("No active handoff session")
        return session

    # -----------------------
    # Messages
    # -----------------------

    def start_chat_session(self, title: str, user: ChatParticipant) -> ChatSession:
        session = ChatSession(title=title, participants=(user,))
        self._session = session
        logger.info("started chat session %s (%r)", session.id, title)

        self.add_message(
            SYSTEM,
            "Welcome! This chat session supports AI handoffs with full context preservation. "
            f"Session ID: {session.short_id}",
        )
        return self._require_session()

    def add_message(
        self,
        sender: ChatParticipant,
        content: str,
        context: Optional[MessageContext] = None,
    ) -> ChatMessage:
        session = self._require_session()
        message = ChatMessage(sender=sender, content=content, context=context)
        session = session.with_message(message)
        if sender.type is not AgentType.SYSTEM:
            session = session.with_participant(sender)
        self._session = session

        if sender.type is AgentType.AI and not session.handoff_session_id:
            self._open_handoff_session(sender)
        return message

    def _open_handoff_session(self, agent: HandoffAgent) -> None:
        session = self._require_session()
        handoff = self.handoffs.start_session(agent)
        self._session = replace(session, handoff_session_id=handoff.id)

        self.handoffs.update_context(
            summary=f"Chat session: {session.title}",
            objectives_partial=(f'Engaging in chat session "{session.title}"',),
            context_notes=f"Chat session started with {len(session.participants)} participants",
        )
        logger.debug("chat %s linked to handoff session %s", session.id, handoff.id)

    # -----------------------
    # Decisions / handoff
    # -----------------------

    def add_chat_decision(
        self,
        description: str,
        rationale: str,
        confidence: Union[DecisionConfidence, str],
    ) -> str:
        self._require_handoff_session()
        decision = self.handoffs.add_decision(description, rationale, confidence)
        self.add_message(
            DECISION_TRACKER,
            f"Decision recorded: {description} (confidence: {decision.confidence.value})",
            MessageContext(decision_ids=(decision.id,)),
        )
        return decision.id

    def create_chat_handoff(
        self,
        to_agent: Optional[HandoffAgent] = None,
        reason: str = "Chat session handoff",
        handoff_reason: Union[HandoffReason, str] = HandoffReason.AGENT_SWITCH,
    ) -> str:
        session = self._require_handoff_session()
        count = len(session.messages)
        names = ", ".join(p.display for p in session.participants)

        self.handoffs.update_context(
            summary=f"Chat session {session.title} with {names}",
            objectives_completed=(f"Completed chat session with {count} messages",),
            recommended_next_steps=(
                "Review chat history for key decisions",
                "Continue conversation with context preserved",
                "Extract actionable items from discussion",
            ),
            context_notes=(
                f"Chat session included {count} messages between {names}. "
                "Full conversation history available in chat logs."
            ),
            artifacts=(
                HandoffArtifact(
                    type=ArtifactType.OTHER,
                    path=f"chat-session-{session.id}",
                    description=f"Chat session: {session.title}",
                    status=ArtifactStatus.CREATED,
                ),
            ),
        )

        handoff_id = self.handoffs.create_handoff(to_agent, handoff_reason)
        self.add_message(
            HANDOFF_SYSTEM,
            f"Handoff created: {reason}. Context preserved for next agent. Handoff ID: {handoff_id[:16]}",
            MessageContext(handoff_id=handoff_id),
        )
        self._session = replace(self._require_session(), status=ChatStatus.COMPLETED)
        logger.info("chat %s handed off as %s", session.id, handoff_id)
        return handoff_id

    def continue_chat_from_handoff(
        self,
        handoff_id: str,
        new_agent: HandoffAgent,
        user: ChatParticipant,
    ) -> ChatSession:
        handoff = self.handoffs.load_handoff(handoff_id)
        previous = handoff.handoff_context

        session = ChatSession(title=f"Continued: {previous.summary}", participants=(user, new_agent))
        handoff_session = self.handoffs.start_session(new_agent, previous.session_id)
        self._session = replace(session, handoff_session_id=handoff_session.id)

        carried: Dict[str, Any] = {
            k: v for k, v in vars(previous).items() if k not in _SESSION_FIELDS
        }
        carried["objectives_completed"] = (
            *previous.objectives_completed,
            "Successfully loaded context from previous session",
        )
        self.handoffs.update_context(**carried)

        self.add_message(
            HANDOFF_SYSTEM,
            "Session continued from handoff. Previous context loaded:\n"
            f"- {len(previous.decisions)} decisions preserved\n"
            f"- {len(previous.artifacts)} artifacts tracked\n"
            f"- {len(previous.objectives_completed)} objectives completed\n"
            f"- {len(previous.unresolved_issues)} issues to address",
            MessageContext(handoff_id=handoff_id, session_id=handoff_session.id),
        )
        logger.info("continued chat from handoff %s as %s", handoff_id, session.id)
        return self._require_session()

    # -----------------------
    # History / export
    # -----------------------

    def search_chat_history(self, query: str) -> List[ChatMessage]:
        if self._session is None:
            return []
        term = query.lower()
        return [
            m for m in self._session.messages
            if term in m.content.lower() or term in m.sender.display.lower()
        ]

    def export_chat_as_ormd(self) -> str:
        session = self._require_session()
        names = ", ".join(p.display for p in session.participants)

        frontmatter: Dict[str, Any] = {
            "title": f"Chat Session: {session.title}",
            "type": "chat_session",
            "authors": [{"id": p.id, "display": p.display, "type": p.type.value} for p in session.participants],
            "dates": {"created": session.created, "modified": now_iso()},
            "context": {
                "lineage": {
                    "source": "chat-session-export",
                    "derivation": "synthesis",
                    "confidence_flow": "preserved",
                },
                "resolution": {"confidence": "working"},
            },
            "session": {
                "id": session.id,
                "handoff_session_id": session.handoff_session_id or "none",
                "message_count": len(session.messages),
                "status": session.status.value,
            },
        }

        history = "\n\n".join(f"**{m.sender.display}** ({m.timestamp}): {m.content}" for m in session.messages)
        if session.handoff_session_id:
            linked = f"The session is linked to handoff session {session.handoff_session_id} for context preservation."
        else:
            linked = "No handoff session was created."

        body = "\n".join(
            [
                f"# Chat Session: {session.title}",
                "",
                "## Session Information",
                f"- **Session ID**: {session.id}",
                f"- **Created**: {session.created}",
                f"- **Status**: {session.status.value}",
                f"- **Participants**: {names}",
                f"- **Messages**: {len(session.messages)}",
                "",
                "## Conversation History",
                "",
                history,
                "",
                "## Session Summary",
                "",
                f"This chat session involved {len(session.participants)} participants and generated "
                f"{len(session.messages)} messages. {linked}",
                "",
            ]
        )
        return render(frontmatter, body)
