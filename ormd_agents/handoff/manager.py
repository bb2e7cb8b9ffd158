from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Union

from ormd_engine.intake.parser import parse
from ormd_engine.intake.projector import to_context_bundle
from ormd_engine.intake.serializer import render
from ormd_engine.models.types import now_iso
from ormd_engine.runtime.store import ContextQuery, ContextStoreProtocol

from ormd_agents.errors import HandoffFormatError, HandoffNotFoundError, NoActiveSessionError

from .types import (
    ArtifactStatus,
    ArtifactType,
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
)

logger = logging.getLogger(__name__)

CONTEXT_OPEN = "<!-- HANDOFF_CONTEXT -->"
CONTEXT_CLOSE = "<!-- /HANDOFF_CONTEXT -->"
_CONTEXT_BLOCK = re.compile(re.escape(CONTEXT_OPEN) + r"\s*(.*?)\s*" + re.escape(CONTEXT_CLOSE), re.DOTALL)

HANDOFF_DOCUMENT_TYPE = "ai_handoff"
HANDOFF_SOURCE = "ai-session-handoff"


def _bullets(items: Sequence[str]) -> List[str]:
    return [f"- {item}" for item in items]


def render_handoff_markdown(context: HandoffContext) -> str:
    """
    Human-readable body followed by the full context as embedded JSON.
    """
    lines: List[str] = [
        "# AI Handoff Session",
        "",
        "## Session Summary",
        context.summary or "No summary provided",
        "",
        "## Objectives Status",
        "### Completed",
        *_bullets(context.objectives_completed),
        "",
        "### In Progress",
        *_bullets(context.objectives_partial),
        "",
        "### Not Started",
        *_bullets(context.objectives_not_started),
        "",
    ]

    if context.decisions:
        lines.append("## Key Decisions")
        for d in context.decisions:
            lines.append(f"### {d.description}")
            lines.append(f"**Rationale:** {d.rationale}")
            lines.append(f"**Confidence:** {d.confidence.value}")
            if d.alternatives_considered:
                lines.append(f"**Alternatives Considered:** {', '.join(d.alternatives_considered)}")
            lines.append("")

    if context.artifacts:
        lines.append("## Artifacts Created/Modified")
        for a in context.artifacts:
            lines.append(f"- **{a.status.value}** {a.type.value}: `{a.path}` - {a.description}")
        lines.append("")

    if context.unresolved_issues:
        lines.append("## Unresolved Issues")
        for i in context.unresolved_issues:
            lines.append(f"### {i.description} ({i.severity.value})")
            if i.context:
                lines.append(f"**Context:** {i.context}")
            if i.suggested_approach:
                lines.append(f"**Suggested Approach:** {i.suggested_approach}")
            lines.append("")

    lines.append("## Next Steps")
    lines.extend(_bullets(context.recommended_next_steps))

    if context.context_notes:
        lines.extend(["", "## Context Notes", context.context_notes])

    if context.important_constraints:
        lines.extend(["", "## Important Constraints", *_bullets(context.important_constraints)])

    lines.extend(["", CONTEXT_OPEN, json.dumps(context.to_dict(), indent=2, ensure_ascii=False), CONTEXT_CLOSE])
    return "\n".join(lines)


def extract_handoff_context(text: str) -> HandoffContext:
    m = _CONTEXT_BLOCK.search(text)
    if m is None:
        raise HandoffFormatError("Handoff document has no embedded context")
    try:
        payload = json.loads(m.group(1))
    except json.JSONDecodeError as exc:
        raise HandoffFormatError("Embedded handoff context is not valid JSON", [str(exc)]) from exc
    return HandoffContext.from_dict(payload)


class HandoffManager:
    """
    Tracks one agent session at a time and turns it into a stored ORMD handoff.

    Not thread safe: a manager belongs to a single conversation.
    """

    def __init__(self, store: ContextStoreProtocol) -> None:
        self.store = store
        self._session: Optional[HandoffSession] = None

    @property
    def current_session(self) -> Optional[HandoffSession]:
        return self._session

    def _require_session(self) -> HandoffSession:
        if self._session is None:
            raise NoActiveSessionError()
        return self._session

    def _set_context(self, context: HandoffContext) -> None:
        self._session = self._require_session().with_context(context)

    # -----------------------
    # Session building
    # -----------------------

    def start_session(self, agent: HandoffAgent, parent_session_id: Optional[str] = None) -> HandoffSession:
        session = HandoffSession(current_agent=agent, context=HandoffContext(parent_session_id=parent_session_id))
        # context and session share one id so search_handoffs(session_id=...) can find it
        session = session.with_context(session.context.updated(session_id=session.id, session_start=session.start_time))
        self._session = session
        logger.info("started handoff session %s for agent %s", session.id, agent.id)
        return session

    def add_decision(
        self,
        description: str,
        rationale: str,
        confidence: Union[DecisionConfidence, str],
        alternatives: Optional[Sequence[str]] = None,
    ) -> HandoffDecision:
        ctx = self._require_session().context
        decision = HandoffDecision(
            description=description,
            rationale=rationale,
            confidence=confidence,
            alternatives_considered=alternatives or (),
        )
        self._set_context(ctx.updated(decisions=(*ctx.decisions, decision)))
        return decision

    def add_artifact(
        self,
        type: Union[ArtifactType, str],
        path: str,
        description: str,
        status: Union[ArtifactStatus, str],
    ) -> HandoffArtifact:
        ctx = self._require_session().context
        artifact = HandoffArtifact(type=type, path=path, description=description, status=status)
        self._set_context(ctx.updated(artifacts=(*ctx.artifacts, artifact)))
        return artifact

    def add_issue(
        self,
        description: str,
        severity: Union[IssueSeverity, str],
        context: Optional[str] = None,
        suggested_approach: Optional[str] = None,
    ) -> HandoffIssue:
        ctx = self._require_session().context
        issue = HandoffIssue(
            description=description,
            severity=severity,
            context=context,
            suggested_approach=suggested_approach,
        )
        self._set_context(ctx.updated(unresolved_issues=(*ctx.unresolved_issues, issue)))
        return issue

    def update_context(self, **updates: Any) -> HandoffContext:
        """Shallow merge; a given field replaces the old value wholesale."""
        ctx = self._require_session().context.updated(**updates)
        self._set_context(ctx)
        return ctx

    # -----------------------
    # Handoff
    # -----------------------

    def generate_handoff_document(
        self,
        to_agent: Optional[HandoffAgent] = None,
        handoff_reason: Union[HandoffReason, str] = HandoffReason.SESSION_END,
    ) -> HandoffDocument:
        session = self._require_session()
        end_time = now_iso()
        context = session.context.updated(session_end=end_time)
        reason = HandoffReason(handoff_reason)

        lineage: Dict[str, Any] = {"source": HANDOFF_SOURCE}
        if context.parent_session_id:
            lineage["parent_session"] = context.parent_session_id
        lineage["derivation"] = "continuation" if context.parent_session_id else "restart"
        lineage["confidence_flow"] = "preserved"

        handoff: Dict[str, Any] = {"from_agent": session.current_agent.id}
        if to_agent is not None:
            handoff["to_agent"] = to_agent.id
        handoff["handoff_reason"] = reason.value

        short_id = session.id.rsplit("_", 1)[-1][:8]
        frontmatter: Dict[str, Any] = {
            "title": f"AI Handoff: {context.summary or 'Session ' + short_id}",
            "type": HANDOFF_DOCUMENT_TYPE,
            "authors": [a.to_dict() for a in session.agents],
            "dates": {"created": end_time, "session_start": session.start_time, "session_end": end_time},
            "context": {
                "lineage": lineage,
                "resolution": {"confidence": "working", "status": "handoff_ready"},
            },
            "handoff": handoff,
        }
        return HandoffDocument(
            frontmatter=frontmatter,
            content=render_handoff_markdown(context),
            handoff_context=context,
        )

    def create_handoff(
        self,
        to_agent: Optional[HandoffAgent] = None,
        handoff_reason: Union[HandoffReason, str] = HandoffReason.SESSION_END,
    ) -> str:
        """
        Render, re-parse, project and store the handoff. Returns the stored bundle id
        and marks the session completed.
        """
        document = self.generate_handoff_document(to_agent, handoff_reason)
        text = render(document.frontmatter, document.content)

        result = parse(text)
        if not result.success or result.data is None:
            raise HandoffFormatError("Failed to parse generated ORMD", result.errors or ())

        stored = self.store.store(to_context_bundle(result.data))
        self._session = self._require_session().completed()
        logger.info("created handoff %s from session %s", stored.id, self._session.id)
        return stored.id

    def load_handoff(self, handoff_id: str) -> HandoffDocument:
        stored = self.store.get(handoff_id)
        if stored is None:
            raise HandoffNotFoundError(handoff_id)

        raw = stored.bundle.content.data
        result = parse(raw)
        if not result.success or result.data is None:
            raise HandoffFormatError("Failed to parse handoff document", result.errors or ())

        return HandoffDocument(
            frontmatter=result.data.frontmatter,
            content=result.data.content,
            handoff_context=extract_handoff_context(raw),
        )

    def search_handoffs(self, query: HandoffQuery) -> List[str]:
        """
        Ids of stored handoffs matching every given criterion, in store order.
        """
        candidates = self.store.query(
            ContextQuery(content_type="text/markdown", search=CONTEXT_OPEN.lower(), limit=10_000)
        ).bundles

        out: List[str] = []
        for stored in candidates:
            text = stored.search_text
            if query.session_id and query.session_id.lower() not in text:
                continue
            if query.agent_id and query.agent_id.lower() not in text:
                continue
            if _needs_context(query) and not _context_matches(stored.bundle.content.data, query):
                continue
            out.append(stored.id)
        return out


def _needs_context(query: HandoffQuery) -> bool:
    return bool(query.date_range or query.contains_artifacts or query.status) or query.has_unresolved_issues is not None


def _context_matches(raw: str, query: HandoffQuery) -> bool:
    try:
        ctx = extract_handoff_context(raw)
    except HandoffFormatError:
        logger.warning("skipping stored handoff with unreadable context")
        return False

    if query.date_range is not None:
        if not (query.date_range.start <= ctx.session_start <= query.date_range.end):
            return False
    if query.contains_artifacts:
        paths = {a.path for a in ctx.artifacts}
        if not all(p in paths for p in query.contains_artifacts):
            return False
    if query.has_unresolved_issues is not None:
        if bool(ctx.unresolved_issues) != query.has_unresolved_issues:
            return False
    if query.status:
        # a stored handoff is always handoff_ready
        if "handoff_ready" not in query.status:
            return False
    return True
