# tests/test_chat_smoke.py

import pytest

from ormd_agents.chat.manager import ChatManager
from ormd_agents.chat.types import ChatStatus
from ormd_agents.errors import NoActiveSessionError
from ormd_agents.handoff.types import AgentType, HandoffAgent
from ormd_engine.intake.parser import parse
from ormd_engine.invariants.validate import validate

USER = HandoffAgent(id="user.dev", type=AgentType.HUMAN, display="Developer")
AI_ONE = HandoffAgent(id="ai.one", type=AgentType.AI, display="Assistant One")
AI_TWO = HandoffAgent(id="ai.two", type=AgentType.AI, display="Assistant Two")


@pytest.fixture
def chat(store):
    return ChatManager(store)


def test_start_adds_welcome_message(chat):
    session = chat.start_chat_session("Design review", USER)

    assert session.title == "Design review"
    assert len(session.messages) == 1
    assert session.messages[0].sender.type is AgentType.SYSTEM
    assert session.handoff_session_id is None


def test_messages_require_session(chat):
    with pytest.raises(NoActiveSessionError):
        chat.add_message(USER, "hello")
    assert chat.search_chat_history("hello") == []


def test_first_ai_message_opens_handoff_session(chat):
    chat.start_chat_session("Design review", USER)
    chat.add_message(USER, "Hi")
    chat.add_message(AI_ONE, "Hello")

    session = chat.current_session
    assert session.handoff_session_id == chat.handoffs.current_session.id
    assert chat.handoffs.current_session.context.summary == "Chat session: Design review"
    assert AI_ONE in session.participants


def test_decision_needs_handoff_session(chat):
    chat.start_chat_session("Design review", USER)

    with pytest.raises(NoActiveSessionError):
        chat.add_chat_decision("x", "y", "low")


def test_decision_is_recorded_and_announced(chat):
    chat.start_chat_session("Design review", USER)
    chat.add_message(AI_ONE, "Let's decide")
    decision_id = chat.add_chat_decision("Use YAML", "Readable", "medium")

    last = chat.current_session.messages[-1]
    assert decision_id in last.context.decision_ids
    assert "Decision recorded: Use YAML" in last.content
    assert chat.handoffs.current_session.context.decisions[0].id == decision_id


def test_handoff_and_continue(chat, store):
    chat.start_chat_session("Design review", USER)
    chat.add_message(AI_ONE, "Let's decide")
    chat.add_chat_decision("Use YAML", "Readable", "medium")

    handoff_id = chat.create_chat_handoff(AI_TWO, "Shift change")
    assert chat.current_session.status is ChatStatus.COMPLETED
    assert chat.current_session.messages[-1].context.handoff_id == handoff_id
    assert store.get(handoff_id) is not None

    previous_session_id = chat.handoffs.current_session.id
    session = chat.continue_chat_from_handoff(handoff_id, AI_TWO, USER)

    assert session.title.startswith("Continued: Chat session Design review")
    assert session.participants == (USER, AI_TWO)
    ctx = chat.handoffs.current_session.context
    assert ctx.parent_session_id == previous_session_id
    assert len(ctx.decisions) == 1
    assert ctx.objectives_completed[-1] == "Successfully loaded context from previous session"
    assert "1 decisions preserved" in session.messages[-1].content


def test_search_history_matches_content_and_sender(chat):
    chat.start_chat_session("Design review", USER)
    chat.add_message(USER, "What about caching?")
    chat.add_message(AI_ONE, "Caching later.")

    assert len(chat.search_chat_history("CACHING")) == 2
    assert [m.sender.id for m in chat.search_chat_history("assistant one")] == ["ai.one"]


def test_export_is_valid_ormd(chat):
    chat.start_chat_session("Design: review \"quotes\"", USER)
    chat.add_message(AI_ONE, "Hello")

    result = parse(chat.export_chat_as_ormd())

    assert result.success, result.errors
    assert result.warnings is None
    assert result.data.title == 'Chat Session: Design: review "quotes"'
    assert result.data.frontmatter["session"]["message_count"] == 2
    assert validate(result.data).valid
