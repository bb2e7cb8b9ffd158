# ormd_engine/scripts/run_handoff_demo.py
from __future__ import annotations

from ormd_agents.chat.manager import ChatManager
from ormd_agents.handoff.types import AgentType, HandoffAgent
from ormd_engine.intake.parser import parse
from ormd_engine.runtime.in_memory_store import InMemoryContextStore


def main() -> None:
    store = InMemoryContextStore()
    chat = ChatManager(store)

    user = HandoffAgent(id="user.dev", type=AgentType.HUMAN, display="Developer")
    first = HandoffAgent(id="ai.drafter", type=AgentType.AI, display="Drafter", model="local")
    second = HandoffAgent(id="ai.reviewer", type=AgentType.AI, display="Reviewer", model="local")

    chat.start_chat_session("Storage layer design", user)
    chat.add_message(user, "Should bundles be keyed by id or by content hash?")
    chat.add_message(first, "Key by id; content changes on every update.")
    chat.add_chat_decision("Key bundles by id", "Ids are stable across updates", "high")

    handoff_id = chat.create_chat_handoff(second, "Reviewer takes over")
    print("handoff:", handoff_id)

    session = chat.continue_chat_from_handoff(handoff_id, second, user)
    print("\n=== CONTINUED SESSION ===")
    print("title:", session.title)
    for m in session.messages:
        print(f"[{m.sender.display}] {m.content}")

    exported = chat.export_chat_as_ormd()
    result = parse(exported)
    print("\nexport parses:", result.success)
    print("export title:", result.data.title if result.data else None)


if __name__ == "__main__":
    main()
