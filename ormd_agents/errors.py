from __future__ import annotations

from typing import Sequence

from ormd_engine.errors import OrmdError


class HandoffError(OrmdError):
    """Base class for handoff/chat session errors."""


class NoActiveSessionError(HandoffError):
    def __init__(self, message: str = "No active session") -> None:
        super().__init__(message)


class HandoffNotFoundError(HandoffError):
    def __init__(self, handoff_id: str) -> None:
        self.handoff_id = handoff_id
        super().__init__(f"Handoff not found: {handoff_id}")


class HandoffFormatError(HandoffError):
    """A generated or stored handoff document failed to parse."""

    def __init__(self, message: str, errors: Sequence[str] = ()) -> None:
        self.errors = tuple(errors)
        detail = ", ".join(self.errors)
        super().__init__(f"{message}: {detail}" if detail else message)
