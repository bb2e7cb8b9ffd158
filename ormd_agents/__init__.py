"""
Agent-facing layer on top of ormd_engine: session handoffs and chat.
"""
from .errors import HandoffError, HandoffFormatError, HandoffNotFoundError, NoActiveSessionError

__all__ = ["HandoffError", "HandoffFormatError", "HandoffNotFoundError", "NoActiveSessionError"]
