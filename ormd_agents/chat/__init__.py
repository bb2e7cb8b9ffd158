from .manager import ChatManager
from .types import ChatMessage, ChatParticipant, ChatSession, ChatStatus, MessageContext

__all__ = ["ChatManager", "ChatMessage", "ChatParticipant", "ChatSession", "ChatStatus", "MessageContext"]
