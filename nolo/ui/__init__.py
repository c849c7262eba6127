"""Terminal user interface for Nolo."""

from .conversation_screen import ConversationScreen

__all__ = ["ConversationScreen"]
