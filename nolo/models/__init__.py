"""Data models for the Nolo application."""

from .audio import AudioStats, RecordedAudio, LoadedAudio
from .events import AudioEvent
from .ui import ConversationPhase, ConversationState
from .api import (
    TranscribeRequest,
    TranscribeResponse,
    ChatRequest,
    ChatResponse,
    SpeechRequest,
    SpeechResponse,
)

__all__ = [
    "AudioStats",
    "RecordedAudio",
    "LoadedAudio",
    "AudioEvent",
    "ConversationPhase",
    "ConversationState",
    # Service wire models
    "TranscribeRequest",
    "TranscribeResponse",
    "ChatRequest",
    "ChatResponse",
    "SpeechRequest",
    "SpeechResponse",
]
