"""UI-related data models."""

from dataclasses import dataclass
from enum import Enum


class ConversationPhase(Enum):
    """What the screen should be showing right now."""
    IDLE = "idle"
    RECORDING = "recording"
    LOADING = "loading"
    RESULT = "result"


@dataclass
class ConversationState:
    """View state for one conversation round.

    Every field is overwritten wholesale each round; nothing is kept from
    earlier rounds.
    """
    is_recording: bool = False
    transcription: str = ""
    reply: str = ""
    loading: bool = False
    error: str = ""
    audio_url: str = ""

    @property
    def phase(self) -> ConversationPhase:
        if self.is_recording:
            return ConversationPhase.RECORDING
        if self.loading:
            return ConversationPhase.LOADING
        if self.transcription or self.reply:
            return ConversationPhase.RESULT
        return ConversationPhase.IDLE

    @property
    def has_result(self) -> bool:
        return bool(self.transcription or self.reply)
