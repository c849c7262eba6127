"""Conversation service: record, then transcribe -> chat -> synthesize -> play."""

import logging
import threading
from dataclasses import replace
from typing import Optional

from pubsub import pub

from ..audio.player import AudioPlayer
from ..backends import ChatClient, SpeechClient, TranscriptionClient
from ..config import NoloConfig
from ..models.audio import RecordedAudio
from ..models.ui import ConversationState
from .recording_service import RecordingService

logger = logging.getLogger(__name__)

MICROPHONE_ERROR = "Failed to access microphone. Please check permissions."
NO_SPEECH_ERROR = "No speech detected. Please try again."
PROCESSING_ERROR = "An error occurred during processing"
PLAYBACK_ERROR = "Failed to play audio"


class ConversationService:
    """Holds the view state and drives one round of the voice conversation.

    The chain is strictly sequential and stops at the first failure; the
    failure is logged and its message is left in ``state.error``. Every state
    change is published on ``topic`` with a copy of the new state.
    """

    def __init__(self,
                 config: NoloConfig,
                 recorder: Optional[RecordingService] = None,
                 transcriber: Optional[TranscriptionClient] = None,
                 chat_client: Optional[ChatClient] = None,
                 speech_client: Optional[SpeechClient] = None,
                 player: Optional[AudioPlayer] = None,
                 topic: str = "conversation.state"):
        self.config = config
        self.topic = topic
        self.autoplay = config.get('playback.autoplay', True)
        timeout = config.get_timeout()

        self.recorder = recorder or RecordingService(config)
        self.transcriber = transcriber or TranscriptionClient(config.get_service_url('transcribe'), timeout)
        self.chat_client = chat_client or ChatClient(config.get_service_url('chat'), timeout)
        self.speech_client = speech_client or SpeechClient(config.get_service_url('tts'), timeout)
        self.player = player or AudioPlayer(
            timeout_seconds=timeout,
            chunk_size=config.get('playback.chunk_size', 1024),
            speech_rate=config.get('playback.speech_rate', 0.9),
            speech_pitch=config.get('playback.speech_pitch', 1.1),
            speech_volume=config.get('playback.speech_volume', 0.8),
        )

        self.state = ConversationState()
        self.lock = threading.Lock()

    def snapshot(self) -> ConversationState:
        """Copy of the current state, safe to read from another thread."""
        with self.lock:
            return replace(self.state)

    def _update(self, **changes) -> None:
        with self.lock:
            for key, value in changes.items():
                setattr(self.state, key, value)
            state = replace(self.state)
        pub.sendMessage(self.topic, state=state)

    def start_recording(self) -> bool:
        """Start capturing the user's message. Returns True if recording began."""
        current = self.snapshot()
        if current.is_recording or current.loading:
            logger.warning("Cannot start recording while recording or processing")
            return False

        self._update(error="")
        try:
            self.recorder.start()
        except Exception as e:
            logger.error(f"Failed to start recording: {e}")
            self._update(error=MICROPHONE_ERROR)
            return False

        self._update(is_recording=True)
        return True

    def stop_recording(self) -> Optional[RecordedAudio]:
        """Stop capturing and return the clip to upload, or None if not recording."""
        if not self.snapshot().is_recording:
            return None

        recording = self.recorder.stop()
        if recording is None:
            self._update(is_recording=False)
            return None

        self._update(is_recording=False, loading=True)
        return recording

    def discard_recording(self) -> None:
        """Leave the loading state for a stopped recording that will not be uploaded."""
        logger.warning("Recording discarded without upload")
        self._update(loading=False)

    async def handle_upload(self, audio: bytes) -> None:
        """Run one transcribe -> chat -> synthesize round for a WAV clip."""
        self.player.unload()
        self._update(error="", loading=True, transcription="", reply="", audio_url="")
        try:
            text = await self.transcriber.transcribe(audio)
            logger.info(f"Transcription: '{text}'")
            self._update(transcription=text)

            if not text.strip():
                logger.info("No speech detected, stopping")
                self._update(error=NO_SPEECH_ERROR)
                return

            reply = await self.chat_client.chat(text)
            logger.info(f"Reply: '{reply}'")
            self._update(reply=reply)

            if reply.strip():
                audio_url = await self.speech_client.synthesize(reply)
                if audio_url:
                    self._update(audio_url=audio_url)
                    await self._load_and_autoplay(audio_url)
        except Exception as e:
            logger.error(f"Error during processing: {e}", exc_info=True)
            self._update(error=str(e) or PROCESSING_ERROR)
        finally:
            self._update(loading=False)

    async def _load_and_autoplay(self, audio_url: str) -> None:
        try:
            await self.player.load(audio_url)
            if self.autoplay:
                self.player.play()
        except Exception as e:
            logger.warning(f"Auto-play failed, user can play manually: {e}")

    def play_audio(self) -> None:
        """Replay the reply audio, or speak the reply locally if none was loaded."""
        if self.player.has_audio:
            try:
                self.player.play()
            except Exception as e:
                logger.error(f"Failed to play audio: {e}")
                self._update(error=PLAYBACK_ERROR)
            return

        reply = self.snapshot().reply
        if not reply:
            return
        try:
            self.player.speak(reply)
        except Exception as e:
            logger.error(f"Failed to use speech synthesis: {e}")
            self._update(error=PLAYBACK_ERROR)

    def clear_session(self) -> None:
        """Forget the current round and stop any playback."""
        self.player.unload()
        self._update(transcription="", reply="", error="", audio_url="")
        logger.info("Session cleared")

    def cleanup(self) -> None:
        """Release the microphone and output device."""
        self.recorder.cleanup()
        self.player.unload()
        logger.info("ConversationService cleaned up")
