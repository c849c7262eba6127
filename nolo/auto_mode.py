"""Auto mode: one unattended conversation round, for scripting and smoke tests."""

import time
import asyncio
import logging
from pathlib import Path
from typing import Optional

from pubsub import pub

from .config import NoloConfig
from .models.ui import ConversationPhase, ConversationState
from .services.conversation_service import ConversationService

logger = logging.getLogger(__name__)


class _PhasePrinter:
    """Prints a line whenever the conversation moves to a new phase."""

    def __init__(self):
        self.last_phase: Optional[ConversationPhase] = None

    def on_state(self, state: ConversationState) -> None:
        if state.phase == self.last_phase:
            return
        self.last_phase = state.phase
        if state.phase == ConversationPhase.RECORDING:
            print("🔴 Recording...")
        elif state.phase == ConversationPhase.LOADING:
            print("⏳ Processing your message...")


def run_auto_mode(config: NoloConfig,
                  duration_seconds: int = 5,
                  input_path: Optional[str] = None,
                  play: bool = True) -> int:
    """Run one round without the interactive screen.

    This mode:
    1. Records from the microphone for the given duration, or reads a WAV file
    2. Sends it through transcribe -> chat -> tts
    3. Prints the transcript and reply
    4. Waits for the reply audio to finish playing (unless play is False)

    Args:
        config: Loaded configuration
        duration_seconds: How long to record when no input file is given
        input_path: Optional WAV file to send instead of recording
        play: Whether to play the synthesized reply

    Returns:
        Process exit code: 0 on success, 1 if the round ended with an error
    """
    logger.info(f"🤖 Starting auto mode: input={input_path or 'microphone'}, duration={duration_seconds}s")
    if not play:
        config.set('playback.autoplay', False)

    service = ConversationService(config)
    printer = _PhasePrinter()
    pub.subscribe(printer.on_state, service.topic)

    try:
        audio = _acquire_audio(service, duration_seconds, input_path)
        if audio is None:
            _report(service.snapshot())
            return 1

        asyncio.run(service.handle_upload(audio))
        state = service.snapshot()
        _report(state)

        if play and service.player.is_playing:
            print("🔊 Playing reply...")
            while service.player.is_playing:
                time.sleep(0.1)

        return 1 if state.error else 0

    except KeyboardInterrupt:
        print("\n🛑 Auto mode interrupted by user")
        logger.info("Auto mode interrupted by KeyboardInterrupt")
        return 1

    finally:
        pub.unsubscribe(printer.on_state, service.topic)
        service.cleanup()


def _acquire_audio(service: ConversationService, duration_seconds: int,
                   input_path: Optional[str]) -> Optional[bytes]:
    """Read the input file, or record from the microphone for duration_seconds."""
    if input_path:
        path = Path(input_path)
        if not path.is_file():
            raise FileNotFoundError(f"Input audio file not found: {path}")
        print(f"📂 Using audio file: {path}")
        return path.read_bytes()

    if not service.start_recording():
        return None

    for elapsed in range(1, duration_seconds + 1):
        remaining = duration_seconds - elapsed
        progress_bar = "█" * elapsed + "░" * remaining
        print(f"   [{progress_bar}] {elapsed:2d}/{duration_seconds}s", end="\r")
        time.sleep(1)
    print()

    recording = service.stop_recording()
    if recording is None:
        return None
    print(f"⏹️  Recorded {recording.duration_seconds:.1f}s of audio")
    return recording.wav_bytes


def _report(state: ConversationState) -> None:
    """Print the outcome of the round."""
    print()
    if state.transcription:
        print(f"🗣️  You said: {state.transcription}")
    if state.reply:
        print(f"💝 Nolo replied: {state.reply}")
    if state.audio_url:
        print(f"   Audio: {state.audio_url}")
    if state.error:
        print(f"❌ {state.error}")
    print()
