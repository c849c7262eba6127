"""Interactive terminal screen for talking to Nolo."""

import sys
import time
import select
import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from ..config import NoloConfig
from ..models.ui import ConversationPhase, ConversationState
from ..services.conversation_service import ConversationService
from ..services.pipeline_worker import PipelineWorker

logger = logging.getLogger(__name__)


class ConversationScreen:
    """Simple conversation interface using line-based input and a redrawn status view."""

    def __init__(self, config: NoloConfig,
                 service: Optional[ConversationService] = None,
                 console: Optional[Console] = None):
        self.console = console or Console()
        self.config = config
        self.service = service or ConversationService(config)
        self.worker = PipelineWorker("conversation")
        self.running = False
        self.refresh_seconds = 0.5

    def render(self, state: ConversationState) -> None:
        """Draw the full screen for the given state."""
        self.console.clear()

        # Header
        self.console.print(Text("Nolo", style="bold dark_orange"), justify="center")
        self.console.print(Text("Your Gentle Voice Companion", style="orange3"), justify="center")
        self.console.print("=" * 50)

        # Status
        phase = state.phase
        if phase == ConversationPhase.RECORDING:
            stats = self.service.recorder.get_recording_stats()
            self.console.print("🎤 Recording... press 1 to stop", style="bold red")
            if stats:
                peak_bar = "█" * int(stats.peak_level * 20)
                self.console.print(f"   {stats.duration_seconds:.1f}s  [{peak_bar:<20}]")
        elif phase == ConversationPhase.LOADING:
            self.console.print("⏳ Processing your message...", style="orange3")
        else:
            self.console.print("Press 1 to start talking", style="orange3")

        if state.error:
            self.console.print(Panel(Text(state.error), border_style="red", style="red"))

        if state.transcription:
            self.console.print(Panel(Text(state.transcription), title="🔈 You said:",
                                     title_align="left", border_style="blue"))

        if state.reply:
            self.console.print(Panel(Text(state.reply), title="💝 Nolo replied:",
                                     title_align="left", border_style="dark_orange"))

        # Controls
        self.console.print("\n" + "=" * 50)
        self.console.print("Commands:")
        if phase == ConversationPhase.RECORDING:
            self.console.print("  [bold red]1[/bold red] - Stop recording")
        elif phase != ConversationPhase.LOADING:
            self.console.print("  [bold green]1[/bold green] - Start recording")
        if state.reply:
            self.console.print("  [bold yellow]2[/bold yellow] - Play voice")
        if state.has_result:
            self.console.print("  [bold blue]3[/bold blue] - Start new conversation")
        self.console.print("  [bold red]q[/bold red] - Quit")
        self.console.print("=" * 50)

    def handle_command(self, command: str) -> bool:
        """Apply one command. Returns False when the user asked to quit."""
        state = self.service.snapshot()

        if command == '1':
            if state.is_recording:
                recording = self.service.stop_recording()
                if recording is not None and not self.worker.submit(
                        "upload", self.service.handle_upload, recording.wav_bytes):
                    self.service.discard_recording()
            elif state.loading:
                logger.debug("Ignoring record command while processing")
            else:
                self.service.start_recording()
        elif command == '2':
            if state.reply:
                self.worker.submit("play", self.service.play_audio)
        elif command == '3':
            self.service.clear_session()
        elif command == 'q':
            return False
        else:
            self.console.print(f"Unknown command: {escape(command)}", style="red")
            time.sleep(1)
        return True

    def _get_user_input(self) -> Optional[str]:
        """Get user input in a way that works in all terminals."""
        try:
            if sys.platform != 'win32':
                if select.select([sys.stdin], [], [], self.refresh_seconds)[0]:
                    line = sys.stdin.readline()
                    if not line:
                        # EOF on stdin
                        return 'q'
                    line = line.strip().lower()
                    logger.debug(f"Line input: '{line}'")
                    return line[:1] if line else None
            else:
                import msvcrt
                if msvcrt.kbhit():
                    key = msvcrt.getch().decode('utf-8')
                    logger.debug(f"Single key pressed: '{key}'")
                    return key.lower()
                time.sleep(self.refresh_seconds)
        except (OSError, ValueError) as e:
            logger.debug(f"Error getting user input: {e}")
        return None

    def run(self) -> None:
        """Run the interactive conversation loop."""
        self.running = True
        self.worker.start()
        logger.info("Conversation screen started")

        try:
            while self.running:
                self.render(self.service.snapshot())
                command = self._get_user_input()
                if command and not self.handle_command(command):
                    self.running = False
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        """Stop the worker and release audio devices."""
        if self.service.snapshot().is_recording:
            self.service.stop_recording()
        self.worker.shutdown(timeout=5.0)
        self.service.cleanup()
        logger.info("Conversation screen closed")
