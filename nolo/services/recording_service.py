"""Recording service: start/stop the microphone and hand back one WAV clip."""

import logging
from typing import Optional

from ..audio.audio_pub import AudioPublisher
from ..audio.buffer import RecordingBuffer
from ..audio.capture import AudioCapture
from ..config import NoloConfig
from ..models.audio import AudioStats, RecordedAudio

logger = logging.getLogger(__name__)


class RecordingService:
    """Owns one recording session at a time: capture publishes, buffer collects."""

    def __init__(self, config: NoloConfig, topic: str = "audio.chunk"):
        """Initialize recording service.

        Args:
            config: Application configuration
            topic: Pub/sub topic used between capture and buffer
        """
        self.config = config
        self.topic = topic
        self.sample_rate = config.get('audio.sample_rate', 16000)
        self.chunk_size = config.get('audio.chunk_size', 1024)
        self.channels = config.get('audio.channels', 1)

        self.audio_publisher = AudioPublisher(topic)
        self.audio_capture: Optional[AudioCapture] = None
        self.buffer: Optional[RecordingBuffer] = None

        logger.info(f"Audio settings: {self.sample_rate}Hz, {self.chunk_size} samples/chunk, "
                    f"{self.channels} channels")

    @property
    def is_recording(self) -> bool:
        return bool(self.audio_capture and self.audio_capture.is_recording)

    def start(self) -> None:
        """Open the microphone and start collecting audio.

        Raises:
            MicrophoneError: If the microphone cannot be opened
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        self.buffer = RecordingBuffer(self.topic, self.sample_rate, self.channels)
        self.buffer.attach()
        self.audio_capture = AudioCapture(
            callback=self.audio_publisher.publish_audio_event,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            channels=self.channels
        )
        try:
            self.audio_capture.start_recording()
        except Exception:
            self.buffer.detach()
            self.buffer = None
            self.audio_capture = None
            raise
        logger.info("Recording started")

    def stop(self) -> Optional[RecordedAudio]:
        """Stop recording and return the clip, or None if nothing was recording."""
        if not self.is_recording:
            logger.warning("Not recording")
            return None

        self.audio_capture.stop_recording()
        self.buffer.detach()

        recording = RecordedAudio(
            wav_bytes=self.buffer.to_wav_bytes(),
            duration_seconds=self.buffer.duration_seconds,
            sample_rate=self.sample_rate,
            channels=self.channels,
            total_chunks=self.buffer.total_chunks,
        )
        logger.info(f"Recording stopped: {recording.duration_seconds:.1f}s, "
                    f"{recording.total_chunks} chunks, {len(recording.wav_bytes)} bytes")
        self.buffer = None
        return recording

    def get_recording_stats(self) -> Optional[AudioStats]:
        """Get current recording statistics."""
        if self.audio_capture:
            return self.audio_capture.get_recording_stats()
        return None

    def cleanup(self) -> None:
        """Clean up service resources."""
        if self.is_recording:
            self.audio_capture.stop_recording()
        if self.buffer:
            self.buffer.detach()
            self.buffer = None
        self.audio_capture = None
        logger.info("RecordingService cleaned up")
