"""Recording buffer that collects published audio chunks into one WAV clip."""

import io
import wave
import logging
import threading
from typing import List

from pubsub import pub

from ..models.events import AudioEvent

logger = logging.getLogger(__name__)


class RecordingBuffer:
    """Accumulates every AudioEvent published on a topic until detached."""

    def __init__(self, topic: str, sample_rate: int = 16000, channels: int = 1):
        """Initialize recording buffer.

        Args:
            topic: Pub/sub topic the audio capture publishes on
            sample_rate: Audio sample rate
            channels: Number of audio channels
        """
        self.topic = topic
        self.sample_rate = sample_rate
        self.channels = channels
        self.bytes_per_sample = 2  # 16-bit audio

        self.chunks: List[bytes] = []
        self.lock = threading.Lock()
        self.attached = False

    def attach(self) -> None:
        """Subscribe to the audio topic."""
        if self.attached:
            return
        pub.subscribe(self.on_audio_event, self.topic)
        self.attached = True
        logger.debug(f"RecordingBuffer subscribed to {self.topic}")

    def detach(self) -> None:
        """Unsubscribe from the audio topic."""
        if not self.attached:
            return
        pub.unsubscribe(self.on_audio_event, self.topic)
        self.attached = False
        logger.debug(f"RecordingBuffer unsubscribed from {self.topic}")

    def on_audio_event(self, event: AudioEvent) -> None:
        """Pub/sub listener: append the chunk to the recording."""
        if not event.audio_data:
            return
        with self.lock:
            self.chunks.append(event.audio_data)

    @property
    def total_chunks(self) -> int:
        with self.lock:
            return len(self.chunks)

    @property
    def size_bytes(self) -> int:
        with self.lock:
            return sum(len(chunk) for chunk in self.chunks)

    @property
    def duration_seconds(self) -> float:
        bytes_per_second = self.sample_rate * self.channels * self.bytes_per_sample
        return self.size_bytes / bytes_per_second

    def to_wav_bytes(self) -> bytes:
        """Encode the collected PCM chunks as an in-memory WAV file."""
        output = io.BytesIO()
        with self.lock:
            with wave.open(output, 'wb') as wf:
                wf.setnchannels(self.channels)
                wf.setsampwidth(self.bytes_per_sample)
                wf.setframerate(self.sample_rate)
                for chunk in self.chunks:
                    wf.writeframes(chunk)
        return output.getvalue()
