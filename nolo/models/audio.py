"""Audio-related data models."""

from dataclasses import dataclass


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int
    peak_level: float = 0.0


@dataclass
class RecordedAudio:
    """A finished recording, ready to upload."""
    wav_bytes: bytes
    duration_seconds: float
    sample_rate: int
    channels: int
    total_chunks: int

    @property
    def is_empty(self) -> bool:
        return self.total_chunks == 0


@dataclass
class LoadedAudio:
    """Decoded audio resource returned by the speech service."""
    url: str
    frames: bytes
    sample_rate: int
    channels: int
    sample_width: int  # Bytes per sample

    @property
    def duration_seconds(self) -> float:
        frame_size = self.channels * self.sample_width
        if not frame_size or not self.sample_rate:
            return 0.0
        return len(self.frames) / frame_size / self.sample_rate
