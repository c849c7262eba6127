"""Audio capture, buffering and playback module."""

from .capture import AudioCapture, MicrophoneError
from .audio_pub import AudioPublisher
from .buffer import RecordingBuffer
from .player import AudioPlayer, PlaybackError

__all__ = [
    'AudioCapture',
    'MicrophoneError',
    'AudioPublisher',
    'RecordingBuffer',
    'AudioPlayer',
    'PlaybackError',
]
