"""Pytest configuration and fixtures for Nolo tests."""

import io
import wave
import logging
from pathlib import Path
from unittest.mock import Mock, patch

import numpy as np
import pytest
from pubsub import pub

from nolo.config import NoloConfig


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def make_wav_bytes(audio_chunk: bytes, repeats: int = 1, sample_rate: int = 16000, channels: int = 1) -> bytes:
    """Build an in-memory 16-bit WAV file from raw PCM."""
    output = io.BytesIO()
    with wave.open(output, 'wb') as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        for _ in range(repeats):
            wf.writeframes(audio_chunk)
    return output.getvalue()


@pytest.fixture
def temp_data_dir(tmp_path):
    """Temporary directory for test data."""
    return str(tmp_path)


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate  # ~0.064 seconds
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def sample_wav_bytes(sample_audio_chunk):
    """About 0.64 seconds of 16kHz mono WAV."""
    return make_wav_bytes(sample_audio_chunk, repeats=10)


@pytest.fixture
def sample_audio_file(temp_data_dir, sample_wav_bytes):
    """Write sample WAV bytes to disk."""
    file_path = Path(temp_data_dir) / "reply.wav"
    file_path.write_bytes(sample_wav_bytes)
    return str(file_path)


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.write.return_value = None
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2
        mock_pyaudio_instance.get_format_from_width.return_value = 8

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def config_file(tmp_path):
    """Write a config file that points every service at an unroutable port."""
    path = tmp_path / "nolo.yaml"
    path.write_text(
        "services:\n"
        "  transcribe_url: http://127.0.0.1:9/transcribe\n"
        "  chat_url: http://127.0.0.1:9/chat\n"
        "  tts_url: http://127.0.0.1:9/tts\n"
        "  timeout_seconds: 5\n"
        "audio:\n"
        "  chunk_size: 512\n"
        "logging:\n"
        "  file_path: logs/test.log\n"
        "  console_output: false\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def test_config(config_file):
    """Loaded test configuration."""
    return NoloConfig(str(config_file))


@pytest.fixture
def state_log():
    """Collect every state published on the conversation.state topic."""
    states = []

    def on_state(state):
        states.append(state)

    pub.subscribe(on_state, "conversation.state")
    yield states
    pub.unsubscribe(on_state, "conversation.state")


class FakeTranscriber:
    """Stands in for TranscriptionClient; records what it was sent."""

    def __init__(self, text="hello there", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def transcribe(self, audio):
        self.calls.append(audio)
        if self.error:
            raise self.error
        return self.text


class FakeChatClient:
    def __init__(self, reply="Hi! How are you feeling today?", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def chat(self, prompt):
        self.calls.append(prompt)
        if self.error:
            raise self.error
        return self.reply


class FakeSpeechClient:
    def __init__(self, audio_url="http://127.0.0.1:9/audio/reply.wav", error=None):
        self.audio_url = audio_url
        self.error = error
        self.calls = []

    async def synthesize(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.audio_url


class FakePlayer:
    """Stands in for AudioPlayer without touching audio devices."""

    def __init__(self, load_error=None, play_error=None, speak_error=None):
        self.load_error = load_error
        self.play_error = play_error
        self.speak_error = speak_error
        self.current = None
        self.loaded = []
        self.play_count = 0
        self.spoken = []
        self.unload_count = 0

    @property
    def has_audio(self):
        return self.current is not None

    @property
    def is_playing(self):
        return False

    async def load(self, url):
        self.loaded.append(url)
        if self.load_error:
            raise self.load_error
        self.current = url
        return url

    def play(self):
        self.play_count += 1
        if self.play_error:
            raise self.play_error

    def speak(self, text):
        if self.speak_error:
            raise self.speak_error
        self.spoken.append(text)

    def unload(self):
        self.unload_count += 1
        self.current = None


class FakeRecorder:
    """Stands in for RecordingService."""

    def __init__(self, start_error=None, wav_bytes=b"RIFF-fake-wav"):
        self.start_error = start_error
        self.wav_bytes = wav_bytes
        self.is_recording = False
        self.cleaned_up = False

    def start(self):
        if self.start_error:
            raise self.start_error
        self.is_recording = True

    def stop(self):
        from nolo.models.audio import RecordedAudio
        if not self.is_recording:
            return None
        self.is_recording = False
        return RecordedAudio(wav_bytes=self.wav_bytes, duration_seconds=1.0,
                             sample_rate=16000, channels=1, total_chunks=16)

    def get_recording_stats(self):
        return None

    def cleanup(self):
        self.cleaned_up = True


@pytest.fixture
def fakes():
    """A fresh set of fake collaborators for ConversationService."""
    return {
        'recorder': FakeRecorder(),
        'transcriber': FakeTranscriber(),
        'chat_client': FakeChatClient(),
        'speech_client': FakeSpeechClient(),
        'player': FakePlayer(),
    }


@pytest.fixture
def make_service(test_config, fakes):
    """Build a ConversationService wired to the fakes, with optional overrides."""
    from nolo.services.conversation_service import ConversationService

    def _make(**overrides):
        collaborators = dict(fakes)
        collaborators.update(overrides)
        fakes.update(overrides)
        return ConversationService(test_config, **collaborators)

    return _make
