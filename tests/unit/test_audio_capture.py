"""Unit tests for AudioCapture class."""

import time
from unittest.mock import patch

import numpy as np
import pytest

from nolo.audio.capture import AudioCapture, MicrophoneError
from nolo.models.audio import AudioStats


class EventSink:
    """Collects AudioEvents handed to the capture callback."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


@pytest.mark.unit
class TestAudioCapture:
    """Test cases for AudioCapture class."""

    def test_initialization(self, mock_pyaudio):
        """Test AudioCapture initialization."""
        capture = AudioCapture(callback=EventSink(), sample_rate=16000, chunk_size=1024, channels=1)

        assert capture.sample_rate == 16000
        assert capture.chunk_size == 1024
        assert capture.channels == 1
        assert capture.is_recording is False
        assert capture.total_chunks == 0
        assert capture.peak_level == 0.0
        # Device is only opened when recording starts
        mock_pyaudio['class'].assert_not_called()

    def test_start_recording_opens_input_stream(self, mock_pyaudio):
        """Test starting recording opens the microphone."""
        capture = AudioCapture(callback=EventSink(), chunk_size=512)

        with patch.object(capture, '_record_continuously'):
            capture.start_recording()

            assert capture.is_recording is True
            assert capture.start_time is not None
            _, kwargs = mock_pyaudio['instance'].open.call_args
            assert kwargs['input'] is True
            assert kwargs['rate'] == 16000
            assert kwargs['frames_per_buffer'] == 512

            capture.stop_recording()

    def test_start_recording_already_recording(self, mock_pyaudio):
        """Test starting recording when already recording."""
        capture = AudioCapture(callback=EventSink())

        with patch.object(capture, '_record_continuously'):
            capture.start_recording()
            capture.start_recording()

            assert mock_pyaudio['instance'].open.call_count == 1
            capture.stop_recording()

    def test_microphone_unavailable(self, mock_pyaudio):
        """Test that a device failure raises MicrophoneError and releases PyAudio."""
        mock_pyaudio['instance'].open.side_effect = OSError("Invalid input device")
        capture = AudioCapture(callback=EventSink())

        with pytest.raises(MicrophoneError, match="Invalid input device"):
            capture.start_recording()

        assert capture.is_recording is False
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_stop_recording_not_recording(self, mock_pyaudio):
        """Test stopping recording when not recording."""
        capture = AudioCapture(callback=EventSink())

        capture.stop_recording()

        assert capture.is_recording is False

    @pytest.mark.slow
    def test_recording_publishes_events(self, mock_pyaudio, sample_audio_chunk):
        """Test that every chunk is published and the last one is final."""
        sink = EventSink()
        capture = AudioCapture(callback=sink)
        mock_pyaudio['stream'].read.return_value = sample_audio_chunk

        capture.start_recording()
        time.sleep(0.1)
        capture.stop_recording()

        assert len(sink.events) == capture.total_chunks
        assert len(sink.events) > 1
        assert sink.events[-1].final is True
        assert not any(event.final for event in sink.events[:-1])
        assert [e.sequence_number for e in sink.events] == list(range(1, len(sink.events) + 1))
        assert sink.events[0].audio_data == sample_audio_chunk

    @pytest.mark.slow
    def test_stop_releases_device(self, mock_pyaudio):
        """Test that stopping closes the stream and terminates PyAudio."""
        capture = AudioCapture(callback=EventSink())

        capture.start_recording()
        time.sleep(0.05)
        capture.stop_recording()

        mock_pyaudio['stream'].stop_stream.assert_called_once()
        mock_pyaudio['stream'].close.assert_called_once()
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_get_recording_stats(self, mock_pyaudio):
        """Test getting recording statistics."""
        capture = AudioCapture(callback=EventSink())

        stats = capture.get_recording_stats()

        assert isinstance(stats, AudioStats)
        assert stats.is_recording is False
        assert stats.duration_seconds == 0.0
        assert stats.sample_rate == 16000
        assert stats.chunk_size == 1024
        assert stats.total_chunks == 0
        assert stats.peak_level == 0.0

    def test_get_recording_stats_while_recording(self, mock_pyaudio):
        """Test getting recording statistics while recording."""
        capture = AudioCapture(callback=EventSink())

        with patch.object(capture, '_record_continuously'):
            capture.start_recording()
            time.sleep(0.1)

            stats = capture.get_recording_stats()
            assert stats.is_recording is True
            assert stats.duration_seconds > 0

            capture.stop_recording()

    @pytest.mark.slow
    def test_peak_level_calculation(self, mock_pyaudio):
        """Test peak level calculation during recording."""
        capture = AudioCapture(callback=EventSink())

        samples = np.array([0, 16383, 0, -16383, 0], dtype=np.int16)  # 50% peak
        mock_pyaudio['stream'].read.return_value = samples.tobytes()

        capture.start_recording()
        time.sleep(0.1)
        capture.stop_recording()

        # Peak should be approximately 0.5 (16383 / 32768)
        assert 0.4 < capture.peak_level < 0.6

    def test_destructor_cleanup(self, mock_pyaudio):
        """Test that destructor properly cleans up resources."""
        capture = AudioCapture(callback=EventSink())

        with patch.object(AudioCapture, 'stop_recording') as mock_stop:
            capture.is_recording = True
            capture.__del__()
            mock_stop.assert_called_once()
            capture.is_recording = False
