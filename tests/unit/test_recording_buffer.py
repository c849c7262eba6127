"""Unit tests for RecordingBuffer."""

import io
import time
import wave

import pytest
from pubsub import pub

from nolo.audio.buffer import RecordingBuffer
from nolo.models.events import AudioEvent


def make_event(sequence_number, data, final=False):
    return AudioEvent(
        chunk_id=f"chunk_{sequence_number}",
        audio_data=data,
        timestamp=time.time(),
        sequence_number=sequence_number,
        final=final,
    )


@pytest.mark.unit
class TestRecordingBuffer:
    """Test cases for RecordingBuffer."""

    def test_collects_published_chunks(self, sample_audio_chunk):
        buffer = RecordingBuffer("test.buffer.collect")
        buffer.attach()
        try:
            pub.sendMessage("test.buffer.collect", event=make_event(1, sample_audio_chunk))
            pub.sendMessage("test.buffer.collect", event=make_event(2, sample_audio_chunk, final=True))
        finally:
            buffer.detach()

        assert buffer.total_chunks == 2
        assert buffer.size_bytes == 2 * len(sample_audio_chunk)

    def test_detached_buffer_ignores_messages(self, sample_audio_chunk):
        buffer = RecordingBuffer("test.buffer.detached")
        buffer.attach()
        buffer.detach()

        pub.sendMessage("test.buffer.detached", event=make_event(1, sample_audio_chunk))

        assert buffer.total_chunks == 0

    def test_empty_chunks_skipped(self):
        buffer = RecordingBuffer("test.buffer.empty")

        buffer.on_audio_event(make_event(1, b""))

        assert buffer.total_chunks == 0

    def test_duration(self, sample_audio_chunk):
        buffer = RecordingBuffer("test.buffer.duration", sample_rate=16000)
        for i in range(10):
            buffer.on_audio_event(make_event(i, sample_audio_chunk))

        # 10 chunks of 1024 16-bit samples at 16kHz
        assert buffer.duration_seconds == pytest.approx(0.64)

    def test_to_wav_bytes(self, sample_audio_chunk):
        buffer = RecordingBuffer("test.buffer.wav", sample_rate=16000, channels=1)
        buffer.on_audio_event(make_event(1, sample_audio_chunk))
        buffer.on_audio_event(make_event(2, sample_audio_chunk))

        with wave.open(io.BytesIO(buffer.to_wav_bytes()), 'rb') as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == 16000
            assert wf.getnframes() == 2048
            assert wf.readframes(1024) == sample_audio_chunk
