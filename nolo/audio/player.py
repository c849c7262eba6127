"""Playback of synthesized replies, with a local speech synthesizer fallback."""

import io
import wave
import logging
from pathlib import Path
from threading import Thread, Event
from typing import Optional
from urllib.parse import urlparse, unquote

import aiohttp
import pyaudio
import pyttsx3

from ..models.audio import LoadedAudio

logger = logging.getLogger(__name__)


class PlaybackError(RuntimeError):
    """Raised when audio cannot be loaded, decoded or played."""


class AudioPlayer:
    """Plays the most recently loaded audio resource on the default output device."""

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        chunk_size: int = 1024,
        speech_rate: float = 0.9,
        speech_pitch: float = 1.1,
        speech_volume: float = 0.8,
    ):
        """Initialize audio player.

        Args:
            timeout_seconds: Time allowed to download an audio resource
            chunk_size: Frames written to the output stream per write
            speech_rate: Fallback synthesizer rate, relative to the engine default
            speech_pitch: Fallback synthesizer pitch (pyttsx3 has no pitch control)
            speech_volume: Fallback synthesizer volume, 0.0 to 1.0
        """
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.chunk_size = chunk_size
        self.speech_rate = speech_rate
        self.speech_pitch = speech_pitch
        self.speech_volume = speech_volume

        self.current: Optional[LoadedAudio] = None

        self.playback_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    @property
    def has_audio(self) -> bool:
        return self.current is not None

    @property
    def is_playing(self) -> bool:
        return bool(self.playback_thread and self.playback_thread.is_alive())

    async def load(self, url: str) -> LoadedAudio:
        """Fetch and decode a WAV resource, making it the current audio.

        Args:
            url: http(s) URL, file:// URI, or local path

        Raises:
            PlaybackError: If the resource is not decodable WAV audio
            aiohttp.ClientError: If an http(s) download fails
        """
        data = await self._fetch(url)
        self.current = self._decode(url, data)
        logger.info(f"Loaded audio from {url}: {self.current.duration_seconds:.1f}s, "
                    f"{self.current.sample_rate}Hz, {self.current.channels} channel(s)")
        return self.current

    async def _fetch(self, url: str) -> bytes:
        parsed = urlparse(url)
        if parsed.scheme in ("http", "https"):
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(url) as response:
                    if not 200 <= response.status < 300:
                        raise PlaybackError(f"Audio download failed: {response.status}")
                    return await response.read()

        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(url)
        if not path.is_file():
            raise PlaybackError(f"Audio file not found: {path}")
        return path.read_bytes()

    @staticmethod
    def _decode(url: str, data: bytes) -> LoadedAudio:
        try:
            with wave.open(io.BytesIO(data), 'rb') as wf:
                return LoadedAudio(
                    url=url,
                    frames=wf.readframes(wf.getnframes()),
                    sample_rate=wf.getframerate(),
                    channels=wf.getnchannels(),
                    sample_width=wf.getsampwidth(),
                )
        except (wave.Error, EOFError) as e:
            raise PlaybackError(f"Unsupported audio format: {e}") from e

    def play(self) -> None:
        """Start playing the current audio from the beginning.

        Raises:
            PlaybackError: If nothing is loaded or the output device fails
        """
        if not self.current:
            raise PlaybackError("No audio loaded")

        self.stop()
        audio = self.current
        try:
            self.pyaudio_instance = pyaudio.PyAudio()
            self.stream = self.pyaudio_instance.open(
                format=self.pyaudio_instance.get_format_from_width(audio.sample_width),
                channels=audio.channels,
                rate=audio.sample_rate,
                output=True,
            )
        except Exception as e:
            self._release()
            raise PlaybackError(f"Failed to open output device: {e}") from e

        self.stop_event.clear()
        self.playback_thread = Thread(target=self._play_frames, args=(audio,), daemon=True)
        self.playback_thread.name = "AudioPlaybackThread"
        self.playback_thread.start()
        logger.info(f"Playing {audio.url}")

    def _play_frames(self, audio: LoadedAudio) -> None:
        """Internal method: write frames to the output stream in background thread."""
        step = self.chunk_size * audio.channels * audio.sample_width
        try:
            for offset in range(0, len(audio.frames), step):
                if self.stop_event.is_set():
                    logger.debug("Playback stopped early")
                    break
                self.stream.write(audio.frames[offset:offset + step])
        except Exception as e:
            logger.error(f"Error during playback: {e}", exc_info=True)
        finally:
            self._release()

    def stop(self) -> None:
        """Stop any playback in progress."""
        if not self.is_playing:
            return
        self.stop_event.set()
        self.playback_thread.join(timeout=2.0)
        if self.playback_thread.is_alive():
            logger.warning("Playback thread did not stop cleanly")

    def unload(self) -> None:
        """Stop playback and forget the current audio."""
        self.stop()
        self.current = None

    def _release(self) -> None:
        if self.stream:
            self.stream.stop_stream()
            self.stream.close()
            self.stream = None
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def speak(self, text: str) -> None:
        """Read text aloud with the local speech synthesizer (blocks until done).

        Raises:
            PlaybackError: If no local speech engine is available
        """
        if not text or not text.strip():
            return
        try:
            engine = pyttsx3.init()
            base_rate = engine.getProperty('rate')
            engine.setProperty('rate', int(base_rate * self.speech_rate))
            engine.setProperty('volume', self.speech_volume)
            engine.say(text)
            engine.runAndWait()
        except Exception as e:
            raise PlaybackError(f"Speech synthesis failed: {e}") from e
        logger.info(f"Spoke {len(text)} chars with local synthesizer")
