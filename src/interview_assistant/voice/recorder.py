"""Push-to-talk audio capture from a granted media stream.

The recorder never opens devices itself: it subscribes to the audio chunks of
the stream held by the media gateway and buffers them until stopped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from interview_assistant.errors import NoStreamError
from interview_assistant.voice.media import MediaStream

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AudioSegment:
    """Raw PCM captured in one recording cycle."""

    data: bytes
    sample_rate: int = 16000
    channels: int = 1
    sample_width: int = 2

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def duration_s(self) -> float:
        frame_bytes = self.channels * self.sample_width
        if not frame_bytes or not self.sample_rate:
            return 0.0
        return len(self.data) / frame_bytes / self.sample_rate

    def to_float32(self) -> np.ndarray:
        """Mono float32 samples in [-1, 1], the layout speech models expect."""
        if self.sample_width != 2:
            raise ValueError(f"Only 16-bit PCM supported, got sample_width={self.sample_width}")
        usable = len(self.data) - len(self.data) % (self.sample_width * self.channels)
        audio = np.frombuffer(self.data[:usable], dtype=np.int16)
        if self.channels > 1:
            audio = audio.reshape(-1, self.channels).mean(axis=1)
        return audio.astype(np.float32) / 32768.0


class Recorder:
    def __init__(self) -> None:
        self._stream: MediaStream | None = None
        self._chunks: list[bytes] = []

    @property
    def is_recording(self) -> bool:
        return self._stream is not None

    def start(self, stream: MediaStream | None) -> None:
        """Start capturing into a fresh, empty buffer.

        Raises:
            NoStreamError: no stream is held.
        """
        if stream is None:
            raise NoStreamError("no media stream is available for recording")
        if self._stream is not None:
            self._stream.unsubscribe_audio(self._on_chunk)

        self._chunks = []
        self._stream = stream
        stream.subscribe_audio(self._on_chunk)
        logger.info("[VOICE][REC] started sample_rate=%s channels=%s", stream.sample_rate, stream.channels)

    def _on_chunk(self, chunk: bytes) -> None:
        if len(chunk) > 0:
            self._chunks.append(chunk)

    def stop(self) -> AudioSegment | None:
        """Finalize the buffer into one segment. Returns None when not recording."""
        stream = self._stream
        if stream is None:
            return None

        stream.unsubscribe_audio(self._on_chunk)
        self._stream = None

        chunks, self._chunks = self._chunks, []
        segment = AudioSegment(
            data=b"".join(chunks),
            sample_rate=stream.sample_rate,
            channels=stream.channels,
            sample_width=stream.sample_width,
        )
        logger.info("[VOICE][REC] stopped chunks=%d bytes=%d dur=%.2fs", len(chunks), segment.size, segment.duration_s)
        return segment
