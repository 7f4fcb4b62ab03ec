"""Camera/microphone acquisition (LLM-agnostic).

This module is "dumb hardware I/O": it knows nothing about the interview.

It provides:
- a `MediaStream` handle made of tracks (audio always, video optional)
- a `MediaGateway` that owns at most one live stream at a time
- default devices backed by `sounddevice` (microphone) and OpenCV (camera)

Device callbacks fire on driver threads. Audio chunks are marshalled onto the
event loop so subscribers only ever run on the loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable

from interview_assistant.errors import MediaPermissionError

logger = logging.getLogger(__name__)

AudioChunkCallback = Callable[[bytes], None]
PreviewSink = Callable[["MediaStream"], None]


class MediaTrack:
    """One device track of a stream."""

    kind: str = "unknown"

    def __init__(self) -> None:
        self._live = True

    @property
    def ready_state(self) -> str:
        return "live" if self._live else "ended"

    def stop(self) -> None:
        self._live = False


class MediaStream:
    """A live capture stream: a set of tracks plus an audio chunk fan-out."""

    def __init__(self, *, sample_rate: int = 16000, channels: int = 1, sample_width: int = 2) -> None:
        self.sample_rate = sample_rate
        self.channels = channels
        self.sample_width = sample_width
        self._tracks: list[MediaTrack] = []
        self._subscribers: list[AudioChunkCallback] = []

    @property
    def tracks(self) -> list[MediaTrack]:
        return list(self._tracks)

    @property
    def active(self) -> bool:
        return any(t.ready_state == "live" for t in self._tracks)

    def add_track(self, track: MediaTrack) -> None:
        self._tracks.append(track)

    def get_tracks(self, kind: str) -> list[MediaTrack]:
        return [t for t in self._tracks if t.kind == kind]

    def subscribe_audio(self, callback: AudioChunkCallback) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe_audio(self, callback: AudioChunkCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def push_audio(self, chunk: bytes) -> None:
        """Deliver one audio chunk to every subscriber (event loop thread only)."""
        for cb in list(self._subscribers):
            cb(chunk)

    def stop(self) -> None:
        """Stop every track. Safe to call more than once."""
        for track in self._tracks:
            try:
                track.stop()
            except Exception as e:
                logger.warning("[MEDIA] track stop failed kind=%s error=%s", track.kind, e)
        self._subscribers.clear()


class MediaDevices:
    async def get_user_media(self, *, audio: bool = True, video: bool = True) -> MediaStream:
        raise NotImplementedError


class MediaGateway:
    """Owns the single camera/microphone stream of a session."""

    def __init__(
        self,
        devices: MediaDevices,
        *,
        video: bool = True,
        preview: PreviewSink | None = None,
    ) -> None:
        self._devices = devices
        self._video = video
        self._preview = preview
        self._stream: MediaStream | None = None
        self._lock = asyncio.Lock()

    @property
    def stream(self) -> MediaStream | None:
        return self._stream

    @property
    def has_stream(self) -> bool:
        return self._stream is not None

    async def acquire(self) -> MediaStream:
        """Request audio+video access, reusing the held stream if it is still live.

        The preview sink is attached to every newly acquired stream, so a camera
        re-acquired after `release()` gets a fresh preview. A reused stream does not.

        Raises:
            MediaPermissionError: access denied or no device available.
        """
        async with self._lock:
            if self._stream is not None:
                if self._stream.active:
                    logger.debug("[MEDIA] acquire reused live stream")
                    return self._stream
                self.release()

            try:
                stream = await self._devices.get_user_media(audio=True, video=self._video)
            except MediaPermissionError:
                raise
            except Exception as e:
                raise MediaPermissionError(str(e) or type(e).__name__) from e

            self._stream = stream
            logger.info(
                "[MEDIA] acquired tracks=%s",
                ",".join(t.kind for t in stream.tracks) or "<none>",
            )
            if self._preview is not None:
                try:
                    self._preview(stream)
                except Exception as e:
                    logger.warning("[MEDIA] preview attach failed: %s", e)
            return stream

    def release(self) -> None:
        """Stop every track of the held stream and drop it. No-op without a stream."""
        stream = self._stream
        if stream is None:
            return
        self._stream = None
        stream.stop()
        logger.info("[MEDIA] released")


@dataclass(frozen=True)
class MediaConfig:
    sample_rate: int = 16000
    channels: int = 1
    dtype: str = "int16"  # sounddevice dtype; 2 bytes per sample
    video_device_index: int = 0


class SoundDeviceAudioTrack(MediaTrack):
    kind = "audio"

    def __init__(self, config: MediaConfig) -> None:
        super().__init__()
        self._config = config
        self._stream = None

    def _require_sounddevice(self):
        try:
            import sounddevice as sd  # type: ignore

            return sd
        except Exception as e:  # pragma: no cover
            raise MediaPermissionError(
                "sounddevice is required for microphone capture. Install with: pip install -e '.[voice]'. "
                "If you see 'PortAudio library not found', install PortAudio (Debian/Ubuntu: sudo apt-get install portaudio19-dev)."
            ) from e

    async def open(self, sink: AudioChunkCallback) -> None:
        sd = self._require_sounddevice()
        loop = asyncio.get_running_loop()

        def callback(indata, frames, time, status):  # noqa: ANN001
            if status:
                logger.debug(f"Input status: {status}")
            loop.call_soon_threadsafe(sink, bytes(indata))

        try:
            self._stream = sd.RawInputStream(
                samplerate=self._config.sample_rate,
                channels=self._config.channels,
                dtype=self._config.dtype,
                callback=callback,
            )
            await asyncio.to_thread(self._stream.start)
        except Exception as e:
            self._stream = None
            raise MediaPermissionError(f"microphone unavailable: {e}") from e

    def stop(self) -> None:
        super().stop()
        stream = self._stream
        self._stream = None
        if stream is not None:
            stream.stop()
            stream.close()


class OpenCVVideoTrack(MediaTrack):
    kind = "video"

    def __init__(self, device_index: int = 0) -> None:
        super().__init__()
        self._device_index = device_index
        self._capture: Any = None
        self._frame_size: tuple[int, int] | None = None

    def open(self) -> None:
        try:
            import cv2  # type: ignore
        except Exception as e:  # pragma: no cover
            raise MediaPermissionError(
                "opencv-python is required for camera capture. Install with: pip install -e '.[voice]'"
            ) from e

        capture = cv2.VideoCapture(self._device_index)
        if not capture.isOpened():
            capture.release()
            raise MediaPermissionError(f"camera {self._device_index} unavailable or access denied")
        self._capture = capture
        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self._frame_size = (width, height) if width and height else None

    def frame_size(self) -> tuple[int, int] | None:
        """Negotiated (width, height) recorded when the camera opened. Never grabs a frame."""
        if self._capture is None:
            return None
        return self._frame_size

    def stop(self) -> None:
        super().stop()
        capture = self._capture
        self._capture = None
        self._frame_size = None
        if capture is not None:
            capture.release()


class SoundDeviceMediaDevices(MediaDevices):
    """Microphone via sounddevice, camera via OpenCV."""

    def __init__(self, config: MediaConfig | None = None) -> None:
        self._config = config or MediaConfig()

    @property
    def config(self) -> MediaConfig:
        return self._config

    async def get_user_media(self, *, audio: bool = True, video: bool = True) -> MediaStream:
        stream = MediaStream(sample_rate=self._config.sample_rate, channels=self._config.channels)

        if audio:
            audio_track = SoundDeviceAudioTrack(self._config)
            await audio_track.open(stream.push_audio)
            stream.add_track(audio_track)

        if video:
            video_track = OpenCVVideoTrack(self._config.video_device_index)
            try:
                await asyncio.to_thread(video_track.open)
            except Exception:
                stream.stop()
                raise
            stream.add_track(video_track)

        return stream
