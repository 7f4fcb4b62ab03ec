"""Text-to-speech (best-effort).

`Narrator.speak` is fire-and-forget: it never raises and never waits for the
audio to finish. Overlapping calls are allowed to overlap at the device.

Default implementation uses `piper` via subprocess if available and plays the
result with `sounddevice`.
"""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
import subprocess
import tempfile
import wave
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from interview_assistant.errors import SynthesisUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoiceParams:
    rate: float = 0.8
    pitch: float = 1.0
    volume: float = 0.8


class SpeechSynthesizer:
    def is_available(self) -> bool:
        raise NotImplementedError

    async def render(self, text: str, params: VoiceParams) -> None:
        """Speak `text` to the output device. Raises `SynthesisUnavailable` if unsupported."""
        raise NotImplementedError


@dataclass(frozen=True)
class TTSConfig:
    piper_bin: str = "piper"
    model_path: str | None = None  # path to *.onnx
    speaker_id: int | None = None
    max_chars_per_chunk: int = 350
    timeout_s: float = 60.0


class PiperSynthesizer(SpeechSynthesizer):
    """Piper CLI synthesis played through `sounddevice`.

    `is_available` never starts a process: it only checks the configured model,
    the binary on PATH and the playback library. The `--help` check of the
    binary runs inside `render`, off the event loop. Any failure is remembered,
    so later checks answer False without repeating it.
    """

    def __init__(self, config: TTSConfig | None = None) -> None:
        self._config = config or TTSConfig()
        self._validated_piper_path: str | None = None
        self._unavailable_reason: str | None = None
        self._warned_pitch = False

    @property
    def config(self) -> TTSConfig:
        return self._config

    @property
    def unavailable_reason(self) -> str | None:
        return self._unavailable_reason

    def is_available(self) -> bool:
        if self._unavailable_reason is not None:
            return False
        try:
            self._locate_piper()
            self._require_sounddevice()
        except SynthesisUnavailable as e:
            self._mark_unavailable(e)
            return False
        return True

    def _mark_unavailable(self, error: SynthesisUnavailable) -> None:
        if self._unavailable_reason is None:
            self._unavailable_reason = str(error)
            logger.info("[VOICE][TTS] unavailable: %s", error)

    def _looks_like_piper_tts(self, piper_path: str) -> bool:
        try:
            r = subprocess.run(
                [piper_path, "--help"],
                check=False,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=5,
            )
        except (OSError, subprocess.SubprocessError):
            return False

        out = (r.stdout or "").lower()
        # Piper TTS CLI typically supports these flags.
        return ("--model" in out or "--output_file" in out) and "application options" not in out

    def _locate_piper(self) -> str:
        if not self._config.model_path:
            raise SynthesisUnavailable("Piper model path not configured. Set INTERVIEW_PIPER_MODEL=/path/to/voice.onnx.")
        p = shutil.which(self._config.piper_bin)
        if not p:
            raise SynthesisUnavailable(
                "piper CLI not found. Install piper (binary) and ensure it's on PATH, "
                "or set INTERVIEW_PIPER_BIN."
            )
        return p

    def _require_piper(self) -> str:
        """Blocking: may run `piper --help` once. Call from a worker thread."""
        if self._validated_piper_path:
            return self._validated_piper_path
        if self._unavailable_reason is not None:
            raise SynthesisUnavailable(self._unavailable_reason)

        try:
            p = self._locate_piper()
            if not self._looks_like_piper_tts(p):
                raise SynthesisUnavailable(
                    "Found a `piper` binary, but it does not look like the Piper TTS CLI "
                    "(common on Linux: /usr/bin/piper is a GTK app). Set INTERVIEW_PIPER_BIN to the Piper TTS binary."
                )
        except SynthesisUnavailable as e:
            self._mark_unavailable(e)
            raise

        self._validated_piper_path = p
        return p

    def _require_sounddevice(self):
        try:
            import sounddevice as sd  # type: ignore

            return sd
        except Exception as e:
            raise SynthesisUnavailable(
                "sounddevice is required for playback. Install with: pip install -e '.[voice]'"
            ) from e

    def _chunk_text(self, text: str) -> list[str]:
        t = (text or "").strip()
        if not t:
            return []

        # Split on sentence-ish boundaries, then re-pack into chunks.
        parts = [p.strip() for p in re.split(r"(?<=[.!?])\s+", t) if p.strip()]
        chunks: list[str] = []
        current = ""
        for p in parts:
            if not current:
                current = p
                continue
            if len(current) + 1 + len(p) <= self._config.max_chars_per_chunk:
                current = current + " " + p
            else:
                chunks.append(current)
                current = p
        if current:
            chunks.append(current)

        return chunks

    def _synthesize(self, piper_bin: str, chunk: str, wav_path: Path, params: VoiceParams) -> None:
        # Piper's length_scale is inverse speed: 0.8x rate -> 1.25 length.
        length_scale = 1.0 / params.rate if params.rate > 0 else 1.0
        cmd = [
            piper_bin,
            "--model",
            str(self._config.model_path),
            "--output_file",
            str(wav_path),
            "--length_scale",
            f"{length_scale:.3f}",
        ]
        if self._config.speaker_id is not None:
            cmd += ["--speaker", str(self._config.speaker_id)]

        try:
            subprocess.run(
                cmd,
                input=chunk,
                text=True,
                check=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                timeout=self._config.timeout_s,
            )
        except subprocess.TimeoutExpired as e:
            raise RuntimeError(
                f"piper timed out after {self._config.timeout_s:.1f}s. model={self._config.model_path!s}."
            ) from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise RuntimeError(
                f"piper failed (exit={e.returncode}). model={self._config.model_path!s}. stderr={stderr or '<empty>'}"
            ) from e

    def _play(self, wav_path: Path, volume: float) -> None:
        sd = self._require_sounddevice()
        with wave.open(str(wav_path), "rb") as wf:
            sr = wf.getframerate()
            n_channels = wf.getnchannels()
            if wf.getsampwidth() != 2:
                raise ValueError(f"Only 16-bit WAV supported, got sampwidth={wf.getsampwidth()}")
            frames = wf.readframes(wf.getnframes())

        audio = np.frombuffer(frames, dtype=np.int16).astype(np.float32) / 32768.0
        if n_channels > 1:
            audio = audio.reshape(-1, n_channels)
        audio = audio * max(0.0, min(1.0, volume))
        sd.play(audio, samplerate=sr, blocking=True)

    async def render(self, text: str, params: VoiceParams) -> None:
        if self._unavailable_reason is not None:
            raise SynthesisUnavailable(self._unavailable_reason)
        chunks = self._chunk_text(text)
        if not chunks:
            return

        if params.pitch != 1.0 and not self._warned_pitch:
            self._warned_pitch = True
            logger.info("[VOICE][TTS] piper does not support pitch; ignoring pitch=%.2f", params.pitch)

        def _run() -> None:
            piper_bin = self._require_piper()
            with tempfile.TemporaryDirectory(prefix="narration_") as tmp:
                for idx, chunk in enumerate(chunks):
                    wav_path = Path(tmp) / f"chunk_{idx:02d}.wav"
                    self._synthesize(piper_bin, chunk, wav_path, params)
                    self._play(wav_path, params.volume)

        await asyncio.to_thread(_run)


class Narrator:
    """Speaks questions aloud with fixed delivery parameters."""

    def __init__(self, synthesizer: SpeechSynthesizer | None, params: VoiceParams | None = None) -> None:
        self._synthesizer = synthesizer
        self._params = params or VoiceParams()
        self._tasks: set[asyncio.Task] = set()

    @property
    def params(self) -> VoiceParams:
        return self._params

    def speak(self, text: str) -> None:
        """Start speaking `text` and return immediately. Silent no-op when speech is unavailable."""
        if self._synthesizer is None or not self._synthesizer.is_available():
            logger.debug("[VOICE][TTS] skipped reason=unavailable")
            return

        task = asyncio.get_running_loop().create_task(self._render(text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _render(self, text: str) -> None:
        excerpt = text[:80].replace("\n", " ")
        try:
            await self._synthesizer.render(text, self._params)
        except SynthesisUnavailable as e:
            logger.debug("[VOICE][TTS] skipped reason=unavailable detail=%s", e)
        except Exception as e:
            logger.warning("[VOICE][TTS] narration failed text=\"%s\": %s", excerpt, e)
        else:
            logger.info("[VOICE][TTS] spoke len=%d text=\"%s\"", len(text), excerpt)

    async def aclose(self) -> None:
        """Wait for narrations still playing."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
