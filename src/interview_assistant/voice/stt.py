"""Speech-to-text.

`Transcriber` wraps any `SpeechRecognizer` in a bounded wait: the first of
(result, error, timeout) settles the transcript and the rest are ignored.

Default recognizer uses `faster-whisper` if installed.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field

from interview_assistant.errors import RecognitionFailure
from interview_assistant.voice.recorder import AudioSegment

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 5.0
DEFAULT_FALLBACK_TRANSCRIPT = "I have provided my response"


@dataclass(frozen=True)
class RecognitionConfig:
    language: str = "en-US"
    continuous: bool = False
    interim_results: bool = False


@dataclass(frozen=True)
class RecognitionAlternative:
    transcript: str
    confidence: float | None = None


@dataclass(frozen=True)
class RecognitionResult:
    alternatives: list[RecognitionAlternative] = field(default_factory=list)

    @property
    def transcript(self) -> str:
        return self.alternatives[0].transcript if self.alternatives else ""


class SpeechRecognizer:
    async def recognize(self, segment: AudioSegment, config: RecognitionConfig) -> RecognitionResult:
        """Return one final result, or raise `RecognitionFailure`."""
        raise NotImplementedError


@dataclass(frozen=True)
class STTConfig:
    model_size: str = "small"
    # Default to CPU to avoid hard crashes when CUDA/cuDNN aren't present.
    device: str = "cpu"  # cpu|cuda|auto
    compute_type: str | None = None  # e.g. int8, float16
    vad_filter: bool = True


class WhisperRecognizer(SpeechRecognizer):
    """faster-whisper wrapper."""

    def __init__(self, config: STTConfig | None = None) -> None:
        self._config = config or STTConfig()
        self._model = None

    @property
    def config(self) -> STTConfig:
        return self._config

    def _load_model(self):
        if self._model is not None:
            return self._model

        try:
            from faster_whisper import WhisperModel  # type: ignore
        except Exception as e:  # pragma: no cover
            raise RecognitionFailure(
                "faster-whisper is required for STT. Install with: pip install -e '.[voice]'"
            ) from e

        device = self._config.device
        if device == "auto":
            # Be conservative: prefer CPU unless user explicitly requests CUDA.
            device = "cpu"

        kwargs = {}
        if self._config.compute_type:
            kwargs["compute_type"] = self._config.compute_type

        self._model = WhisperModel(self._config.model_size, device=device, **kwargs)
        return self._model

    async def recognize(self, segment: AudioSegment, config: RecognitionConfig) -> RecognitionResult:
        if segment.size == 0:
            raise RecognitionFailure("no-speech")

        # Whisper takes bare language codes ("en"), not locales ("en-US").
        language = (config.language or "").split("-")[0].lower() or None

        def _run() -> RecognitionResult:
            model = self._load_model()
            segments, _info = model.transcribe(
                segment.to_float32(),
                language=language,
                vad_filter=self._config.vad_filter,
            )
            text_parts: list[str] = []
            logprobs: list[float] = []
            for s in segments:
                if s.text:
                    text_parts.append(s.text.strip())
                avg = getattr(s, "avg_logprob", None)
                if avg is not None:
                    logprobs.append(avg)
            text = " ".join(t for t in text_parts if t).strip()
            if not text:
                raise RecognitionFailure("no-speech")
            confidence = math.exp(sum(logprobs) / len(logprobs)) if logprobs else None
            return RecognitionResult(alternatives=[RecognitionAlternative(transcript=text, confidence=confidence)])

        return await asyncio.to_thread(_run)


class Transcriber:
    """Bounded-wait transcription of one recorded segment."""

    def __init__(
        self,
        recognizer: SpeechRecognizer,
        *,
        config: RecognitionConfig | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        fallback: str = DEFAULT_FALLBACK_TRANSCRIPT,
    ) -> None:
        self._recognizer = recognizer
        self._config = config or RecognitionConfig()
        self._timeout_s = timeout_s
        self._fallback = fallback
        self._pending: set[asyncio.Task] = set()

    @property
    def config(self) -> RecognitionConfig:
        return self._config

    async def transcribe(self, segment: AudioSegment) -> str:
        """Resolve with the transcript, "" on recognition error, or the fallback on timeout."""
        loop = asyncio.get_running_loop()
        outcome: asyncio.Future[str] = loop.create_future()

        def _settle(text: str, source: str) -> None:
            if outcome.done():
                logger.debug("[VOICE][STT] ignored late outcome source=%s", source)
                return
            logger.info("[VOICE][STT] settled source=%s chars=%d", source, len(text))
            outcome.set_result(text)

        async def _recognize() -> None:
            try:
                result = await self._recognizer.recognize(segment, self._config)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.info("[VOICE][STT] recognition error: %s", e)
                _settle("", "error")
                return
            _settle(result.transcript, "result")

        task = asyncio.create_task(_recognize())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

        timer = loop.call_later(self._timeout_s, _settle, self._fallback, "timeout")
        try:
            return await outcome
        finally:
            timer.cancel()

    async def aclose(self) -> None:
        """Cancel recognitions that outlived their transcription."""
        tasks = list(self._pending)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
