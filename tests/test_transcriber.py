import asyncio
import math

import pytest

from interview_assistant.errors import RecognitionFailure
from interview_assistant.voice.recorder import AudioSegment
from interview_assistant.voice.stt import (
    DEFAULT_FALLBACK_TRANSCRIPT,
    RecognitionAlternative,
    RecognitionConfig,
    RecognitionResult,
    SpeechRecognizer,
    STTConfig,
    Transcriber,
    WhisperRecognizer,
)
from tests.fakes import FakeRecognizer

SEGMENT = AudioSegment(data=b"\x00\x01" * 100)


@pytest.mark.asyncio
async def test_result_wins_with_first_alternative():
    class TwoAlternatives(SpeechRecognizer):
        async def recognize(self, segment, config):
            return RecognitionResult(
                alternatives=[
                    RecognitionAlternative("I studied computer science", 0.9),
                    RecognitionAlternative("I studied computer silence", 0.1),
                ]
            )

    transcriber = Transcriber(TwoAlternatives())
    assert await transcriber.transcribe(SEGMENT) == "I studied computer science"


@pytest.mark.asyncio
async def test_recognition_error_resolves_empty():
    transcriber = Transcriber(FakeRecognizer(error=RecognitionFailure("no-speech")))
    assert await transcriber.transcribe(SEGMENT) == ""


@pytest.mark.asyncio
async def test_timeout_resolves_fallback():
    recognizer = FakeRecognizer(hang=True)
    transcriber = Transcriber(recognizer, timeout_s=0.05)

    assert await transcriber.transcribe(SEGMENT) == DEFAULT_FALLBACK_TRANSCRIPT
    assert len(recognizer.calls) == 1

    # The recognizer is left running until the transcriber is closed.
    await transcriber.aclose()


@pytest.mark.asyncio
async def test_late_result_after_timeout_is_ignored():
    gate = asyncio.Event()
    transcriber = Transcriber(FakeRecognizer("too late", gate=gate), timeout_s=0.02, fallback="fallback")

    assert await transcriber.transcribe(SEGMENT) == "fallback"

    gate.set()
    await asyncio.sleep(0.01)
    # The late result must not try to settle again.
    await transcriber.aclose()


@pytest.mark.asyncio
async def test_result_before_timeout_cancels_fallback():
    transcriber = Transcriber(FakeRecognizer("first"), timeout_s=0.01)
    assert await transcriber.transcribe(SEGMENT) == "first"
    # Outlive the timer: the cancelled timeout must not fire the fallback.
    await asyncio.sleep(0.03)


@pytest.mark.asyncio
async def test_recognizer_gets_final_only_english_config():
    recognizer = FakeRecognizer("hello")
    await Transcriber(recognizer).transcribe(SEGMENT)

    segment, config = recognizer.calls[0]
    assert segment is SEGMENT
    assert config == RecognitionConfig(language="en-US", continuous=False, interim_results=False)


@pytest.mark.asyncio
async def test_no_alternatives_resolves_empty():
    class Silent(SpeechRecognizer):
        async def recognize(self, segment, config):
            return RecognitionResult(alternatives=[])

    assert await Transcriber(Silent()).transcribe(SEGMENT) == ""


class FakeWhisperSegment:
    def __init__(self, text: str, avg_logprob: float = -0.1) -> None:
        self.text = text
        self.avg_logprob = avg_logprob


class FakeWhisperModel:
    def __init__(self, *texts: str) -> None:
        self.texts = texts
        self.calls: list[dict] = []

    def transcribe(self, audio, **kwargs):
        self.calls.append(kwargs)
        return (FakeWhisperSegment(t) for t in self.texts), None


def _whisper(model: FakeWhisperModel) -> WhisperRecognizer:
    recognizer = WhisperRecognizer(STTConfig(model_size="tiny"))
    recognizer._load_model = lambda: model
    return recognizer


@pytest.mark.asyncio
async def test_whisper_empty_segment_is_no_speech():
    model = FakeWhisperModel("should not be used")
    with pytest.raises(RecognitionFailure, match="no-speech"):
        await _whisper(model).recognize(AudioSegment(data=b""), RecognitionConfig())
    assert model.calls == []


@pytest.mark.asyncio
async def test_whisper_blank_text_is_no_speech():
    model = FakeWhisperModel("", "   ")
    with pytest.raises(RecognitionFailure, match="no-speech"):
        await _whisper(model).recognize(SEGMENT, RecognitionConfig())


@pytest.mark.asyncio
async def test_whisper_blank_text_resolves_empty_transcript():
    assert await Transcriber(_whisper(FakeWhisperModel(""))).transcribe(SEGMENT) == ""


@pytest.mark.asyncio
async def test_whisper_joins_segments_and_maps_locale():
    model = FakeWhisperModel(" I studied", "computer science. ")
    result = await _whisper(model).recognize(SEGMENT, RecognitionConfig(language="en-US"))

    assert result.transcript == "I studied computer science."
    assert result.alternatives[0].confidence == pytest.approx(math.exp(-0.1))
    assert model.calls[0]["language"] == "en"
