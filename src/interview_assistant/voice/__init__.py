"""Local voice subsystem.

This package provides the device-facing capabilities of an interview session:

camera/mic -> recorder -> STT -> (exchange) -> TTS -> speaker

The orchestrator remains the single authority for session flow. Device
libraries (sounddevice, OpenCV, faster-whisper, Piper) are imported lazily,
so importing this package never touches hardware.
"""

from interview_assistant.voice.media import (
    MediaConfig,
    MediaDevices,
    MediaGateway,
    MediaStream,
    MediaTrack,
    SoundDeviceMediaDevices,
)
from interview_assistant.voice.recorder import AudioSegment, Recorder
from interview_assistant.voice.stt import (
    RecognitionAlternative,
    RecognitionConfig,
    RecognitionResult,
    SpeechRecognizer,
    STTConfig,
    Transcriber,
    WhisperRecognizer,
)
from interview_assistant.voice.tts import Narrator, PiperSynthesizer, SpeechSynthesizer, TTSConfig, VoiceParams

__all__ = [
    "AudioSegment",
    "MediaConfig",
    "MediaDevices",
    "MediaGateway",
    "MediaStream",
    "MediaTrack",
    "Narrator",
    "PiperSynthesizer",
    "RecognitionAlternative",
    "RecognitionConfig",
    "RecognitionResult",
    "Recorder",
    "SoundDeviceMediaDevices",
    "SpeechRecognizer",
    "SpeechSynthesizer",
    "STTConfig",
    "Transcriber",
    "TTSConfig",
    "VoiceParams",
    "WhisperRecognizer",
]
