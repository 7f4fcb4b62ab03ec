"""
Application configuration using pydantic-settings.

Loads configuration from environment variables (prefix ``INTERVIEW_``) and
.env files.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INTERVIEW_",
        case_sensitive=False,
    )

    # Session
    session_id: str = Field(
        default="6851086aed4d8125b0785e87",
        description="Stable session identifier sent with every exchange",
    )

    # Question exchange service
    exchange_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the question-generation service",
    )
    exchange_path: str = Field(
        default="/generateInterview",
        description="Path of the question exchange endpoint",
    )
    exchange_timeout_s: float | None = Field(
        default=None,
        description="Client-side timeout for the exchange (None waits on the transport)",
    )
    tunnel_bypass_header: str = Field(
        default="ngrok-skip-browser-warning",
        description="Header sent to skip a development tunnel's interstitial page (empty disables)",
    )

    # Speech recognition
    transcription_timeout_s: float = Field(
        default=5.0,
        description="Seconds to wait for recognition before using the fallback transcript",
    )
    transcription_fallback: str = Field(
        default="I have provided my response",
        description="Transcript used when recognition does not finish in time",
    )
    recognition_language: str = Field(
        default="en-US",
        description="Recognition locale",
    )
    stt_model: str = Field(
        default="small",
        description="faster-whisper model size",
    )
    stt_device: Literal["cpu", "cuda", "auto"] = Field(
        default="cpu",
        description="Device used by faster-whisper",
    )

    # Media capture
    sample_rate: int = Field(
        default=16000,
        description="Microphone sample rate in Hz",
    )
    enable_video: bool = Field(
        default=True,
        description="Open a camera track alongside the microphone",
    )
    video_device_index: int = Field(
        default=0,
        description="OpenCV camera index",
    )

    # Speech synthesis
    piper_bin: str = Field(
        default="piper",
        description="Path/name of the Piper TTS binary",
    )
    piper_model: str | None = Field(
        default=None,
        description="Path to the Piper .onnx voice model",
    )
    piper_timeout_s: float = Field(
        default=60.0,
        description="Timeout in seconds for one Piper synthesis",
    )
    tts_rate: float = Field(default=0.8, description="Narration rate")
    tts_pitch: float = Field(default=1.0, description="Narration pitch")
    tts_volume: float = Field(default=0.8, description="Narration volume (0.0 to 1.0)")

    # Application
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
