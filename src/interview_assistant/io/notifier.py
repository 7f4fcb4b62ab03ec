"""
User-facing notifications.

The orchestrator fires one notification per transition or failure; how it is
shown (toast, console line, log record) is up to the `Notifier`.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class NotificationEvent(str, Enum):
    """Events the orchestrator reports to the user."""

    CAMERA_STARTED = "camera_started"
    CAMERA_ERROR = "camera_error"
    CAMERA_REQUIRED = "camera_required"
    NO_AUDIO_STREAM = "no_audio_stream"
    RECORDING_STARTED = "recording_started"
    RECORDING_ERROR = "recording_error"
    PROCESSING_STARTED = "processing_started"
    RESPONSE_PROCESSED = "response_processed"
    API_ERROR = "api_error"
    SPEECH_NOT_DETECTED = "speech_not_detected"
    PROCESSING_ERROR = "processing_error"


class Notification(BaseModel):
    """One notification shown to the user."""

    event: NotificationEvent = Field(..., description="What happened")
    title: str = Field(..., description="Short headline")
    description: str = Field(default="", description="One-line detail")
    variant: Literal["default", "destructive"] = Field(default="default", description="Severity styling")

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


_CATALOGUE: dict[NotificationEvent, tuple[str, str, str]] = {
    NotificationEvent.CAMERA_STARTED: (
        "Camera started",
        "Your camera is now active for the interview.",
        "default",
    ),
    NotificationEvent.CAMERA_ERROR: (
        "Camera Error",
        "Please allow camera access for the interview.",
        "destructive",
    ),
    NotificationEvent.CAMERA_REQUIRED: (
        "Camera Required",
        "Please enable your camera to start the interview.",
        "destructive",
    ),
    NotificationEvent.NO_AUDIO_STREAM: (
        "No audio stream",
        "Please ensure microphone access is granted.",
        "destructive",
    ),
    NotificationEvent.RECORDING_STARTED: (
        "Recording started",
        "Speak your answer now. Click stop when finished.",
        "default",
    ),
    NotificationEvent.RECORDING_ERROR: (
        "Recording Error",
        "Failed to start recording. Please try again.",
        "destructive",
    ),
    NotificationEvent.PROCESSING_STARTED: (
        "Processing response",
        "Converting your speech to text and getting next question...",
        "default",
    ),
    NotificationEvent.RESPONSE_PROCESSED: (
        "Response processed",
        "Here's your next question!",
        "default",
    ),
    NotificationEvent.API_ERROR: (
        "API Error",
        "Failed to get next question. Please try again.",
        "destructive",
    ),
    NotificationEvent.SPEECH_NOT_DETECTED: (
        "Speech not detected",
        "Please try speaking again more clearly.",
        "destructive",
    ),
    NotificationEvent.PROCESSING_ERROR: (
        "Processing Error",
        "Failed to process your response. Please try again.",
        "destructive",
    ),
}


def build_notification(event: NotificationEvent) -> Notification:
    """Build the standard notification for an event."""
    title, description, variant = _CATALOGUE[event]
    return Notification(event=event, title=title, description=description, variant=variant)


class Notifier:
    def notify(self, notification: Notification) -> None:
        raise NotImplementedError


class LoggingNotifier(Notifier):
    """Writes notifications to the log; errors at WARNING."""

    def notify(self, notification: Notification) -> None:
        level = logging.WARNING if notification.is_error else logging.INFO
        logger.log(level, "[NOTIFY] %s: %s", notification.title, notification.description)


class ConsoleNotifier(LoggingNotifier):
    """Prints notifications for the terminal front end."""

    def notify(self, notification: Notification) -> None:
        super().notify(notification)
        marker = "!" if notification.is_error else "*"
        print(f"[{marker}] {notification.title}: {notification.description}", flush=True)
