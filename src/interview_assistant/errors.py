"""
Error taxonomy for the interview assistant.

All errors are session-local: the orchestrator catches them at the boundary
of the step that raised them and turns them into user notifications.
"""


class InterviewAssistantError(Exception):
    """Base class for all interview assistant errors."""


class MediaPermissionError(InterviewAssistantError):
    """Camera/microphone access was denied or no device is available."""


class NoStreamError(InterviewAssistantError):
    """An action needed a media stream but none is held."""


class RecognitionFailure(InterviewAssistantError):
    """Speech recognition produced an error instead of a result."""


class ExchangeError(InterviewAssistantError):
    """Exception raised when the question service round-trip fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SynthesisUnavailable(InterviewAssistantError):
    """Speech output is not supported in this environment."""
