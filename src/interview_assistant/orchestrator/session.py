"""
Session state management.

One cohesive record of everything the orchestrator mutates: the stream
handle, the interview/recording/processing flags and the current question.
The session state is derived from these flags so that exactly one state
holds at any time.
"""

from interview_assistant.orchestrator.schemas import IDLE_PROMPT, SessionState
from interview_assistant.voice.media import MediaStream


class Session:
    """
    Mutable state of one interview session.

    Only the orchestrator writes to a session; front ends read it.
    """

    def __init__(self, session_id: str) -> None:
        """
        Initialize session state.

        Args:
            session_id: Stable identifier sent with every exchange.
        """
        self._session_id = session_id
        self._stream: MediaStream | None = None
        self._interview_started: bool = False
        self._is_recording: bool = False
        self._is_processing: bool = False
        self._current_question: str = IDLE_PROMPT
        self._questions_asked: int = 0

    @property
    def session_id(self) -> str:
        """Get the session identifier."""
        return self._session_id

    @property
    def state(self) -> SessionState:
        """Get the current session state."""
        if self._stream is None:
            return SessionState.IDLE
        if self._is_recording:
            return SessionState.RECORDING
        if self._is_processing:
            return SessionState.PROCESSING
        if self._interview_started:
            return SessionState.INTERVIEW_ACTIVE
        return SessionState.CAMERA_READY

    @property
    def stream(self) -> MediaStream | None:
        return self._stream

    @property
    def is_video_on(self) -> bool:
        return self._stream is not None

    @property
    def interview_started(self) -> bool:
        return self._interview_started

    @property
    def is_recording(self) -> bool:
        return self._is_recording

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def current_question(self) -> str:
        return self._current_question

    @property
    def questions_asked(self) -> int:
        """Number of questions presented, the opening prompt included."""
        return self._questions_asked

    def attach_stream(self, stream: MediaStream) -> None:
        self._stream = stream

    def detach_stream(self) -> None:
        self._stream = None

    def begin_interview(self, opening_prompt: str) -> None:
        self._interview_started = True
        self.set_question(opening_prompt)

    def set_question(self, question: str) -> None:
        self._current_question = question
        self._questions_asked += 1

    def set_recording(self, value: bool) -> None:
        self._is_recording = value

    def set_processing(self, value: bool) -> None:
        self._is_processing = value

    def snapshot(self) -> dict[str, object]:
        """Get a plain-dict view of the session for logging or display."""
        return {
            "session_id": self._session_id,
            "state": self.state.value,
            "is_video_on": self.is_video_on,
            "interview_started": self._interview_started,
            "is_recording": self._is_recording,
            "is_processing": self._is_processing,
            "current_question": self._current_question,
            "questions_asked": self._questions_asked,
        }
