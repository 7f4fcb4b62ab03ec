"""
Session orchestrator.

Sequences camera/microphone acquisition, recording, transcription, the
question exchange and narration for one interview session:

    start_camera -> start_interview -> (toggle_recording x2 -> cycle)*

Every failure is caught at the boundary of the step that produced it and
reported through the notifier. Processing is always cleared when a cycle
ends, whatever the outcome.
"""

from __future__ import annotations

import asyncio
import logging

from interview_assistant.errors import ExchangeError, MediaPermissionError, NoStreamError
from interview_assistant.exchange.client import QuestionExchangeBase
from interview_assistant.io.notifier import LoggingNotifier, NotificationEvent, Notifier, build_notification
from interview_assistant.orchestrator.schemas import OPENING_PROMPT, SessionState
from interview_assistant.orchestrator.session import Session
from interview_assistant.voice.media import MediaGateway
from interview_assistant.voice.recorder import AudioSegment, Recorder
from interview_assistant.voice.stt import Transcriber
from interview_assistant.voice.tts import Narrator

logger = logging.getLogger(__name__)


class SessionOrchestrator:
    """
    State machine behind the user-facing actions of an interview session.

    All methods must be called from the event loop thread. Actions that are
    invalid in the current state are ignored (or reported) rather than
    raised, so a front end can call them straight from its controls.
    """

    def __init__(
        self,
        *,
        session: Session,
        gateway: MediaGateway,
        recorder: Recorder,
        transcriber: Transcriber,
        exchange: QuestionExchangeBase,
        narrator: Narrator,
        notifier: Notifier | None = None,
        opening_prompt: str = OPENING_PROMPT,
    ) -> None:
        self._session = session
        self._gateway = gateway
        self._recorder = recorder
        self._transcriber = transcriber
        self._exchange = exchange
        self._narrator = narrator
        self._notifier = notifier or LoggingNotifier()
        self._opening_prompt = opening_prompt
        self._cycle_task: asyncio.Task | None = None

    @property
    def session(self) -> Session:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def current_question(self) -> str:
        return self._session.current_question

    # Which controls a front end should enable.
    @property
    def can_start_camera(self) -> bool:
        return not self._session.is_video_on

    @property
    def can_stop_camera(self) -> bool:
        return self._session.is_video_on

    @property
    def can_start_interview(self) -> bool:
        return self._session.is_video_on and not self._session.interview_started

    @property
    def can_toggle_recording(self) -> bool:
        return self._session.interview_started and not self._session.is_processing

    @property
    def can_repeat_question(self) -> bool:
        return self._session.interview_started and not self._session.is_processing

    def _notify(self, event: NotificationEvent) -> None:
        try:
            self._notifier.notify(build_notification(event))
        except Exception as e:
            logger.warning(f"Notifier failed for {event.value}: {e}")

    async def start_camera(self) -> bool:
        """
        Acquire the camera and microphone.

        Returns:
            True if a stream is held afterwards.
        """
        try:
            stream = await self._gateway.acquire()
        except MediaPermissionError as e:
            logger.warning(f"Error accessing camera: {e}")
            self._notify(NotificationEvent.CAMERA_ERROR)
            return False

        self._session.attach_stream(stream)
        logger.info(f"Camera started state={self.state.value}")
        self._notify(NotificationEvent.CAMERA_STARTED)
        return True

    def stop_camera(self) -> None:
        """
        Release the stream. Allowed in any state.

        A recording in progress is stopped first and its audio goes through
        the normal cycle. A cycle already in flight finishes on its own.
        """
        if self._session.is_recording:
            self._stop_recording()
        self._gateway.release()
        self._session.detach_stream()
        logger.info(f"Camera stopped state={self.state.value}")

    async def start_interview(self) -> bool:
        """
        Present and narrate the opening prompt.

        Returns:
            True if the interview was started by this call.
        """
        if self._session.stream is None:
            logger.info("Start interview rejected: no camera stream")
            self._notify(NotificationEvent.CAMERA_REQUIRED)
            return False
        if self._session.interview_started:
            logger.debug("Start interview ignored: already started")
            return False

        self._session.begin_interview(self._opening_prompt)
        logger.info(f"Interview started session={self._session.session_id}")
        self._narrator.speak(self._opening_prompt)
        return True

    async def toggle_recording(self) -> None:
        """Stop the recording in progress, or start one if allowed."""
        if self._session.is_recording:
            self._stop_recording()
            return
        if self._session.is_processing:
            logger.debug("Toggle ignored: previous answer still processing")
            return
        if not self._session.interview_started:
            logger.debug("Toggle ignored: interview not started")
            return
        self._start_recording()

    async def repeat_question(self) -> bool:
        """Narrate the current question again."""
        if not self.can_repeat_question:
            return False
        self._narrator.speak(self._session.current_question)
        return True

    def _start_recording(self) -> None:
        try:
            self._recorder.start(self._session.stream)
        except NoStreamError:
            self._notify(NotificationEvent.NO_AUDIO_STREAM)
            return
        except Exception as e:
            logger.error(f"Error starting recording: {e}", exc_info=True)
            self._notify(NotificationEvent.RECORDING_ERROR)
            return

        self._session.set_recording(True)
        self._notify(NotificationEvent.RECORDING_STARTED)

    def _stop_recording(self) -> None:
        segment = self._recorder.stop()
        self._session.set_recording(False)
        if segment is None:
            return

        self._session.set_processing(True)
        self._notify(NotificationEvent.PROCESSING_STARTED)
        self._cycle_task = asyncio.get_running_loop().create_task(self._process_segment(segment))

    async def _process_segment(self, segment: AudioSegment) -> None:
        """Transcribe -> exchange -> update question -> narrate."""
        try:
            transcript = await self._transcriber.transcribe(segment)
            if not transcript:
                self._notify(NotificationEvent.SPEECH_NOT_DETECTED)
                return

            try:
                question = await self._exchange.exchange(self._session.session_id, transcript)
            except ExchangeError as e:
                logger.warning(f"Error sending to AI: {e}")
                self._notify(NotificationEvent.API_ERROR)
                return
            except Exception as e:
                logger.error(f"Error sending to AI: {e}", exc_info=True)
                self._notify(NotificationEvent.API_ERROR)
                return

            self._session.set_question(question)
            self._narrator.speak(question)
            self._notify(NotificationEvent.RESPONSE_PROCESSED)

        except Exception as e:
            logger.error(f"Error processing audio: {e}", exc_info=True)
            self._notify(NotificationEvent.PROCESSING_ERROR)

        finally:
            self._session.set_processing(False)
            logger.info(f"Cycle finished state={self.state.value}")

    async def wait_idle(self) -> None:
        """Wait for the cycle in flight, if any, to finish."""
        task = self._cycle_task
        if task is not None and not task.done():
            await task

    async def shutdown(self) -> None:
        """Release the stream and close every collaborator."""
        self.stop_camera()
        await self.wait_idle()
        await self._transcriber.aclose()
        await self._narrator.aclose()
        await self._exchange.close()
