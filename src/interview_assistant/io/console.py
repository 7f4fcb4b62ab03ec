"""Console front end (push-to-talk).

Maps single-key commands onto the orchestrator's user-facing actions. It
stays intentionally thin: all sequencing and failure handling lives in
`SessionOrchestrator`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from interview_assistant.voice.media import MediaStream, OpenCVVideoTrack

if TYPE_CHECKING:
    from interview_assistant.orchestrator.session_orchestrator import SessionOrchestrator

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  Enter  start/stop recording your answer
  s      start interview
  c      start camera
  x      stop camera
  r      repeat question
  q      quit"""


def console_preview(stream: MediaStream) -> None:
    """Preview sink: report the camera track without grabbing a frame."""
    for track in stream.get_tracks("video"):
        size = track.frame_size() if isinstance(track, OpenCVVideoTrack) else None
        if size is not None:
            print(f"[Camera] preview {size[0]}x{size[1]}", flush=True)
        else:
            print("[Camera] preview on", flush=True)
        return
    print("[Camera] preview unavailable (audio only)", flush=True)


class ConsoleInterface:
    def __init__(self, orchestrator: "SessionOrchestrator", *, auto_start_camera: bool = True) -> None:
        self._orchestrator = orchestrator
        self._auto_start_camera = auto_start_camera
        self._shown_questions = 0

    async def run(self) -> None:
        print("\n" + "=" * 60)
        print("AI Interview Assistant")
        print("=" * 60 + "\n")
        print(HELP_TEXT)

        if self._auto_start_camera:
            await self._orchestrator.start_camera()

        try:
            while True:
                self._print_status()
                command = await self._get_input("> ")
                if command is None or command == "q":
                    logger.info("Console session ending")
                    break
                await self.handle(command)
        finally:
            await self._orchestrator.shutdown()
            print("\nInterview session closed.")

    async def handle(self, command: str) -> None:
        o = self._orchestrator
        if command == "":
            if not o.can_toggle_recording:
                if o.session.is_processing:
                    print("[Voice] Still processing your last answer...", flush=True)
                else:
                    print("[Voice] Start the interview first (s).", flush=True)
                return
            await o.toggle_recording()
        elif command == "s":
            await o.start_interview()
        elif command == "c":
            if o.can_start_camera:
                await o.start_camera()
        elif command == "x":
            if o.can_stop_camera:
                o.stop_camera()
        elif command == "r":
            if await o.repeat_question():
                print(f"\n[Interviewer] {o.current_question}\n")
        else:
            print(HELP_TEXT)

    def _print_status(self) -> None:
        snap = self._orchestrator.session.snapshot()
        camera = "Active" if snap["is_video_on"] else "Inactive"
        recording = "Active" if snap["is_recording"] else "Inactive"
        print(f"\n[Status] state={snap['state']} camera={camera} recording={recording}", flush=True)
        if snap["interview_started"] and snap["questions_asked"] != self._shown_questions:
            self._shown_questions = snap["questions_asked"]
            print(f"\n[Interviewer] {snap['current_question']}\n", flush=True)

    async def _get_input(self, prompt: str) -> str | None:
        try:
            line = await asyncio.to_thread(input, prompt)
        except EOFError:
            return None
        return line.strip().lower()
