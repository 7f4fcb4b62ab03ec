import pytest

from interview_assistant.config import Settings
from interview_assistant.io.console import ConsoleInterface, console_preview
from interview_assistant.io.notifier import ConsoleNotifier, NotificationEvent, build_notification
from interview_assistant.main import build_orchestrator, build_parser
from interview_assistant.orchestrator.schemas import IDLE_PROMPT, OPENING_PROMPT, SessionState
from interview_assistant.orchestrator.session import Session
from interview_assistant.voice.media import MediaStream, OpenCVVideoTrack
from tests.fakes import FakeTrack, Harness


def test_cli_defaults_come_from_environment(monkeypatch):
    monkeypatch.setenv("INTERVIEW_EXCHANGE_BASE_URL", "https://tunnel.example")
    monkeypatch.setenv("INTERVIEW_SESSION_ID", "abc123")
    monkeypatch.setenv("INTERVIEW_STT_MODEL", "tiny")
    monkeypatch.setenv("INTERVIEW_PIPER_MODEL", "/tmp/voice.onnx")

    args = build_parser(Settings()).parse_args([])

    assert args.exchange_url == "https://tunnel.example"
    assert args.session_id == "abc123"
    assert args.stt_model == "tiny"
    assert args.piper_model == "/tmp/voice.onnx"
    assert args.video is True


def test_cli_flags_override_settings():
    args = build_parser(Settings()).parse_args(["--no-video", "--session-id", "xyz", "--stt-device", "cuda"])
    assert args.video is False
    assert args.session_id == "xyz"
    assert args.stt_device == "cuda"


def test_build_orchestrator_wires_session_id():
    args = build_parser(Settings()).parse_args(["--session-id", "wired"])
    orchestrator = build_orchestrator(args, Settings())

    assert orchestrator.session.session_id == "wired"
    assert orchestrator.state == SessionState.IDLE


def test_default_transcription_settings():
    settings = Settings()
    assert settings.transcription_timeout_s == 5.0
    assert settings.transcription_fallback == "I have provided my response"
    assert settings.recognition_language == "en-US"
    assert (settings.tts_rate, settings.tts_pitch, settings.tts_volume) == (0.8, 1.0, 0.8)


def test_notification_catalogue_variants():
    errors = {
        NotificationEvent.CAMERA_ERROR,
        NotificationEvent.CAMERA_REQUIRED,
        NotificationEvent.NO_AUDIO_STREAM,
        NotificationEvent.RECORDING_ERROR,
        NotificationEvent.API_ERROR,
        NotificationEvent.SPEECH_NOT_DETECTED,
        NotificationEvent.PROCESSING_ERROR,
    }
    for event in NotificationEvent:
        notification = build_notification(event)
        assert notification.title
        assert notification.is_error == (event in errors)

    assert build_notification(NotificationEvent.SPEECH_NOT_DETECTED).title == "Speech not detected"


def test_console_notifier_prints(capsys):
    ConsoleNotifier().notify(build_notification(NotificationEvent.API_ERROR))
    out = capsys.readouterr().out
    assert "[!] API Error: Failed to get next question." in out


@pytest.mark.asyncio
async def test_console_commands_drive_orchestrator(capsys):
    h = Harness()
    console = ConsoleInterface(h.orchestrator, auto_start_camera=False)

    await console.handle("")
    assert "Start the interview first" in capsys.readouterr().out

    await console.handle("c")
    await console.handle("s")
    assert h.orchestrator.state == SessionState.INTERVIEW_ACTIVE

    await console.handle("")
    h.push_audio(b"\x01\x00")
    await console.handle("")
    await console.handle("")
    assert "Still processing" in capsys.readouterr().out

    await h.settle()
    assert h.orchestrator.current_question == "What is your greatest strength?"

    await console.handle("x")
    assert h.orchestrator.state == SessionState.IDLE


@pytest.mark.asyncio
async def test_console_status_renders_session_snapshot(capsys):
    h = Harness()
    console = ConsoleInterface(h.orchestrator, auto_start_camera=False)

    console._print_status()
    out = capsys.readouterr().out
    assert "[Status] state=idle camera=Inactive recording=Inactive" in out
    assert "[Interviewer]" not in out

    await h.orchestrator.start_camera()
    await h.orchestrator.start_interview()
    console._print_status()
    out = capsys.readouterr().out
    assert "camera=Active" in out
    assert f"[Interviewer] {OPENING_PROMPT}" in out

    # The same question is not printed twice.
    console._print_status()
    assert "[Interviewer]" not in capsys.readouterr().out
    await h.settle()


def test_session_snapshot_reflects_flags():
    session = Session("abc")
    assert session.snapshot() == {
        "session_id": "abc",
        "state": "idle",
        "is_video_on": False,
        "interview_started": False,
        "is_recording": False,
        "is_processing": False,
        "current_question": IDLE_PROMPT,
        "questions_asked": 0,
    }


class NoReadCapture:
    def read(self):
        raise AssertionError("preview must not grab frames")

    def release(self) -> None:
        pass


def test_console_preview_reports_size_without_reading(capsys):
    track = OpenCVVideoTrack()
    track._capture = NoReadCapture()
    track._frame_size = (640, 480)
    stream = MediaStream()
    stream.add_track(track)

    console_preview(stream)

    assert "[Camera] preview 640x480" in capsys.readouterr().out


def test_console_preview_audio_only(capsys):
    stream = MediaStream()
    stream.add_track(FakeTrack("audio"))
    console_preview(stream)
    assert "preview unavailable (audio only)" in capsys.readouterr().out
