"""
Main entry point for the AI Interview Assistant.
"""

import argparse
import asyncio
import logging
import sys

from interview_assistant.config import Settings, get_settings
from interview_assistant.exchange.client import QuestionExchangeClient
from interview_assistant.io.console import ConsoleInterface, console_preview
from interview_assistant.io.notifier import ConsoleNotifier
from interview_assistant.orchestrator.session import Session
from interview_assistant.orchestrator.session_orchestrator import SessionOrchestrator
from interview_assistant.voice.media import MediaConfig, MediaGateway, SoundDeviceMediaDevices
from interview_assistant.voice.recorder import Recorder
from interview_assistant.voice.stt import RecognitionConfig, STTConfig, Transcriber, WhisperRecognizer
from interview_assistant.voice.tts import Narrator, PiperSynthesizer, TTSConfig, VoiceParams


def setup_logging() -> None:
    """Configure application logging."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_parser(settings: Settings | None = None) -> argparse.ArgumentParser:
    """Command-line options; defaults come from settings (INTERVIEW_* env vars)."""
    settings = settings or get_settings()
    p = argparse.ArgumentParser(prog="interview-assistant", description="Run the AI interview assistant")
    p.add_argument("--exchange-url", default=settings.exchange_base_url, help="Base URL of the question service")
    p.add_argument("--session-id", default=settings.session_id, help="Session identifier sent with every answer")
    p.add_argument(
        "--no-video",
        dest="video",
        action="store_false",
        default=settings.enable_video,
        help="Capture the microphone only",
    )
    p.add_argument("--stt-model", default=settings.stt_model, help="faster-whisper model size")
    p.add_argument("--stt-device", default=settings.stt_device, choices=["cpu", "cuda", "auto"])
    p.add_argument("--piper-bin", default=settings.piper_bin, help="Path/name of Piper TTS binary")
    p.add_argument("--piper-model", default=settings.piper_model, help="Path to Piper .onnx model")
    return p


def build_orchestrator(args: argparse.Namespace, settings: Settings | None = None) -> SessionOrchestrator:
    """Wire the default device-backed collaborators into an orchestrator."""
    settings = settings or get_settings()

    devices = SoundDeviceMediaDevices(
        MediaConfig(sample_rate=settings.sample_rate, video_device_index=settings.video_device_index)
    )
    transcriber = Transcriber(
        WhisperRecognizer(STTConfig(model_size=args.stt_model, device=args.stt_device)),
        config=RecognitionConfig(language=settings.recognition_language),
        timeout_s=settings.transcription_timeout_s,
        fallback=settings.transcription_fallback,
    )
    narrator = Narrator(
        PiperSynthesizer(
            TTSConfig(piper_bin=args.piper_bin, model_path=args.piper_model, timeout_s=settings.piper_timeout_s)
        ),
        VoiceParams(rate=settings.tts_rate, pitch=settings.tts_pitch, volume=settings.tts_volume),
    )

    return SessionOrchestrator(
        session=Session(args.session_id),
        gateway=MediaGateway(devices, video=args.video, preview=console_preview),
        recorder=Recorder(),
        transcriber=transcriber,
        exchange=QuestionExchangeClient(args.exchange_url),
        narrator=narrator,
        notifier=ConsoleNotifier(),
    )


async def run_interview(argv: list[str] | None = None) -> None:
    """
    Run an interactive interview session.

    This is the main async entry point that initializes all components
    and runs the console loop.
    """
    logger = logging.getLogger(__name__)
    args = build_parser().parse_args(argv)

    logger.info("Initializing AI Interview Assistant...")
    logger.debug(f"Question service: {args.exchange_url} session={args.session_id}")

    orchestrator = build_orchestrator(args)
    interface = ConsoleInterface(orchestrator)

    logger.info("Starting interview session...")
    await interface.run()


def main() -> None:
    """Main entry point for the application."""
    setup_logging()

    try:
        asyncio.run(run_interview(sys.argv[1:]))
    except KeyboardInterrupt:
        print("\nInterview session terminated by user.")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
