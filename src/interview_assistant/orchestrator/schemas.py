"""
Schemas for the orchestrator module.

Defines the session states and the fixed prompts of an interview session.
"""

from enum import Enum

IDLE_PROMPT = 'Click "Start Interview" to begin your AI interview session.'

OPENING_PROMPT = (
    "Welcome to your AI interview! I'll ask you questions and you can respond by clicking "
    "the microphone button. Let's start: Tell me about yourself and your background."
)


class SessionState(str, Enum):
    """States of an interview session. Exactly one holds at a time."""

    IDLE = "idle"
    CAMERA_READY = "camera_ready"
    INTERVIEW_ACTIVE = "interview_active"
    RECORDING = "recording"
    PROCESSING = "processing"
