"""
Orchestrator module for managing the interview session state machine.
"""

from interview_assistant.orchestrator.schemas import IDLE_PROMPT, OPENING_PROMPT, SessionState
from interview_assistant.orchestrator.session import Session
from interview_assistant.orchestrator.session_orchestrator import SessionOrchestrator

__all__ = [
    "IDLE_PROMPT",
    "OPENING_PROMPT",
    "Session",
    "SessionOrchestrator",
    "SessionState",
]
