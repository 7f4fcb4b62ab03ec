"""
IO module for interview front ends.

Provides the notification channel and the console push-to-talk interface.
"""

from interview_assistant.io.console import ConsoleInterface
from interview_assistant.io.notifier import (
    ConsoleNotifier,
    LoggingNotifier,
    Notification,
    NotificationEvent,
    Notifier,
    build_notification,
)

__all__ = [
    "ConsoleInterface",
    "ConsoleNotifier",
    "LoggingNotifier",
    "Notification",
    "NotificationEvent",
    "Notifier",
    "build_notification",
]
