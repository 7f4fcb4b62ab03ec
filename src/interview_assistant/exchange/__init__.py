"""
Client for the remote question-generation service.
"""

from interview_assistant.exchange.client import (
    DEFAULT_EXCHANGE_PATH,
    QuestionExchangeBase,
    QuestionExchangeClient,
)
from interview_assistant.exchange.schemas import ExchangeRequest, ExchangeResponse

__all__ = [
    "DEFAULT_EXCHANGE_PATH",
    "QuestionExchangeBase",
    "QuestionExchangeClient",
    "ExchangeRequest",
    "ExchangeResponse",
]
