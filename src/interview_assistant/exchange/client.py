"""
Question exchange client.

Sends the user's transcript to the remote question-generation service and
returns the next interview question. One request per recording cycle, no
automatic retry.
"""

import json
import logging
from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError

from interview_assistant.config import get_settings
from interview_assistant.errors import ExchangeError
from interview_assistant.exchange.schemas import ExchangeRequest, ExchangeResponse

logger = logging.getLogger(__name__)

DEFAULT_EXCHANGE_PATH = "/generateInterview"


class QuestionExchangeBase(ABC):
    """Abstract base class for question exchange clients."""

    @abstractmethod
    async def exchange(self, session_id: str, transcript: str) -> str:
        """
        Send one answer and receive the next question.

        Args:
            session_id: Stable session identifier.
            transcript: The user's transcribed answer.

        Returns:
            The next question text.

        Raises:
            ExchangeError: On any failure.
        """
        ...

    async def close(self) -> None:
        """Release resources held by the client."""


class QuestionExchangeClient(QuestionExchangeBase):
    """
    HTTP client for the ``/generateInterview`` endpoint.

    The underlying ``httpx.AsyncClient`` is created lazily and reused across
    cycles.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        path: str | None = None,
        timeout: float | None = None,
        bypass_header: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the exchange client.

        Args:
            base_url: Service base URL (defaults to settings).
            path: Endpoint path (defaults to ``/generateInterview``).
            timeout: Request timeout in seconds; None waits on the transport.
            bypass_header: Dev-tunnel bypass header name; empty string disables it.
            transport: Optional httpx transport (used by tests).
        """
        settings = get_settings()
        self._base_url = (base_url or settings.exchange_base_url).rstrip("/")
        self._path = path or settings.exchange_path or DEFAULT_EXCHANGE_PATH
        self._timeout = timeout if timeout is not None else settings.exchange_timeout_s
        self._bypass_header = settings.tunnel_bypass_header if bypass_header is None else bypass_header
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def url(self) -> str:
        """Full endpoint URL."""
        return f"{self._base_url}{self._path}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._bypass_header:
            headers[self._bypass_header] = "true"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers=self._headers(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def exchange(self, session_id: str, transcript: str) -> str:
        """
        Post the transcript and return the next question.

        Args:
            session_id: Stable session identifier.
            transcript: The user's transcribed answer.

        Returns:
            The next question text.

        Raises:
            ExchangeError: Transport failure, non-2xx status, malformed body,
                ``ok`` false, or a missing/empty question.
        """
        request = ExchangeRequest(session_id=session_id, user_response=transcript)
        client = await self._get_client()

        try:
            response = await client.post(self._path, json=request.model_dump(by_alias=True))
        except httpx.HTTPError as e:
            logger.warning(f"Exchange request failed: {e}")
            raise ExchangeError(f"Question service unreachable: {e}") from e

        if not response.is_success:
            logger.warning(f"Exchange returned HTTP {response.status_code}")
            raise ExchangeError(
                f"Question service returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = ExchangeResponse.model_validate(response.json())
        except (json.JSONDecodeError, ValueError, ValidationError) as e:
            logger.warning(f"Exchange returned a malformed body: {e}")
            logger.debug(f"Response content: {response.text[:500]}")
            raise ExchangeError("Invalid response from AI", status_code=response.status_code) from e

        if not body.is_authoritative:
            logger.warning(f"Exchange rejected: ok={body.ok} question_present={bool(body.question)}")
            raise ExchangeError("Invalid response from AI", status_code=response.status_code)

        logger.info(f"Exchange ok session={session_id} question_len={len(body.question or '')}")
        return body.question or ""
