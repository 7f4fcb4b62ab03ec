import json

import httpx
import pytest

from interview_assistant.errors import ExchangeError
from interview_assistant.exchange.client import QuestionExchangeClient
from interview_assistant.exchange.schemas import ExchangeRequest, ExchangeResponse

BASE_URL = "http://questions.test"


def _client(handler, **kwargs) -> QuestionExchangeClient:
    return QuestionExchangeClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_exchange_posts_session_and_transcript():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "question": "What is your greatest strength?"})

    client = _client(handler)
    question = await client.exchange("6851086aed4d8125b0785e87", "I studied computer science")
    await client.close()

    assert question == "What is your greatest strength?"
    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/generateInterview"
    assert request.headers["content-type"] == "application/json"
    assert request.headers["ngrok-skip-browser-warning"] == "true"
    assert json.loads(request.content) == {
        "sessionId": "6851086aed4d8125b0785e87",
        "userResponse": "I studied computer science",
    }


@pytest.mark.asyncio
async def test_bypass_header_can_be_disabled():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "question": "Q?"})

    client = _client(handler, bypass_header="")
    await client.exchange("s", "t")
    await client.close()

    assert "ngrok-skip-browser-warning" not in seen[0].headers


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"ok": False},
        {"ok": False, "question": "Ignored?"},
        {"ok": True},
        {"ok": True, "question": ""},
        {"ok": True, "question": None},
        {"ok": "true", "question": "Coerced?"},
        {"question": "No ok flag?"},
        ["ok", True],
    ],
)
async def test_non_authoritative_bodies_raise(body):
    client = _client(lambda request: httpx.Response(200, json=body))

    with pytest.raises(ExchangeError):
        await client.exchange("s", "t")
    await client.close()


@pytest.mark.asyncio
async def test_http_error_status_raises_with_code():
    client = _client(lambda request: httpx.Response(502, json={"ok": True, "question": "Q?"}))

    with pytest.raises(ExchangeError) as exc_info:
        await client.exchange("s", "t")
    await client.close()

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_malformed_json_raises():
    client = _client(lambda request: httpx.Response(200, text="<html>tunnel warning</html>"))

    with pytest.raises(ExchangeError, match="Invalid response"):
        await client.exchange("s", "t")
    await client.close()


@pytest.mark.asyncio
async def test_transport_failure_raises_without_retry():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    with pytest.raises(ExchangeError, match="unreachable"):
        await client.exchange("s", "t")
    await client.close()

    assert calls == 1


@pytest.mark.asyncio
async def test_client_reused_until_closed():
    client = _client(lambda request: httpx.Response(200, json={"ok": True, "question": "Q?"}))

    await client.exchange("s", "a")
    first = client._client
    await client.exchange("s", "b")
    assert client._client is first

    await client.close()
    assert client._client is None


def test_url_from_settings(monkeypatch):
    monkeypatch.setenv("INTERVIEW_EXCHANGE_BASE_URL", "https://tunnel.example/")
    assert QuestionExchangeClient().url == "https://tunnel.example/generateInterview"


def test_request_serializes_with_wire_names():
    request = ExchangeRequest(session_id="abc", user_response="hello")
    assert request.model_dump(by_alias=True) == {"sessionId": "abc", "userResponse": "hello"}
    assert ExchangeRequest.model_validate({"sessionId": "abc", "userResponse": "hi"}).user_response == "hi"


def test_response_authority():
    assert ExchangeResponse(ok=True, question="Q?").is_authoritative
    assert not ExchangeResponse(ok=True, question="").is_authoritative
    assert not ExchangeResponse(ok=False, question="Q?").is_authoritative
