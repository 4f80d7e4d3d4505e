import httpx
import pytest

from chat_core.dispatch.controller import DispatchConfig, DispatchController
from chat_core.domain.exceptions import (
    API_ERROR,
    BAD_RESPONSE,
    MISSING_ENDPOINT,
    NETWORK_ERROR,
    RATE_LIMIT,
    ApiError,
    NetworkError,
    RateLimitError,
    ValidationError,
)
from chat_core.domain.models import ProviderMessage
from chat_core.infrastructure.storage.memory_store import InMemoryTranscriptStore
from chat_core.providers.remote_client import RemoteReplySource


class SettingsStub:
    remote_endpoint = "http://reply.test/chat"
    http_timeout = 1.0


def install_client(monkeypatch, response=None, error=None):
    calls = []

    class Client:
        def __init__(self, *a, **kw):
            calls.append({"init": kw})

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def post(self, url, json=None, headers=None):
            calls.append({"url": url, "json": json, "headers": headers})
            if error is not None:
                raise error
            return response

    monkeypatch.setattr("httpx.AsyncClient", Client)
    return calls


@pytest.mark.asyncio
async def test_remote_reply_success(monkeypatch):
    calls = install_client(monkeypatch, response=httpx.Response(200, json={"response": "ok"}))
    history = [ProviderMessage.from_text("user", "hi"), ProviderMessage.from_text("assistant", "yo")]
    reply = await RemoteReplySource(SettingsStub()).produce_reply("hello", history, "Alice")
    assert reply == "ok"
    assert calls[0]["init"]["timeout"] == 1.0
    assert calls[1]["url"] == "http://reply.test/chat"
    assert calls[1]["json"] == {
        "message": "hello",
        "chat_history": [
            {"role": "user", "content": [{"text": "hi"}]},
            {"role": "assistant", "content": [{"text": "yo"}]},
        ],
        "user_name": "Alice",
    }


@pytest.mark.asyncio
async def test_remote_reply_server_error(monkeypatch):
    install_client(monkeypatch, response=httpx.Response(500, text="boom"))
    with pytest.raises(ApiError) as exc:
        await RemoteReplySource(SettingsStub()).produce_reply("hello", [], "Alice")
    assert exc.value.http_status == 500
    assert exc.value.code == API_ERROR


@pytest.mark.asyncio
async def test_remote_reply_rate_limited(monkeypatch):
    install_client(monkeypatch, response=httpx.Response(429, text="slow down"))
    with pytest.raises(RateLimitError) as exc:
        await RemoteReplySource(SettingsStub()).produce_reply("hello", [], "Alice")
    assert exc.value.code == RATE_LIMIT
    assert exc.value.http_status == 429
    assert exc.value.log_fields()["endpoint"] == "http://reply.test/chat"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json={"reply": "wrong key"}),
        httpx.Response(200, json={"response": 42}),
        httpx.Response(200, json=["response"]),
        httpx.Response(200, json={"response": ""}),
        httpx.Response(200, json={"response": "  \n\t"}),
    ],
)
async def test_remote_reply_malformed_body(monkeypatch, response):
    install_client(monkeypatch, response=response)
    with pytest.raises(ApiError) as exc:
        await RemoteReplySource(SettingsStub()).produce_reply("hello", [], "Alice")
    assert exc.value.code == BAD_RESPONSE


@pytest.mark.asyncio
async def test_remote_reply_transport_error(monkeypatch):
    install_client(monkeypatch, error=httpx.ConnectError("connection refused"))
    with pytest.raises(NetworkError) as exc:
        await RemoteReplySource(SettingsStub()).produce_reply("hello", [], "Alice")
    assert exc.value.code == NETWORK_ERROR
    assert exc.value.extra == {"endpoint": "http://reply.test/chat"}


@pytest.mark.asyncio
async def test_remote_reply_timeout_is_network_error(monkeypatch):
    install_client(monkeypatch, error=httpx.ReadTimeout("timed out"))
    with pytest.raises(NetworkError):
        await RemoteReplySource(SettingsStub()).produce_reply("hello", [], "Alice")


@pytest.mark.asyncio
async def test_remote_reply_requires_endpoint():
    class NoEndpoint:
        remote_endpoint = ""
        http_timeout = 1.0

    with pytest.raises(ValidationError) as exc:
        await RemoteReplySource(NoEndpoint()).produce_reply("hello", [], "Alice")
    assert exc.value.code == MISSING_ENDPOINT


@pytest.mark.asyncio
async def test_blank_remote_reply_takes_failure_path(monkeypatch):
    install_client(monkeypatch, response=httpx.Response(200, json={"response": "   "}))
    store = InMemoryTranscriptStore(bot_name="Bot", welcome_text="welcome")
    config = DispatchConfig(bot_name="Bot", default_user_name="You", failure_text="failed")
    controller = DispatchController(store, RemoteReplySource(SettingsStub()), config=config)
    await controller.send("hello")

    messages, history, busy = store.snapshot()
    assert [m.text for m in messages] == ["welcome", "hello", "failed"]
    assert all(m.text.strip() for m in messages)
    assert history == ()
    assert busy is False
