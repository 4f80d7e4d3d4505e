import pytest

from chat_core.providers import create_reply_source
from chat_core.providers.remote_client import RemoteReplySource
from chat_core.providers.simulated_client import SimulatedReplySource


def test_create_reply_source_default(monkeypatch):
    class DummySettings:
        reply_source = "simulated"
        simulated_delay = 0.1

    monkeypatch.setattr("chat_core.providers.settings", DummySettings())
    source = create_reply_source()
    assert isinstance(source, SimulatedReplySource)
    assert source._delay == 0.1


def test_create_reply_source_explicit(monkeypatch):
    class DummySettings:
        reply_source = "simulated"
        remote_endpoint = "http://reply.test/chat"
        http_timeout = 1.0

    monkeypatch.setattr("chat_core.providers.settings", DummySettings())
    source = create_reply_source("Remote")
    assert isinstance(source, RemoteReplySource)
    assert source._endpoint == "http://reply.test/chat"


def test_create_reply_source_unknown():
    with pytest.raises(KeyError):
        create_reply_source("carrier-pigeon")


def test_create_reply_source_name_is_case_insensitive(monkeypatch):
    class DummySettings:
        reply_source = "SIMULATED"
        simulated_delay = 0.0

    monkeypatch.setattr("chat_core.providers.settings", DummySettings())
    assert isinstance(create_reply_source(), SimulatedReplySource)
