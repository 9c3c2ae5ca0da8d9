import asyncio
import json
from typing import List

import httpx
import pytest

from src.second_brain.assistant_client import AssistantClient, AssistantClientError
from src.second_brain.chat import (
    FAILED_REPLY,
    GREETING,
    MISSING_REPLY,
    ChatTranscript,
    greeting_transcript,
)
from src.second_brain.models import ChatMessage
from src.second_brain.persistent_state import PersistentStateContainer
from src.second_brain.storage import InMemoryKeyValueStore


def make_transcript(ask=None, store=None):
    store = store or InMemoryKeyValueStore()
    state = PersistentStateContainer("chat", greeting_transcript(), store, value_type=List[ChatMessage])
    asyncio.run(state.hydrate())
    if ask is None:
        return ChatTranscript(state), store
    return ChatTranscript(state, ask=ask), store


def test_fresh_transcript_starts_with_greeting():
    chat, _ = make_transcript()
    messages = chat.messages()
    assert len(messages) == 1
    assert messages[0].role == "assistant"
    assert messages[0].content == GREETING


def test_send_uses_local_responder_and_persists():
    chat, store = make_transcript()
    answer = chat.send("  help me plan the week  ")

    assert answer.content.startswith("Drafting an adaptive plan")
    roles = [m.role for m in chat.messages()]
    assert roles == ["assistant", "user", "assistant"]
    assert chat.messages()[1].content == "help me plan the week"
    assert len(json.loads(store.get("chat"))) == 3


def test_blank_message_is_ignored():
    chat, _ = make_transcript()
    assert chat.send("   ") is None
    assert len(chat.messages()) == 1


def test_failed_ask_keeps_user_message():
    def boom(prompt):
        raise AssistantClientError("offline")

    chat, _ = make_transcript(ask=boom)
    answer = chat.send("hello?")

    assert answer.content == FAILED_REPLY
    assert [m.content for m in chat.messages()][1:] == ["hello?", FAILED_REPLY]
    assert chat.pending is False


def test_missing_reply_placeholder():
    chat, _ = make_transcript(ask=lambda prompt: None)
    assert chat.send("anything").content == MISSING_REPLY


def test_clear_restores_greeting():
    chat, _ = make_transcript()
    chat.send("brainstorm with me")
    chat.clear()
    assert [m.content for m in chat.messages()] == [GREETING]


def test_transcript_survives_restart():
    chat, store = make_transcript()
    chat.send("summary please")

    reopened, _ = make_transcript(store=InMemoryKeyValueStore(store.data))
    assert [m.role for m in reopened.messages()] == ["assistant", "user", "assistant"]


class TestAssistantClient:
    def _client(self, handler):
        transport = httpx.MockTransport(handler)
        return AssistantClient(client=httpx.Client(transport=transport, base_url="http://aurora.test"))

    def test_posts_prompt_and_returns_reply(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"reply": "ok!"})

        with self._client(handler) as client:
            assert client("plan my day") == "ok!"
        assert seen == {"path": "/api/ai", "body": {"prompt": "plan my day"}}

    def test_missing_reply_is_none(self):
        with self._client(lambda request: httpx.Response(200, json={})) as client:
            assert client.ask("x") is None

    def test_http_error_raises(self):
        with self._client(lambda request: httpx.Response(500, text="boom")) as client:
            with pytest.raises(AssistantClientError):
                client.ask("x")

    def test_non_json_raises(self):
        with self._client(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(AssistantClientError):
                client.ask("x")

    def test_client_plugs_into_transcript(self):
        with self._client(lambda request: httpx.Response(200, json={"reply": "remote"})) as client:
            chat, _ = make_transcript(ask=client)
            assert chat.send("hi").content == "remote"


def test_utc_suffixed_history_sorts_with_new_messages():
    store = InMemoryKeyValueStore({"chat": json.dumps([
        {"id": "m-2", "role": "user", "content": "second", "createdAt": "2024-05-01T10:05:00.000Z"},
        {"id": "m-1", "role": "assistant", "content": "first", "createdAt": "2024-05-01T10:00:00.000Z"},
    ])})
    chat, _ = make_transcript(store=store)

    answer = chat.send("plan my week")

    assert answer.content.startswith("Drafting an adaptive plan")
    assert [m.content for m in chat.messages()][:3] == ["first", "second", "plan my week"]
    assert json.loads(store.get("chat"))[-1]["createdAt"].endswith("Z")
