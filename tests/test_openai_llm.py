"""Tests for the OpenAI wrapper with the client mocked out."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from brt_pulse import openai_llm


def _reply(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


@pytest.fixture
def client():
    mock_client = MagicMock()
    mock_client.chat.completions.create.return_value = _reply("Queues at Oshodi.")
    with patch.object(openai_llm, "OpenAI", return_value=mock_client) as ctor:
        openai_llm._clients.clear()
        yield mock_client, ctor
    openai_llm._clients.clear()


def test_returns_message_text(client):
    mock_client, ctor = client
    assert openai_llm.openai_llm_call("prompt", api_key="sk-1") == "Queues at Oshodi."
    ctor.assert_called_once_with(api_key="sk-1")
    kwargs = mock_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == openai_llm.DEFAULT_MODEL
    assert kwargs["messages"][-1] == {"role": "user", "content": "prompt"}
    assert "response_format" not in kwargs


def test_json_mode_and_client_reuse(client):
    mock_client, ctor = client
    fn = openai_llm.make_llm_call_fn("sk-2", model="gpt-x", json_mode=True)
    fn("a")
    fn("b")
    assert ctor.call_count == 1
    kwargs = mock_client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["model"] == "gpt-x"


def test_empty_content_is_blank(client):
    mock_client, _ = client
    mock_client.chat.completions.create.return_value = _reply(None)
    assert openai_llm.openai_llm_call("prompt", api_key="sk-3") == ""


def test_key_required():
    with pytest.raises(ValueError):
        openai_llm.openai_llm_call("prompt", api_key="")
