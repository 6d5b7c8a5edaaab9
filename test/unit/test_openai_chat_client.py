"""Unit tests for OpenAIChatClient.

HTTP calls are mocked via unittest.mock.patch to avoid real API calls.
"""

from __future__ import annotations

import asyncio
import io
import json
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from domain import LLMClientPort
from infra.llm import LLMClientError, OpenAIChatClient


def _mock_response(body: dict | bytes) -> MagicMock:
    resp = MagicMock()
    raw = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    resp.read.return_value = raw
    resp.__enter__ = MagicMock(return_value=resp)
    resp.__exit__ = MagicMock(return_value=False)
    return resp


def _make_client() -> OpenAIChatClient:
    return OpenAIChatClient(
        api_key="sk-test-key",
        base_url="https://api.example.com/v1/",
        model="gpt-4o-test",
    )


def test_conforms_to_llm_client_port() -> None:
    assert isinstance(_make_client(), LLMClientPort)


class TestComplete:
    @patch("urllib.request.urlopen")
    def test_returns_text_content(self, mock_urlopen: MagicMock) -> None:
        mock_urlopen.return_value = _mock_response({
            "choices": [{"message": {"content": 'click "#go"'}, "finish_reason": "stop"}],
        })
        result = asyncio.run(_make_client().complete("Hi"))
        assert result == 'click "#go"'

    @patch("urllib.request.urlopen")
    def test_sends_model_prompt_and_auth(self, mock_urlopen: MagicMock) -> None:
        mock_urlopen.return_value = _mock_response({
            "choices": [{"message": {"content": "ok"}}],
        })
        asyncio.run(_make_client().complete("Write a script", max_tokens=100, temperature=0.0))

        req = mock_urlopen.call_args[0][0]
        assert req.full_url == "https://api.example.com/v1/chat/completions"
        assert req.get_header("Authorization") == "Bearer sk-test-key"
        body = json.loads(req.data.decode())
        assert body["model"] == "gpt-4o-test"
        assert body["messages"] == [{"role": "user", "content": "Write a script"}]
        assert body["max_tokens"] == 100
        assert body["temperature"] == 0.0

    @patch("urllib.request.urlopen")
    def test_omits_unset_options(self, mock_urlopen: MagicMock) -> None:
        mock_urlopen.return_value = _mock_response({"choices": [{"message": {"content": "ok"}}]})
        asyncio.run(_make_client().complete("Hi"))
        body = json.loads(mock_urlopen.call_args[0][0].data.decode())
        assert "max_tokens" not in body
        assert "temperature" not in body

    @patch("urllib.request.urlopen")
    def test_null_content_is_empty_string(self, mock_urlopen: MagicMock) -> None:
        mock_urlopen.return_value = _mock_response({"choices": [{"message": {"content": None}}]})
        assert asyncio.run(_make_client().complete("Hi")) == ""


class TestErrors:
    @patch("urllib.request.urlopen")
    def test_http_error(self, mock_urlopen: MagicMock) -> None:
        mock_urlopen.side_effect = urllib.error.HTTPError(
            "https://api.example.com/v1/chat/completions", 429, "Too Many Requests", {}, io.BytesIO(b"")
        )
        with pytest.raises(LLMClientError, match="429"):
            asyncio.run(_make_client().complete("Hi"))

    @patch("urllib.request.urlopen")
    def test_unreachable(self, mock_urlopen: MagicMock) -> None:
        mock_urlopen.side_effect = urllib.error.URLError("connection refused")
        with pytest.raises(LLMClientError, match="unreachable"):
            asyncio.run(_make_client().complete("Hi"))

    @patch("urllib.request.urlopen")
    def test_invalid_json(self, mock_urlopen: MagicMock) -> None:
        mock_urlopen.return_value = _mock_response(b"<html>gateway</html>")
        with pytest.raises(LLMClientError, match="invalid JSON"):
            asyncio.run(_make_client().complete("Hi"))

    @patch("urllib.request.urlopen")
    def test_unexpected_shape(self, mock_urlopen: MagicMock) -> None:
        mock_urlopen.return_value = _mock_response({"choices": []})
        with pytest.raises(LLMClientError, match="Invalid response format"):
            asyncio.run(_make_client().complete("Hi"))
