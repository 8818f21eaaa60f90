"""Tests for ChatPrompter: payload shape and failure mapping."""

import asyncio
from unittest.mock import MagicMock, patch

import aiohttp
import pytest

from craftbot.prompter import ChatPrompter, GenerationError


def _prompter(**kwargs):
    kwargs.setdefault("api_key", "sk-test")
    return ChatPrompter(
        name="andy",
        model="hermes",
        base_url="http://llm.local/v1/",
        command_docs="!stfu: be quiet",
        **kwargs,
    )


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class TestBuildMessages:
    def test_system_prompt_first(self):
        history = [{"role": "user", "content": "steve: hi"}]
        messages = _prompter().build_messages(history)
        assert messages[0]["role"] == "system"
        assert "andy" in messages[0]["content"]
        assert "!stfu: be quiet" in messages[0]["content"]
        assert messages[1:] == history

    def test_custom_system_prompt(self):
        p = _prompter(system_prompt="I am {name}.")
        assert p.build_messages([])[0]["content"] == "I am andy."


class TestGenerate:
    @pytest.mark.asyncio
    async def test_returns_content(self, http_session):
        session_cm, session = http_session(json_data=_completion("  Hi Steve! !lookAround  "))
        with patch("craftbot.prompter.aiohttp.ClientSession", MagicMock(return_value=session_cm)):
            result = await _prompter().generate([{"role": "user", "content": "steve: hi"}])

        assert result == "Hi Steve! !lookAround"
        url = session.post.call_args.args[0]
        kwargs = session.post.call_args.kwargs
        assert url == "http://llm.local/v1/chat/completions"
        assert kwargs["json"]["model"] == "hermes"
        assert kwargs["json"]["messages"][-1] == {"role": "user", "content": "steve: hi"}
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"

    @pytest.mark.asyncio
    async def test_no_auth_header_without_key(self, http_session):
        session_cm, session = http_session(json_data=_completion("ok"))
        with patch("craftbot.prompter.aiohttp.ClientSession", MagicMock(return_value=session_cm)):
            await _prompter(api_key="").generate([])
        assert "Authorization" not in session.post.call_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_strips_echoed_name(self, http_session):
        session_cm, _ = http_session(json_data=_completion("andy: on my way"))
        with patch("craftbot.prompter.aiohttp.ClientSession", MagicMock(return_value=session_cm)):
            assert await _prompter().generate([]) == "on my way"

    @pytest.mark.asyncio
    async def test_null_content_is_empty(self, http_session):
        session_cm, _ = http_session(json_data=_completion(None))
        with patch("craftbot.prompter.aiohttp.ClientSession", MagicMock(return_value=session_cm)):
            assert await _prompter().generate([]) == ""

    @pytest.mark.asyncio
    async def test_http_error_status(self, http_session):
        session_cm, _ = http_session(status=503, text="model loading")
        with patch("craftbot.prompter.aiohttp.ClientSession", MagicMock(return_value=session_cm)):
            with pytest.raises(GenerationError, match="503"):
                await _prompter().generate([])

    @pytest.mark.asyncio
    async def test_connection_error(self, http_session):
        session_cm, _ = http_session(post_error=aiohttp.ClientConnectionError("refused"))
        with patch("craftbot.prompter.aiohttp.ClientSession", MagicMock(return_value=session_cm)):
            with pytest.raises(GenerationError, match="refused"):
                await _prompter().generate([])

    @pytest.mark.asyncio
    async def test_timeout(self, http_session):
        session_cm, _ = http_session(post_error=asyncio.TimeoutError())
        with patch("craftbot.prompter.aiohttp.ClientSession", MagicMock(return_value=session_cm)):
            with pytest.raises(GenerationError):
                await _prompter().generate([])

    @pytest.mark.asyncio
    async def test_malformed_payload(self, http_session):
        session_cm, _ = http_session(json_data={"choices": []})
        with patch("craftbot.prompter.aiohttp.ClientSession", MagicMock(return_value=session_cm)):
            with pytest.raises(GenerationError, match="Malformed"):
                await _prompter().generate([])
