"""Shared fakes and factories for agent tests."""

from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from craftbot.agent import Agent
from craftbot.commands import Command, CommandRegistry, builtin_commands
from craftbot.environment import LocalEnvironment
from craftbot.history import History

AGENT_NAME = "andy"


class ScriptedPrompter:
    """Response generator that replays a script; the last entry repeats."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls: List[List[Dict[str, str]]] = []

    async def generate(self, history):
        self.calls.append(history)
        if len(self.responses) > 1:
            response = self.responses.pop(0)
        else:
            response = self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


def _make_registry(*extra: Command) -> CommandRegistry:
    return CommandRegistry(builtin_commands() + list(extra))


def _fake_command(name: str, output: Optional[str] = "", is_action: bool = False, params=None) -> Command:
    return Command(
        name=name,
        description=f"fake {name}",
        perform=AsyncMock(return_value=output),
        params=params or {},
        is_action=is_action,
    )


@pytest.fixture
def make_agent(tmp_path):
    """Build an Agent on a LocalEnvironment with a scripted prompter."""

    def _make(responses=("Hello!",), extra_commands=(), commands: Optional[CommandRegistry] = None, **kwargs) -> Agent:
        kwargs.setdefault("spawn_delay_seconds", 0)
        kwargs.setdefault("self_prompt_cooldown_ms", 10)
        kwargs.setdefault("tick_interval_ms", 10)
        history = History(AGENT_NAME, storage_dir=str(tmp_path), max_messages=100)
        return Agent(
            AGENT_NAME,
            LocalEnvironment(),
            ScriptedPrompter(responses),
            commands=commands or _make_registry(*extra_commands),
            history=history,
            **kwargs,
        )

    return _make


@pytest.fixture
def fake_command():
    """Factory for directives whose ``perform`` is an AsyncMock."""
    return _fake_command


def _mock_http_session(status: int = 200, json_data=None, text: str = "", post_error: Optional[BaseException] = None):
    """(ClientSession stand-in, inner session) for ``async with`` use."""
    resp = MagicMock()
    resp.status = status
    resp.json = AsyncMock(return_value=json_data)
    resp.text = AsyncMock(return_value=text)

    post_cm = MagicMock()
    post_cm.__aenter__ = AsyncMock(return_value=resp)
    post_cm.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    if post_error is not None:
        session.post = MagicMock(side_effect=post_error)
    else:
        session.post = MagicMock(return_value=post_cm)

    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=False)
    return session_cm, session


@pytest.fixture
def http_session():
    """Factory for a mocked aiohttp.ClientSession context manager."""
    return _mock_http_session
