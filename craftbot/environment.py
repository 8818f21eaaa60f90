"""Environments the agent lives in: event intake and outbound chat."""

import asyncio
import sys
from typing import Any, Callable, List, Optional

from craftbot.ports.inbound import EnvironmentListener


def _log(msg: str):
    print(msg, file=sys.stderr)


class Environment:
    """Base environment: one attached listener, outbound chat, idle signal.

    Adapters call the ``deliver_*`` methods when something happens; each one
    maps to exactly one listener handler.
    """

    def __init__(self):
        self._listener: Optional[EnvironmentListener] = None
        self._finished_callbacks: List[Callable[[], None]] = []

    def attach(self, listener: EnvironmentListener):
        self._listener = listener

    async def connect(self):
        raise NotImplementedError

    async def chat(self, text: str):
        raise NotImplementedError

    async def close(self):
        pass

    # "cycle finished" signal consumed by automations
    def on_finished_executing(self, callback: Callable[[], None]):
        self._finished_callbacks.append(callback)

    def finished_executing(self):
        for callback in list(self._finished_callbacks):
            callback()

    # event intake
    async def deliver_spawn(self):
        if self._listener:
            await self._listener.on_spawn()

    async def deliver_chat(self, sender: str, text: str) -> Optional[Any]:
        if self._listener:
            return await self._listener.on_chat(sender, text)
        return None

    async def deliver_death(self, message: str) -> Optional[Any]:
        if self._listener:
            return await self._listener.on_death(message)
        return None

    async def deliver_disconnect(self, reason: str):
        if self._listener:
            await self._listener.on_disconnect(reason)

    async def deliver_kicked(self, reason: str):
        if self._listener:
            await self._listener.on_kicked(reason)

    async def deliver_error(self, error: BaseException):
        if self._listener:
            await self._listener.on_error(error)


class LocalEnvironment(Environment):
    """In-process environment that records what the agent says."""

    def __init__(self, spawn_on_connect: bool = True):
        super().__init__()
        self.spawn_on_connect = spawn_on_connect
        self.sent: List[str] = []
        self.connected = False
        self.closed = False

    async def connect(self):
        self.connected = True
        if self.spawn_on_connect:
            await self.deliver_spawn()

    async def chat(self, text: str):
        self.sent.append(text)

    async def close(self):
        self.connected = False
        self.closed = True


class ConsoleEnvironment(LocalEnvironment):
    """Talk to the agent from a terminal: stdin lines in, stdout lines out."""

    def __init__(self, username: str = "console"):
        super().__init__()
        self.username = username
        self._reader: Optional[asyncio.Task] = None

    async def connect(self):
        await super().connect()
        self._reader = asyncio.create_task(self._read_stdin())

    async def chat(self, text: str):
        await super().chat(text)
        print(text, flush=True)

    async def close(self):
        await super().close()
        if self._reader and self._reader is not asyncio.current_task():
            self._reader.cancel()

    async def _read_stdin(self):
        while self.connected:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line:
                await self.deliver_disconnect("stdin closed")
                return
            line = line.strip()
            if line:
                await self.deliver_chat(self.username, line)
