"""Automations ("modes") run once per tick on behalf of the agent."""

import inspect
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional


def _log(msg: str):
    print(msg, file=sys.stderr)


@dataclass
class Mode:
    name: str
    description: str
    update: Callable[[Any], Any]  # (agent) -> None | awaitable
    on: bool = True
    paused: bool = False


class ModeController:
    """Automation set: runs every enabled, unpaused mode each tick.

    A failing mode is logged and skipped; it never reaches the tick loop.
    """

    def __init__(self, agent: Any, modes: Optional[List[Mode]] = None):
        self.agent = agent
        self._modes: Dict[str, Mode] = {}
        for mode in modes or []:
            self.register(mode)

    def register(self, mode: Mode) -> Mode:
        self._modes[mode.name] = mode
        return mode

    def exists(self, name: str) -> bool:
        return name in self._modes

    def get(self, name: str) -> Optional[Mode]:
        return self._modes.get(name)

    def set_on(self, name: str, on: bool):
        self._modes[name].on = on

    def pause(self, name: str):
        self._modes[name].paused = True

    def unpause_all(self):
        for mode in self._modes.values():
            mode.paused = False

    async def update(self):
        for mode in list(self._modes.values()):
            if not mode.on or mode.paused:
                continue
            try:
                result = mode.update(self.agent)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                _log(f"[Modes] {mode.name} failed: {e}")

    def status(self) -> Dict[str, str]:
        return {
            name: ("paused" if m.paused else "on" if m.on else "off")
            for name, m in self._modes.items()
        }
