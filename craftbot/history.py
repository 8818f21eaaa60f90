"""Conversation history: bounded turn list persisted as JSON."""

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from craftbot.domain.models import SYSTEM


def _log(msg: str):
    print(msg, file=sys.stderr)


class History:
    """Chat turns for one agent, in OpenAI message format.

    The agent's own lines are ``assistant`` turns, system notes are
    ``system`` turns and everybody else is a ``user`` turn prefixed with the
    speaker's name.
    """

    def __init__(
        self,
        name: str,
        storage_dir: str = "bots",
        max_messages: int = 20,
        self_prompt_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.name = name
        self.max_messages = max_messages
        self.self_prompt_provider = self_prompt_provider
        self._storage_path = Path(storage_dir) / name / "memory.json"
        self.turns: List[Dict[str, str]] = []

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    def add(self, source: str, text: str):
        if source == self.name:
            turn = {"role": "assistant", "content": text}
        elif source == SYSTEM:
            turn = {"role": "system", "content": text}
        else:
            turn = {"role": "user", "content": f"{source}: {text}"}
        self.turns.append(turn)
        if self.max_messages > 0 and len(self.turns) > self.max_messages:
            del self.turns[: len(self.turns) - self.max_messages]

    def get_history(self) -> List[Dict[str, str]]:
        return [dict(t) for t in self.turns]

    def clear(self):
        self.turns = []

    def save(self):
        """Persist turns and the active self-prompt goal, if any."""
        self_prompt = self.self_prompt_provider() if self.self_prompt_provider else None
        data = {"name": self.name, "turns": self.turns, "self_prompt": self_prompt}
        try:
            self._storage_path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._storage_path.with_suffix(".tmp")
            tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp.replace(self._storage_path)
        except OSError as e:
            _log(f"[History:{self.name}] save failed: {e}")

    def load(self) -> Dict[str, Any]:
        """Restore saved turns. Returns ``{"turns": [...], "self_prompt": str|None}``."""
        if not self._storage_path.exists():
            return {"turns": [], "self_prompt": None}
        try:
            raw = json.loads(self._storage_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            _log(f"[History:{self.name}] load failed: {e}")
            return {"turns": [], "self_prompt": None}
        if not isinstance(raw, dict):
            _log(f"[History:{self.name}] load failed: expected an object, got {type(raw).__name__}")
            return {"turns": [], "self_prompt": None}

        turns = []
        for item in raw.get("turns", []):
            if isinstance(item, dict) and "role" in item and "content" in item:
                turns.append({"role": str(item["role"]), "content": str(item["content"])})
        self.turns = turns
        self_prompt = raw.get("self_prompt") or None
        return {"turns": self.get_history(), "self_prompt": self_prompt}
