"""Outbound ports: collaborators the turn controller drives."""

from typing import Any, Dict, List, Optional, Protocol


class ResponseGenerator(Protocol):
    async def generate(self, history: List[Dict[str, str]]) -> str:
        """Return the next agent line; raises GenerationError on failure."""
        ...


class ActionExecutor(Protocol):
    def exists(self, name: str) -> bool: ...

    def is_action(self, name: str) -> bool: ...

    async def execute(self, agent: Any, text: str) -> Optional[str]:
        """Run the first directive in text; raises CommandExecutionError."""
        ...


class HistoryStore(Protocol):
    def add(self, source: str, text: str) -> None: ...

    def save(self) -> None: ...

    def load(self) -> Dict[str, Any]: ...

    def get_history(self) -> List[Dict[str, str]]: ...


class AutomationSet(Protocol):
    async def update(self) -> None:
        """Run every enabled automation once; failures stay inside."""
        ...

    def unpause_all(self) -> None: ...

    def status(self) -> Dict[str, str]: ...
