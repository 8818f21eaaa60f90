"""Inbound port: the one interface environments deliver events through."""

from typing import Any, Optional, Protocol


class EnvironmentListener(Protocol):
    """One handler per environment event kind.

    Chat and death events funnel into the turn controller; disconnect and
    kick funnel into lifecycle teardown.
    """

    async def on_spawn(self) -> None: ...

    async def on_chat(self, sender: str, text: str) -> Optional[Any]: ...

    async def on_death(self, message: str) -> Optional[Any]: ...

    async def on_disconnect(self, reason: str) -> None: ...

    async def on_kicked(self, reason: str) -> None: ...

    async def on_error(self, error: BaseException) -> None: ...
