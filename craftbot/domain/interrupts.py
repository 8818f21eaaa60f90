"""Interrupt gate and turn budget policy shared by every agent loop."""

import itertools
from typing import Iterator, Optional

UNBOUNDED = -1


class InterruptGate:
    """Cooperative cancellation flags checked at every turn boundary.

    ``muted`` silences the agent whatever triggered the cycle. The self-prompt
    stop flag only halts self-initiated cycles; it is raised and cleared by
    the self-prompter alone.
    """

    def __init__(self):
        self._muted = False
        self._self_prompt_stop = False

    @property
    def muted(self) -> bool:
        return self._muted

    @property
    def self_prompt_stop_requested(self) -> bool:
        return self._self_prompt_stop

    def mute(self):
        self._muted = True

    def unmute(self):
        self._muted = False

    def request_self_prompt_stop(self):
        self._self_prompt_stop = True

    def clear_self_prompt_stop(self):
        self._self_prompt_stop = False

    def should_interrupt(self, is_self_prompt: bool) -> bool:
        return self._muted or (is_self_prompt and self._self_prompt_stop)


def turn_budget(
    max_commands: int,
    override: Optional[int] = None,
    is_self_prompt: bool = False,
    self_prompt_active: bool = False,
) -> Optional[int]:
    """Maximum generate/execute cycles for one message; None means unbounded."""
    if override is not None:
        return None if override == UNBOUNDED else max(0, override)
    if not is_self_prompt and self_prompt_active:
        # answer the user once, then hand control back to self-prompting
        return 1
    if max_commands == UNBOUNDED:
        return None
    return max(0, max_commands)


def iter_turns(budget: Optional[int]) -> Iterator[int]:
    if budget is None:
        return itertools.count()
    return iter(range(budget))
