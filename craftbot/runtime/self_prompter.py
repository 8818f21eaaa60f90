"""Self-prompting: the agent feeds itself its goal until told to stop."""

import asyncio
import sys
from typing import Any, Optional

from craftbot.domain.interrupts import UNBOUNDED, InterruptGate
from craftbot.domain.models import SelfPromptSession

MAX_NO_COMMAND = 3


def _log(msg: str):
    print(msg, file=sys.stderr)


class SelfPrompter:
    """Owns at most one self-prompt session and the task that drives it.

    The cycle task re-enters the agent's turn controller with the agent's own
    name as the source. A user-issued action pauses the cycle; the tick
    cadence (``update``) resumes it once the agent has been idle for the
    cooldown.
    """

    def __init__(self, agent: Any, gate: InterruptGate, cooldown_ms: float = 2000):
        self.agent = agent
        self.gate = gate
        self.cooldown_ms = cooldown_ms
        self.session: Optional[SelfPromptSession] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self.session is not None

    @property
    def loop_active(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def prompt(self) -> Optional[str]:
        return self.session.prompt if self.session else None

    def start(self, prompt: str) -> Optional[str]:
        if not prompt:
            return "No prompt specified. Ignoring request."
        if self.session:
            self.session.prompt = prompt
        else:
            self.session = SelfPromptSession(prompt=prompt, cooldown_remaining_ms=self.cooldown_ms)
        self.gate.clear_self_prompt_stop()
        if self.loop_active:
            _log("[SelfPrompter] loop already running, goal updated")
        else:
            self._launch()
        return None

    async def stop(self, chat_notification: bool = True):
        """End the session. The running cycle notices at its next turn boundary."""
        if not self.session:
            return
        self.session = None
        if self.loop_active:
            self.gate.request_self_prompt_stop()
        else:
            self.gate.clear_self_prompt_stop()
        _log("[SelfPrompter] stopped")
        if chat_notification:
            await self.agent.chat("Self-prompting stopped.")

    def pause(self):
        """Wind the cycle down but keep the session for a later restart."""
        if self.session and self.loop_active:
            self.gate.request_self_prompt_stop()
            self.session.cooldown_remaining_ms = self.cooldown_ms

    def handle_user_prompted_cmd(self, is_self_prompt: bool, is_action: bool):
        if self.session and not is_self_prompt and is_action:
            self.pause()

    def update(self, delta_ms: float):
        """Tick hook: restart a paused session after the agent has been idle."""
        session = self.session
        if session is None or self.loop_active or self.gate.self_prompt_stop_requested:
            return
        if self.agent.is_idle():
            session.cooldown_remaining_ms -= delta_ms
        else:
            session.cooldown_remaining_ms = self.cooldown_ms
        if session.cooldown_remaining_ms <= 0:
            _log("[SelfPrompter] restarting self-prompting...")
            session.cooldown_remaining_ms = self.cooldown_ms
            self._launch()

    async def shutdown(self):
        self.session = None
        task, self._task = self._task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.gate.clear_self_prompt_stop()

    def _launch(self):
        self._task = asyncio.create_task(self._run())

    async def _run(self):
        no_command_count = 0
        try:
            while self.session and not self.gate.self_prompt_stop_requested:
                if self.gate.muted:
                    # muted cycles neither prompt nor count as strikes
                    await asyncio.sleep(self.cooldown_ms / 1000)
                    continue
                msg = (
                    f"You are self-prompting with the goal: '{self.session.prompt}'. "
                    "Your next response MUST contain a command !withThisSyntax. Respond:"
                )
                used_command = await self.agent.handle_message(
                    self.agent.name, msg, max_turns=UNBOUNDED
                )
                if used_command:
                    no_command_count = 0
                elif not self.gate.muted:
                    no_command_count += 1
                    if no_command_count >= MAX_NO_COMMAND:
                        out = (
                            f"Agent did not use command in the last {MAX_NO_COMMAND} "
                            "auto-prompts. Stopping auto-prompting."
                        )
                        _log(f"[SelfPrompter] {out}")
                        self.session = None
                        await self.agent.chat(out)
                        break
                await asyncio.sleep(self.cooldown_ms / 1000)
        except Exception as e:
            # the cycle stalls; update() restarts it while the session lives
            _log(f"[SelfPrompter] cycle failed: {e}")
        finally:
            if self._task is asyncio.current_task():
                self._task = None
            self.gate.clear_self_prompt_stop()
