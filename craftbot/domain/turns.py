"""Conversation turn controller: serializes generate/classify/execute steps."""

import sys
from typing import Any, Awaitable, Callable, Optional

from craftbot.domain.grammar import contains_command, truncate_command_message
from craftbot.domain.interrupts import InterruptGate, iter_turns, turn_budget
from craftbot.domain.models import SYSTEM, Message
from craftbot.ports.outbound import ActionExecutor, HistoryStore, ResponseGenerator

NEW_ACTION_COMMAND = "!newAction"
STOP_SELF_PROMPT_COMMAND = "!stopSelfPrompt"


def _log(msg: str):
    print(msg, file=sys.stderr)


class TurnController:
    """Runs one bounded conversation cycle per inbound message.

    Each turn asks the response generator for a line. A plain reply ends
    the cycle. A directive is executed, and its output feeds the next turn.
    Interruption is checked only at turn boundaries. Generation and
    execution errors propagate to the caller.
    """

    def __init__(
        self,
        agent: Any,
        *,
        prompter: ResponseGenerator,
        commands: ActionExecutor,
        history: HistoryStore,
        gate: InterruptGate,
        self_prompter: Any,
        chat: Callable[[str], Awaitable[None]],
        on_finished: Optional[Callable[[], None]] = None,
        max_commands: int = -1,
        verbose_commands: bool = True,
    ):
        self.agent = agent
        self.prompter = prompter
        self.commands = commands
        self.history = history
        self.gate = gate
        self.self_prompter = self_prompter
        self._chat = chat
        self._on_finished = on_finished
        self.max_commands = max_commands
        self.verbose_commands = verbose_commands
        self._in_flight = 0

    @property
    def name(self) -> str:
        return self.agent.name

    def is_idle(self) -> bool:
        return self._in_flight == 0

    async def handle(self, message: Message, max_turns: Optional[int] = None) -> bool:
        """Process one message. Returns True if any directive was executed."""
        source, text = message.source, message.text
        is_self_prompt = source in (SYSTEM, self.name)

        if source != self.name:
            # a fresh message always gets a chance to be answered
            self.gate.unmute()

        if not is_self_prompt:
            user_command = contains_command(text)
            if user_command:
                return await self._run_user_command(source, text, user_command)

        self.history.add(source, text)
        self.history.save()

        budget = turn_budget(
            self.max_commands,
            override=max_turns,
            is_self_prompt=is_self_prompt,
            self_prompt_active=self.self_prompter.active,
        )
        used_command = False
        self._in_flight += 1
        try:
            for _ in iter_turns(budget):
                if self.gate.should_interrupt(is_self_prompt):
                    break

                res = await self.prompter.generate(self.history.get_history())
                command_name = contains_command(res)

                if command_name is None:
                    self.history.add(self.name, res)
                    await self._chat(res)
                    _log(f"[{self.name}] Purely conversational response: {res}")
                    break

                _log(f"[{self.name}] Full response: \"{res}\"")
                res = truncate_command_message(res, command_name)
                self.history.add(self.name, res)

                if not self.commands.exists(command_name):
                    self.history.add(SYSTEM, f"Command {command_name} does not exist.")
                    _log(f"[{self.name}] WARNING: hallucinated command: {command_name}")
                    self.history.save()
                    continue

                if command_name == STOP_SELF_PROMPT_COMMAND and is_self_prompt:
                    self.history.add(SYSTEM, "Cannot stopSelfPrompt unless requested by user.")
                    self.history.save()
                    continue

                if self.gate.should_interrupt(is_self_prompt):
                    break

                self.self_prompter.handle_user_prompted_cmd(
                    is_self_prompt, self.commands.is_action(command_name)
                )
                await self._chat(self._command_chat_line(res, command_name))

                execute_res = await self.commands.execute(self.agent, res)
                _log(f"[{self.name}] Executed {command_name} and got: {execute_res!r}")
                used_command = True

                if not execute_res:
                    break
                self.history.add(SYSTEM, execute_res)
                self.history.save()
        finally:
            self._in_flight -= 1
            if self._on_finished:
                self._on_finished()

        return used_command

    async def _run_user_command(self, source: str, text: str, command_name: str) -> bool:
        if not self.commands.exists(command_name):
            await self._chat(f"Command '{command_name}' does not exist.")
            return False

        await self._chat(f"*{source} used {command_name[1:]}*")
        if command_name == NEW_ACTION_COMMAND:
            # the only user directive whose wording is kept as context
            self.history.add(source, text)

        execute_res = await self.commands.execute(self.agent, text)
        if execute_res:
            await self._chat(execute_res)
        return True

    def _command_chat_line(self, res: str, command_name: str) -> str:
        if self.verbose_commands:
            return res
        pre_message = res[: res.find(command_name)].strip()
        chat_message = f"*used {command_name[1:]}*"
        if pre_message:
            chat_message = f"{pre_message}  {chat_message}"
        return chat_message
