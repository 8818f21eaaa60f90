"""Directive catalog: registry, argument checking and built-in directives."""

import inspect
import sys
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from craftbot.domain.grammar import parse_command, parse_command_args


def _log(msg: str):
    print(msg, file=sys.stderr)


class CommandExecutionError(Exception):
    """A directive's implementation raised while executing."""

    def __init__(self, name: str, cause: BaseException):
        super().__init__(f"{name} failed: {cause}")
        self.name = name
        self.cause = cause


@dataclass
class Command:
    name: str  # "!selfPrompt"
    description: str
    perform: Callable[..., Awaitable[Optional[str]]]
    params: Dict[str, str] = field(default_factory=dict)
    is_action: bool = False


class CommandRegistry:
    """Known directives, keyed by name. Implements the action executor port."""

    def __init__(self, commands: Optional[List[Command]] = None):
        self._commands: Dict[str, Command] = {}
        for command in commands or []:
            self.register(command)

    def register(self, command: Command) -> Command:
        if not command.name.startswith("!"):
            raise ValueError(f"Command name must start with '!': {command.name!r}")
        self._commands[command.name] = command
        return command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def exists(self, name: str) -> bool:
        return name in self._commands

    def is_action(self, name: str) -> bool:
        command = self._commands.get(name)
        return bool(command and command.is_action)

    def names(self) -> List[str]:
        return sorted(self._commands)

    async def execute(self, agent: Any, text: str) -> Optional[str]:
        """Run the first directive found in text and return its output."""
        directive = parse_command(text)
        if directive is None:
            return "Command is incorrectly formatted."
        command = self._commands.get(directive.name)
        if command is None:
            return f"Command {directive.name} does not exist."

        args = parse_command_args(directive.argument_text)
        if len(args) != len(command.params):
            return (
                f"Command {command.name} was given {len(args)} args, "
                f"but requires {len(command.params)} args."
            )

        try:
            result = command.perform(agent, *args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            _log(f"[Commands] {command.name} raised: {e}")
            raise CommandExecutionError(command.name, e) from e
        return result if result else None

    def docs(self) -> str:
        """Directive reference embedded in the system prompt."""
        lines = [
            "*COMMAND DOCS*",
            "You can use the following commands to perform actions and get information "
            "about the world. Use the commands with the syntax: !commandName or "
            '!commandName("arg1", 1.2, ...) if the command takes arguments.',
            "Do not use codeblocks. Only use one command in each response, trailing "
            "text after the command will be ignored.",
        ]
        for name in self.names():
            command = self._commands[name]
            lines.append(f"{name}: {command.description}")
            if command.params:
                lines.append("Params:")
                for param, desc in command.params.items():
                    lines.append(f"{param}: {desc}")
        lines.append("*")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Built-in directives
# ---------------------------------------------------------------------------


async def _stfu(agent) -> None:
    await agent.mute()


async def _self_prompt(agent, prompt) -> Optional[str]:
    return agent.self_prompter.start(str(prompt))


async def _stop_self_prompt(agent) -> None:
    await agent.self_prompter.stop()


async def _clear_chat(agent) -> str:
    agent.history.clear()
    agent.history.save()
    return f"{agent.name}'s chat history was cleared, starting new conversation from scratch."


def builtin_commands() -> List[Command]:
    return [
        Command(
            name="!stfu",
            description="Stop all chatting and self prompting, but continue current action.",
            perform=_stfu,
        ),
        Command(
            name="!selfPrompt",
            description="Continously prompt yourself to continue acting without user input.",
            perform=_self_prompt,
            params={"prompt": "(string) The goal prompt."},
        ),
        Command(
            name="!stopSelfPrompt",
            description="Stop current action and self-prompting.",
            perform=_stop_self_prompt,
        ),
        Command(
            name="!clearChat",
            description="Clear the chat history.",
            perform=_clear_chat,
        ),
    ]


def build_default_registry() -> CommandRegistry:
    return CommandRegistry(builtin_commands())
