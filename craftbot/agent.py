"""Agent: wires the environment, turn controller, self-prompter and ticker."""

import asyncio
import sys
from typing import Any, Dict, Optional, Set

from craftbot.commands import CommandRegistry, build_default_registry
from craftbot.config import CONFIG, IGNORE_MESSAGES
from craftbot.domain.interrupts import InterruptGate
from craftbot.domain.models import SYSTEM, Message
from craftbot.domain.turns import TurnController
from craftbot.environment import Environment
from craftbot.history import History
from craftbot.notify import format_lifecycle_event, send_webhook_notification
from craftbot.ports.outbound import AutomationSet, ResponseGenerator
from craftbot.prompter import ChatPrompter
from craftbot.runtime.modes import ModeController
from craftbot.runtime.self_prompter import SelfPrompter
from craftbot.runtime.ticker import TickScheduler


def _log(msg: str):
    print(msg, file=sys.stderr)


class Agent:
    """A single conversational actor embedded in an environment.

    Implements the environment listener: chat and death events become turn
    controller runs, disconnect and kick events tear the agent down.
    """

    def __init__(
        self,
        name: str,
        environment: Environment,
        prompter: ResponseGenerator,
        commands: Optional[CommandRegistry] = None,
        history: Optional[History] = None,
        modes: Optional[AutomationSet] = None,
        max_commands: int = -1,
        verbose_commands: bool = True,
        tick_interval_ms: float = 300,
        self_prompt_cooldown_ms: float = 2000,
        spawn_delay_seconds: float = 1.0,
        webhook_url: str = "",
    ):
        self.name = name
        self.environment = environment
        self.prompter = prompter
        self.commands = commands or build_default_registry()
        self.gate = InterruptGate()
        self.self_prompter = SelfPrompter(self, self.gate, cooldown_ms=self_prompt_cooldown_ms)
        self.history = history or History(name)
        if self.history.self_prompt_provider is None:
            self.history.self_prompt_provider = lambda: self.self_prompter.prompt
        self.modes = modes or ModeController(self)
        self.turns = TurnController(
            self,
            prompter=prompter,
            commands=self.commands,
            history=self.history,
            gate=self.gate,
            self_prompter=self.self_prompter,
            chat=self.chat,
            on_finished=environment.finished_executing,
            max_commands=max_commands,
            verbose_commands=verbose_commands,
        )
        self.ticker = TickScheduler(self.update, period_ms=tick_interval_ms)
        self.spawn_delay_seconds = spawn_delay_seconds
        self.webhook_url = webhook_url

        self._tasks: Set[asyncio.Task] = set()
        self._save_data: Optional[Dict[str, Any]] = None
        self._init_message: Optional[str] = None
        self._closed = False
        environment.on_finished_executing(self._on_finished_executing)

    @classmethod
    def from_config(cls, environment: Environment, config: Dict[str, Any] = CONFIG) -> "Agent":
        name = config["agent_name"]
        commands = build_default_registry()
        prompter = ChatPrompter(
            name=name,
            model=config["llm_model"],
            base_url=config["llm_base_url"],
            api_key=config["llm_api_key"],
            temperature=config["llm_temperature"],
            timeout_seconds=config["llm_timeout_seconds"],
            command_docs=commands.docs(),
        )
        history = History(
            name,
            storage_dir=config["memory_dir"],
            max_messages=config["max_history_messages"],
        )
        return cls(
            name,
            environment,
            prompter,
            commands=commands,
            history=history,
            max_commands=config["max_commands"],
            verbose_commands=config["verbose_commands"],
            tick_interval_ms=config["tick_interval_ms"],
            self_prompt_cooldown_ms=config["self_prompt_cooldown_ms"],
            spawn_delay_seconds=config["spawn_delay_seconds"],
            webhook_url=config["discord_webhook_url"],
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start(self, load_memory: bool = False, init_message: Optional[str] = None):
        _log(f"[Agent:{self.name}] starting (load_memory={load_memory})")
        self._init_message = init_message or None
        if load_memory:
            self._save_data = self.history.load()
            _log(f"[Agent:{self.name}] memory loaded: {len(self._save_data['turns'])} turns")
        self.environment.attach(self)
        await self.environment.connect()

    async def on_spawn(self):
        # let the environment settle before acting
        await asyncio.sleep(self.spawn_delay_seconds)
        _log(f"[Agent:{self.name}] spawned.")

        save_data = self._save_data or {}
        if save_data.get("self_prompt"):
            prompt = save_data["self_prompt"]
            self.history.add(SYSTEM, prompt)
            self.self_prompter.start(prompt)
        elif self._init_message:
            self._dispatch(SYSTEM, self._init_message, max_turns=2)
        else:
            await self.chat(f"Hello world! I am {self.name}")
            self.environment.finished_executing()

        self.ticker.start()

    async def on_chat(self, sender: str, text: str) -> Optional[asyncio.Task]:
        if sender == self.name:
            return None
        if any(text.startswith(m) for m in IGNORE_MESSAGES):
            return None
        _log(f"[Agent:{self.name}] received message from {sender}: {text}")
        return self._dispatch(sender, text)

    async def on_death(self, message: str) -> Optional[asyncio.Task]:
        _log(f"[Agent:{self.name}] died: {message}")
        return self._dispatch(
            SYSTEM,
            f"You died with the final message: '{message}'. Previous actions were stopped "
            "and you have respawned. Notify the user and perform any necessary actions.",
        )

    async def on_disconnect(self, reason: str):
        _log(f"[Agent:{self.name}] disconnected: {reason}")
        await self.clean_kill("Bot disconnected! Killing agent process.")

    async def on_kicked(self, reason: str):
        _log(f"[Agent:{self.name}] kicked: {reason}")
        await self.clean_kill("Bot kicked! Killing agent process.")

    async def on_error(self, error: BaseException):
        _log(f"[Agent:{self.name}] environment error: {error}")

    async def clean_kill(self, msg: str = "Killing agent process..."):
        if self._closed:
            return
        self.history.add(SYSTEM, msg)
        try:
            await self.chat("Goodbye world.")
        except Exception as e:
            _log(f"[Agent:{self.name}] farewell failed: {e}")
        self.history.save()
        await self.shutdown(msg)

    async def shutdown(self, reason: str = "shutdown"):
        if self._closed:
            return
        self._closed = True
        await self.ticker.stop()
        await self.self_prompter.shutdown()
        current = asyncio.current_task()
        pending = [t for t in self._tasks if t is not current and not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        await self.environment.close()
        if self.webhook_url:
            await send_webhook_notification(
                format_lifecycle_event(self.name, "shut down", reason),
                self.webhook_url,
                username=self.name,
            )
        _log(f"[Agent:{self.name}] shut down: {reason}")

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------
    async def handle_message(self, source: str, text: str, max_turns: Optional[int] = None) -> bool:
        return await self.turns.handle(Message(source=source, text=text), max_turns)

    def _dispatch(self, source: str, text: str, max_turns: Optional[int] = None) -> asyncio.Task:
        """Start a new turn-controller run without waiting for it."""
        task = asyncio.create_task(self.handle_message(source, text, max_turns))
        self._tasks.add(task)
        task.add_done_callback(self._on_turn_done)
        return task

    def _on_turn_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            _log(f"[Agent:{self.name}] turn failed: {type(error).__name__}: {error}")

    async def chat(self, text: str):
        # newlines read as separate chat lines and trip spam filters
        await self.environment.chat(text.replace("\n", "  "))

    async def mute(self):
        self.gate.mute()
        if self.self_prompter.active:
            await self.self_prompter.stop(chat_notification=False)

    # ------------------------------------------------------------------
    # Background
    # ------------------------------------------------------------------
    async def update(self, delta_ms: float):
        await self.modes.update()
        self.self_prompter.update(delta_ms)

    def is_idle(self) -> bool:
        return self.turns.is_idle()

    def _on_finished_executing(self):
        if self.is_idle():
            self.modes.unpause_all()

    def status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "idle": self.is_idle(),
            "muted": self.gate.muted,
            "self_prompt": {
                "active": self.self_prompter.active,
                "prompt": self.self_prompter.prompt,
                "loop_active": self.self_prompter.loop_active,
            },
            "ticker": {
                "running": self.ticker.running,
                "ticks": self.ticker.tick_count,
                "period_ms": self.ticker.period_ms,
            },
            "modes": self.modes.status(),
            "history_turns": len(self.history.turns),
            "closed": self._closed,
        }
