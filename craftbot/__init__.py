"""craftbot: autonomous conversational agent runtime."""

from craftbot.agent import Agent
from craftbot.commands import Command, CommandExecutionError, CommandRegistry
from craftbot.config import CONFIG
from craftbot.domain.interrupts import InterruptGate
from craftbot.domain.models import SYSTEM, Directive, Message
from craftbot.domain.turns import TurnController
from craftbot.environment import ConsoleEnvironment, Environment, LocalEnvironment
from craftbot.history import History
from craftbot.prompter import ChatPrompter, GenerationError
from craftbot.runtime.modes import Mode, ModeController
from craftbot.runtime.self_prompter import SelfPrompter
from craftbot.runtime.ticker import TickScheduler

__all__ = [
    "Agent",
    "CONFIG",
    "ChatPrompter",
    "Command",
    "CommandExecutionError",
    "CommandRegistry",
    "ConsoleEnvironment",
    "Directive",
    "Environment",
    "GenerationError",
    "History",
    "InterruptGate",
    "LocalEnvironment",
    "Message",
    "Mode",
    "ModeController",
    "SYSTEM",
    "SelfPrompter",
    "TickScheduler",
    "TurnController",
]
