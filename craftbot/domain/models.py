"""Domain data models: pure Python dataclasses."""

import time
from dataclasses import dataclass, field

# Distinguished identity for messages the runtime injects on its own behalf
SYSTEM = "system"


@dataclass
class Message:
    """One inbound line of conversation."""

    source: str  # actor name, SYSTEM, or an external participant
    text: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class Directive:
    """Parsed directive from a chat line or LLM response."""

    name: str  # includes the marker, e.g. "!selfPrompt"
    argument_text: str
    preceding_text: str


@dataclass
class SelfPromptSession:
    """State of one active self-prompting goal."""

    prompt: str
    cooldown_remaining_ms: float = 0.0
