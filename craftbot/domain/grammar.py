"""Directive grammar: detect, parse and truncate `!name(args)` markers."""

import re
from typing import Any, List, Optional

from craftbot.domain.models import Directive

COMMAND_PREFIX = "!"

# The marker must not be glued to a word or another "!": "Hi!", "wow!!" and
# "a!b" are plain conversation. Quoted arguments may hold ")" and ",".
_COMMAND_RE = re.compile(
    r"(?<![\w!])!([A-Za-z][A-Za-z0-9_]*)"
    r"(?:\(((?:[^)(\"']|'[^']*'|\"[^\"]*\")*)\))?"
)
_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")


def _find(text: str, name: Optional[str] = None):
    for match in _COMMAND_RE.finditer(text or ""):
        if name is None or COMMAND_PREFIX + match.group(1) == name:
            return match
    return None


def contains_command(text: str) -> Optional[str]:
    """Return the first directive name in text (with its "!"), or None."""
    match = _find(text)
    if match is None:
        return None
    return COMMAND_PREFIX + match.group(1)


def parse_command(text: str) -> Optional[Directive]:
    match = _find(text)
    if match is None:
        return None
    return Directive(
        name=COMMAND_PREFIX + match.group(1),
        argument_text=match.group(2) or "",
        preceding_text=text[: match.start()].strip(),
    )


def truncate_command_message(text: str, name: Optional[str] = None) -> str:
    """Drop everything after the directive's closing argument span."""
    match = _find(text, name)
    if match is None:
        return text
    return text[: match.end()]


def _split_args(argument_text: str) -> List[str]:
    parts: List[str] = []
    current = []
    quote = ""
    for ch in argument_text:
        if quote:
            current.append(ch)
            if ch == quote:
                quote = ""
        elif ch in ("'", '"'):
            quote = ch
            current.append(ch)
        elif ch == ",":
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts]


def _convert(arg: str) -> Any:
    if len(arg) >= 2 and arg[0] == arg[-1] and arg[0] in ("'", '"'):
        return arg[1:-1]
    lowered = arg.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if _NUMBER_RE.match(arg):
        return float(arg) if "." in arg else int(arg)
    return arg


def parse_command_args(argument_text: str) -> List[Any]:
    """Split a directive's argument text into typed values."""
    if not argument_text or not argument_text.strip():
        return []
    return [_convert(a) for a in _split_args(argument_text)]
