"""Response generator: OpenAI-compatible chat completions over aiohttp."""

import asyncio
import sys
from typing import Dict, List

import aiohttp


def _log(msg: str):
    print(msg, file=sys.stderr)


class GenerationError(Exception):
    """The language model endpoint failed to produce a response."""


DEFAULT_SYSTEM_PROMPT = (
    "You are a playful Minecraft bot named {name} that can converse with players, "
    "see, move, mine, build, and interact with the world by using commands. "
    "Act human-like as if you were a typical Minecraft player, rather than an AI. "
    "Be very brief in your responses, don't apologize constantly, don't give "
    "instructions or make lists unless asked, and don't refuse requests. "
    "Don't pretend to act, use commands immediately when requested.\n{command_docs}"
)


class ChatPrompter:
    """Turns conversation history into the agent's next line."""

    def __init__(
        self,
        name: str,
        model: str,
        base_url: str = "http://localhost:1234/v1",
        api_key: str = "",
        temperature: float = 0.7,
        timeout_seconds: float = 60.0,
        command_docs: str = "",
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ):
        self.name = name
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self.command_docs = command_docs
        self.system_prompt = system_prompt

    def build_messages(self, history: List[Dict[str, str]]) -> List[Dict[str, str]]:
        system = self.system_prompt.format(name=self.name, command_docs=self.command_docs)
        return [{"role": "system", "content": system}] + list(history)

    async def generate(self, history: List[Dict[str, str]]) -> str:
        payload = {
            "model": self.model,
            "messages": self.build_messages(history),
            "temperature": self.temperature,
        }
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    f"{self.base_url}/chat/completions", json=payload, headers=headers
                ) as resp:
                    if resp.status != 200:
                        body = await resp.text()
                        raise GenerationError(f"LLM returned {resp.status}: {body[:200]}")
                    data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise GenerationError(f"LLM request failed: {e}") from e

        try:
            content = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError(f"Malformed LLM response: {data!r}"[:300]) from e

        content = content.strip()
        # some models echo the speaker tag
        if content.startswith(f"{self.name}:"):
            content = content[len(self.name) + 1 :].strip()
        return content
