"""Discord adapter: a Discord channel as the agent's environment.

DiscordEnvironment is the environment the agent attaches to; the thin
DiscordBotAdapter client converts gateway events into environment
deliveries and owns the connection.
"""

import sys
from typing import Optional

import discord

from craftbot.environment import Environment

_MAX_MESSAGE_LEN = 2000


def _log(msg: str):
    print(msg, file=sys.stderr)


class DiscordBotAdapter(discord.Client):
    """Thin discord.Client that forwards channel events to the environment."""

    def __init__(self, environment: "DiscordEnvironment", **discord_kwargs):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **discord_kwargs)
        self._environment = environment
        self._spawned = False

    def _accepts(self, message: discord.Message) -> bool:
        if message.author.bot:
            # other agents in the channel would answer each other forever
            return False
        if self.user is not None and message.author.id == self.user.id:
            return False
        return message.channel.id == self._environment.channel_id

    async def on_ready(self):
        _log(f"[Discord] logged in as {self.user}")
        if not self._spawned:
            self._spawned = True
            await self._environment.deliver_spawn()

    async def on_message(self, message: discord.Message):
        if not self._accepts(message):
            return
        sender = getattr(message.author, "display_name", None) or str(message.author)
        await self._environment.deliver_chat(sender, message.content)

    async def on_guild_remove(self, guild: discord.Guild):
        channel = self.get_channel(self._environment.channel_id)
        if channel is None or getattr(channel, "guild", None) == guild:
            await self._environment.deliver_kicked(f"removed from guild {guild.name}")

    async def on_error(self, event_method: str, *args, **kwargs):
        error = sys.exc_info()[1]
        if error is not None:
            await self._environment.deliver_error(error)


class DiscordEnvironment(Environment):
    """Environment backed by one Discord text channel."""

    def __init__(self, token: str, channel_id: int, client: Optional[DiscordBotAdapter] = None):
        super().__init__()
        self._token = token
        self.channel_id = channel_id
        self.client = client or DiscordBotAdapter(self)

    async def connect(self):
        """Run the gateway connection; returns once the client has closed."""
        try:
            await self.client.start(self._token)
        finally:
            await self.deliver_disconnect("Discord connection closed")

    async def chat(self, text: str):
        channel = self.client.get_channel(self.channel_id)
        if channel is None:
            _log(f"[Discord] channel {self.channel_id} not accessible")
            return
        while text:
            await channel.send(text[:_MAX_MESSAGE_LEN])
            text = text[_MAX_MESSAGE_LEN:]

    async def close(self):
        if not self.client.is_closed():
            await self.client.close()
