"""Lifecycle notifications posted to a Discord webhook."""

from datetime import datetime, timezone

import aiohttp


def format_lifecycle_event(agent_name: str, event: str, detail: str = "") -> str:
    """Render a lifecycle event as a short notification line."""
    line = f"**{agent_name}** {event}"
    if detail:
        line += f"\n> {detail[:500]}"
    return line


async def send_webhook_notification(message: str, webhook_url: str, username: str = "craftbot") -> bool:
    """Post an embed to a Discord webhook. Best effort, returns success."""
    if not webhook_url:
        return False

    embed = {
        "title": "Agent lifecycle",
        "description": message,
        "color": 5814783,  # Blue (#58ACFF)
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    payload = {"username": username, "embeds": [embed]}
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(webhook_url, json=payload) as resp:
                if resp.status == 204:
                    print("Lifecycle notification sent (webhook)")
                    return True
                print(f"Discord webhook returned {resp.status}")
    except Exception as e:
        print(f"Lifecycle notification failed: {e}")
    return False
