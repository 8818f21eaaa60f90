"""Run one agent: ``python -m craftbot --environment console``."""

import argparse
import asyncio
import sys

from craftbot.agent import Agent
from craftbot.config import CONFIG
from craftbot.environment import ConsoleEnvironment, Environment


def _build_environment(kind: str) -> Environment:
    if kind == "discord":
        from craftbot.adapters.discord_adapter import DiscordEnvironment

        if not CONFIG["discord_token"] or not CONFIG["discord_channel_id"]:
            sys.exit("DISCORD_TOKEN and DISCORD_CHANNEL_ID must be set for the discord environment")
        return DiscordEnvironment(CONFIG["discord_token"], CONFIG["discord_channel_id"])
    return ConsoleEnvironment()


async def _serve_api(agent: Agent):
    import uvicorn

    from craftbot.app import create_app

    server = uvicorn.Server(
        uvicorn.Config(create_app(agent), host=CONFIG["api_host"], port=CONFIG["api_port"], log_level="warning")
    )
    await server.serve()


async def _run(args: argparse.Namespace):
    if args.name:
        CONFIG["agent_name"] = args.name
    agent = Agent.from_config(_build_environment(args.environment))
    api_task = asyncio.create_task(_serve_api(agent)) if args.api else None
    try:
        await agent.start(load_memory=args.load_memory, init_message=args.init_message)
        while not agent.closed:
            await asyncio.sleep(0.5)
    finally:
        await agent.shutdown("process exiting")
        if api_task:
            api_task.cancel()


def main():
    parser = argparse.ArgumentParser(prog="craftbot", description="Run a conversational agent")
    parser.add_argument("--name", "-n", default=None, help="Agent name (default: $AGENT_NAME)")
    parser.add_argument(
        "--load-memory", "-l", action="store_true", default=CONFIG["load_memory"],
        help="Load agent memory from file on startup",
    )
    parser.add_argument(
        "--init-message", "-m", default=CONFIG["init_message"] or None,
        help="Automatically prompt the agent on startup",
    )
    parser.add_argument("--environment", "-e", choices=("console", "discord"), default="console")
    parser.add_argument("--api", action="store_true", help="Serve the HTTP control surface")
    args = parser.parse_args()
    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
