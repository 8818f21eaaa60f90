"""Runtime configuration: read once from the environment."""

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


CONFIG = {
    "agent_name": os.getenv("AGENT_NAME", "andy"),
    # -1 = no limit on directive/response cycles per message
    "max_commands": _env_int("MAX_COMMANDS", -1),
    "verbose_commands": _env_bool("VERBOSE_COMMANDS", True),
    "tick_interval_ms": _env_int("TICK_INTERVAL_MS", 300),
    "self_prompt_cooldown_ms": _env_int("SELF_PROMPT_COOLDOWN_MS", 2000),
    "spawn_delay_seconds": _env_float("SPAWN_DELAY_SECONDS", 1.0),
    "memory_dir": os.getenv("MEMORY_DIR", "bots"),
    "max_history_messages": _env_int("MAX_HISTORY_MESSAGES", 20),
    "load_memory": _env_bool("LOAD_MEMORY", False),
    "init_message": os.getenv("INIT_MESSAGE", ""),
    # OpenAI-compatible endpoint (LM Studio default)
    "llm_base_url": os.getenv("LLM_BASE_URL", "http://localhost:1234/v1"),
    "llm_model": os.getenv("LLM_MODEL", "NousResearch/Hermes-3-Llama-3.1-8B-GGUF"),
    "llm_api_key": os.getenv("LLM_API_KEY", "lm-studio"),
    "llm_temperature": _env_float("LLM_TEMPERATURE", 0.7),
    "llm_timeout_seconds": _env_float("LLM_TIMEOUT_SECONDS", 60.0),
    "discord_token": os.getenv("DISCORD_TOKEN", ""),
    "discord_channel_id": _env_int("DISCORD_CHANNEL_ID", 0),
    "discord_webhook_url": os.getenv("DISCORD_WEBHOOK_URL", ""),
    "api_host": os.getenv("API_HOST", "127.0.0.1"),
    "api_port": _env_int("API_PORT", 8765),
}

# Server feedback lines that look like chat but are not addressed to the agent
IGNORE_MESSAGES = [
    "Set own game mode to",
    "Set the time to",
    "Set the difficulty to",
    "Teleported ",
    "Set the weather to",
    "Gamerule ",
]
