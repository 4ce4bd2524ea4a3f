"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_list(name: str, default: list[str]) -> list[str]:
    """Comma-separated values; blank entries are skipped, an empty result falls back to default."""
    items = [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]
    return items or list(default)


# OpenAI (reasoning engine). Required: the server refuses to start without it.
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()

# Agent defaults, overridable per run via request options
DEFAULT_MODEL: str = os.getenv("OPENAI_LLM_MODEL", "gpt-3.5-turbo").strip() or "gpt-3.5-turbo"
DEFAULT_TEMPERATURE: float = _env_float("AGENT_TEMPERATURE", 0.0)
DEFAULT_VERBOSE: bool = _env_bool("AGENT_VERBOSE", True)

# Reasoning loop bounds
MAX_ITERATIONS: int = _env_int("AGENT_MAX_ITERATIONS", 15)
RUN_TIMEOUT_SECONDS: float = _env_float("AGENT_RUN_TIMEOUT", 120.0)

# Advanced agent memory: oldest turns are dropped beyond this
MEMORY_MAX_TURNS: int = _env_int("AGENT_MEMORY_MAX_TURNS", 50)

# Session registry: least recently used sessions are forgotten beyond this
SESSION_MAX: int = _env_int("AGENT_SESSION_MAX", 1000)

# API timeouts (seconds)
LLM_API_TIMEOUT: float = 60.0
TOOLS_HTTP_TIMEOUT: float = 15.0

# Web browser tool: page text passed to the engine is truncated to this
WEB_PAGE_MAX_CHARS: int = 4000

# HTTP server
PORT: int = _env_int("PORT", 3000)
CORS_ORIGINS: list[str] = _env_list("CORS_ORIGINS", ["*"])
