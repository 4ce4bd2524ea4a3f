"""
Agent factory: build a configured reasoning loop for the basic or advanced variant.

basic    — calculator, getCurrentWeather, web-browser; no memory.
advanced — the basic tools plus summarizeTool and queryDatabase; conversational memory.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from agent_api.agent import builtin_tools
from agent_api.agent.graph import AgentExecutor, Engine
from agent_api.agent.llm import ChatEngine
from agent_api.agent.tools import ToolDescriptor, ToolRegistry
from agent_api.core import config
from agent_api.core.errors import MissingCredentialsError
from agent_api.core.session_store import MemoryStore

logger = logging.getLogger(__name__)

BASIC_INSTRUCTIONS = (
    "Answer the following questions as best you can. Use the tools for arithmetic, "
    "weather and anything found on web pages instead of guessing."
)

ADVANCED_INSTRUCTIONS = (
    "You are a helpful conversational assistant. You remember the earlier turns of this "
    "conversation and may refer back to them. Use the tools for arithmetic, weather, web "
    "pages, summarizing long text and database lookups instead of guessing."
)


class AgentVariant(str, Enum):
    BASIC = "basic"
    ADVANCED = "advanced"

    @classmethod
    def parse(cls, value: "str | AgentVariant | None") -> "AgentVariant":
        if isinstance(value, AgentVariant):
            return value
        if value is None:
            return cls.BASIC
        if isinstance(value, str):
            try:
                return cls(value.strip().lower() or cls.BASIC.value)
            except ValueError:
                pass
        raise ValueError(f"Unknown agent type: {value!r} (expected 'basic' or 'advanced')")


@dataclass(frozen=True)
class AgentConfig:
    model_identifier: str = config.DEFAULT_MODEL
    temperature: float = config.DEFAULT_TEMPERATURE
    verbose: bool = config.DEFAULT_VERBOSE
    max_iterations: int = config.MAX_ITERATIONS
    timeout_seconds: float = config.RUN_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.model_identifier or not isinstance(self.model_identifier, str):
            raise ValueError("modelIdentifier must be a non-empty string")
        if isinstance(self.temperature, bool) or not isinstance(self.temperature, (int, float)):
            raise ValueError("temperature must be a number")
        if not 0 <= self.temperature <= 1:
            raise ValueError(f"temperature must be between 0 and 1, got {self.temperature}")
        if self.max_iterations < 1:
            raise ValueError("maxIterations must be >= 1")
        if self.timeout_seconds <= 0:
            raise ValueError("timeoutSeconds must be > 0")

    @classmethod
    def from_options(cls, options: dict[str, Any] | None = None) -> "AgentConfig":
        """Defaults overridden by caller options (camelCase keys as sent over the wire)."""
        opts = options or {}
        kwargs: dict[str, Any] = {}
        model = opts.get("modelIdentifier") or opts.get("modelName")
        if model is not None:
            kwargs["model_identifier"] = model
        if opts.get("temperature") is not None:
            kwargs["temperature"] = opts["temperature"]
        if opts.get("verbose") is not None:
            kwargs["verbose"] = bool(opts["verbose"])
        if opts.get("maxIterations") is not None:
            kwargs["max_iterations"] = int(opts["maxIterations"])
        if opts.get("timeoutSeconds") is not None:
            kwargs["timeout_seconds"] = float(opts["timeoutSeconds"])
        return cls(**kwargs)


@dataclass
class Agent:
    variant: AgentVariant
    config: AgentConfig
    executor: AgentExecutor
    registry: ToolRegistry
    memory: MemoryStore | None = None


def require_credentials() -> str:
    """Return the engine credential or raise MissingCredentialsError."""
    if not config.OPENAI_API_KEY:
        raise MissingCredentialsError()
    return config.OPENAI_API_KEY


def basic_tools(engine: Engine) -> list[ToolDescriptor]:
    return [
        builtin_tools.CALCULATOR_TOOL,
        builtin_tools.WEATHER_TOOL,
        builtin_tools.make_web_browser_tool(engine),
    ]


def advanced_tools(engine: Engine) -> list[ToolDescriptor]:
    return basic_tools(engine) + [
        builtin_tools.make_summarize_tool(engine),
        builtin_tools.DATABASE_TOOL,
    ]


def build_agent(
    variant: "AgentVariant | str" = AgentVariant.BASIC,
    agent_config: AgentConfig | None = None,
    memory: MemoryStore | None = None,
    engine: Engine | None = None,
) -> Agent:
    """
    Build engine, tool registry and executor for the variant.

    Without an injected engine the OpenAI credential is checked here, before anything
    else is built. `memory` is only used by the advanced variant; when omitted it gets
    a fresh store (per-request lifetime).
    """
    variant = AgentVariant.parse(variant)
    cfg = agent_config or AgentConfig()
    if engine is None:
        api_key = require_credentials()
        engine = ChatEngine(
            api_key=api_key,
            model=cfg.model_identifier,
            temperature=cfg.temperature,
            timeout=config.LLM_API_TIMEOUT,
        )

    if variant is AgentVariant.ADVANCED:
        registry = ToolRegistry(advanced_tools(engine))
        store = memory if memory is not None else MemoryStore()
        instructions = ADVANCED_INSTRUCTIONS
    else:
        registry = ToolRegistry(basic_tools(engine))
        store = None
        instructions = BASIC_INSTRUCTIONS

    executor = AgentExecutor(
        engine=engine,
        registry=registry,
        instructions=instructions,
        memory=store,
        max_iterations=cfg.max_iterations,
        timeout_seconds=cfg.timeout_seconds,
        verbose=cfg.verbose,
    )
    logger.info(
        "[factory:build_agent] variant=%s model=%s temperature=%s tools=%s memory=%s",
        variant.value,
        cfg.model_identifier,
        cfg.temperature,
        registry.names(),
        "none" if store is None else f"{len(store)} turns",
    )
    return Agent(variant=variant, config=cfg, executor=executor, registry=registry, memory=store)
