"""
Tool registry: the closed set of tools one agent may invoke.

Every tool is text in, text out. The registry is the capability boundary: names
chosen by the engine are resolved here by exact match, and handler failures are
rewrapped as ToolExecutionError so the loop can show them to the engine.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from agent_api.core.errors import DuplicateToolError, ToolExecutionError, UnknownToolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    handler: Callable[..., str]
    # handler also takes a timeout= keyword (seconds left in the run)
    accepts_timeout: bool = False

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise ValueError("Tool must have a valid string name.")


class ToolRegistry:
    def __init__(self, tools: Iterable[ToolDescriptor] = ()) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._lock = threading.RLock()
        self.register_many(tools)

    def register(self, tool: ToolDescriptor) -> None:
        with self._lock:
            if tool.name in self._tools:
                raise DuplicateToolError(tool.name)
            self._tools[tool.name] = tool
        logger.debug("[tools:register] name=%s", tool.name)

    def register_many(self, tools: Iterable[ToolDescriptor]) -> None:
        """Register all or nothing: a duplicate anywhere leaves the registry unchanged."""
        tools = list(tools)
        with self._lock:
            seen: set[str] = set()
            for tool in tools:
                if tool.name in self._tools or tool.name in seen:
                    raise DuplicateToolError(tool.name)
                seen.add(tool.name)
            for tool in tools:
                self._tools[tool.name] = tool
        if tools:
            logger.info("[tools:register_many] registered=%s", [t.name for t in tools])

    def resolve(self, name: str) -> ToolDescriptor:
        with self._lock:
            tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._tools

    def names(self) -> list[str]:
        with self._lock:
            return list(self._tools)

    def catalog(self) -> list[dict[str, str]]:
        """Name and description of each tool, in registration order."""
        with self._lock:
            return [{"name": t.name, "description": t.description} for t in self._tools.values()]

    def to_openai_tools(self) -> list[dict[str, Any]]:
        """OpenAI function-calling format: every tool takes a single string argument."""
        return [
            {
                "type": "function",
                "function": {
                    "name": entry["name"],
                    "description": entry["description"],
                    "parameters": {
                        "type": "object",
                        "properties": {
                            "input": {"type": "string", "description": "Input text for the tool"},
                        },
                        "required": ["input"],
                    },
                },
            }
            for entry in self.catalog()
        ]

    def invoke(self, name: str, tool_input: str, timeout: float | None = None) -> str:
        """
        Call the tool's handler. UnknownToolError if the name is not registered;
        any handler failure is raised as ToolExecutionError. timeout is forwarded to
        handlers that accept it.
        """
        tool = self.resolve(name)
        logger.info("[tools:invoke] name=%r input=%r", name, tool_input)
        try:
            if tool.accepts_timeout:
                result = tool.handler(tool_input, timeout=timeout)
            else:
                result = tool.handler(tool_input)
        except Exception as e:
            logger.warning("[tools:invoke] %s failed: %s", name, e)
            raise ToolExecutionError(name, e) from e
        out = "" if result is None else str(result)
        logger.info("[tools:invoke] name=%r output_len=%d", name, len(out))
        return out

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)
