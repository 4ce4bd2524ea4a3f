"""
Reasoning engine: OpenAI chat completions with tool calling.

The reasoning loop only depends on the two methods of ChatEngine: chat() for a
tool-aware turn and complete() for a single-shot prompt (used by tools such as
the summarizer). Every SDK or transport failure is raised as EngineError.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from openai import OpenAI, OpenAIError

from agent_api.core.config import LLM_API_TIMEOUT
from agent_api.core.errors import EngineError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolCallRequest:
    """One tool invocation requested by the engine."""

    id: str
    name: str
    input: str


@dataclass(frozen=True)
class EngineReply:
    """Either a final answer (content, no tool_calls) or tool invocation requests."""

    content: str | None = None
    tool_calls: list[ToolCallRequest] = field(default_factory=list)

    @property
    def is_final(self) -> bool:
        return not self.tool_calls


def _tool_input_from_arguments(raw: Any) -> str:
    """Tools take one string. Accept {"input": ...}, any single-value object, or raw text."""
    if raw is None:
        return ""
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            return raw
    else:
        parsed = raw
    if isinstance(parsed, dict):
        if not parsed:
            return ""
        if "input" in parsed:
            return str(parsed["input"] if parsed["input"] is not None else "")
        if len(parsed) == 1:
            return str(next(iter(parsed.values())))
        return json.dumps(parsed)
    return str(parsed)


class ChatEngine:
    """OpenAI-backed reasoning engine bound to one model and temperature."""

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float = 0.0,
        timeout: float = LLM_API_TIMEOUT,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._client = OpenAI(api_key=api_key, timeout=timeout)

    def _create(self, timeout: float | None, **kwargs: Any) -> Any:
        client = self._client if timeout is None else self._client.with_options(timeout=timeout)
        try:
            return client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                **kwargs,
            )
        except OpenAIError as e:
            logger.warning("[llm:openai] request failed: %s", e)
            raise EngineError(e) from e

    def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        timeout: float | None = None,
    ) -> EngineReply:
        """
        Call OpenAI chat with tools. Returns an EngineReply; if tool_calls is non-empty the
        caller should execute them and call again with tool results.
        """
        logger.info("[llm:chat] IN  messages=%d tools=%d model=%s", len(messages), len(tools), self.model)
        kwargs: dict[str, Any] = {"messages": messages}
        if tools:
            kwargs["tools"] = tools
        response = self._create(timeout, **kwargs)
        msg = response.choices[0].message if getattr(response, "choices", None) else None
        if msg is None:
            raise EngineError("response contained no choices")
        content = (getattr(msg, "content", None) or "").strip() or None
        tool_calls = []
        for tc in getattr(msg, "tool_calls", None) or []:
            fn = getattr(tc, "function", None)
            if not fn:
                continue
            tool_calls.append(
                ToolCallRequest(
                    id=getattr(tc, "id", None) or "",
                    name=getattr(fn, "name", None) or "",
                    input=_tool_input_from_arguments(getattr(fn, "arguments", None)),
                )
            )
        if tool_calls:
            logger.info("[llm:chat] OUT tool_calls=%s", [t.name for t in tool_calls])
            return EngineReply(content=content, tool_calls=tool_calls)
        if content is None:
            raise EngineError("response contained neither an answer nor tool calls")
        logger.info("[llm:chat] OUT content_len=%d", len(content))
        return EngineReply(content=content)

    def complete(self, prompt: str, timeout: float | None = None) -> str:
        """Single-shot prompt, no tools. Returns generated text."""
        logger.info("[llm:complete] IN  prompt_len=%d", len(prompt))
        response = self._create(timeout, messages=[{"role": "user", "content": prompt}])
        msg = response.choices[0].message if getattr(response, "choices", None) else None
        if not msg or not getattr(msg, "content", None):
            raise EngineError("empty completion")
        out = msg.content.strip()
        logger.info("[llm:complete] OUT response_len=%d", len(out))
        return out
