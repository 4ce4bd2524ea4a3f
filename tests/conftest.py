"""
Shared fixtures. FakeEngine replays scripted replies so the reasoning loop can be
tested without OpenAI.
"""

import copy
from typing import Any, Callable

import pytest

from agent_api.agent.llm import EngineReply, ToolCallRequest


def tool_call(name: str, tool_input: str, call_id: str = "") -> EngineReply:
    return EngineReply(tool_calls=[ToolCallRequest(id=call_id, name=name, input=tool_input)])


def final(text: str) -> EngineReply:
    return EngineReply(content=text)


class FakeEngine:
    """
    Scripted engine. Each chat() call consumes the next item of `replies`: an EngineReply,
    an exception to raise, or a callable(messages) -> EngineReply. After the script runs
    out, `default` is used (or the call fails the test).
    """

    def __init__(self, replies: list | None = None, default: Any = None, completion: str = "Short summary.") -> None:
        self.replies = list(replies or [])
        self.default = default
        self.completion = completion
        self.chat_calls: list[list[dict[str, Any]]] = []
        self.prompts: list[str] = []
        self.completion_timeouts: list = []

    def chat(self, messages, tools, timeout=None) -> EngineReply:
        self.chat_calls.append(copy.deepcopy(messages))
        if self.replies:
            item = self.replies.pop(0)
        elif self.default is not None:
            item = self.default
        else:
            raise AssertionError("FakeEngine script exhausted")
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(messages)
        return item

    def complete(self, prompt: str, timeout=None) -> str:
        self.prompts.append(prompt)
        self.completion_timeouts.append(timeout)
        return self.completion


@pytest.fixture
def fake_engine() -> Callable[..., FakeEngine]:
    return FakeEngine
