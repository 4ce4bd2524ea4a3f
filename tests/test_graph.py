"""
Tests for the reasoning loop (AgentExecutor) with a scripted engine.
"""

import time

import pytest

from conftest import FakeEngine, final, tool_call

from agent_api.agent.builtin_tools import CALCULATOR_TOOL
from agent_api.agent.graph import AgentExecutor
from agent_api.agent.llm import EngineReply, ToolCallRequest
from agent_api.agent.tools import ToolDescriptor, ToolRegistry
from agent_api.core.errors import AgentTimeoutError, EngineError, MaxIterationsExceededError
from agent_api.core.session_store import MemoryStore, Role


def _always_fails(_: str) -> str:
    raise RuntimeError("service down")


FAILING_TOOL = ToolDescriptor(name="flaky", description="Always fails.", handler=_always_fails)


def _executor(engine: FakeEngine, memory: MemoryStore | None = None, **kwargs) -> AgentExecutor:
    registry = ToolRegistry([CALCULATOR_TOOL, FAILING_TOOL])
    return AgentExecutor(engine, registry, "Answer questions.", memory=memory, **kwargs)


def _tool_messages(messages: list[dict]) -> list[dict]:
    return [m for m in messages if m["role"] == "tool"]


def test_final_answer_without_tools() -> None:
    engine = FakeEngine([final("Hello there.")])
    result = _executor(engine).run("Say hello")
    assert result.output == "Hello there."
    assert result.iterations == 0
    assert result.steps == []
    assert len(engine.chat_calls) == 1


def test_prompt_contains_system_catalog_and_query() -> None:
    engine = FakeEngine([final("ok")])
    _executor(engine).run("  What is 2+2?  ")
    messages = engine.chat_calls[0]
    assert messages[0]["role"] == "system"
    assert "- calculator:" in messages[0]["content"]
    assert "- flaky: Always fails." in messages[0]["content"]
    assert messages[-1] == {"role": "user", "content": "What is 2+2?"}


def test_calculator_round_trip() -> None:
    engine = FakeEngine([tool_call("calculator", "25 * 48"), final("25 * 48 = 1200")])
    result = _executor(engine).run("Calculate 25 * 48")

    assert "1200" in result.output
    assert result.iterations == 1
    assert result.steps == [{"tool": "calculator", "input": "25 * 48", "observation": "1200"}]
    second = engine.chat_calls[1]
    assert second[-2]["role"] == "assistant"
    assert second[-2]["tool_calls"][0]["function"]["name"] == "calculator"
    assert second[-1]["role"] == "tool"
    assert second[-1]["content"] == "1200"
    assert second[-1]["tool_call_id"] == second[-2]["tool_calls"][0]["id"]


def test_multiple_tool_calls_in_one_round() -> None:
    reply = EngineReply(
        tool_calls=[
            ToolCallRequest(id="a", name="calculator", input="1+1"),
            ToolCallRequest(id="b", name="calculator", input="2*3"),
        ]
    )
    engine = FakeEngine([reply, final("2 and 6")])
    result = _executor(engine).run("two sums")
    assert result.iterations == 1
    assert [m["content"] for m in _tool_messages(engine.chat_calls[1])] == ["2", "6"]


def test_tool_failure_becomes_observation_and_loop_continues() -> None:
    engine = FakeEngine([tool_call("flaky", "x"), final("The service is unavailable.")])
    result = _executor(engine).run("use the flaky tool")
    assert result.output == "The service is unavailable."
    observation = _tool_messages(engine.chat_calls[1])[0]["content"]
    assert observation == "tool flaky failed: service down"


def test_unknown_tool_name_is_rejected_as_observation() -> None:
    engine = FakeEngine([tool_call("search_everything", "x"), final("Sorry.")])
    result = _executor(engine).run("hallucinate a tool")
    assert result.output == "Sorry."
    observation = _tool_messages(engine.chat_calls[1])[0]["content"]
    assert "search_everything is not a valid tool" in observation
    assert "calculator" in observation


def test_iteration_bound_raises() -> None:
    engine = FakeEngine(default=tool_call("calculator", "1+1"))
    with pytest.raises(MaxIterationsExceededError) as exc:
        _executor(engine, max_iterations=3).run("loop forever")
    assert exc.value.max_iterations == 3
    # three tool rounds, then the fourth request for a tool trips the bound
    assert len(engine.chat_calls) == 4


def test_finishes_on_last_allowed_iteration() -> None:
    engine = FakeEngine([tool_call("calculator", "1+1")] * 3 + [final("done")])
    result = _executor(engine, max_iterations=3).run("three rounds")
    assert result.output == "done"
    assert result.iterations == 3


def test_engine_error_propagates() -> None:
    engine = FakeEngine([EngineError("invalid api key")])
    with pytest.raises(EngineError):
        _executor(engine).run("hi")


def test_unexpected_engine_exception_is_wrapped() -> None:
    engine = FakeEngine([ConnectionError("network unreachable")])
    with pytest.raises(EngineError) as exc:
        _executor(engine).run("hi")
    assert "network unreachable" in exc.value.message


def test_deadline_stops_the_run() -> None:
    def slow(_messages):
        time.sleep(0.1)
        return tool_call("calculator", "1+1")

    engine = FakeEngine([slow])
    with pytest.raises(AgentTimeoutError):
        _executor(engine, timeout_seconds=0.05).run("slow")


def test_deadline_releases_a_running_tool() -> None:
    def sleepy(_: str) -> str:
        time.sleep(1.0)
        return "too late"

    registry = ToolRegistry([ToolDescriptor(name="sleepy", description="Sleeps.", handler=sleepy)])
    engine = FakeEngine([tool_call("sleepy", "x"), final("never reached")])
    executor = AgentExecutor(engine, registry, "Answer questions.", timeout_seconds=0.2)

    started = time.monotonic()
    with pytest.raises(AgentTimeoutError):
        executor.run("wait")
    assert time.monotonic() - started < 0.8
    assert len(engine.chat_calls) == 1


def test_remaining_time_is_passed_to_tools_that_accept_it() -> None:
    seen: list = []

    def timed(tool_input: str, timeout: float | None = None) -> str:
        seen.append(timeout)
        return "ok"

    registry = ToolRegistry([ToolDescriptor(name="timed", description="t", handler=timed, accepts_timeout=True)])
    engine = FakeEngine([tool_call("timed", "x"), final("done")])
    AgentExecutor(engine, registry, "Answer questions.", timeout_seconds=30).run("go")
    assert len(seen) == 1
    assert 0 < seen[0] <= 30


def test_empty_query_rejected() -> None:
    with pytest.raises(ValueError):
        _executor(FakeEngine([final("x")])).run("   ")


def test_invalid_bounds_rejected() -> None:
    with pytest.raises(ValueError):
        _executor(FakeEngine(), max_iterations=0)
    with pytest.raises(ValueError):
        _executor(FakeEngine(), timeout_seconds=0)


class TestMemory:
    def test_success_appends_query_and_answer(self) -> None:
        memory = MemoryStore()
        _executor(FakeEngine([final("Paris")]), memory=memory).run("Capital of France?")
        turns = memory.snapshot()
        assert [(t.role, t.content) for t in turns] == [
            (Role.USER, "Capital of France?"),
            (Role.ASSISTANT, "Paris"),
        ]

    def test_prior_turns_are_replayed(self) -> None:
        memory = MemoryStore()
        memory.append_exchange("My name is Ada.", "Nice to meet you, Ada.")
        engine = FakeEngine([final("Your name is Ada.")])
        _executor(engine, memory=memory).run("What is my name?")
        messages = engine.chat_calls[0]
        assert messages[1] == {"role": "user", "content": "My name is Ada."}
        assert messages[2] == {"role": "assistant", "content": "Nice to meet you, Ada."}
        assert messages[3] == {"role": "user", "content": "What is my name?"}

    def test_n_runs_give_2n_turns(self) -> None:
        memory = MemoryStore()
        engine = FakeEngine(default=final("ok"))
        for i in range(4):
            _executor(engine, memory=memory).run(f"question {i}")
        turns = memory.snapshot()
        assert len(turns) == 8
        assert [t.content for t in turns[::2]] == [f"question {i}" for i in range(4)]

    def test_failed_run_leaves_memory_untouched(self) -> None:
        memory = MemoryStore()
        with pytest.raises(EngineError):
            _executor(FakeEngine([EngineError("down")]), memory=memory).run("hi")
        assert len(memory) == 0
