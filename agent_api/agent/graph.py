"""
LangGraph reasoning loop: think → (call_tool → think)* → END.

One AgentExecutor per agent; one graph invocation per run. The engine is asked
for the next step with the full message list; a final answer ends the run, tool
requests are dispatched through the registry and their observations appended
before thinking again. Bounded by max_iterations tool rounds and a wall-clock
deadline.
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, TypedDict

from langgraph.errors import GraphRecursionError
from langgraph.graph import END, StateGraph

from agent_api.agent.llm import EngineReply, ToolCallRequest
from agent_api.agent.tools import ToolRegistry
from agent_api.core.config import MAX_ITERATIONS, RUN_TIMEOUT_SECONDS
from agent_api.core.errors import (
    AgentError,
    AgentTimeoutError,
    EngineError,
    MaxIterationsExceededError,
    ToolExecutionError,
)
from agent_api.core.session_store import MemoryStore

logger = logging.getLogger(__name__)


class Engine(Protocol):
    def chat(self, messages: list[dict[str, Any]], tools: list[dict[str, Any]], timeout: float | None = None) -> EngineReply: ...

    def complete(self, prompt: str, timeout: float | None = None) -> str: ...


class LoopState(TypedDict):
    messages: list  # OpenAI chat messages: system, memory turns, user, then assistant/tool pairs
    pending: list  # ToolCallRequest list from the last think step
    steps: list  # list of {"tool": str, "input": str, "observation": str}
    iterations: int
    answer: str


@dataclass
class LoopResult:
    output: str
    iterations: int
    steps: list[dict[str, str]] = field(default_factory=list)


def build_system_prompt(instructions: str, registry: ToolRegistry) -> str:
    lines = [instructions.strip(), "", "You have access to the following tools:"]
    for entry in registry.catalog():
        lines.append(f"- {entry['name']}: {entry['description']}")
    lines.append("")
    lines.append(
        "Call a tool when it helps answer the question. When you have enough information, "
        "reply with the final answer instead of calling another tool."
    )
    return "\n".join(lines)


class AgentExecutor:
    """Drives the reasoning loop for one agent (engine + registry + optional memory)."""

    def __init__(
        self,
        engine: Engine,
        registry: ToolRegistry,
        instructions: str,
        memory: MemoryStore | None = None,
        max_iterations: int = MAX_ITERATIONS,
        timeout_seconds: float = RUN_TIMEOUT_SECONDS,
        verbose: bool = False,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be >= 1")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        self.engine = engine
        self.registry = registry
        self.memory = memory
        self.max_iterations = max_iterations
        self.timeout_seconds = timeout_seconds
        self.verbose = verbose
        self.system_prompt = build_system_prompt(instructions, registry)
        self._tools_schema = registry.to_openai_tools()
        self._deadline = 0.0
        self._graph = self._build_graph()

    def _log(self, msg: str, *args: Any) -> None:
        logger.log(logging.INFO if self.verbose else logging.DEBUG, msg, *args)

    def _remaining(self) -> float:
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            raise AgentTimeoutError(self.timeout_seconds)
        return remaining

    # --- nodes ---

    def _think(self, state: LoopState) -> dict:
        """Ask the engine for the next step: a final answer or tool calls."""
        it = state.get("iterations") or 0
        messages = list(state.get("messages") or [])
        self._log("[graph:think] IN  iteration=%d messages=%d", it, len(messages))
        remaining = self._remaining()
        try:
            reply = self.engine.chat(messages, self._tools_schema, timeout=remaining)
        except AgentError:
            raise
        except Exception as e:
            raise EngineError(e) from e
        if reply is None:
            raise EngineError("engine returned no reply")

        if reply.is_final:
            answer = (reply.content or "").strip()
            self._log("[graph:think] OUT final answer_len=%d", len(answer))
            return {"answer": answer, "pending": []}

        if it >= self.max_iterations:
            logger.warning("[graph:think] iteration bound hit max_iterations=%d", self.max_iterations)
            raise MaxIterationsExceededError(self.max_iterations)

        calls = [
            ToolCallRequest(id=tc.id or f"call_{it}_{i}", name=tc.name, input=tc.input)
            for i, tc in enumerate(reply.tool_calls)
        ]
        messages.append(
            {
                "role": "assistant",
                "content": reply.content or "",
                "tool_calls": [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {"name": tc.name, "arguments": json.dumps({"input": tc.input})},
                    }
                    for tc in calls
                ],
            }
        )
        self._log("[graph:think] OUT tool_calls=%s", [tc.name for tc in calls])
        return {"messages": messages, "pending": calls}

    def _call_tool(self, state: LoopState) -> dict:
        """Dispatch each pending tool call and append its observation."""
        messages = list(state.get("messages") or [])
        steps = list(state.get("steps") or [])
        for tc in state.get("pending") or []:
            observation = self._observe(tc)
            self._log("[graph:call_tool] tool=%s input=%r observation=%r", tc.name, tc.input, observation[:200])
            messages.append({"role": "tool", "tool_call_id": tc.id, "content": observation})
            steps.append({"tool": tc.name, "input": tc.input, "observation": observation})
        return {
            "messages": messages,
            "steps": steps,
            "pending": [],
            "iterations": (state.get("iterations") or 0) + 1,
        }

    def _observe(self, tc: ToolCallRequest) -> str:
        remaining = self._remaining()
        # The engine's tool choice is untrusted; check it before dispatching.
        if not self.registry.has(tc.name):
            logger.warning("[graph:call_tool] engine requested unknown tool=%r", tc.name)
            return f"{tc.name} is not a valid tool, try one of [{', '.join(self.registry.names())}]."
        # A worker thread cannot be killed; on timeout the run returns and the call is abandoned.
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="agent-tool")
        try:
            future = pool.submit(self.registry.invoke, tc.name, tc.input, remaining)
            return future.result(timeout=remaining)
        except FutureTimeoutError:
            logger.warning("[graph:call_tool] tool=%s still running at the deadline", tc.name)
            raise AgentTimeoutError(self.timeout_seconds) from None
        except ToolExecutionError as e:
            return e.message
        finally:
            pool.shutdown(wait=False)

    def _route_after_think(self, state: LoopState) -> Literal["call_tool", "__end__"]:
        return "call_tool" if state.get("pending") else END

    def _build_graph(self):
        graph = StateGraph(LoopState)
        graph.add_node("think", self._think)
        graph.add_node("call_tool", self._call_tool)
        graph.set_entry_point("think")
        graph.add_conditional_edges("think", self._route_after_think, {"call_tool": "call_tool", END: END})
        graph.add_edge("call_tool", "think")
        return graph.compile()

    # --- entry point ---

    def run(self, query: str) -> LoopResult:
        """
        Run the loop once for the query. Raises EngineError, MaxIterationsExceededError or
        AgentTimeoutError; tool failures never escape. On success the query and answer are
        appended to memory (if any).
        """
        if not query or not str(query).strip():
            raise ValueError("query is required")
        q = str(query).strip()
        history = self.memory.snapshot() if self.memory is not None else []
        logger.info("[run_agent] START query=%r history_len=%d", q, len(history))

        messages: list[dict[str, Any]] = [{"role": "system", "content": self.system_prompt}]
        messages.extend(t.to_message() for t in history)
        messages.append({"role": "user", "content": q})
        initial: LoopState = {
            "messages": messages,
            "pending": [],
            "steps": [],
            "iterations": 0,
            "answer": "",
        }
        self._deadline = time.monotonic() + self.timeout_seconds
        # Each round is two supersteps (think + call_tool) plus the final think.
        config = {"recursion_limit": 2 * self.max_iterations + 4}
        try:
            final = self._graph.invoke(initial, config=config)
        except GraphRecursionError as e:
            raise MaxIterationsExceededError(self.max_iterations) from e

        answer = final.get("answer") or ""
        if self.memory is not None:
            self.memory.append_exchange(q, answer)
        iterations = final.get("iterations") or 0
        logger.info("[run_agent] END iterations=%d answer_len=%d", iterations, len(answer))
        return LoopResult(output=answer, iterations=iterations, steps=final.get("steps") or [])

    def invoke(self, query: str) -> str:
        return self.run(query).output
