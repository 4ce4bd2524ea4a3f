"""
Unit tests for the tool registry: registration, lookup and failure wrapping.
"""

import pytest

from agent_api.agent.tools import ToolDescriptor, ToolRegistry
from agent_api.core.errors import DuplicateToolError, ToolExecutionError, UnknownToolError


def _echo(text: str) -> str:
    return f"echo:{text}"


def _boom(text: str) -> str:
    raise RuntimeError("kaboom")


ECHO = ToolDescriptor(name="echo", description="Echo the input back.", handler=_echo)
BOOM = ToolDescriptor(name="boom", description="Always fails.", handler=_boom)


class TestRegistration:
    def test_register_and_resolve(self) -> None:
        registry = ToolRegistry()
        registry.register(ECHO)
        assert registry.resolve("echo") is ECHO
        assert registry.has("echo")
        assert "echo" in registry
        assert len(registry) == 1

    def test_duplicate_name_fails(self) -> None:
        registry = ToolRegistry([ECHO])
        with pytest.raises(DuplicateToolError) as exc:
            registry.register(ToolDescriptor(name="echo", description="other", handler=_echo))
        assert exc.value.tool_name == "echo"

    def test_register_many_is_all_or_nothing(self) -> None:
        registry = ToolRegistry([ECHO])
        with pytest.raises(DuplicateToolError):
            registry.register_many([BOOM, ECHO])
        assert registry.names() == ["echo"]

    def test_duplicate_within_constructor_batch_fails(self) -> None:
        with pytest.raises(DuplicateToolError):
            ToolRegistry([ECHO, ECHO])

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            ToolDescriptor(name="", description="x", handler=_echo)


class TestLookupAndInvoke:
    def test_resolve_unknown_fails(self) -> None:
        with pytest.raises(UnknownToolError) as exc:
            ToolRegistry([ECHO]).resolve("missing")
        assert exc.value.tool_name == "missing"

    def test_invoke_unknown_fails(self) -> None:
        with pytest.raises(UnknownToolError):
            ToolRegistry([ECHO]).invoke("missing", "x")

    def test_invoke_returns_handler_output(self) -> None:
        assert ToolRegistry([ECHO]).invoke("echo", "hi") == "echo:hi"

    def test_handler_failure_is_rewrapped(self) -> None:
        with pytest.raises(ToolExecutionError) as exc:
            ToolRegistry([BOOM]).invoke("boom", "x")
        assert exc.value.tool_name == "boom"
        assert isinstance(exc.value.cause, RuntimeError)
        assert exc.value.message == "tool boom failed: kaboom"

    def test_timeout_forwarded_only_to_handlers_that_accept_it(self) -> None:
        timed = ToolDescriptor(
            name="timed",
            description="t",
            handler=lambda text, timeout=None: f"{text}:{timeout}",
            accepts_timeout=True,
        )
        registry = ToolRegistry([ECHO, timed])
        assert registry.invoke("timed", "a", timeout=1.5) == "a:1.5"
        assert registry.invoke("echo", "a", timeout=1.5) == "echo:a"

    def test_none_output_becomes_empty_string(self) -> None:
        registry = ToolRegistry([ToolDescriptor(name="nothing", description="n", handler=lambda _: None)])
        assert registry.invoke("nothing", "") == ""


def test_catalog_and_openai_schema_follow_registration_order() -> None:
    registry = ToolRegistry([ECHO, BOOM])
    assert registry.catalog() == [
        {"name": "echo", "description": "Echo the input back."},
        {"name": "boom", "description": "Always fails."},
    ]
    schema = registry.to_openai_tools()
    assert [t["function"]["name"] for t in schema] == ["echo", "boom"]
    assert schema[0]["type"] == "function"
    assert schema[0]["function"]["parameters"]["required"] == ["input"]
