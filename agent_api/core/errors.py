"""
Agent errors for clean run-level and API error handling.

Tool failures (ToolExecutionError) are absorbed by the reasoning loop and shown to
the engine as observations. Everything else propagates to the run dispatcher,
which turns it into a RunResult with success=False.
"""


class AgentError(Exception):
    """Base class for every error raised by the agent layer."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MissingCredentialsError(AgentError):
    """Raised when no reasoning-engine credential (OPENAI_API_KEY) is configured."""

    def __init__(self, message: str = "OPENAI_API_KEY is not set. Please add it to your .env file") -> None:
        super().__init__(message)


class DuplicateToolError(AgentError):
    """Raised when a tool name is registered twice in the same registry."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' is already registered.")


class UnknownToolError(AgentError):
    """Raised when a tool name is not present in the registry."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' is not registered.")


class ToolExecutionError(AgentError):
    """Raised when a tool handler fails. Carries the tool name and the original exception."""

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        self.tool_name = tool_name
        self.cause = cause
        super().__init__(f"tool {tool_name} failed: {cause}")


class EngineError(AgentError):
    """Raised when the reasoning engine fails (network, auth, malformed response)."""

    def __init__(self, cause: BaseException | str) -> None:
        self.cause = cause
        super().__init__(f"Reasoning engine error: {cause}")


class MaxIterationsExceededError(AgentError):
    """Raised when the engine keeps requesting tools past the iteration bound."""

    def __init__(self, max_iterations: int) -> None:
        self.max_iterations = max_iterations
        super().__init__(f"Agent stopped after reaching the maximum of {max_iterations} iterations")


class AgentTimeoutError(AgentError):
    """Raised when a run exceeds its wall-clock deadline."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Agent run timed out after {timeout_seconds:g}s")
