"""Schemas for the agent endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RunOptions(BaseModel):
    """Per-run overrides of the agent configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", protected_namespaces=())

    model_identifier: str | None = Field(None, alias="modelIdentifier", description="OpenAI model to use (e.g. gpt-3.5-turbo, gpt-4).")
    model_name: str | None = Field(None, alias="modelName", description="Alias of modelIdentifier.")
    temperature: float | None = Field(None, description="Sampling temperature (0-1).")
    verbose: bool | None = Field(None, description="Log every reasoning step at INFO.")
    max_iterations: int | None = Field(None, alias="maxIterations", description="Maximum tool round-trips.")
    timeout_seconds: float | None = Field(None, alias="timeoutSeconds", description="Wall-clock limit for the run.")

    def to_options(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RunRequest(BaseModel):
    """Request body for POST /api/agent/run. query is checked by the handler so a missing one maps to 400."""

    model_config = ConfigDict(populate_by_name=True)

    query: str | None = Field(None, description="The question or task for the agent to handle.")
    agent_type: str = Field("basic", alias="agentType", description="basic (no memory) or advanced (with memory).")
    options: RunOptions = Field(default_factory=RunOptions)
    session_id: str | None = Field(None, alias="sessionId", description="Advanced agent only: share memory across requests with this id.")


class ToolCallRequest(BaseModel):
    """Request body for POST /api/agent/tool (tool-calling convention)."""

    name: str | None = None
    arguments: dict[str, Any] = Field(default_factory=dict)


class RunResult(BaseModel):
    """Outcome of one agent run. error is present only when success is false."""

    output: str = Field(..., description="Final answer, or 'Error executing agent: ...' on failure.")
    success: bool
    error: str | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
