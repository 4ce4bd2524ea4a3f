"""
Tool-calling surface: exposes the agent as a single `runAgent` tool so an external
LLM host can discover its schema and call it through a standardized interface.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from agent_api.api.handlers import handle_tool_call
from agent_api.client import TOOL_CONFIG

logger = logging.getLogger(__name__)

tool_router = APIRouter(tags=["tool"])


@tool_router.get(
    "/api/agent/tool",
    summary="Tool schema: runAgent",
    description="Function-calling schema for runAgent, for registration with a tool-calling LLM host.",
)
def get_tool_schema() -> dict[str, Any]:
    logger.info("Tool schema requested")
    return TOOL_CONFIG


@tool_router.post(
    "/api/agent/tool",
    summary="Tool call: runAgent",
    description="Run the agent via the tool-calling convention {name, arguments}. The response echoes toolName and toolArgs.",
)
def post_tool_call(payload: Any = Body(None)) -> JSONResponse:
    return handle_tool_call(payload)
