"""
API handlers: validate request data, call the agent service, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Agent failures are already folded into
RunResult by the service and go out as 200; only malformed requests get 400 and only
faults in this layer get 500.
"""

import logging
from typing import Any

from fastapi.responses import JSONResponse
from pydantic import ValidationError

from agent_api.schemas.agent import RunOptions, RunRequest, ToolCallRequest
from agent_api.services.agent_service import run_agent

logger = logging.getLogger(__name__)

RUN_AGENT_TOOL_NAME = "runAgent"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _describe(e: ValidationError) -> str:
    first = e.errors()[0]
    where = ".".join(str(part) for part in first.get("loc", ()))
    return f"{where}: {first.get('msg', '')}" if where else first.get("msg", "")


def handle_run(payload: Any) -> JSONResponse:
    try:
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            return _error(400, "Request body must be a JSON object")
        try:
            body = RunRequest.model_validate(payload)
        except ValidationError as e:
            return _error(400, f"Invalid request: {_describe(e)}")
        if not body.query:
            return _error(400, "Query is required")
        logger.info("Received request to run %s agent with query: %s", body.agent_type, body.query)
        result = run_agent(
            body.query,
            body.agent_type,
            body.options.to_options(),
            session_id=body.session_id,
        )
        return JSONResponse(status_code=200, content=result.to_body())
    except Exception as e:
        logger.exception("Error in /api/agent/run")
        return _error(500, f"Server error: {e}")


def handle_tool_call(payload: Any) -> JSONResponse:
    try:
        if not isinstance(payload, dict):
            return _error(400, "Request body must be a JSON object")
        try:
            body = ToolCallRequest.model_validate(payload)
        except ValidationError as e:
            return _error(400, f"Invalid request: {_describe(e)}")
        if body.name != RUN_AGENT_TOOL_NAME:
            return _error(400, f"Unknown tool: {body.name}")
        args: dict[str, Any] = body.arguments or {}
        query = args.get("query")
        if not query or not isinstance(query, str):
            return _error(400, "Query parameter is required")
        try:
            options = RunOptions.model_validate(args.get("options") or {})
        except ValidationError as e:
            return _error(400, f"Invalid options: {_describe(e)}")
        agent_type = args.get("agentType") or "basic"
        logger.info("Received tool call request: %s with query: %s", body.name, query)
        result = run_agent(query, agent_type, options.to_options(), session_id=args.get("sessionId"))
        content = result.to_body()
        content.update({"toolName": body.name, "toolArgs": args})
        return JSONResponse(status_code=200, content=content)
    except Exception as e:
        logger.exception("Error in /api/agent/tool")
        return _error(500, f"Server error: {e}")
