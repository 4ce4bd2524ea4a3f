"""
API route aggregator: register endpoints; no logic — only delegate to handlers.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from agent_api.api.handlers import handle_run
from agent_api.schemas.agent import RunResult

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/health", tags=["system"])
def health():
    return {"status": "ok", "message": "Agent API is running"}


# --- Agent ---

@router.post(
    "/api/agent/run",
    tags=["agent"],
    summary="Run the basic or advanced agent on a query",
    description="Returns 200 with a RunResult for every completed run, including agent failures (success=false). 400 when the body is malformed or query is missing, 500 on server faults.",
    responses={200: {"model": RunResult}},
)
def post_run(payload: Any = Body(None)) -> JSONResponse:
    return handle_run(payload)
