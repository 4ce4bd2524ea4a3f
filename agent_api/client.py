"""
Client for the agent API's tool-calling endpoint.

TOOL_CONFIG is the function schema a tool-calling LLM host registers so its model
can call `runAgent`; call_agent_api() performs that call against a running server.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"

TOOL_CONFIG: dict[str, Any] = {
    "tools": [
        {
            "type": "function",
            "function": {
                "name": "runAgent",
                "description": "Run an AI agent to perform tasks and answer questions",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "The question or task for the agent to handle",
                        },
                        "agentType": {
                            "type": "string",
                            "enum": ["basic", "advanced"],
                            "description": "The type of agent to use: basic (no memory) or advanced (with memory)",
                        },
                        "options": {
                            "type": "object",
                            "properties": {
                                "modelIdentifier": {
                                    "type": "string",
                                    "description": "The OpenAI model to use (e.g., gpt-3.5-turbo, gpt-4)",
                                },
                                "temperature": {
                                    "type": "number",
                                    "description": "The temperature setting for the model (0-1)",
                                },
                            },
                        },
                        "sessionId": {
                            "type": "string",
                            "description": "Advanced agent only: reuse conversation memory across calls with the same id",
                        },
                    },
                    "required": ["query"],
                },
            },
        }
    ]
}


def call_agent_api(
    query: str,
    agent_type: str = "basic",
    options: dict[str, Any] | None = None,
    base_url: str = DEFAULT_BASE_URL,
    session_id: str | None = None,
    client: httpx.Client | None = None,
    timeout: float = 300.0,
) -> dict[str, Any]:
    """POST a runAgent tool call and return the JSON body. Raises httpx.HTTPStatusError on non-2xx."""
    arguments: dict[str, Any] = {"query": query, "agentType": agent_type, "options": options or {}}
    if session_id:
        arguments["sessionId"] = session_id
    payload = {"name": "runAgent", "arguments": arguments}
    url = base_url.rstrip("/") + "/api/agent/tool"
    logger.info("[client:call_agent_api] POST %s agent_type=%s", url, agent_type)
    if client is not None:
        response = client.post(url, json=payload, timeout=timeout)
    else:
        with httpx.Client(timeout=timeout) as own_client:
            response = own_client.post(url, json=payload)
    response.raise_for_status()
    return response.json()
