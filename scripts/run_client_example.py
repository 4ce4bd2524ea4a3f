#!/usr/bin/env python3
"""
Call a running agent API through its tool-calling endpoint.

Start the server first (agent-api serve), then run from project root:

    python scripts/run_client_example.py
    python scripts/run_client_example.py --base-url http://localhost:3000

Runs the basic agent, then the advanced agent twice with the same session id so
the follow-up question is answered from memory.
"""

import argparse
import sys
import uuid
from pathlib import Path

import httpx

# Project root on path so "agent_api" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from agent_api.client import DEFAULT_BASE_URL, call_agent_api


def main() -> int:
    parser = argparse.ArgumentParser(description="Example client for the agent API tool endpoint")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    args = parser.parse_args()
    session_id = uuid.uuid4().hex

    try:
        print("Calling basic agent...")
        basic = call_agent_api(
            "What's the weather in New York and calculate 25 * 48?",
            "basic",
            base_url=args.base_url,
        )
        print("Basic agent result:", basic.get("output"))

        print("\nCalling advanced agent with memory...")
        advanced = call_agent_api(
            "Tell me about the latest advancements in AI and summarize the key points.",
            "advanced",
            {"modelIdentifier": "gpt-4"},
            base_url=args.base_url,
            session_id=session_id,
        )
        print("Advanced agent result:", advanced.get("output"))

        print("\nAsking a follow-up question to advanced agent...")
        follow_up = call_agent_api(
            "What were the main points you just mentioned?",
            "advanced",
            base_url=args.base_url,
            session_id=session_id,
        )
        print("Follow-up result:", follow_up.get("output"))
    except httpx.HTTPError as e:
        print(f"Error calling agent API: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
