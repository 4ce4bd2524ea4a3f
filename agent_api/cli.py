#!/usr/bin/env python3
"""
Command line entry points.

    agent-api run "What's the weather in New York and calculate 25 * 48."
    agent-api run --agent-type advanced "Query our database for recent sales and summarize the findings."
    agent-api serve --port 3000

`run` without a query uses a demo query; for the advanced agent it then asks a
follow-up question against the same memory to show that earlier turns are kept.
"""

import argparse
import logging
import sys

from agent_api.core.config import PORT
from agent_api.core.errors import MissingCredentialsError
from agent_api.core.session_store import MemoryStore

logger = logging.getLogger(__name__)

DEMO_QUERIES = {
    "basic": "What's the weather in New York and calculate 25 * 48.",
    "advanced": "Query our database for recent sales and summarize the findings.",
}
FOLLOW_UP_QUERY = "What was the previous query about?"


def _options(args: argparse.Namespace) -> dict:
    options: dict = {}
    if args.model:
        options["modelIdentifier"] = args.model
    if args.temperature is not None:
        options["temperature"] = args.temperature
    if args.quiet:
        options["verbose"] = False
    return options


def cmd_run(args: argparse.Namespace) -> int:
    from agent_api.services.agent_service import run_agent

    query = args.query or DEMO_QUERIES[args.agent_type]
    options = _options(args)
    memory = MemoryStore() if args.agent_type == "advanced" else None
    print(f"Running {args.agent_type} agent with query: {query}")
    result = run_agent(query, args.agent_type, options, memory=memory)
    print(f"\nResult: {result.output}")
    if not result.success:
        return 1
    if args.agent_type == "advanced" and not args.query:
        print("\n--- Follow-up question to demonstrate memory ---")
        follow_up = run_agent(FOLLOW_UP_QUERY, args.agent_type, options, memory=memory)
        print(f"\nFollow-up Result: {follow_up.output}")
        return 0 if follow_up.success else 1
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from agent_api.agent.factory import require_credentials

    try:
        require_credentials()
    except MissingCredentialsError as e:
        print(e.message, file=sys.stderr)
        return 1

    import uvicorn

    print(f"Agent API server running on port {args.port}")
    print(f"Health check available at http://localhost:{args.port}/health")
    print(f"Agent endpoint available at http://localhost:{args.port}/api/agent/run")
    print(f"Tool calling endpoint available at http://localhost:{args.port}/api/agent/tool")
    uvicorn.run("agent_api.main:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agent-api", description="Run the tool-using agent or its HTTP API.")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run one query and print the result")
    run.add_argument("query", nargs="?", default="", help="Free-text query (demo query when omitted)")
    run.add_argument("--agent-type", choices=["basic", "advanced"], default="basic")
    run.add_argument("--model", default=None, help="OpenAI model identifier")
    run.add_argument("--temperature", type=float, default=None)
    run.add_argument("--quiet", action="store_true", help="Do not log each reasoning step")
    run.set_defaults(func=cmd_run)

    serve = sub.add_parser("serve", help="Start the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=PORT)
    serve.set_defaults(func=cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
