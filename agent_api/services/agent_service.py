"""
Agent service: run one query through a freshly built agent.

Responsibility: Resolve the variant, build the agent, execute the reasoning loop,
and normalize every outcome into a RunResult. This is the only place failures are
turned into display strings; nothing raised below escapes. Called by the API and
the CLI; no HTTP here.
"""

import logging
from typing import Any

from agent_api.agent.factory import AgentConfig, AgentVariant, build_agent
from agent_api.agent.graph import Engine
from agent_api.core.errors import AgentError
from agent_api.core.session_store import MemoryStore, get_session_memory
from agent_api.schemas.agent import RunResult

logger = logging.getLogger(__name__)


def _error_message(exc: Exception) -> str:
    if isinstance(exc, AgentError):
        return exc.message
    return str(exc) or exc.__class__.__name__


def run_agent(
    query: str,
    agent_type: "str | AgentVariant" = "basic",
    options: dict[str, Any] | None = None,
    *,
    memory: MemoryStore | None = None,
    session_id: str | None = None,
    engine: Engine | None = None,
) -> RunResult:
    """
    Run the agent of the given type on the query.

    memory / session_id only apply to the advanced agent: an explicit store wins, then the
    session's shared store; otherwise the run gets fresh memory.
    """
    try:
        logger.info("Running %s agent with query: %r", agent_type, query)
        variant = AgentVariant.parse(agent_type)
        agent_config = AgentConfig.from_options(options)
        store = None
        if variant is AgentVariant.ADVANCED:
            store = memory
            if store is None and session_id:
                store = get_session_memory(session_id)
        agent = build_agent(variant, agent_config, memory=store, engine=engine)
        result = agent.executor.run(query)
    except Exception as e:
        message = _error_message(e)
        logger.exception("Error running agent: %s", message)
        return RunResult(output=f"Error executing agent: {message}", success=False, error=message)

    logger.info("Agent execution completed. iterations=%d tools=%s", result.iterations, [s["tool"] for s in result.steps])
    return RunResult(output=result.output, success=True)
