# Run from project root: uvicorn agent_api.main:app --port 3000  (or: agent-api serve)

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agent_api.agent.factory import require_credentials
from agent_api.api.routes import router
from agent_api.api.tool_server import tool_router
from agent_api.core.config import CORS_ORIGINS
from agent_api.core.errors import MissingCredentialsError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Checked once at startup; the server must not come up without a credential.
    try:
        require_credentials()
    except MissingCredentialsError as e:
        logger.error(e.message)
        raise
    logger.info("Agent API ready: /health, /api/agent/run, /api/agent/tool")
    yield


app = FastAPI(title="Agent API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)
app.include_router(tool_router)
