"""
In-memory conversation memory for the advanced agent.

MemoryStore is one ordered, append-only log of turns. By default every advanced
run gets a fresh store (per-request lifetime). Runs that carry a session_id share
the store kept here under that id (per-session lifetime).
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum

from agent_api.core.config import MEMORY_MAX_TURNS, SESSION_MAX

logger = logging.getLogger(__name__)


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    role: Role
    content: str

    def to_message(self) -> dict[str, str]:
        """OpenAI chat message for this turn."""
        return {"role": self.role.value, "content": self.content}


class MemoryStore:
    """
    Ordered turn log. Reads and writes are serialized by a per-store lock.
    The cap is applied in whole user/assistant exchanges, so history never
    starts with an assistant turn.
    """

    def __init__(self, max_turns: int | None = MEMORY_MAX_TURNS) -> None:
        if max_turns is not None and max_turns < 2:
            raise ValueError("max_turns must be at least 2 (one user + one assistant turn)")
        self._max_turns = max_turns
        self._turns: list[Turn] = []
        self._lock = threading.Lock()

    @property
    def max_turns(self) -> int | None:
        return self._max_turns

    def append(self, turn: Turn) -> None:
        with self._lock:
            self._turns.append(turn)
            self._trim()
        logger.debug("[memory:append] role=%s content_len=%d", turn.role.value, len(turn.content))

    def append_exchange(self, user_content: str, assistant_content: str) -> None:
        """Append the user query and the final answer of one run as a single write."""
        with self._lock:
            self._turns.append(Turn(Role.USER, user_content or ""))
            self._turns.append(Turn(Role.ASSISTANT, assistant_content or ""))
            self._trim()
            total = len(self._turns)
        logger.info("[memory:append_exchange] turns=%d", total)

    def snapshot(self) -> list[Turn]:
        """Return the turns in chronological order (copy so caller cannot mutate store)."""
        with self._lock:
            return list(self._turns)

    def clear(self) -> None:
        with self._lock:
            self._turns.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._turns)

    def _trim(self) -> None:
        if self._max_turns is not None and len(self._turns) > self._max_turns:
            dropped = len(self._turns) - self._max_turns
            while dropped < len(self._turns) and self._turns[dropped].role is Role.ASSISTANT:
                dropped += 1
            self._turns = self._turns[dropped:]
            logger.info("[memory:trim] dropped=%d max_turns=%d", dropped, self._max_turns)


# session_id -> MemoryStore, least recently used first
_sessions: "OrderedDict[str, MemoryStore]" = OrderedDict()
_lock = threading.Lock()


def get_session_memory(session_id: str) -> MemoryStore:
    """
    Return the shared store for the session, creating it on first use. Beyond
    SESSION_MAX sessions the least recently used one is forgotten.
    """
    if not session_id or not isinstance(session_id, str):
        raise ValueError("session_id must be a non-empty string")
    with _lock:
        store = _sessions.get(session_id)
        if store is not None:
            _sessions.move_to_end(session_id)
        else:
            store = MemoryStore()
            _sessions[session_id] = store
            logger.info("[session_store:get_session_memory] created session_id=%s", session_id[:16])
            while len(_sessions) > max(SESSION_MAX, 1):
                evicted, _ = _sessions.popitem(last=False)
                logger.info("[session_store:get_session_memory] evicted session_id=%s", evicted[:16])
    return store


def drop_session(session_id: str) -> bool:
    """Forget a session's memory. Returns True if the session existed."""
    with _lock:
        existed = _sessions.pop(session_id, None) is not None
    logger.info("[session_store:drop_session] session_id=%s existed=%s", (session_id or "")[:16], existed)
    return existed
