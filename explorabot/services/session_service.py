"""
Per-conversation IntentResponder instances keyed by session id.
"""

import threading
import uuid
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from loguru import logger

from explorabot.config import settings
from explorabot.services.intent_service import IntentResponder, default_intents, welcome_template


def build_responder() -> IntentResponder:
    """A responder configured with this deployment's name, version and environment."""
    return IntentResponder(
        default_intents(settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT),
        welcome=welcome_template(settings.APP_NAME),
    )


class SessionStore:
    """LRU map of session id → responder; the oldest session is evicted past ``max_sessions``."""

    def __init__(
        self,
        max_sessions: int = 1000,
        factory: Callable[[], IntentResponder] = build_responder,
    ):
        self.max_sessions = max_sessions
        self._factory = factory
        self._sessions: "OrderedDict[str, IntentResponder]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> Optional[IntentResponder]:
        with self._lock:
            responder = self._sessions.get(session_id)
            if responder is not None:
                self._sessions.move_to_end(session_id)
            return responder

    def get_or_create(self, session_id: Optional[str] = None) -> Tuple[str, IntentResponder]:
        session_id = session_id or str(uuid.uuid4())
        with self._lock:
            responder = self._sessions.get(session_id)
            if responder is None:
                responder = self._factory()
                self._sessions[session_id] = responder
                logger.debug(f"Session created [{session_id[:8]}]")
                while len(self._sessions) > self.max_sessions:
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.info(f"Session evicted [{evicted[:8]}]")
            else:
                self._sessions.move_to_end(session_id)
        return session_id, responder

    def total_turns(self) -> int:
        with self._lock:
            responders = list(self._sessions.values())
        return sum(len(r.get_history()) for r in responders)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


sessions = SessionStore(max_sessions=settings.MAX_SESSIONS)
