"""
In-memory registry of interview sessions.
"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from mock_interview.interview.state import InterviewStateMachine
from mock_interview.utils.config import config

logger = logging.getLogger(__name__)


class SessionNotFound(KeyError):
    """Raised when a session id is unknown or has expired."""


class SessionStore:
    """
    Thread-safe map of session id -> InterviewStateMachine.
    Idle sessions older than the TTL are dropped on access.
    """

    def __init__(self, ttl_minutes: Optional[int] = None, clock: Callable[[], datetime] = datetime.now):
        ttl = config.interview.session_ttl_minutes if ttl_minutes is None else ttl_minutes
        self.ttl = timedelta(minutes=ttl) if ttl > 0 else None
        self._clock = clock
        self._sessions: Dict[str, InterviewStateMachine] = {}
        self._lock = threading.Lock()

    def create(self, **kwargs) -> InterviewStateMachine:
        """Create and register a new interview session."""
        session = InterviewStateMachine(**kwargs)
        with self._lock:
            self._purge_expired()
            self._sessions[session.session_id] = session
        logger.info(f"Created session {session.session_id} ({session.interview_mode.value}, {session.job_role})")
        return session

    def get(self, session_id: str) -> InterviewStateMachine:
        with self._lock:
            self._purge_expired()
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def delete(self, session_id: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.info(f"Removed session {session_id}")
        return removed

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _purge_expired(self):
        if self.ttl is None:
            return
        cutoff = self._clock() - self.ttl
        expired = [sid for sid, s in self._sessions.items() if s.last_activity < cutoff]
        for sid in expired:
            del self._sessions[sid]
            logger.info(f"Expired idle session {sid}")


# Global session store
session_store = SessionStore()
