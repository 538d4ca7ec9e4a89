"""
In-memory registry of open staging sessions
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

from core.config import settings
from schemas.products import ProductSchema
from services.staging_session import StagingSession

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Sessions live from preview open to preview close; nothing is persisted.

    A session that is not touched for `ttl_minutes` is closed and dropped, so
    clients that leave without closing do not pin uploads and results in memory.
    """

    def __init__(self, ttl_minutes: Optional[int] = None):
        self.sessions: Dict[str, StagingSession] = {}
        self.session_ttl = timedelta(minutes=ttl_minutes or settings.preview_session_ttl_minutes)

    def _is_expired(self, session: StagingSession, now: datetime) -> bool:
        # Never expire a session while its composition is in flight
        return not session.is_processing and now - session.last_accessed > self.session_ttl

    def create(self, product: ProductSchema) -> StagingSession:
        self.cleanup_expired_sessions()
        session = StagingSession(product)
        self.sessions[session.session_id] = session
        logger.info(f"Open staging sessions: {len(self.sessions)}")
        return session

    def get(self, session_id: str) -> Optional[StagingSession]:
        session = self.sessions.get(session_id)
        if session is None:
            return None

        now = datetime.now()
        if self._is_expired(session, now):
            logger.info(f"Staging session {session_id[:8]} expired")
            self.close(session_id)
            return None

        session.last_accessed = now
        return session

    def close(self, session_id: str) -> bool:
        session = self.sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def cleanup_expired_sessions(self) -> int:
        """Close and drop expired sessions"""
        now = datetime.now()
        expired = [sid for sid, session in self.sessions.items() if self._is_expired(session, now)]

        for session_id in expired:
            self.close(session_id)

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired staging sessions")

        return len(expired)

    def close_all(self):
        for session_id in list(self.sessions):
            self.close(session_id)


# Global session store
session_store = SessionStore()
