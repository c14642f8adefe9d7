"""Service for cleanup operations."""
import logging
import threading
import time

from excel_quiz.config import SESSION_CLEANUP_INTERVAL_SECONDS
from excel_quiz.database import SessionLocal
from excel_quiz.services.auth_service import cleanup_expired_sessions

logger = logging.getLogger(__name__)


def purge_sessions() -> int:
    """Remove expired and invalidated login sessions."""
    try:
        db = SessionLocal()
        try:
            deleted = cleanup_expired_sessions(db)
            if deleted > 0:
                logger.info(f"Cleaned up {deleted} expired sessions")
            return deleted
        finally:
            db.close()
    except Exception as e:
        logger.error(f"Failed to cleanup expired sessions: {e}")
        return 0


def schedule_sessions_cleanup() -> None:
    """Schedule periodic cleanup of expired sessions."""
    if SESSION_CLEANUP_INTERVAL_SECONDS <= 0:
        return

    def _worker() -> None:
        # Initial delay before first cleanup
        time.sleep(60)
        while True:
            purge_sessions()
            time.sleep(SESSION_CLEANUP_INTERVAL_SECONDS)

    thread = threading.Thread(
        target=_worker,
        name="sessions_cleanup",
        daemon=True,
    )
    thread.start()
