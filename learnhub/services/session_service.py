"""
Session service - resolves opaque session tokens to users
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from learnhub.config import settings
from learnhub.database import utcnow
from learnhub.models import User, UserSession
from learnhub.models.enums import UserStatus

logger = logging.getLogger(__name__)


class SessionService:
    """Session store backed by the sessions table"""

    def create_session(self, db: Session, user_id: UUID, ttl: Optional[timedelta] = None) -> str:
        """Issue a new token for a user"""
        token = secrets.token_hex(32)
        expires_at = utcnow() + (ttl or timedelta(days=settings.SESSION_TTL_DAYS))

        db.add(UserSession(id=token, user_id=user_id, expires_at=expires_at))
        db.commit()

        return token

    def get_user(self, db: Session, token: str) -> Optional[User]:
        """
        Look up the active user behind a token

        Expired sessions are deleted on sight. Returns None for unknown or
        expired tokens and for users that are not active.
        """
        session = db.query(UserSession).filter(UserSession.id == token).first()
        if not session:
            return None

        if session.expires_at < utcnow():
            db.delete(session)
            db.commit()
            logger.info(f"Expired session removed for user {session.user_id}")
            return None

        user = db.query(User).filter(User.id == session.user_id).first()
        if not user or user.status != UserStatus.ACTIVE.value:
            return None

        return user


# Global instance
session_service = SessionService()
