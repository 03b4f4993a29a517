"""
UserSession model - opaque session tokens with expiry
"""
from sqlalchemy import Column, String, DateTime, Uuid, ForeignKey
from learnhub.database import Base, utcnow


class UserSession(Base):
    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)  # opaque token
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<UserSession(user_id={self.user_id}, expires_at={self.expires_at})>"
