"""
Badge models - badge definitions and grants
"""
from sqlalchemy import Column, String, Text, DateTime, Uuid, ForeignKey
from learnhub.database import Base, utcnow
import uuid


class Badge(Base):
    """
    Badges table - criteria_json looks like {"type": "quiz_pass_count", "value": 5}
    """
    __tablename__ = "badges"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    icon_url = Column(String(512))
    criteria_json = Column(Text, default="{}")
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Badge(id={self.id}, name={self.name})>"


class UserBadge(Base):
    __tablename__ = "user_badges"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    badge_id = Column(Uuid(as_uuid=True), ForeignKey("badges.id", ondelete="CASCADE"), primary_key=True)
    earned_at = Column(DateTime, default=utcnow)
