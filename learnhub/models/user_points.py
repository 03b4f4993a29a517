"""
UserPoints model - one ledger row per user
"""
from sqlalchemy import Column, Integer, DateTime, Uuid, ForeignKey, CheckConstraint
from learnhub.database import Base, utcnow


class UserPoints(Base):
    __tablename__ = "user_points"
    __table_args__ = (
        CheckConstraint("total_points >= 0", name="ck_user_points_total"),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    total_points = Column(Integer, nullable=False, default=0, index=True)
    level = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<UserPoints(user_id={self.user_id}, total={self.total_points}, level={self.level})>"
