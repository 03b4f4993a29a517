"""
QuizAttempt model - one learner's run at a quiz unit
"""
from sqlalchemy import Column, Integer, Boolean, DateTime, Uuid, ForeignKey
from sqlalchemy.orm import relationship
from learnhub.database import Base, utcnow
import uuid


class QuizAttempt(Base):
    """
    Quiz attempts table - in progress while completed_at is NULL
    """
    __tablename__ = "quiz_attempts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    enrollment_id = Column(
        Uuid(as_uuid=True), ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    unit_id = Column(Uuid(as_uuid=True), ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer)  # 0-100
    passed = Column(Boolean)
    started_at = Column(DateTime, nullable=False, default=utcnow)
    completed_at = Column(DateTime)

    enrollment = relationship("Enrollment", back_populates="attempts")
    unit = relationship("Unit")
    answers = relationship("QuizAnswer", back_populates="attempt", cascade="all, delete-orphan")

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __repr__(self):
        return f"<QuizAttempt(id={self.id}, unit_id={self.unit_id}, score={self.score})>"
