"""
Enrollment model - a learner's registration in a course
"""
from sqlalchemy import Column, String, Integer, DateTime, Uuid, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from learnhub.database import Base, utcnow
from learnhub.models.enums import ProgressStatus
import uuid


class Enrollment(Base):
    """
    Enrollments table - carries the aggregate completion state of a course
    """
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
        CheckConstraint(
            "status IN ('not_started', 'in_progress', 'completed')",
            name="ck_enrollments_status",
        ),
        CheckConstraint("progress_pct >= 0 AND progress_pct <= 100", name="ck_enrollments_progress"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ProgressStatus.NOT_STARTED.value)
    progress_pct = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime)
    completed_at = Column(DateTime)
    enrolled_at = Column(DateTime, default=utcnow)

    unit_progress = relationship(
        "UnitProgress", back_populates="enrollment", cascade="all, delete-orphan"
    )
    attempts = relationship(
        "QuizAttempt", back_populates="enrollment", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Enrollment(id={self.id}, user_id={self.user_id}, progress={self.progress_pct})>"
