"""
UnitProgress model - tracks completion of a single unit within an enrollment
"""
from sqlalchemy import Column, String, Integer, DateTime, Uuid, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from learnhub.database import Base
from learnhub.models.enums import ProgressStatus
import uuid


class UnitProgress(Base):
    __tablename__ = "unit_progress"
    __table_args__ = (
        UniqueConstraint("enrollment_id", "unit_id", name="uq_unit_progress_enrollment_unit"),
        CheckConstraint(
            "status IN ('not_started', 'in_progress', 'completed')",
            name="ck_unit_progress_status",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    enrollment_id = Column(
        Uuid(as_uuid=True), ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    unit_id = Column(Uuid(as_uuid=True), ForeignKey("units.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default=ProgressStatus.NOT_STARTED.value)
    score = Column(Integer)
    time_spent_sec = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime)  # first completion only

    enrollment = relationship("Enrollment", back_populates="unit_progress")

    def __repr__(self):
        return f"<UnitProgress(enrollment_id={self.enrollment_id}, unit_id={self.unit_id}, status={self.status})>"
