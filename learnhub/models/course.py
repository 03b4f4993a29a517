"""
Course model
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
from learnhub.database import Base, utcnow
from learnhub.models.enums import CourseStatus
import uuid


class Course(Base):
    """
    Courses table - authored elsewhere, read by enrollment and progress logic
    """
    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published', 'archived')", name="ck_courses_status"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    status = Column(String(20), nullable=False, default=CourseStatus.DRAFT.value, index=True)
    hidden = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)

    units = relationship("Unit", back_populates="course", order_by="Unit.sort_order")

    def __repr__(self):
        return f"<Course(id={self.id}, name={self.name})>"
