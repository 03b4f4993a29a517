"""
Unit model - atomic pieces of course content
"""
from sqlalchemy import Column, String, Text, Integer, DateTime, Uuid, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from learnhub.database import Base, utcnow
from learnhub.models.enums import UnitType
import uuid


class Unit(Base):
    """
    Units table - quiz units carry their settings as a JSON blob
    """
    __tablename__ = "units"
    __table_args__ = (
        CheckConstraint(
            "type IN ('text', 'video', 'document', 'quiz', 'survey', 'link')",
            name="ck_units_type",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    name = Column(String(255), nullable=False)
    content = Column(Text)
    settings_json = Column(Text, default="{}")  # {"max_retries": 3, "pass_threshold": 80}
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=utcnow)

    course = relationship("Course", back_populates="units")

    @property
    def is_quiz(self) -> bool:
        return self.type == UnitType.QUIZ.value

    def __repr__(self):
        return f"<Unit(id={self.id}, type={self.type}, name={self.name})>"
