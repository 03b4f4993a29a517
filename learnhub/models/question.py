"""
Question model - stored quiz questions and their accepted answers
"""
from sqlalchemy import Column, String, Text, Integer, DateTime, Uuid, ForeignKey, JSON, CheckConstraint
from learnhub.database import Base, utcnow
import uuid


class Question(Base):
    """
    Questions table - correct_answer may hold comma-separated alternatives
    """
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint(
            "type IN ('multiple_choice', 'true_false', 'fill_blank', 'matching')",
            name="ck_questions_type",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid(as_uuid=True), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    unit_id = Column(Uuid(as_uuid=True), ForeignKey("units.id", ondelete="CASCADE"), index=True)
    type = Column(String(20), nullable=False)
    question_text = Column(Text, nullable=False)
    options = Column(JSON)  # ["Option A", "Option B", ...]
    correct_answer = Column(Text)
    points = Column(Integer, nullable=False, default=1)
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<Question(id={self.id}, unit_id={self.unit_id}, type={self.type})>"
