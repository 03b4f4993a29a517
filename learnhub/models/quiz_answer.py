"""
QuizAnswer model - scored answers of a submitted attempt
"""
from sqlalchemy import Column, Text, Boolean, Uuid, ForeignKey
from sqlalchemy.orm import relationship
from learnhub.database import Base
import uuid


class QuizAnswer(Base):
    __tablename__ = "quiz_answers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    attempt_id = Column(
        Uuid(as_uuid=True), ForeignKey("quiz_attempts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(Uuid(as_uuid=True), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    answer = Column(Text)
    is_correct = Column(Boolean)

    attempt = relationship("QuizAttempt", back_populates="answers")
    question = relationship("Question")

    def __repr__(self):
        return f"<QuizAnswer(attempt_id={self.attempt_id}, question_id={self.question_id}, correct={self.is_correct})>"
