"""
Pydantic schemas for quiz attempt requests and responses
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, List, Optional
from uuid import UUID
from datetime import datetime


class QuizAttemptStart(BaseModel):
    """Request schema for starting or resuming an attempt"""
    unit_id: UUID


class AnswerSubmission(BaseModel):
    """A single submitted answer"""
    question_id: UUID
    answer: Optional[str] = None

    @field_validator("answer", mode="before")
    @classmethod
    def stringify_scalars(cls, value: Any) -> Any:
        # true/false and numeric answers arrive as JSON scalars
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (bool, int, float)):
            return str(value)
        return value


class QuizSubmission(BaseModel):
    """Schema for quiz submission"""
    answers: List[AnswerSubmission]


class QuizAttemptOut(BaseModel):
    """Attempt summary"""
    id: UUID
    enrollment_id: UUID
    unit_id: UUID
    unit_name: Optional[str] = None
    score: Optional[int] = None
    passed: Optional[bool] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    total_questions: int = 0
    correct_answers: int = 0

    class Config:
        from_attributes = True


class QuizAttemptStartResponse(BaseModel):
    attempt: QuizAttemptOut
    resumed: bool = False


class QuizSubmissionResponse(BaseModel):
    """Response after scoring a submission"""
    attempt: QuizAttemptOut
    score: int
    passed: bool
    earned_points: int = Field(..., alias="earnedPoints")
    total_points: int = Field(..., alias="totalPoints")
    points_awarded: int = Field(..., alias="pointsAwarded")

    class Config:
        populate_by_name = True


class QuizAttemptList(BaseModel):
    attempts: List[QuizAttemptOut]


class AttemptAnswerOut(BaseModel):
    """Stored answer; correct_answer stays null until the attempt is completed"""
    question_id: UUID
    answer: Optional[str] = None
    is_correct: Optional[bool] = None
    question_text: str
    question_type: str
    options: Optional[List[Any]] = None
    points: int
    correct_answer: Optional[str] = None


class AttemptQuestionOut(BaseModel):
    id: UUID
    question_text: str
    type: str
    options: Optional[List[Any]] = None
    points: int
    sort_order: Optional[int] = None


class QuizAttemptDetail(BaseModel):
    attempt: QuizAttemptOut
    answers: List[AttemptAnswerOut]
    questions: List[AttemptQuestionOut]
