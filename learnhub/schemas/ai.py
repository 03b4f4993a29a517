"""
Pydantic schemas for AI question drafting
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID

from learnhub.models.enums import QuestionType


class GenerateQuestionsRequest(BaseModel):
    course_id: UUID
    content: Optional[str] = Field(None, description="Source text; defaults to the course's text units")
    count: int = Field(5, ge=1, le=20)
    types: List[QuestionType] = Field(
        default_factory=lambda: [
            QuestionType.MULTIPLE_CHOICE,
            QuestionType.TRUE_FALSE,
            QuestionType.FILL_BLANK,
        ],
        min_length=1,
    )


class GeneratedQuestion(BaseModel):
    type: QuestionType
    question_text: str
    options: Optional[List[str]] = None
    correct_answer: str
    points: int = 1


class GenerateQuestionsResponse(BaseModel):
    questions: List[GeneratedQuestion]
    count: int
