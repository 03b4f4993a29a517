"""
AI question drafting API endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging
from learnhub.api.deps import require_staff
from learnhub.database import get_db
from learnhub.models import User
from learnhub.schemas.ai import GenerateQuestionsRequest, GenerateQuestionsResponse
from learnhub.services.gemini_service import gemini_service


router = APIRouter(prefix="/api/ai", tags=["ai"])
logger = logging.getLogger(__name__)


@router.post("/generate-questions", response_model=GenerateQuestionsResponse)
async def generate_questions(
    request: GenerateQuestionsRequest,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    """
    Draft quiz questions with Gemini

    Uses the request content, or the course's text units when none is given.
    Questions are returned for review and are not saved.
    """
    content = request.content or gemini_service.build_course_content(db, request.course_id)

    logger.info(f"Generating {request.count} questions for course {request.course_id} (user={current_user.id})")

    questions = gemini_service.generate_questions(
        content,
        count=request.count,
        types=[question_type.value for question_type in request.types],
    )

    return GenerateQuestionsResponse(questions=questions, count=len(questions))
