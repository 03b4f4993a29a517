"""
Quiz attempt API endpoints
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging
from learnhub.api.deps import get_current_user
from learnhub.database import get_db
from learnhub.models import User
from learnhub.schemas.quiz import (
    QuizAttemptStart,
    QuizAttemptStartResponse,
    QuizSubmission,
    QuizSubmissionResponse,
    QuizAttemptList,
    QuizAttemptDetail,
)
from learnhub.services.quiz_attempt_service import quiz_attempt_service


router = APIRouter(prefix="/api/quiz-attempts", tags=["quiz-attempts"])
logger = logging.getLogger(__name__)


@router.post("", response_model=QuizAttemptStartResponse, status_code=201)
async def start_attempt(
    request: QuizAttemptStart,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Start a quiz attempt, or resume the one in progress

    - 201 with a new attempt
    - 200 with resumed=true when an attempt is already in progress
    - 400 retry_limit_reached once max_retries completed attempts exist
    """
    attempt, resumed = quiz_attempt_service.start_or_resume_attempt(
        db, current_user, request.unit_id
    )

    if resumed:
        response.status_code = 200

    return QuizAttemptStartResponse(
        attempt=quiz_attempt_service.summarize(attempt), resumed=resumed
    )


@router.get("", response_model=QuizAttemptList)
async def list_attempts(
    enrollment_id: Optional[UUID] = None,
    unit_id: Optional[UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    attempts = quiz_attempt_service.list_attempts(
        db, current_user, enrollment_id=enrollment_id, unit_id=unit_id
    )
    return QuizAttemptList(attempts=attempts)


@router.get("/{attempt_id}", response_model=QuizAttemptDetail)
async def get_attempt(
    attempt_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Attempt with answers; correct answers only once completed"""
    return QuizAttemptDetail(**quiz_attempt_service.get_attempt_detail(db, current_user, attempt_id))


@router.post("/{attempt_id}", response_model=QuizSubmissionResponse, response_model_by_alias=True)
async def submit_attempt(
    attempt_id: UUID,
    submission: QuizSubmission,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Submit answers and complete the attempt

    Scoring:
    - score = round(100 * earned points / total points of the unit's questions)
    - passed when score >= the unit's pass threshold
    - passing awards quiz points and completes the unit
    """
    result = quiz_attempt_service.submit_attempt(
        db,
        current_user,
        attempt_id,
        [(answer.question_id, answer.answer) for answer in submission.answers],
    )

    return QuizSubmissionResponse(
        attempt=quiz_attempt_service.summarize(result.attempt),
        score=result.score,
        passed=result.passed,
        earned_points=result.earned_points,
        total_points=result.total_points,
        points_awarded=result.points_awarded,
    )
