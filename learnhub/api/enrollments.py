"""
Enrollment and unit progress API endpoints
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from uuid import UUID
import logging
from learnhub.api.deps import get_current_user
from learnhub.database import get_db
from learnhub.models import User
from learnhub.schemas.enrollment import (
    EnrollmentCreate,
    EnrollmentDetail,
    EnrollmentOut,
    ProgressResponse,
    ProgressUpdate,
)
from learnhub.services.completion_service import completion_service
from learnhub.services.enrollment_service import enrollment_service


router = APIRouter(prefix="/api/enrollments", tags=["enrollments"])
logger = logging.getLogger(__name__)


@router.post("", response_model=EnrollmentOut, status_code=201)
async def create_enrollment(
    request: EnrollmentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Enroll in a course

    Learners enroll themselves; staff may pass user_id to enroll someone else.
    """
    return enrollment_service.enroll(db, current_user, request.course_id, request.user_id)


@router.get("/{enrollment_id}", response_model=EnrollmentDetail)
async def get_enrollment(
    enrollment_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return enrollment_service.get_enrollment(db, current_user, enrollment_id)


@router.delete("/{enrollment_id}", status_code=204)
async def delete_enrollment(
    enrollment_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    enrollment_service.unenroll(db, current_user, enrollment_id)
    return Response(status_code=204)


@router.post("/{enrollment_id}/progress", response_model=ProgressResponse)
async def update_progress(
    enrollment_id: UUID,
    update: ProgressUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Record progress on a unit

    - time_spent_sec is added to the unit's running total
    - completing a unit stamps completed_at once
    - the enrollment's progress_pct and status are recomputed
    """
    progress, enrollment = completion_service.record_unit_progress(
        db,
        current_user,
        enrollment_id,
        update.unit_id,
        status=update.status.value if update.status else None,
        score=update.score,
        time_delta_sec=update.time_spent_sec,
    )

    return ProgressResponse(unit_progress=progress, enrollment=enrollment)
