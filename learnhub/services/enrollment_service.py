"""
Enrollment service - enroll, read and unenroll
"""
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from learnhub.exceptions import Conflict, Forbidden, NotFound
from learnhub.models import Course, Enrollment, UnitProgress, User
from learnhub.models.enums import CourseStatus, ProgressStatus

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Service managing a learner's registration in a course"""

    def _get_visible(self, db: Session, user: User, enrollment_id: UUID) -> Enrollment:
        enrollment = db.query(Enrollment).filter(Enrollment.id == enrollment_id).first()
        if not enrollment:
            raise NotFound("Enrollment not found")

        if user.is_learner and enrollment.user_id != user.id:
            raise Forbidden("Cannot access another user's enrollment")

        return enrollment

    def enroll(
        self,
        db: Session,
        user: User,
        course_id: UUID,
        target_user_id: Optional[UUID] = None
    ) -> Enrollment:
        """
        Enroll a user in a course

        Learners may only enroll themselves, and only in published,
        non-hidden courses. Instructors and admins may enroll anyone.
        """
        if user.is_learner:
            if target_user_id and target_user_id != user.id:
                raise Forbidden("Learners can only enroll themselves")
            target_user_id = user.id
        target_user_id = target_user_id or user.id

        course = db.query(Course).filter(Course.id == course_id).first()
        if not course:
            raise NotFound("Course not found")

        if user.is_learner and (course.status != CourseStatus.PUBLISHED.value or course.hidden):
            raise Forbidden("Course not available for enrollment")

        if not db.query(User.id).filter(User.id == target_user_id).first():
            raise NotFound("User not found")

        existing = db.query(Enrollment).filter(
            Enrollment.user_id == target_user_id,
            Enrollment.course_id == course_id
        ).first()
        if existing:
            raise Conflict(
                "Already enrolled in this course",
                code="already_enrolled",
                enrollment_id=str(existing.id),
            )

        enrollment = Enrollment(
            user_id=target_user_id,
            course_id=course_id,
            status=ProgressStatus.NOT_STARTED.value,
            progress_pct=0,
        )
        db.add(enrollment)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("Already enrolled in this course", code="already_enrolled")

        db.refresh(enrollment)
        logger.info(f"Enrollment created: {enrollment.id} (user={target_user_id}, course={course_id})")

        return enrollment

    def get_enrollment(self, db: Session, user: User, enrollment_id: UUID) -> Dict[str, Any]:
        """Enrollment with its unit progress rows"""
        enrollment = self._get_visible(db, user, enrollment_id)

        progress = db.query(UnitProgress).filter(
            UnitProgress.enrollment_id == enrollment.id
        ).all()

        return {"enrollment": enrollment, "unit_progress": progress}

    def unenroll(self, db: Session, user: User, enrollment_id: UUID) -> None:
        """Delete an enrollment with its progress, attempts and answers"""
        enrollment = self._get_visible(db, user, enrollment_id)

        db.delete(enrollment)
        db.commit()

        logger.info(f"Enrollment deleted: {enrollment_id} by user {user.id}")


# Global instance
enrollment_service = EnrollmentService()
