"""
Unit progress and enrollment completion service
"""
import logging
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from learnhub.database import utcnow
from learnhub.exceptions import Forbidden, NotFound, ValidationError
from learnhub.models import Enrollment, Unit, UnitProgress, User
from learnhub.models.enums import ProgressStatus
from learnhub.services.grading_service import percentage

logger = logging.getLogger(__name__)


class CompletionService:
    """
    Service tracking per-unit progress and the enrollment aggregate

    Aggregate: progress_pct = round(100 * completed units / units in course)
    - 0%        -> enrollment status unchanged
    - 1..99%    -> in_progress
    - 100%      -> completed, completed_at stamped the first time only

    The enrollment row is locked for the whole update so that two units
    completing at once both see each other's progress row when counting.
    """

    def next_enrollment_status(self, current: str, progress_pct: int) -> str:
        if progress_pct >= 100:
            return ProgressStatus.COMPLETED.value
        if progress_pct > 0:
            return ProgressStatus.IN_PROGRESS.value
        return current

    def lock_enrollment(self, db: Session, enrollment_id: UUID) -> Optional[Enrollment]:
        return (
            db.query(Enrollment)
            .filter(Enrollment.id == enrollment_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def _get_or_create_progress(
        self,
        db: Session,
        enrollment_id: UUID,
        unit_id: UUID
    ) -> Tuple[UnitProgress, bool]:
        progress = db.query(UnitProgress).filter(
            UnitProgress.enrollment_id == enrollment_id,
            UnitProgress.unit_id == unit_id
        ).first()

        if progress:
            return progress, False

        progress = UnitProgress(
            enrollment_id=enrollment_id,
            unit_id=unit_id,
            status=ProgressStatus.NOT_STARTED.value,
            time_spent_sec=0,
        )
        db.add(progress)
        return progress, True

    def _apply_status(self, progress: UnitProgress, status: str) -> None:
        if status == ProgressStatus.COMPLETED.value and progress.completed_at is None:
            progress.completed_at = utcnow()
        progress.status = status

    def recompute_enrollment(self, db: Session, enrollment: Enrollment) -> Enrollment:
        """
        Recompute progress_pct and status from the stored unit progress

        Caller must hold the enrollment lock (see lock_enrollment).
        """
        db.flush()

        total_units = db.query(func.count(Unit.id)).filter(
            Unit.course_id == enrollment.course_id
        ).scalar()

        completed_units = db.query(func.count(UnitProgress.id)).filter(
            UnitProgress.enrollment_id == enrollment.id,
            UnitProgress.status == ProgressStatus.COMPLETED.value
        ).scalar()

        now = utcnow()
        if enrollment.started_at is None:
            enrollment.started_at = now

        if total_units == 0:
            enrollment.progress_pct = 0
            db.flush()
            return enrollment

        progress_pct = min(percentage(completed_units, total_units), 100)
        enrollment.progress_pct = progress_pct
        enrollment.status = self.next_enrollment_status(enrollment.status, progress_pct)

        if progress_pct == 100 and enrollment.completed_at is None:
            enrollment.completed_at = now
            logger.info(f"Enrollment completed: {enrollment.id}")

        db.flush()

        logger.info(
            f"Enrollment progress: id={enrollment.id}, "
            f"completed={completed_units}/{total_units}, pct={progress_pct}, status={enrollment.status}"
        )

        return enrollment

    def record_unit_progress(
        self,
        db: Session,
        user: User,
        enrollment_id: UUID,
        unit_id: UUID,
        status: Optional[str] = None,
        score: Optional[int] = None,
        time_delta_sec: Optional[int] = None,
    ) -> Tuple[UnitProgress, Enrollment]:
        """
        Upsert a unit progress row and recompute the enrollment

        Args:
            db: Database session
            user: Acting user; learners may only touch their own enrollments
            enrollment_id: Enrollment UUID
            unit_id: Unit UUID, must belong to the enrollment's course
            status: New unit status
            score: Unit score (0-100)
            time_delta_sec: Seconds to add to time_spent_sec

        Returns:
            Tuple of (unit_progress, enrollment)
        """
        enrollment = self.lock_enrollment(db, enrollment_id)
        if not enrollment:
            raise NotFound("Enrollment not found")

        if user.is_learner and enrollment.user_id != user.id:
            raise Forbidden("Cannot record progress on another user's enrollment")

        unit = db.query(Unit).filter(Unit.id == unit_id).first()
        if not unit or unit.course_id != enrollment.course_id:
            raise ValidationError("Unit not found in this course", code="unit_not_in_course")

        progress, created = self._get_or_create_progress(db, enrollment.id, unit.id)

        if status is not None:
            self._apply_status(progress, status)
        if score is not None:
            progress.score = score
        if time_delta_sec:
            progress.time_spent_sec = (progress.time_spent_sec or 0) + time_delta_sec

        self.recompute_enrollment(db, enrollment)
        db.commit()
        db.refresh(progress)
        db.refresh(enrollment)

        logger.info(
            f"Unit progress recorded: enrollment={enrollment.id}, unit={unit.id}, "
            f"status={progress.status}, created={created}"
        )

        return progress, enrollment

    def mark_unit_completed(
        self,
        db: Session,
        enrollment: Enrollment,
        unit: Unit,
        score: Optional[int] = None
    ) -> UnitProgress:
        """
        Complete a unit as part of a larger unit of work (no commit)

        Keeps an earlier first-completion timestamp and accumulated time.
        """
        enrollment = self.lock_enrollment(db, enrollment.id)
        progress, _ = self._get_or_create_progress(db, enrollment.id, unit.id)

        self._apply_status(progress, ProgressStatus.COMPLETED.value)
        if score is not None:
            progress.score = score

        self.recompute_enrollment(db, enrollment)
        return progress


# Global instance
completion_service = CompletionService()
