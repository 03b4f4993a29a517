"""
Quiz attempt lifecycle service

States:
- NotStarted: no attempt row for (enrollment, unit)
- InProgress: attempt row with completed_at NULL
- Completed: completed_at set; terminal
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from learnhub.config import settings
from learnhub.database import utcnow
from learnhub.exceptions import (
    AlreadyCompleted,
    Forbidden,
    NotAQuiz,
    NotEnrolled,
    NotFound,
    RetryLimitReached,
)
from learnhub.models import Enrollment, Question, QuizAnswer, QuizAttempt, Unit, User
from learnhub.schemas.quiz_settings import QuizSettings
from learnhub.services.completion_service import completion_service
from learnhub.services.grading_service import grading_service
from learnhub.services.points_service import points_service
from learnhub.utils.cache import cache_service

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    attempt: QuizAttempt
    score: int
    passed: bool
    earned_points: int
    total_points: int
    points_awarded: int


class QuizAttemptService:
    """Service driving quiz attempts from start to scored completion"""

    def _unit_questions(self, db: Session, unit_id: UUID) -> List[Question]:
        return (
            db.query(Question)
            .filter(Question.unit_id == unit_id)
            .order_by(Question.sort_order.asc())
            .all()
        )

    def start_or_resume_attempt(
        self,
        db: Session,
        user: User,
        unit_id: UUID
    ) -> Tuple[QuizAttempt, bool]:
        """
        Start a new attempt, or return the one already in progress

        Args:
            db: Database session
            user: Learner taking the quiz
            unit_id: Quiz unit UUID

        Returns:
            Tuple of (attempt, resumed)
        """
        unit = db.query(Unit).filter(Unit.id == unit_id).first()
        if not unit:
            raise NotFound("Unit not found")

        if not unit.is_quiz:
            raise NotAQuiz("Unit is not a quiz")

        # Locked so two concurrent starts cannot both create an attempt
        enrollment = (
            db.query(Enrollment)
            .filter(Enrollment.user_id == user.id, Enrollment.course_id == unit.course_id)
            .with_for_update()
            .first()
        )
        if not enrollment:
            raise NotEnrolled("Not enrolled in this course")

        quiz_settings = QuizSettings.from_json(unit.settings_json)

        if quiz_settings.has_retry_limit:
            completed_attempts = db.query(func.count(QuizAttempt.id)).filter(
                QuizAttempt.enrollment_id == enrollment.id,
                QuizAttempt.unit_id == unit.id,
                QuizAttempt.completed_at.isnot(None)
            ).scalar()

            if completed_attempts >= quiz_settings.max_retries:
                logger.warning(
                    f"Retry limit reached: enrollment={enrollment.id}, unit={unit.id}, "
                    f"attempts={completed_attempts}, max={quiz_settings.max_retries}"
                )
                raise RetryLimitReached("Maximum retry limit reached")

        in_progress = db.query(QuizAttempt).filter(
            QuizAttempt.enrollment_id == enrollment.id,
            QuizAttempt.unit_id == unit.id,
            QuizAttempt.completed_at.is_(None)
        ).first()

        if in_progress:
            logger.info(f"Resuming quiz attempt {in_progress.id}")
            return in_progress, True

        attempt = QuizAttempt(enrollment_id=enrollment.id, unit_id=unit.id, started_at=utcnow())
        db.add(attempt)
        db.commit()
        db.refresh(attempt)

        logger.info(f"Quiz attempt started: {attempt.id} (enrollment={enrollment.id}, unit={unit.id})")

        return attempt, False

    def submit_attempt(
        self,
        db: Session,
        user: User,
        attempt_id: UUID,
        answers: Iterable[Tuple[UUID, Optional[str]]]
    ) -> SubmissionResult:
        """
        Score a submission and complete the attempt

        Args:
            db: Database session
            user: Submitting learner, must own the attempt
            attempt_id: Attempt UUID
            answers: (question_id, answer_text) pairs; a repeated question keeps its last answer

        Returns:
            SubmissionResult with the completed attempt and score breakdown
        """
        attempt = db.query(QuizAttempt).filter(QuizAttempt.id == attempt_id).first()
        if not attempt:
            raise NotFound("Attempt not found")

        enrollment = attempt.enrollment
        if enrollment.user_id != user.id:
            raise Forbidden("Cannot submit another user's attempt")

        if attempt.is_completed:
            raise AlreadyCompleted("Attempt already completed")

        unit = attempt.unit
        quiz_settings = QuizSettings.from_json(unit.settings_json)

        answer_map = {question_id: answer for question_id, answer in answers}
        grading = grading_service.grade_submission(
            self._unit_questions(db, unit.id), answer_map
        )

        score = grading.score
        passed = score >= quiz_settings.pass_threshold
        points_awarded = 0

        try:
            # Guarded transition: only one request can move the attempt out of InProgress
            claimed = db.query(QuizAttempt).filter(
                QuizAttempt.id == attempt.id,
                QuizAttempt.completed_at.is_(None)
            ).update(
                {"score": score, "passed": passed, "completed_at": utcnow()},
                synchronize_session=False
            )

            if claimed != 1:
                db.rollback()
                logger.warning(f"Concurrent submission lost the race: attempt={attempt.id}")
                raise AlreadyCompleted("Attempt already completed")

            db.query(QuizAnswer).filter(QuizAnswer.attempt_id == attempt.id).delete(
                synchronize_session=False
            )
            db.add_all([
                QuizAnswer(
                    attempt_id=attempt.id,
                    question_id=graded.question_id,
                    answer=graded.answer,
                    is_correct=graded.is_correct,
                )
                for graded in grading.answers
            ])

            if passed:
                award = points_service.award_points(
                    db, user.id, settings.POINTS_QUIZ_PASS, reason="quiz_pass", commit=False
                )
                points_awarded += award.points_awarded

                if score == 100:
                    award = points_service.award_points(
                        db, user.id, settings.POINTS_QUIZ_PERFECT, reason="quiz_perfect", commit=False
                    )
                    points_awarded += award.points_awarded

                completion_service.mark_unit_completed(db, enrollment, unit, score)

            db.commit()

        except AlreadyCompleted:
            raise
        except Exception as e:
            logger.error(f"Failed to submit attempt {attempt.id}: {str(e)}")
            db.rollback()
            raise

        if points_awarded:
            cache_service.clear_leaderboard_cache()

        db.refresh(attempt)

        logger.info(
            f"Quiz attempt submitted: {attempt.id}, score={score}, passed={passed}, "
            f"points_awarded={points_awarded}"
        )

        return SubmissionResult(
            attempt=attempt,
            score=score,
            passed=passed,
            earned_points=grading.earned_points,
            total_points=grading.total_points,
            points_awarded=points_awarded,
        )

    def summarize(self, attempt: QuizAttempt) -> Dict[str, Any]:
        """Attempt row plus unit name and answer counts"""
        return {
            "id": attempt.id,
            "enrollment_id": attempt.enrollment_id,
            "unit_id": attempt.unit_id,
            "unit_name": attempt.unit.name if attempt.unit else None,
            "score": attempt.score,
            "passed": attempt.passed,
            "started_at": attempt.started_at,
            "completed_at": attempt.completed_at,
            "total_questions": len(attempt.answers),
            "correct_answers": sum(1 for answer in attempt.answers if answer.is_correct),
        }

    def list_attempts(
        self,
        db: Session,
        user: User,
        enrollment_id: Optional[UUID] = None,
        unit_id: Optional[UUID] = None
    ) -> List[Dict[str, Any]]:
        """Attempts newest first; learners only see their own"""
        query = (
            db.query(QuizAttempt)
            .join(Enrollment, QuizAttempt.enrollment_id == Enrollment.id)
            .options(joinedload(QuizAttempt.unit), selectinload(QuizAttempt.answers))
        )

        if user.is_learner:
            query = query.filter(Enrollment.user_id == user.id)
        if enrollment_id:
            query = query.filter(QuizAttempt.enrollment_id == enrollment_id)
        if unit_id:
            query = query.filter(QuizAttempt.unit_id == unit_id)

        attempts = query.order_by(QuizAttempt.started_at.desc()).all()
        return [self.summarize(attempt) for attempt in attempts]

    def get_attempt_detail(self, db: Session, user: User, attempt_id: UUID) -> Dict[str, Any]:
        """
        Attempt with stored answers and the unit's questions

        Correct answers are only revealed once the attempt is completed.
        """
        attempt = db.query(QuizAttempt).filter(QuizAttempt.id == attempt_id).first()
        if not attempt:
            raise NotFound("Attempt not found")

        if user.is_learner and attempt.enrollment.user_id != user.id:
            raise Forbidden("Cannot view another user's attempt")

        reveal = attempt.is_completed

        answers = []
        stored = sorted(attempt.answers, key=lambda a: a.question.sort_order or 0)
        for answer in stored:
            answers.append({
                "question_id": answer.question_id,
                "answer": answer.answer,
                "is_correct": answer.is_correct,
                "question_text": answer.question.question_text,
                "question_type": answer.question.type,
                "options": answer.question.options,
                "points": answer.question.points,
                "correct_answer": answer.question.correct_answer if reveal else None,
            })

        questions = [
            {
                "id": question.id,
                "question_text": question.question_text,
                "type": question.type,
                "options": question.options,
                "points": question.points,
                "sort_order": question.sort_order,
            }
            for question in self._unit_questions(db, attempt.unit_id)
        ]

        return {
            "attempt": self.summarize(attempt),
            "answers": answers,
            "questions": questions,
        }


# Global instance
quiz_attempt_service = QuizAttemptService()
