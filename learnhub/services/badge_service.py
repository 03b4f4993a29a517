"""
Badge service - grants badges whose criteria a learner meets
"""
import json
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from learnhub.models import Badge, Enrollment, QuizAttempt, UserBadge, UserPoints
from learnhub.models.enums import ProgressStatus

logger = logging.getLogger(__name__)


class BadgeService:
    """
    Evaluates badge criteria of the form {"type": <stat>, "value": <n>}

    Supported stats: course_count, quiz_pass_count, quiz_perfect_count,
    points, level. A badge is earned when stat >= value.
    """

    STAT_FOR_CRITERIA = {
        "course_count": "course_count",
        "quiz_pass_count": "quiz_pass_count",
        "quiz_perfect_count": "quiz_perfect_count",
        "points": "total_points",
        "level": "level",
    }

    def get_stats(self, db: Session, user_id: UUID) -> Dict[str, int]:
        course_count = db.query(func.count(Enrollment.id)).filter(
            Enrollment.user_id == user_id,
            Enrollment.status == ProgressStatus.COMPLETED.value
        ).scalar()

        attempts = (
            db.query(func.count(QuizAttempt.id))
            .join(Enrollment, QuizAttempt.enrollment_id == Enrollment.id)
            .filter(Enrollment.user_id == user_id)
        )
        quiz_pass_count = attempts.filter(QuizAttempt.passed.is_(True)).scalar()
        quiz_perfect_count = attempts.filter(QuizAttempt.score == 100).scalar()

        points = db.query(UserPoints).filter(UserPoints.user_id == user_id).first()

        return {
            "course_count": course_count or 0,
            "quiz_pass_count": quiz_pass_count or 0,
            "quiz_perfect_count": quiz_perfect_count or 0,
            "total_points": points.total_points if points else 0,
            "level": points.level if points else 1,
        }

    def _parse_criteria(self, raw: Optional[str]) -> Optional[Dict[str, Any]]:
        try:
            criteria = json.loads(raw or "")
        except (TypeError, ValueError):
            return None

        if not isinstance(criteria, dict):
            return None
        if criteria.get("type") not in self.STAT_FOR_CRITERIA:
            return None
        if not isinstance(criteria.get("value"), (int, float)):
            return None
        return criteria

    def check_badges(self, db: Session, user_id: UUID) -> Dict[str, Any]:
        """
        Grant every unearned badge whose criteria are met

        Returns:
            {"stats": {...}, "newly_earned": [Badge], "checked_count": int}
        """
        stats = self.get_stats(db, user_id)

        earned_ids = select(UserBadge.badge_id).where(UserBadge.user_id == user_id)
        unearned = db.query(Badge).filter(Badge.id.notin_(earned_ids)).all()

        newly_earned = []
        for badge in unearned:
            criteria = self._parse_criteria(badge.criteria_json)
            if criteria is None:
                continue

            stat = stats[self.STAT_FOR_CRITERIA[criteria["type"]]]
            if stat < criteria["value"]:
                continue

            try:
                with db.begin_nested():
                    db.add(UserBadge(user_id=user_id, badge_id=badge.id))
            except IntegrityError:
                # A concurrent check granted it first
                logger.info(f"Badge {badge.id} already granted to user {user_id}")
                continue

            newly_earned.append(badge)

        db.commit()

        if newly_earned:
            logger.info(
                f"Badges earned: user={user_id}, badges={[badge.name for badge in newly_earned]}"
            )

        return {
            "stats": stats,
            "newly_earned": newly_earned,
            "checked_count": len(unearned),
        }


# Global instance
badge_service = BadgeService()
