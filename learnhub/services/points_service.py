"""
Points ledger service
Point totals, derived levels and the leaderboard
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from learnhub.config import settings
from learnhub.exceptions import InvalidState
from learnhub.models import User, UserPoints
from learnhub.models.enums import UserStatus
from learnhub.utils.cache import cache_service

logger = logging.getLogger(__name__)

# Index i holds the minimum total for level i + 1
LEVEL_THRESHOLDS = [0, 100, 300, 600, 1000, 1500, 2200, 3000, 4000, 5000]
MAX_LEVEL = len(LEVEL_THRESHOLDS)


@dataclass(frozen=True)
class PointsState:
    total_points: int = 0
    level: int = 1


@dataclass
class AwardResult:
    points_awarded: int
    new_total: int
    new_level: int
    leveled_up: bool


def calculate_level(total_points: int) -> int:
    """Highest level whose threshold the total reaches"""
    for index in range(MAX_LEVEL - 1, -1, -1):
        if total_points >= LEVEL_THRESHOLDS[index]:
            return index + 1
    return 1


def next_points_state(current: Optional[PointsState], points: int) -> PointsState:
    """Ledger transition: the row after awarding `points` to `current`"""
    base = current.total_points if current else 0
    new_total = base + points
    return PointsState(total_points=new_total, level=calculate_level(new_total))


class PointsService:
    """Service for awarding points and reading totals"""

    def _lock_row(self, db: Session, user_id: UUID) -> Optional[UserPoints]:
        return (
            db.query(UserPoints)
            .filter(UserPoints.user_id == user_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def award_points(
        self,
        db: Session,
        user_id: UUID,
        points: int,
        reason: Optional[str] = None,
        commit: bool = True,
    ) -> AwardResult:
        """
        Add points to a user's total and recompute their level

        Args:
            db: Database session
            user_id: Receiving user
            points: Positive number of points
            reason: Free-form label for the log
            commit: Commit here; pass False when part of a larger unit of work

        Returns:
            AwardResult with the new total and level

        Raises:
            InvalidState: points is not a positive integer
        """
        if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
            raise InvalidState("Points must be a positive number", code="invalid_points")

        row = self._lock_row(db, user_id)
        previous = PointsState(row.total_points, row.level) if row else PointsState()

        if row is None:
            state = next_points_state(None, points)
            try:
                with db.begin_nested():
                    db.add(UserPoints(
                        user_id=user_id,
                        total_points=state.total_points,
                        level=state.level,
                    ))
            except IntegrityError:
                # A concurrent first award created the row
                row = self._lock_row(db, user_id)
                previous = PointsState(row.total_points, row.level)

        if row is not None:
            state = next_points_state(previous, points)
            row.total_points = state.total_points
            row.level = state.level
            db.flush()

        if commit:
            db.commit()
            cache_service.clear_leaderboard_cache()

        result = AwardResult(
            points_awarded=points,
            new_total=state.total_points,
            new_level=state.level,
            leveled_up=state.level > previous.level,
        )

        logger.info(
            f"Points awarded: user={user_id}, points={points}, reason={reason}, "
            f"total={result.new_total}, level={result.new_level}, leveled_up={result.leveled_up}"
        )

        return result

    def next_level_progress(self, total_points: int, level: int) -> Optional[Dict[str, int]]:
        """Progress through the current level band, None at the max level"""
        if level >= MAX_LEVEL:
            return None

        current_threshold = LEVEL_THRESHOLDS[level - 1]
        next_threshold = LEVEL_THRESHOLDS[level]
        band = next_threshold - current_threshold
        progress = round(100 * (total_points - current_threshold) / band)

        return {
            "level": level + 1,
            "points_needed": next_threshold,
            "progress": max(0, min(progress, 100)),
        }

    def get_user_points(self, db: Session, user_id: UUID) -> Dict[str, Any]:
        """
        Get a user's ledger row, defaulting to zero points at level 1

        Returns:
            {"points": {...}, "next_level": {...} | None}
        """
        row = db.query(UserPoints).filter(UserPoints.user_id == user_id).first()

        if row is None:
            points = {"user_id": user_id, "total_points": 0, "level": 1, "updated_at": None}
        else:
            points = {
                "user_id": row.user_id,
                "total_points": row.total_points,
                "level": row.level,
                "updated_at": row.updated_at,
            }

        return {
            "points": points,
            "next_level": self.next_level_progress(points["total_points"], points["level"]),
        }

    def get_rank(self, db: Session, user_id: UUID) -> int:
        """1 + number of users with strictly more points"""
        own_total = (
            db.query(UserPoints.total_points)
            .filter(UserPoints.user_id == user_id)
            .scalar()
        ) or 0

        ahead = (
            db.query(func.count(UserPoints.user_id))
            .filter(UserPoints.total_points > own_total)
            .scalar()
        )
        return ahead + 1

    def get_leaderboard(self, db: Session, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Top active users by total points

        Read-through cached; every award clears the cache.
        """
        limit = max(1, min(limit, settings.LEADERBOARD_MAX_LIMIT))
        cache_key = cache_service.leaderboard_key(limit)

        cached = cache_service.get(cache_key)
        if cached is not None:
            return cached

        rows = (
            db.query(UserPoints, User)
            .join(User, User.id == UserPoints.user_id)
            .filter(User.status == UserStatus.ACTIVE.value)
            .order_by(UserPoints.total_points.desc(), User.name.asc())
            .limit(limit)
            .all()
        )

        leaderboard = [
            {
                "user_id": str(points.user_id),
                "user_name": user.name,
                "total_points": points.total_points,
                "level": points.level,
            }
            for points, user in rows
        ]

        cache_service.set(cache_key, leaderboard)

        return leaderboard


# Global instance
points_service = PointsService()
