"""
Points ledger API endpoints
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging
from learnhub.api.deps import get_current_user
from learnhub.config import settings
from learnhub.database import get_db
from learnhub.exceptions import Forbidden
from learnhub.models import User
from learnhub.schemas.points import (
    LeaderboardResponse,
    PointsAward,
    PointsAwardResponse,
    UserPointsResponse,
)
from learnhub.services.points_service import points_service


router = APIRouter(prefix="/api/points", tags=["points"])
logger = logging.getLogger(__name__)


def _resolve_target(current_user: User, user_id: Optional[UUID]) -> UUID:
    if user_id and user_id != current_user.id:
        if not current_user.is_admin:
            raise Forbidden("Admin role required to act on another user's points")
        return user_id
    return current_user.id


@router.get("", response_model=UserPointsResponse)
async def get_points(
    user_id: Optional[UUID] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Total, level and progress toward the next level"""
    target_id = _resolve_target(current_user, user_id)
    return points_service.get_user_points(db, target_id)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: int = Query(10, ge=1, le=settings.LEADERBOARD_MAX_LIMIT),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return LeaderboardResponse(
        leaderboard=points_service.get_leaderboard(db, limit),
        current_user_rank=points_service.get_rank(db, current_user.id),
    )


@router.post("", response_model=PointsAwardResponse)
async def award_points(
    request: PointsAward,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Award points

    Anyone may award to themselves; awarding to another user requires admin.
    """
    target_id = _resolve_target(current_user, request.user_id)

    result = points_service.award_points(db, target_id, request.points, reason=request.reason)

    return PointsAwardResponse(
        points_awarded=result.points_awarded,
        reason=request.reason,
        new_total=result.new_total,
        new_level=result.new_level,
        leveled_up=result.leveled_up,
    )
