"""
Badge API endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional
import logging
from learnhub.api.deps import get_current_user
from learnhub.database import get_db
from learnhub.exceptions import Forbidden
from learnhub.models import User
from learnhub.schemas.badge import BadgeCheckRequest, BadgeCheckResponse
from learnhub.services.badge_service import badge_service


router = APIRouter(prefix="/api/badges", tags=["badges"])
logger = logging.getLogger(__name__)


@router.post("/check", response_model=BadgeCheckResponse)
async def check_badges(
    request: Optional[BadgeCheckRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Grant any badges whose criteria the user now meets"""
    target_id = current_user.id
    if request and request.user_id and request.user_id != current_user.id:
        if not current_user.is_admin:
            raise Forbidden("Admin role required to check another user's badges")
        target_id = request.user_id

    return badge_service.check_badges(db, target_id)
