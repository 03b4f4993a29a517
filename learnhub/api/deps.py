"""
Request dependencies - identity and role checks
"""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from learnhub.config import settings
from learnhub.database import get_db
from learnhub.exceptions import Forbidden, Unauthorized
from learnhub.models import User
from learnhub.models.enums import UserRole
from learnhub.services.session_service import session_service


def get_session_token(request: Request) -> Optional[str]:
    """Session token from the session cookie or a Bearer header"""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        return token

    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()

    return None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token = get_session_token(request)
    if not token:
        raise Unauthorized("Not authenticated")

    user = session_service.get_user(db, token)
    if not user:
        raise Unauthorized("Session expired or invalid")

    request.state.user_id = user.id
    return user


def require_staff(current_user: User = Depends(get_current_user)) -> User:
    """Instructors and admins"""
    if current_user.role not in (UserRole.ADMIN.value, UserRole.INSTRUCTOR.value):
        raise Forbidden("Instructor or admin role required")
    return current_user
