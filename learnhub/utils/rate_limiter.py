"""
Rate limiting for API endpoints
"""
import time
from collections import deque
from fastapi import Request
from typing import Callable, Deque, Dict, Optional
from uuid import UUID
import logging

from learnhub.config import settings
from learnhub.database import SessionLocal
from learnhub.exceptions import RateLimited
from learnhub.services.session_service import session_service

logger = logging.getLogger(__name__)

MINUTE = 60
HOUR = 3600


def lookup_session_user(token: str) -> Optional[UUID]:
    """User id behind a session token, None when the token does not resolve"""
    db = SessionLocal()
    try:
        user = session_service.get_user(db, token)
        return user.id if user else None
    finally:
        db.close()


class RateLimiter:
    """
    In-memory sliding-window rate limiter

    Clients are keyed by user when the request carries a session that
    resolves to one, else by IP. Unresolved tokens count against the IP.
    Each client keeps one deque of request timestamps covering the last hour;
    the per-minute count is taken from its tail.
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        enabled: bool = True,
        clock=time.monotonic,
        resolve_user: Callable[[str], Optional[UUID]] = lookup_session_user,
    ):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.enabled = enabled
        self._clock = clock
        self._resolve_user = resolve_user
        self._requests: Dict[str, Deque[float]] = {}

    def _get_session_token(self, request: Request) -> Optional[str]:
        token = request.cookies.get(settings.SESSION_COOKIE_NAME)
        if token:
            return token

        scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
        if scheme.lower() == "bearer" and credentials:
            return credentials.strip()
        return None

    def _get_client_id(self, request: Request) -> str:
        user_id = getattr(request.state, "user_id", None)

        if user_id is None:
            token = self._get_session_token(request)
            if token:
                user_id = self._resolve_user(token)

        if user_id is not None:
            return f"user:{user_id}"

        return f"ip:{request.client.host if request.client else 'unknown'}"

    def _count_since(self, timestamps: Deque[float], cutoff: float) -> int:
        count = 0
        for ts in reversed(timestamps):
            if ts <= cutoff:
                break
            count += 1
        return count

    def _cleanup_old_entries(self, now: float) -> None:
        """Drop timestamps older than the hour window and clients left empty"""
        cutoff = now - HOUR

        for client_id in list(self._requests.keys()):
            timestamps = self._requests[client_id]
            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()
            if not timestamps:
                del self._requests[client_id]

    @property
    def tracked_clients(self) -> int:
        return len(self._requests)

    def hit(self, client_id: str) -> None:
        """
        Record one request for a client

        Raises:
            RateLimited: the client is over its minute or hour budget
        """
        now = self._clock()
        self._cleanup_old_entries(now)

        timestamps = self._requests.get(client_id, deque())

        if self._count_since(timestamps, now - MINUTE) >= self.requests_per_minute:
            logger.warning(f"Rate limit exceeded (minute): {client_id}")
            raise RateLimited(
                f"Too many requests. Limit: {self.requests_per_minute} requests per minute",
                retry_after=MINUTE,
            )

        if len(timestamps) >= self.requests_per_hour:
            logger.warning(f"Rate limit exceeded (hour): {client_id}")
            raise RateLimited(
                f"Too many requests. Limit: {self.requests_per_hour} requests per hour",
                retry_after=HOUR,
            )

        timestamps.append(now)
        self._requests[client_id] = timestamps

    async def check_rate_limit(self, request: Request) -> Optional[str]:
        if not self.enabled:
            return None

        client_id = self._get_client_id(request)
        self.hit(client_id)
        return client_id


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR,
    enabled=settings.RATE_LIMIT_ENABLED,
)
