"""
Typed view of a quiz unit's settings_json blob
"""
import json
import logging
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

UNLIMITED_RETRIES = -1


class QuizSettings(BaseModel):
    """
    Per-unit quiz configuration

    - time_limit_minutes: shown to clients only; late submissions are scored normally
    - max_retries: completed attempts allowed, -1 means unlimited
    - pass_threshold: minimum percentage score that passes
    """
    time_limit_minutes: Optional[int] = Field(None, ge=1)
    max_retries: int = Field(UNLIMITED_RETRIES, ge=UNLIMITED_RETRIES)
    pass_threshold: int = Field(70, ge=0, le=100)

    class Config:
        extra = "ignore"

    @property
    def has_retry_limit(self) -> bool:
        return self.max_retries >= 0

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "QuizSettings":
        """Parse settings_json, falling back to defaults on anything malformed"""
        if not raw:
            return cls()

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Malformed quiz settings JSON, using defaults")
            return cls()

        if not isinstance(data, dict):
            logger.warning("Quiz settings are not a JSON object, using defaults")
            return cls()

        # Explicit nulls mean "not configured"
        data = {key: value for key, value in data.items() if value is not None}

        try:
            return cls(**data)
        except ValidationError as e:
            logger.warning(f"Invalid quiz settings, using defaults: {e.error_count()} error(s)")
            return cls()
