"""
Pydantic schemas for badge checks
"""
from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID


class BadgeCheckRequest(BaseModel):
    user_id: Optional[UUID] = None


class BadgeOut(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    icon_url: Optional[str] = None

    class Config:
        from_attributes = True


class BadgeStats(BaseModel):
    course_count: int
    quiz_pass_count: int
    quiz_perfect_count: int
    total_points: int
    level: int


class BadgeCheckResponse(BaseModel):
    stats: BadgeStats
    newly_earned: List[BadgeOut]
    checked_count: int
