"""
Pydantic schemas for the points ledger and leaderboard
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class PointsAward(BaseModel):
    """Request schema for awarding points"""
    user_id: Optional[UUID] = Field(None, description="Receiving user (admin only when not yourself)")
    points: int
    reason: Optional[str] = Field(None, max_length=255)


class PointsAwardResponse(BaseModel):
    success: bool = True
    points_awarded: int
    reason: Optional[str] = None
    new_total: int
    new_level: int
    leveled_up: bool


class UserPointsOut(BaseModel):
    user_id: UUID
    total_points: int
    level: int
    updated_at: Optional[datetime] = None


class NextLevel(BaseModel):
    level: int
    points_needed: int
    progress: int


class UserPointsResponse(BaseModel):
    points: UserPointsOut
    next_level: Optional[NextLevel] = None


class LeaderboardEntry(BaseModel):
    user_id: UUID
    user_name: str
    total_points: int
    level: int


class LeaderboardResponse(BaseModel):
    leaderboard: List[LeaderboardEntry]
    current_user_rank: int
