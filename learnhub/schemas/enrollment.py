"""
Pydantic schemas for enrollments and unit progress
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from learnhub.models.enums import ProgressStatus


class EnrollmentCreate(BaseModel):
    """Request schema for enrolling in a course"""
    course_id: UUID
    user_id: Optional[UUID] = Field(None, description="Target user (staff only)")


class EnrollmentOut(BaseModel):
    id: UUID
    user_id: UUID
    course_id: UUID
    status: ProgressStatus
    progress_pct: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    enrolled_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UnitProgressOut(BaseModel):
    id: UUID
    enrollment_id: UUID
    unit_id: UUID
    status: ProgressStatus
    score: Optional[int] = None
    time_spent_sec: int
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProgressUpdate(BaseModel):
    """Schema for recording unit progress"""
    unit_id: UUID
    status: Optional[ProgressStatus] = None
    score: Optional[int] = Field(None, ge=0, le=100, description="Unit score (0-100)")
    time_spent_sec: Optional[int] = Field(None, ge=0, description="Seconds to add to the unit's time")


class ProgressResponse(BaseModel):
    """Response for progress update"""
    unit_progress: UnitProgressOut
    enrollment: EnrollmentOut


class EnrollmentDetail(BaseModel):
    enrollment: EnrollmentOut
    unit_progress: List[UnitProgressOut]
