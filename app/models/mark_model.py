# /formify-backend/app/models/mark_model.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class StudentMarkUpdate(BaseModel):
    marks: float = Field(..., ge=0, le=100, description="Score between 0 and 100.")


class GroupMarkUpdate(BaseModel):
    marks: float = Field(..., ge=0, le=100)
    remarks: Optional[str] = None


class StudentMarkRow(BaseModel):
    """One member of a supervised group and the caller's mark for them (if any)."""
    studentId: str
    rollNumber: str
    name: str
    marks: Optional[float] = None
    updatedAt: Optional[datetime] = None


class GroupMarkRead(BaseModel):
    groupId: str
    teacherId: str
    marks: float
    remarks: Optional[str] = None
    updatedAt: Optional[datetime] = None
