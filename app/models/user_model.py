# /formify-backend/app/models/user_model.py

# --- Core Imports ---
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator

from ..services.group_helpers.roll_numbers import normalize_roll


# --- Core Enumerations ---
class UserRole(str, Enum):
    STUDENT = "Student"
    TEACHER = "Teacher"
    ADMIN = "Admin"


# --- Model Definitions ---

class UserCreate(BaseModel):
    """The payload an admin sends to register a Student, Teacher or Admin."""
    rollNumber: str = Field(..., description="University roll number or staff code.")
    name: str = Field(..., min_length=1)
    role: UserRole
    teacherCapacity: Optional[int] = Field(
        default=None, ge=0,
        description="Maximum concurrent supervised groups. Only meaningful for Teachers."
    )

    @field_validator('rollNumber')
    @classmethod
    def roll_number_must_not_be_blank(cls, v):
        roll = normalize_roll(v)
        if not roll: raise ValueError('rollNumber cannot be empty')
        return roll

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v: raise ValueError('name cannot be empty')
        return v


class UserUpdate(BaseModel):
    """Partial update for a Student or Teacher. All fields are optional."""
    name: Optional[str] = Field(default=None)
    rollNumber: Optional[str] = Field(default=None)
    teacherCapacity: Optional[int] = Field(default=None, ge=0)


class CapacityUpdate(BaseModel):
    teacherCapacity: int = Field(..., ge=0)


class UserSummary(BaseModel):
    """The public representation of any user."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    rollNumber: str
    name: str
    role: UserRole


class Teacher(UserSummary):
    """A Teacher together with their live capacity figures."""
    teacherCapacity: int = 0
    assignedGroupsCount: int = 0


class CountDrift(BaseModel):
    """One teacher whose stored assigned-count disagrees with the groups table."""
    teacherId: str
    rollNumber: str
    stored: int
    actual: int
