# /formify-backend/app/models/group_model.py

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from enum import Enum
from datetime import datetime


# --- Core Enumerations ---
class GroupStatus(str, Enum):
    PENDING = "Pending"
    ALLOCATED = "Allocated"


# --- API Contract Models ---

class MemberSummary(BaseModel):
    id: str
    rollNumber: str
    name: str


class GroupRead(BaseModel):
    """The full representation of a project group as returned by the API."""
    id: str
    groupCode: str
    leader: Optional[MemberSummary] = None
    members: List[MemberSummary] = Field(default_factory=list)
    memberRollNumbers: List[str] = Field(default_factory=list)
    expectedPartnerRollNumbers: List[str] = Field(default_factory=list)

    projectTitle: str
    domain: str
    projectDomainOther: Optional[str] = None
    techStack: str
    projectDescription: Optional[str] = None
    expectedOutcomes: Optional[str] = None
    sdgMapping: Optional[str] = None

    teacherPreferences: List[MemberSummary] = Field(default_factory=list)
    assignedSupervisor: Optional[MemberSummary] = None
    status: GroupStatus
    flaggedForAdmin: bool = False
    flagReason: Optional[str] = None
    createdAt: Optional[datetime] = None


class GroupEnvelope(BaseModel):
    group: Optional[GroupRead] = None


class SubmitResponse(BaseModel):
    group: GroupRead
    submissionId: str


class SupervisorReset(BaseModel):
    reason: Optional[str] = None


class SupervisorOverride(BaseModel):
    supervisorId: str = Field(..., min_length=1)
    reason: Optional[str] = None
    force: bool = False


class OverrideLogRead(BaseModel):
    id: str
    adminId: str
    groupId: str
    groupCode: Optional[str] = None
    action: str
    fromState: Optional[Dict[str, Any]] = None
    toState: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None
    createdAt: Optional[datetime] = None
