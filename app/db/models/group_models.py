# /formify-backend/app/db/models/group_models.py

"""
This module defines the SQLAlchemy ORM models for a project `Group` and the
three child tables that hold its roll-number sets and ranked preferences.

Confirmed membership lives in `group_members`, whose `roll_number` column is
unique across the whole table: a roll number can be a confirmed member of at
most one group, and the database refuses a second claim even when two
submissions race each other.
"""

from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from datetime import datetime, timezone

from ..base_class import Base
from ...models.group_model import GroupStatus

MEMBER_ROLL_CONSTRAINT = "uq_group_members_roll_number"


class Group(Base):
    """
    SQLAlchemy model representing one project team.

    The `status`, `assigned_supervisor_id`, `flaggedForAdmin` and `flagReason`
    columns form a small state machine. They are only ever changed together
    through `allocate_to` and `release_to_pending`, and the CHECK constraint
    below rejects an Allocated group without a supervisor (or a Pending group
    with one) at the database level.
    """
    __tablename__ = "groups"
    __table_args__ = (
        CheckConstraint(
            "(status = 'Allocated' AND assigned_supervisor_id IS NOT NULL) OR "
            "(status = 'Pending' AND assigned_supervisor_id IS NULL)",
            name="ck_groups_status_matches_supervisor",
        ),
    )

    id = Column(String, primary_key=True, index=True)
    groupCode = Column(String, unique=True, index=True, nullable=False)
    leader_id = Column(String, ForeignKey("users.id"), nullable=True)

    # Project metadata, locked by the submission that created the group.
    projectTitle = Column(String, nullable=False)
    domain = Column(String, nullable=False)
    projectDomainOther = Column(String, nullable=True)
    techStack = Column(String, nullable=False)
    projectDescription = Column(String, nullable=True)
    expectedOutcomes = Column(String, nullable=True)
    sdgMapping = Column(String, nullable=True)

    assigned_supervisor_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)
    status = Column(String, nullable=False, default=GroupStatus.PENDING.value, index=True)
    flaggedForAdmin = Column(Boolean, nullable=False, default=False, index=True)
    flagReason = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    leader = relationship("User", foreign_keys=[leader_id])
    supervisor = relationship("User", foreign_keys=[assigned_supervisor_id])

    # Join order is preserved by the autoincrement key; leader promotion relies on it.
    members = relationship(
        "GroupMember", back_populates="group", cascade="all, delete-orphan", order_by="GroupMember.id"
    )
    expected_partners = relationship(
        "GroupExpectedPartner", back_populates="group", cascade="all, delete-orphan",
        order_by="GroupExpectedPartner.id"
    )
    teacher_preferences = relationship(
        "GroupTeacherPreference", back_populates="group", cascade="all, delete-orphan",
        order_by="GroupTeacherPreference.rank"
    )

    # --- Read helpers ---

    @property
    def memberRollNumbers(self):
        return [m.roll_number for m in self.members]

    @property
    def expectedPartnerRollNumbers(self):
        return [p.roll_number for p in self.expected_partners]

    @property
    def teacherPreferenceIds(self):
        return [p.teacher_id for p in self.teacher_preferences]

    def has_member(self, student_id: str) -> bool:
        return any(m.student_id == student_id for m in self.members)

    # --- State transitions ---

    def allocate_to(self, teacher_id: str):
        """Pending -> Allocated. Clears any admin flag."""
        if not teacher_id:
            raise ValueError("An allocated group requires a supervisor.")
        self.assigned_supervisor_id = teacher_id
        self.status = GroupStatus.ALLOCATED.value
        self.flaggedForAdmin = False
        self.flagReason = None

    def release_to_pending(self, reason: str):
        """Any state -> Pending, flagged for admin attention with `reason`."""
        self.assigned_supervisor_id = None
        self.status = GroupStatus.PENDING.value
        self.flaggedForAdmin = True
        self.flagReason = reason

    def state_snapshot(self) -> dict:
        return {
            "assignedSupervisor": self.assigned_supervisor_id,
            "status": self.status,
            "flaggedForAdmin": bool(self.flaggedForAdmin),
        }


class GroupMember(Base):
    """A confirmed member: a student whose own submission linked them to the group."""
    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("roll_number", name=MEMBER_ROLL_CONSTRAINT),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(String, ForeignKey("groups.id"), nullable=False, index=True)
    student_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    roll_number = Column(String, index=True, nullable=False)

    group = relationship("Group", back_populates="members")
    student = relationship("User")


class GroupExpectedPartner(Base):
    """A roll number named as a teammate that has not yet submitted on its own."""
    __tablename__ = "group_expected_partners"
    __table_args__ = (UniqueConstraint("group_id", "roll_number", name="uq_expected_partner_group_roll"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(String, ForeignKey("groups.id"), nullable=False, index=True)
    roll_number = Column(String, index=True, nullable=False)

    group = relationship("Group", back_populates="expected_partners")


class GroupTeacherPreference(Base):
    """One ranked supervisor preference, copied from the founding submission."""
    __tablename__ = "group_teacher_preferences"
    __table_args__ = (UniqueConstraint("group_id", "teacher_id", name="uq_preference_group_teacher"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(String, ForeignKey("groups.id"), nullable=False, index=True)
    teacher_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    rank = Column(Integer, nullable=False)

    group = relationship("Group", back_populates="teacher_preferences")
    teacher = relationship("User")
