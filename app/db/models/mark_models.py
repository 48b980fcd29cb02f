# /formify-backend/app/db/models/mark_models.py

from sqlalchemy import Column, String, Float, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from ..base_class import Base


class StudentMark(Base):
    """A teacher's private score for one student in one group."""
    __tablename__ = "student_marks"
    __table_args__ = (
        UniqueConstraint("group_id", "student_id", "teacher_id", name="uq_student_mark_group_student_teacher"),
    )

    id = Column(String, primary_key=True, index=True)
    group_id = Column(String, ForeignKey("groups.id"), nullable=False, index=True)
    student_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    teacher_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    marks = Column(Float, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class GroupMark(Base):
    """A teacher's private score for a whole group."""
    __tablename__ = "group_marks"
    __table_args__ = (UniqueConstraint("group_id", "teacher_id", name="uq_group_mark_group_teacher"),)

    id = Column(String, primary_key=True, index=True)
    group_id = Column(String, ForeignKey("groups.id"), nullable=False, index=True)
    teacher_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    marks = Column(Float, nullable=False)
    remarks = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
