# /formify-backend/app/db/models/submission_models.py

"""
This module defines the SQLAlchemy ORM model for a `StudentSubmission`, the
latest project form a student submitted for their group.
"""

from sqlalchemy import Column, String, Boolean, JSON, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..base_class import Base


class StudentSubmission(Base):
    """
    SQLAlchemy model representing one student's form for one group.

    There is at most one row per (group_id, student_id). A NULL `group_id`
    marks an unlinked conflict record kept for admin review; the unique
    constraint does not apply to those rows.
    """
    __tablename__ = "student_submissions"
    __table_args__ = (UniqueConstraint("group_id", "student_id", name="uq_submission_group_student"),)

    id = Column(String, primary_key=True, index=True)
    student_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    group_id = Column(String, ForeignKey("groups.id"), nullable=True, index=True)

    name = Column(String, nullable=True)
    universityRollNo = Column(String, nullable=True)
    mobile = Column(String, nullable=True)
    member1Roll = Column(String, nullable=True)
    member2Roll = Column(String, nullable=True)
    member1Name = Column(String, nullable=True)
    member2Name = Column(String, nullable=True)
    projectDomain = Column(String, nullable=True)
    projectDomainOther = Column(String, nullable=True)
    tentativeProjectTitle = Column(String, nullable=True)
    projectDescription = Column(String, nullable=True)
    technologyStack = Column(String, nullable=True)
    expectedOutcomes = Column(String, nullable=True)
    previousExperience = Column(String, nullable=True)
    agreement = Column(Boolean, nullable=True)
    sdgMapping = Column(String, nullable=True)
    teacherPreferences = Column(JSON, nullable=True)  # ordered list of teacher ids
    comments = Column(String, nullable=True)

    # File references: {originalName, filename, mimetype, size, path}
    synopsisFile = Column(JSON, nullable=True)
    presentationFile = Column(JSON, nullable=True)

    submissionTimestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    student = relationship("User")
    group = relationship("Group")
