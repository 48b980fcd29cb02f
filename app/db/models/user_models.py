# /formify-backend/app/db/models/user_models.py

"""
This module defines the SQLAlchemy ORM model for the `User` entity, the shared
directory of Students, Teachers and Admins.

Teachers additionally carry a supervision capacity and a denormalised
`assignedGroupsCount`. The count is the only value consulted by capacity
checks, so it is maintained by single-statement increments and decrements in
the user repository rather than recomputed from the groups table.
"""

from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint
from sqlalchemy.sql import func

from ..base_class import Base


class User(Base):
    """
    SQLAlchemy model representing any person known to the system.

    `rollNumber` is the identity key and is always stored trimmed and
    upper-cased.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint('"teacherCapacity" >= 0', name="ck_users_capacity_non_negative"),
        CheckConstraint('"assignedGroupsCount" >= 0', name="ck_users_assigned_non_negative"),
    )

    id = Column(String, primary_key=True, index=True)
    rollNumber = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, index=True, nullable=False)  # 'Student', 'Teacher' or 'Admin'

    # Teacher-only. Both stay at 0 for Students and Admins.
    teacherCapacity = Column(Integer, nullable=False, default=0)
    assignedGroupsCount = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
