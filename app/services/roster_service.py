# /formify-backend/app/services/roster_service.py

"""
Admin management of the user directory: creating users and editing the
Students and Teachers already registered.

Roll numbers are the identity key shared with the grouping logic, so every
write normalises them first and refuses one that another user already owns.
"""

import logging
import uuid
from typing import List, Optional

from .database_service import DatabaseService
from .exceptions import DuplicateRollNumberError
from .group_helpers.roll_numbers import normalize_roll
from ..config import DEFAULT_TEACHER_CAPACITY
from ..db.models.user_models import User
from ..models import user_model
from ..models.user_model import UserRole

logger = logging.getLogger(__name__)

DUPLICATE_ROLL_MESSAGE = "rollNumber already exists"


def _ensure_roll_available(db: DatabaseService, roll_number: str, owner_id: Optional[str] = None) -> None:
    existing = db.get_user_by_roll(roll_number)
    if existing is not None and existing.id != owner_id:
        raise DuplicateRollNumberError(DUPLICATE_ROLL_MESSAGE)


def create_user(db: DatabaseService, user_data: user_model.UserCreate) -> User:
    _ensure_roll_available(db, user_data.rollNumber)

    capacity = 0
    if user_data.role == UserRole.TEACHER:
        capacity = user_data.teacherCapacity if user_data.teacherCapacity is not None else DEFAULT_TEACHER_CAPACITY

    record = {
        "id": f"usr_{uuid.uuid4().hex[:12]}",
        "rollNumber": user_data.rollNumber,
        "name": user_data.name,
        "role": user_data.role.value,
        "teacherCapacity": capacity,
        "assignedGroupsCount": 0,
    }
    try:
        user = db.add_user(record)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Created %s %s.", user.role, user.rollNumber)
    return user


def _update_user(db: DatabaseService, user: User, update: user_model.UserUpdate, allow_capacity: bool) -> User:
    """Applies the non-blank fields of `update`. Raises ValueError when nothing remains."""
    data = {}
    if update.name is not None and update.name.strip():
        data["name"] = update.name.strip()
    if update.rollNumber is not None:
        roll = normalize_roll(update.rollNumber)
        if not roll:
            raise ValueError("rollNumber cannot be empty")
        _ensure_roll_available(db, roll, owner_id=user.id)
        data["rollNumber"] = roll
    if allow_capacity and update.teacherCapacity is not None:
        data["teacherCapacity"] = update.teacherCapacity

    if not data:
        raise ValueError("No valid fields to update")

    old_roll = user.rollNumber
    try:
        db.update_user(user, data)
        if data.get("rollNumber", old_roll) != old_roll:
            # Confirmed and expected membership are both keyed by roll number.
            db.rename_group_member_roll(user.id, data["rollNumber"])
            db.rename_expected_partner_roll(old_roll, data["rollNumber"])
        db.commit()
    except Exception:
        db.rollback()
        raise
    return user


def _get_user_with_role(db: DatabaseService, user_id: str, role: UserRole) -> Optional[User]:
    user = db.get_user_by_id(user_id)
    if user is None or user.role != role.value:
        return None
    return user


def update_teacher(db: DatabaseService, teacher_id: str, update: user_model.UserUpdate) -> Optional[User]:
    teacher = _get_user_with_role(db, teacher_id, UserRole.TEACHER)
    if teacher is None:
        return None
    return _update_user(db, teacher, update, allow_capacity=True)


def update_teacher_capacity(db: DatabaseService, teacher_id: str, capacity: int) -> Optional[User]:
    """
    Sets a teacher's capacity. Lowering it below the current count is allowed;
    the teacher simply receives no new groups until the count drops.
    """
    teacher = _get_user_with_role(db, teacher_id, UserRole.TEACHER)
    if teacher is None:
        return None
    try:
        db.update_user(teacher, {"teacherCapacity": capacity})
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Teacher %s capacity set to %d.", teacher.rollNumber, capacity)
    return teacher


def update_student(db: DatabaseService, student_id: str, update: user_model.UserUpdate) -> Optional[User]:
    student = _get_user_with_role(db, student_id, UserRole.STUDENT)
    if student is None:
        return None
    return _update_user(db, student, update, allow_capacity=False)


def list_teachers(db: DatabaseService) -> List[User]:
    return db.get_users_by_role(UserRole.TEACHER)


def list_students(db: DatabaseService) -> List[User]:
    return db.get_users_by_role(UserRole.STUDENT)
