# /formify-backend/app/services/lifecycle_service.py

"""
Cascading deletes for groups, teachers and students, plus the admin utility
that audits teachers' denormalised assigned-group counts.

Each cascade is a fixed sequence of repository calls committed once at the
end. Every step tolerates the rows it targets already being gone, so an
interrupted cascade can simply be run again.
"""

import logging
from typing import List, Dict

from .database_service import DatabaseService
from .group_helpers import capacity_allocator
from ..db.models.group_models import Group
from ..models.user_model import UserRole

logger = logging.getLogger(__name__)

TEACHER_REMOVED_REASON = "Supervisor removed. Reassign required."


def _cascade_delete_group(db: DatabaseService, group: Group) -> None:
    """Everything `delete_group` does except the commit."""
    capacity_allocator.release(db, group.assigned_supervisor_id)
    db.delete_submissions_by_group(group.id)
    db.delete_marks_by_group(group.id)
    db.delete_group(group)


def delete_group(db: DatabaseService, group_ref: str) -> bool:
    group = db.get_group_by_ref(group_ref)
    if group is None:
        return False

    group_code = group.groupCode
    try:
        _cascade_delete_group(db, group)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Group %s deleted.", group_code)
    return True


def delete_teacher(db: DatabaseService, teacher_id: str) -> bool:
    """
    Removes a teacher. Their groups fall back to Pending and are flagged for
    reassignment; the teacher's own count disappears with the row, so no
    other counter changes.
    """
    teacher = db.get_user_by_id(teacher_id)
    if teacher is None or teacher.role != UserRole.TEACHER.value:
        return False

    try:
        released = db.get_groups_by_supervisor(teacher.id)
        for group in released:
            group.release_to_pending(TEACHER_REMOVED_REASON)
            db.save_group(group)
        db.remove_teacher_from_preferences(teacher.id)
        db.delete_marks_by_teacher(teacher.id)
        db.delete_user(teacher)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Teacher %s deleted; %d group(s) returned to Pending.", teacher_id, len(released))
    return True


def delete_student(db: DatabaseService, student_id: str) -> bool:
    """
    Removes a student from every group they belong to, promoting the next
    member (by join order) to leader where needed. A group left without
    members is deleted with its full cascade.
    """
    student = db.get_user_by_id(student_id)
    if student is None or student.role != UserRole.STUDENT.value:
        return False

    try:
        for group in db.get_groups_by_member_student(student.id):
            db.remove_group_member(group, student.id)
            if not group.members:
                logger.info("Group %s has no members left; deleting it.", group.groupCode)
                _cascade_delete_group(db, group)
                continue
            if group.leader_id == student.id:
                group.leader_id = group.members[0].student_id
                logger.info("Group %s leader changed to %s.", group.groupCode, group.leader_id)
            db.save_group(group)

        db.delete_submissions_by_student(student.id)
        db.delete_marks_by_student(student.id)
        db.delete_user(student)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Student %s deleted.", student_id)
    return True


def reconcile_teacher_counts(db: DatabaseService, apply: bool = False) -> List[Dict]:
    """
    Compares every teacher's stored `assignedGroupsCount` with the number of
    groups that actually name them as supervisor.

    Returns one entry per teacher whose figures disagree. With `apply` the
    stored value is overwritten by the recomputed one.
    """
    actual_counts = db.count_groups_by_supervisor()
    drift = []
    for teacher in db.get_users_by_role(UserRole.TEACHER):
        actual = actual_counts.get(teacher.id, 0)
        if teacher.assignedGroupsCount != actual:
            drift.append({
                "teacherId": teacher.id,
                "rollNumber": teacher.rollNumber,
                "stored": teacher.assignedGroupsCount,
                "actual": actual,
            })

    if apply and drift:
        try:
            for entry in drift:
                db.set_assigned_count(entry["teacherId"], entry["actual"])
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.warning("Corrected assigned-group counts for %d teacher(s).", len(drift))
    return drift
