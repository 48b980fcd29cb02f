# /formify-backend/app/services/marking_service.py

"""
Teacher-facing views of supervised groups and the private marks a teacher
records for them.

Every operation goes through `_get_supervised_group`: a missing group yields
None (404 in the router) and a group supervised by someone else raises
`PermissionDeniedError` (403).
"""

from typing import List, Dict, Optional

from .database_service import DatabaseService
from .exceptions import PermissionDeniedError
from . import report_service
from ..db.models.group_models import Group


def _get_supervised_group(db: DatabaseService, group_ref: str, teacher_id: str) -> Optional[Group]:
    group = db.get_group_by_ref(group_ref)
    if group is None:
        return None
    if group.assigned_supervisor_id != teacher_id:
        raise PermissionDeniedError("Forbidden")
    return group


def list_supervised_groups(db: DatabaseService, teacher_id: str) -> List[Dict]:
    return [report_service.serialize_group(g) for g in db.get_groups_by_supervisor(teacher_id)]


def get_group_submissions(db: DatabaseService, group_ref: str, teacher_id: str) -> Optional[List[Dict]]:
    """Latest submission per member, newest first."""
    group = _get_supervised_group(db, group_ref, teacher_id)
    if group is None:
        return None
    submissions = report_service.latest_per_student(db.get_submissions_by_group(group.id))
    return [report_service.serialize_submission(s) for s in submissions]


def get_latest_group_submission(db: DatabaseService, group_ref: str, teacher_id: str) -> Optional[Dict]:
    """
    The single most recent submission in the group, wrapped as
    `{"submission": ... | None}`. Returns None only when the group is missing.
    """
    group = _get_supervised_group(db, group_ref, teacher_id)
    if group is None:
        return None
    submissions = db.get_submissions_by_group(group.id)
    return {"submission": report_service.serialize_submission(submissions[0]) if submissions else None}


def get_group_marks(db: DatabaseService, group_ref: str, teacher_id: str) -> Optional[Dict]:
    """Every confirmed member with this teacher's mark (or None), plus the group mark."""
    group = _get_supervised_group(db, group_ref, teacher_id)
    if group is None:
        return None

    marks_by_student = {m.student_id: m for m in db.get_student_marks(group.id, teacher_id)}
    students = []
    for member in group.members:
        mark = marks_by_student.get(member.student_id)
        students.append({
            "studentId": member.student_id,
            "rollNumber": member.roll_number,
            "name": member.student.name if member.student else "",
            "marks": mark.marks if mark else None,
            "updatedAt": mark.updated_at if mark else None,
        })

    group_mark = db.get_group_mark(group.id, teacher_id)
    return {"students": students, "groupMark": _serialize_group_mark(group_mark) if group_mark else None}


def upsert_student_mark(db: DatabaseService, group_ref: str, teacher_id: str, student_id: str, marks: float) -> Optional[Dict]:
    group = _get_supervised_group(db, group_ref, teacher_id)
    if group is None:
        return None
    if not group.has_member(student_id):
        raise ValueError("Student is not a member of this group")

    try:
        mark = db.upsert_student_mark(group.id, student_id, teacher_id, marks)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(mark)
    return {"studentId": mark.student_id, "marks": mark.marks, "updatedAt": mark.updated_at}


def upsert_group_mark(
    db: DatabaseService, group_ref: str, teacher_id: str, marks: float, remarks: Optional[str] = None
) -> Optional[Dict]:
    group = _get_supervised_group(db, group_ref, teacher_id)
    if group is None:
        return None

    try:
        mark = db.upsert_group_mark(group.id, teacher_id, marks, remarks)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(mark)
    return _serialize_group_mark(mark)


def _serialize_group_mark(mark) -> Dict:
    return {
        "groupId": mark.group_id,
        "teacherId": mark.teacher_id,
        "marks": mark.marks,
        "remarks": mark.remarks,
        "updatedAt": mark.updated_at,
    }
