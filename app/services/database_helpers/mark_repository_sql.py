# /formify-backend/app/services/database_helpers/mark_repository_sql.py

"""
This module contains all the raw SQLAlchemy queries for the `student_marks`
and `group_marks` tables. Marks are private to the teacher who gave them, so
every read is scoped by `teacher_id`.
"""

import uuid
from typing import List, Optional
from sqlalchemy.orm import Session

from app.db.models.mark_models import StudentMark, GroupMark


class MarkRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    # --- Student marks ---

    def get_student_marks(self, group_id: str, teacher_id: str) -> List[StudentMark]:
        return (
            self.db.query(StudentMark)
            .filter(StudentMark.group_id == group_id, StudentMark.teacher_id == teacher_id)
            .all()
        )

    def upsert_student_mark(self, group_id: str, student_id: str, teacher_id: str, marks: float) -> StudentMark:
        mark = (
            self.db.query(StudentMark)
            .filter(
                StudentMark.group_id == group_id,
                StudentMark.student_id == student_id,
                StudentMark.teacher_id == teacher_id,
            )
            .first()
        )
        if mark is None:
            mark = StudentMark(
                id=f"smk_{uuid.uuid4().hex[:12]}",
                group_id=group_id, student_id=student_id, teacher_id=teacher_id,
            )
            self.db.add(mark)
        mark.marks = marks
        self.db.flush()
        return mark

    # --- Group marks ---

    def get_group_mark(self, group_id: str, teacher_id: str) -> Optional[GroupMark]:
        return (
            self.db.query(GroupMark)
            .filter(GroupMark.group_id == group_id, GroupMark.teacher_id == teacher_id)
            .first()
        )

    def upsert_group_mark(self, group_id: str, teacher_id: str, marks: float, remarks: Optional[str]) -> GroupMark:
        mark = self.get_group_mark(group_id, teacher_id)
        if mark is None:
            mark = GroupMark(id=f"gmk_{uuid.uuid4().hex[:12]}", group_id=group_id, teacher_id=teacher_id)
            self.db.add(mark)
        mark.marks = marks
        mark.remarks = remarks
        self.db.flush()
        return mark

    # --- Cascades ---

    def delete_marks_by_group(self, group_id: str) -> int:
        removed = self.db.query(StudentMark).filter(StudentMark.group_id == group_id).delete(synchronize_session="fetch")
        removed += self.db.query(GroupMark).filter(GroupMark.group_id == group_id).delete(synchronize_session="fetch")
        return removed

    def delete_marks_by_teacher(self, teacher_id: str) -> int:
        removed = self.db.query(StudentMark).filter(StudentMark.teacher_id == teacher_id).delete(synchronize_session="fetch")
        removed += self.db.query(GroupMark).filter(GroupMark.teacher_id == teacher_id).delete(synchronize_session="fetch")
        return removed

    def delete_marks_by_student(self, student_id: str) -> int:
        return (
            self.db.query(StudentMark)
            .filter(StudentMark.student_id == student_id)
            .delete(synchronize_session="fetch")
        )
