# /formify-backend/app/services/database_helpers/submission_repository_sql.py

"""
This module contains all the raw SQLAlchemy queries for the
`student_submissions` table.
"""

from typing import List, Dict, Optional
from sqlalchemy.orm import Session

from app.db.models.submission_models import StudentSubmission


class SubmissionRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def _latest_first(self, query):
        return query.order_by(
            StudentSubmission.submissionTimestamp.desc(), StudentSubmission.created_at.desc()
        )

    # --- Lookups ---

    def get_submission_by_id(self, submission_id: str) -> Optional[StudentSubmission]:
        return self.db.query(StudentSubmission).filter(StudentSubmission.id == submission_id).first()

    def get_latest_submission(self, group_id: str, student_id: str, for_update: bool = False) -> Optional[StudentSubmission]:
        """The most recent row for (group, student); `for_update` row-locks it."""
        query = self.db.query(StudentSubmission).filter(
            StudentSubmission.group_id == group_id,
            StudentSubmission.student_id == student_id,
        )
        if for_update:
            query = query.with_for_update()
        return self._latest_first(query).first()

    def get_submissions_by_group(self, group_id: str) -> List[StudentSubmission]:
        return self._latest_first(
            self.db.query(StudentSubmission).filter(StudentSubmission.group_id == group_id)
        ).all()

    def get_linked_submissions(self) -> List[StudentSubmission]:
        return self._latest_first(
            self.db.query(StudentSubmission).filter(StudentSubmission.group_id.isnot(None))
        ).all()

    def get_orphaned_submissions(self) -> List[StudentSubmission]:
        return self._latest_first(
            self.db.query(StudentSubmission).filter(StudentSubmission.group_id.is_(None))
        ).all()

    # --- Mutations ---

    def add_submission(self, record: Dict) -> StudentSubmission:
        submission = StudentSubmission(**record)
        self.db.add(submission)
        self.db.flush()
        return submission

    def update_submission(self, submission: StudentSubmission, data: Dict) -> StudentSubmission:
        for key, value in data.items():
            setattr(submission, key, value)
        self.db.flush()
        return submission

    def delete_other_submissions(self, group_id: str, student_id: str, keep_id: str) -> int:
        """Removes every (group, student) row except `keep_id`. Returns how many went."""
        return (
            self.db.query(StudentSubmission)
            .filter(
                StudentSubmission.group_id == group_id,
                StudentSubmission.student_id == student_id,
                StudentSubmission.id != keep_id,
            )
            .delete(synchronize_session="fetch")
        )

    def delete_submissions_by_group(self, group_id: str) -> int:
        return (
            self.db.query(StudentSubmission)
            .filter(StudentSubmission.group_id == group_id)
            .delete(synchronize_session="fetch")
        )

    def delete_submissions_by_student(self, student_id: str) -> int:
        return (
            self.db.query(StudentSubmission)
            .filter(StudentSubmission.student_id == student_id)
            .delete(synchronize_session="fetch")
        )
