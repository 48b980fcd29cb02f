# /formify-backend/app/services/database_service.py

from typing import List, Dict, Optional, Generator, Iterable
from sqlalchemy.orm import Session
from fastapi import Depends

# --- Core Database Setup ---
from app.db.database import get_db
from app.models.user_model import UserRole

# --- Repository Imports ---
from .database_helpers.user_repository_sql import UserRepositorySQL
from .database_helpers.group_repository_sql import GroupRepositorySQL
from .database_helpers.submission_repository_sql import SubmissionRepositorySQL
from .database_helpers.mark_repository_sql import MarkRepositorySQL
from .database_helpers.audit_repository_sql import AuditRepositorySQL


class DatabaseService:
    def __init__(self, db_session: Session):
        """
        Initializes the DatabaseService around one SQLAlchemy session.

        Every repository shares the session, so everything a service does
        between two `commit()` calls is a single transaction.
        """
        self.session = db_session
        self.user_repo = UserRepositorySQL(db_session)
        self.group_repo = GroupRepositorySQL(db_session)
        self.submission_repo = SubmissionRepositorySQL(db_session)
        self.mark_repo = MarkRepositorySQL(db_session)
        self.audit_repo = AuditRepositorySQL(db_session)

    # --- UNIT OF WORK ---
    def commit(self): self.session.commit()
    def rollback(self): self.session.rollback()
    def refresh(self, obj): self.session.refresh(obj)

    # --- USER METHODS (DELEGATED) ---
    def get_user_by_id(self, user_id: str): return self.user_repo.get_user_by_id(user_id)
    def get_user_by_roll(self, roll_number: str): return self.user_repo.get_user_by_roll(roll_number)
    def get_users_by_role(self, role: UserRole, order_by: str = "rollNumber"): return self.user_repo.get_users_by_role(role, order_by)
    def get_teachers_by_ids(self, teacher_ids: Iterable[str]): return self.user_repo.get_teachers_by_ids(teacher_ids)
    def lock_users_by_rolls(self, roll_numbers: Iterable[str]): return self.user_repo.lock_users_by_rolls(roll_numbers)
    def add_user(self, record: Dict): return self.user_repo.add_user(record)
    def update_user(self, user, data: Dict): return self.user_repo.update_user(user, data)
    def delete_user(self, user): self.user_repo.delete_user(user)

    # --- CAPACITY COUNTER METHODS (DELEGATED) ---
    def increment_assigned_count_if_available(self, teacher_id: str) -> bool: return self.user_repo.increment_assigned_count_if_available(teacher_id)
    def increment_assigned_count(self, teacher_id: str) -> bool: return self.user_repo.increment_assigned_count(teacher_id)
    def decrement_assigned_count(self, teacher_id: str) -> bool: return self.user_repo.decrement_assigned_count(teacher_id)
    def set_assigned_count(self, teacher_id: str, value: int): self.user_repo.set_assigned_count(teacher_id, value)

    # --- GROUP METHODS (DELEGATED) ---
    def get_group_by_id(self, group_id: str): return self.group_repo.get_group_by_id(group_id)
    def get_group_by_code(self, group_code: str): return self.group_repo.get_group_by_code(group_code)
    def get_group_by_ref(self, group_ref: str): return self.group_repo.get_group_by_ref(group_ref)
    def get_all_groups(self, flagged_only: bool = False): return self.group_repo.get_all_groups(flagged_only)
    def get_groups_by_supervisor(self, teacher_id: str): return self.group_repo.get_groups_by_supervisor(teacher_id)
    def get_group_by_member_roll(self, roll_number: str): return self.group_repo.get_group_by_member_roll(roll_number)
    def get_groups_by_member_student(self, student_id: str): return self.group_repo.get_groups_by_member_student(student_id)
    def find_groups_matching_rolls(self, roll_numbers: Iterable[str]): return self.group_repo.find_groups_matching_rolls(roll_numbers)
    def count_groups_by_supervisor(self) -> Dict[str, int]: return self.group_repo.count_groups_by_supervisor()
    def add_group(self, record: Dict, leader_id: str, leader_roll: str, expected_rolls: List[str], teacher_ids: List[str]):
        return self.group_repo.add_group(record, leader_id, leader_roll, expected_rolls, teacher_ids)
    def add_group_member(self, group, student_id: str, roll_number: str): return self.group_repo.add_member(group, student_id, roll_number)
    def remove_group_member(self, group, student_id: str) -> int: return self.group_repo.remove_member(group, student_id)
    def rename_group_member_roll(self, student_id: str, roll_number: str) -> int: return self.group_repo.rename_member_roll(student_id, roll_number)
    def rename_expected_partner_roll(self, old_roll: str, new_roll: str) -> int: return self.group_repo.rename_expected_roll(old_roll, new_roll)
    def add_expected_partner(self, group, roll_number: str): self.group_repo.add_expected_partner(group, roll_number)
    def remove_expected_partner(self, group, roll_number: str): self.group_repo.remove_expected_partner(group, roll_number)
    def remove_teacher_from_preferences(self, teacher_id: str) -> int: return self.group_repo.remove_teacher_from_preferences(teacher_id)
    def save_group(self, group): return self.group_repo.save_group(group)
    def delete_group(self, group): self.group_repo.delete_group(group)

    # --- SUBMISSION METHODS (DELEGATED) ---
    def get_submission_by_id(self, submission_id: str): return self.submission_repo.get_submission_by_id(submission_id)
    def get_latest_submission(self, group_id: str, student_id: str, for_update: bool = False): return self.submission_repo.get_latest_submission(group_id, student_id, for_update)
    def get_submissions_by_group(self, group_id: str): return self.submission_repo.get_submissions_by_group(group_id)
    def get_linked_submissions(self): return self.submission_repo.get_linked_submissions()
    def get_orphaned_submissions(self): return self.submission_repo.get_orphaned_submissions()
    def add_submission(self, record: Dict): return self.submission_repo.add_submission(record)
    def update_submission(self, submission, data: Dict): return self.submission_repo.update_submission(submission, data)
    def delete_other_submissions(self, group_id: str, student_id: str, keep_id: str) -> int: return self.submission_repo.delete_other_submissions(group_id, student_id, keep_id)
    def delete_submissions_by_group(self, group_id: str) -> int: return self.submission_repo.delete_submissions_by_group(group_id)
    def delete_submissions_by_student(self, student_id: str) -> int: return self.submission_repo.delete_submissions_by_student(student_id)

    # --- MARK METHODS (DELEGATED) ---
    def get_student_marks(self, group_id: str, teacher_id: str): return self.mark_repo.get_student_marks(group_id, teacher_id)
    def upsert_student_mark(self, group_id: str, student_id: str, teacher_id: str, marks: float): return self.mark_repo.upsert_student_mark(group_id, student_id, teacher_id, marks)
    def get_group_mark(self, group_id: str, teacher_id: str): return self.mark_repo.get_group_mark(group_id, teacher_id)
    def upsert_group_mark(self, group_id: str, teacher_id: str, marks: float, remarks: Optional[str]): return self.mark_repo.upsert_group_mark(group_id, teacher_id, marks, remarks)
    def delete_marks_by_group(self, group_id: str) -> int: return self.mark_repo.delete_marks_by_group(group_id)
    def delete_marks_by_teacher(self, teacher_id: str) -> int: return self.mark_repo.delete_marks_by_teacher(teacher_id)
    def delete_marks_by_student(self, student_id: str) -> int: return self.mark_repo.delete_marks_by_student(student_id)

    # --- AUDIT LOG METHODS (DELEGATED) ---
    def add_override_log(self, record: Dict): return self.audit_repo.add_log(record)
    def get_recent_override_logs(self, limit: int = 200): return self.audit_repo.get_recent_logs(limit)
    def get_override_logs_by_group(self, group_id: str): return self.audit_repo.get_logs_by_group(group_id)


def get_db_service(db: Session = Depends(get_db)) -> Generator[DatabaseService, None, None]:
    """FastAPI dependency that provides a DatabaseService bound to the request's session."""
    yield DatabaseService(db_session=db)
