# /formify-backend/app/services/submission_service.py

"""
This module defines the SubmissionService, the orchestrator behind every
student-facing operation.

A project submission flows through three specialists in one transaction:

1. the group resolver links the student to an existing group or creates one
   (allocating a supervisor for new groups),
2. the submission reconciler stores the form as the student's single
   submission for that group, and
3. the commit makes all of it visible at once.

When the resolver reports a grouping conflict the transaction is rolled back
and the form is stored unlinked so an admin can review it; the conflict is
then re-raised for the router to turn into a 409.
"""

import logging
from typing import Dict, List, Optional
from fastapi import UploadFile, Depends
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from .database_service import DatabaseService, get_db_service
from .exceptions import (
    SubmissionValidationError, GroupingConflictError, AlreadyGroupedError, NotFoundError
)
from .group_helpers import group_resolver, submission_reconciler, upload_storage
from .group_helpers.roll_numbers import normalize_roll
from . import report_service
from ..models.submission_model import ProjectSubmissionForm
from ..models.user_model import UserRole
from ..db.models.group_models import MEMBER_ROLL_CONSTRAINT

logger = logging.getLogger(__name__)


def _first_error_message(exc: ValidationError) -> str:
    """The message of the first failing field, without pydantic's prefixes."""
    error = exc.errors()[0]
    ctx_error = (error.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    field = ".".join(str(part) for part in error.get("loc", ()))
    return f"{field}: {error['msg']}" if field else error["msg"]


def _is_member_roll_conflict(exc: IntegrityError) -> bool:
    """True when `exc` is the unique violation on a confirmed member's roll number."""
    detail = str(exc.orig)
    return MEMBER_ROLL_CONSTRAINT in detail or "group_members.roll_number" in detail


def parse_submission_form(raw_form: Dict) -> ProjectSubmissionForm:
    try:
        return ProjectSubmissionForm.model_validate(raw_form)
    except ValidationError as e:
        raise SubmissionValidationError(_first_error_message(e))


class SubmissionService:
    def __init__(self, db: DatabaseService = Depends(get_db_service)):
        self.db = db

    # --- PROJECT SUBMISSION ---
    def submit(
        self,
        student,
        raw_form: Dict,
        synopsis: Optional[UploadFile] = None,
        presentation: Optional[UploadFile] = None,
    ) -> Dict:
        """
        Validates and records a student's project form.

        Returns `{"group": ..., "submissionId": ...}`. Raises
        `SubmissionValidationError` (nothing written) or a
        `GroupingConflictError` subclass (form stored unlinked).
        """
        student_id = student.id
        student_roll = normalize_roll(student.rollNumber)

        form = parse_submission_form(raw_form)
        group_resolver.check_not_self_referential(student_roll, form.partner_rolls)
        self._check_teacher_preferences(form.teacher_preference_ids)

        files = {
            "synopsisFile": upload_storage.save_upload(synopsis),
            "presentationFile": upload_storage.save_upload(presentation),
        }
        fields = form.submission_fields()

        try:
            group, created = group_resolver.resolve_group(
                self.db,
                student_id=student_id,
                student_roll=student_roll,
                partner_rolls=form.partner_rolls,
                project_metadata=form.project_metadata(),
                teacher_preference_ids=form.teacher_preference_ids,
            )
            submission = submission_reconciler.upsert(self.db, group.id, student_id, fields, files)
            self.db.commit()
        except GroupingConflictError as conflict:
            self.db.rollback()
            conflict.submission_id = self._store_orphan(student_id, fields, files)
            raise
        except IntegrityError as e:
            self.db.rollback()
            if not _is_member_roll_conflict(e):
                raise
            # A concurrent submission confirmed one of these roll numbers first.
            logger.warning("Concurrent grouping detected for student %s; storing unlinked.", student_roll)
            orphan_id = self._store_orphan(student_id, fields, files)
            raise AlreadyGroupedError(group_resolver.ALREADY_GROUPED_MESSAGE, submission_id=orphan_id)
        except Exception:
            self.db.rollback()
            raise

        logger.info("Submission %s stored for %s in group %s (created=%s).",
                    submission.id, student_roll, group.groupCode, created)
        return {"group": report_service.serialize_group(group), "submissionId": submission.id}

    def _check_teacher_preferences(self, teacher_ids: List[str]) -> None:
        teachers = self.db.get_teachers_by_ids(teacher_ids)
        if len(teachers) != len(teacher_ids):
            raise SubmissionValidationError("One or more supervisor preferences are invalid")

    def _store_orphan(self, student_id: str, fields: Dict, files: Dict) -> str:
        orphan = submission_reconciler.record_orphan(self.db, student_id, fields, files)
        self.db.commit()
        logger.info("Stored unlinked submission %s for admin review.", orphan.id)
        return orphan.id

    # --- STUDENT VIEWS ---
    def get_my_group(self, student) -> Optional[Dict]:
        group = self.db.get_group_by_member_roll(normalize_roll(student.rollNumber))
        return report_service.serialize_group(group) if group else None

    def get_latest_submission(self, student) -> Optional[Dict]:
        group = self.db.get_group_by_member_roll(normalize_roll(student.rollNumber))
        if group is None:
            return None
        submission = self.db.get_latest_submission(group.id, student.id)
        return report_service.serialize_submission(submission) if submission else None

    def upload_files(
        self,
        student,
        synopsis: Optional[UploadFile] = None,
        presentation: Optional[UploadFile] = None,
    ) -> Dict:
        """Attaches files to the student's existing submission in their group."""
        group = self.db.get_group_by_member_roll(normalize_roll(student.rollNumber))
        if group is None:
            raise NotFoundError("No group found for this student")
        if not (synopsis and synopsis.filename) and not (presentation and presentation.filename):
            raise SubmissionValidationError("Upload at least one file: synopsis or presentation")

        files = {
            "synopsisFile": upload_storage.save_upload(synopsis),
            "presentationFile": upload_storage.save_upload(presentation),
        }
        try:
            submission = submission_reconciler.attach_files(self.db, group.id, student.id, files)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return {"group": report_service.serialize_group(group), "submissionId": submission.id}

    def list_teachers(self) -> List:
        return self.db.get_users_by_role(UserRole.TEACHER, order_by="name")


def get_submission_service(db: DatabaseService = Depends(get_db_service)) -> SubmissionService:
    return SubmissionService(db)
