# /formify-backend/app/services/group_helpers/submission_reconciler.py

"""
Keeps exactly one submission per (group, student).

Resubmitting overwrites the existing row and bumps its timestamp instead of
appending a new one. Uploaded files carry forward: a slot the caller did not
attach a new file for keeps the reference from the previous submission, so a
student can edit the form without uploading everything again.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from ..database_service import DatabaseService
from ..exceptions import SubmissionValidationError, NotFoundError
from ...db.models.submission_models import StudentSubmission

logger = logging.getLogger(__name__)

FILE_SLOTS = ("synopsisFile", "presentationFile")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_submission_id() -> str:
    return f"sub_{uuid.uuid4().hex[:12]}"


def upsert(
    db: DatabaseService,
    group_id: str,
    student_id: str,
    form_fields: Dict,
    files: Optional[Dict[str, Optional[Dict]]] = None,
) -> StudentSubmission:
    """
    Inserts or overwrites the (group_id, student_id) submission and returns it.

    `files` maps a slot name in FILE_SLOTS to a new file reference, or None
    when nothing new was attached for that slot.
    """
    files = files or {}
    existing = db.get_latest_submission(group_id, student_id, for_update=True)

    record = dict(form_fields)
    for slot in FILE_SLOTS:
        new_file = files.get(slot)
        if new_file:
            record[slot] = new_file
        elif existing is not None:
            record[slot] = getattr(existing, slot)
        else:
            record[slot] = None
    record["submissionTimestamp"] = _now()

    if existing is not None:
        submission = db.update_submission(existing, record)
    else:
        submission = db.add_submission({
            "id": _new_submission_id(),
            "group_id": group_id,
            "student_id": student_id,
            **record,
        })

    # Historical data may hold more than one row for the pair.
    removed = db.delete_other_submissions(group_id, student_id, keep_id=submission.id)
    if removed:
        logger.warning("Removed %d duplicate submission(s) for student %s in group %s.", removed, student_id, group_id)
    return submission


def record_orphan(
    db: DatabaseService,
    student_id: str,
    form_fields: Dict,
    files: Optional[Dict[str, Optional[Dict]]] = None,
) -> StudentSubmission:
    """Stores a submission with no group link so an admin can review the conflict."""
    files = files or {}
    record = {
        "id": _new_submission_id(),
        "group_id": None,
        "student_id": student_id,
        **form_fields,
        "submissionTimestamp": _now(),
    }
    for slot in FILE_SLOTS:
        record[slot] = files.get(slot)
    return db.add_submission(record)


def attach_files(
    db: DatabaseService,
    group_id: str,
    student_id: str,
    files: Dict[str, Optional[Dict]],
) -> StudentSubmission:
    """
    Attaches newly uploaded files to the student's existing submission.
    Never creates a file-only submission.
    """
    new_files = {slot: files.get(slot) for slot in FILE_SLOTS if files.get(slot)}
    if not new_files:
        raise SubmissionValidationError("Upload at least one file: synopsis or presentation")

    existing = db.get_latest_submission(group_id, student_id, for_update=True)
    if existing is None:
        raise NotFoundError("No existing submission found to attach files. Please submit the form first.")

    return db.update_submission(existing, new_files)
