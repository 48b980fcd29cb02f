# /formify-backend/app/services/group_helpers/group_resolver.py

"""
Decides which group a student's submission belongs to.

The matching key of a submission is the set {submitter} ∪ {named teammates}.
A group matches when any roll number in the key is one of its confirmed
members or expected partners. From the matches the resolver either:

1. rejects the submission as ambiguous (more than one group matched),
2. rejects it because the submitter is already confirmed elsewhere,
3. joins the single matched group, or
4. creates a new group and tries to allocate a supervisor for it.

Rejections never mutate a group. They raise a `GroupingConflictError`
subclass; storing the unlinked submission is the caller's job, because the
caller owns the transaction that has to be rolled back first.

Before matching, the rows of every user in the key are locked in roll order.
Two concurrent submissions over overlapping roll numbers therefore run one
after the other on backends with row locks, and the unique constraint on
`group_members.roll_number` stops a second confirmed claim everywhere else.
"""

import logging
import uuid
from typing import List, Dict, Tuple

from ..database_service import DatabaseService
from ..exceptions import SubmissionValidationError, AmbiguousGroupingError, AlreadyGroupedError
from ...db.models.group_models import Group
from ...models.group_model import GroupStatus
from . import capacity_allocator
from .roll_numbers import normalize_roll, unique_rolls

logger = logging.getLogger(__name__)

NO_CAPACITY_REASON = "No preferred teacher had available capacity."
AMBIGUOUS_MESSAGE = "Multiple groups matched these rolls. Admin review required."
ALREADY_GROUPED_MESSAGE = "You are already in another group."


def new_group_code() -> str:
    return f"G-{uuid.uuid4().hex[:8].upper()}"


def check_not_self_referential(student_roll: str, partner_rolls: List[str]) -> None:
    if normalize_roll(student_roll) in {normalize_roll(r) for r in partner_rolls}:
        raise SubmissionValidationError("Group member roll numbers cannot include your own roll number")


def resolve_group(
    db: DatabaseService,
    student_id: str,
    student_roll: str,
    partner_rolls: List[str],
    project_metadata: Dict,
    teacher_preference_ids: List[str],
) -> Tuple[Group, bool]:
    """
    Links the submitter to a group and returns `(group, created)`.

    Raises `SubmissionValidationError` for a self-referencing teammate,
    `AmbiguousGroupingError` / `AlreadyGroupedError` for conflicts.
    """
    student_roll = normalize_roll(student_roll)
    partner_rolls = unique_rolls(partner_rolls)
    check_not_self_referential(student_roll, partner_rolls)

    matching_key = unique_rolls([student_roll, *partner_rolls])
    db.lock_users_by_rolls(matching_key)

    matches = db.find_groups_matching_rolls(matching_key)
    if len(matches) > 1:
        codes = [g.groupCode for g in matches]
        logger.warning("Roll set %s matched %d groups %s; escalating to admin.", matching_key, len(matches), codes)
        raise AmbiguousGroupingError(AMBIGUOUS_MESSAGE, group_codes=codes)

    matched = matches[0] if matches else None
    current = db.get_group_by_member_roll(student_roll)
    if current is not None and (matched is None or current.id != matched.id):
        logger.warning("Student %s is confirmed in %s but matched %s.", student_roll, current.groupCode,
                       matched.groupCode if matched else None)
        raise AlreadyGroupedError(ALREADY_GROUPED_MESSAGE, group_codes=[current.groupCode])

    if matched is None:
        return create_group(db, student_id, student_roll, partner_rolls, project_metadata, teacher_preference_ids), True

    join_group(db, matched, student_id, student_roll, partner_rolls)
    return matched, False


def join_group(db: DatabaseService, group: Group, student_id: str, student_roll: str, partner_rolls: List[str]) -> Group:
    """
    Confirms the submitter in `group` (idempotent) and records any teammate
    rolls the group has not heard of yet. Project metadata is left untouched.
    """
    if student_roll not in group.memberRollNumbers:
        db.add_group_member(group, student_id, student_roll)
        logger.info("Student %s joined group %s.", student_roll, group.groupCode)
    if student_roll in group.expectedPartnerRollNumbers:
        db.remove_expected_partner(group, student_roll)

    for roll in partner_rolls:
        if roll not in group.memberRollNumbers and roll not in group.expectedPartnerRollNumbers:
            db.add_expected_partner(group, roll)
    return db.save_group(group)


def create_group(
    db: DatabaseService,
    student_id: str,
    student_roll: str,
    partner_rolls: List[str],
    project_metadata: Dict,
    teacher_preference_ids: List[str],
) -> Group:
    """Creates a group led by the submitter, then runs supervisor allocation."""
    record = {
        "id": f"grp_{uuid.uuid4().hex[:12]}",
        "groupCode": new_group_code(),
        "status": GroupStatus.PENDING.value,
        "flaggedForAdmin": False,
        **project_metadata,
    }
    group = db.add_group(record, student_id, student_roll, partner_rolls, teacher_preference_ids)

    teacher_id = capacity_allocator.try_allocate(db, teacher_preference_ids)
    if teacher_id:
        group.allocate_to(teacher_id)
        logger.info("Group %s created by %s and allocated to %s.", group.groupCode, student_roll, teacher_id)
    else:
        group.release_to_pending(NO_CAPACITY_REASON)
        logger.warning("Group %s created by %s is pending: %s", group.groupCode, student_roll, NO_CAPACITY_REASON)
    return db.save_group(group)
