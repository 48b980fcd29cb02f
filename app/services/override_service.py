# /formify-backend/app/services/override_service.py

"""
Admin actions that change a group's supervisor outside the automatic path.

Both operations keep the teachers' denormalised counts consistent: the old
supervisor (if any) gets one slot back, and an override claims one slot from
the new supervisor, through the capacity allocator unless the admin forces
it. Every successful override appends an immutable audit row; resets do not.
"""

import logging
import uuid
from typing import Optional

from .database_service import DatabaseService
from .exceptions import CapacityConflictError, InvalidSupervisorError
from .group_helpers import capacity_allocator
from ..db.models.group_models import Group
from ..models.user_model import UserRole

logger = logging.getLogger(__name__)

DEFAULT_RESET_REASON = "Supervisor reset by admin. Reassign required."
OVERRIDE_ACTION = "override-supervisor"


def reset_supervisor(db: DatabaseService, group_ref: str, reason: Optional[str] = None) -> Optional[Group]:
    """
    Clears the group's supervisor and flags it for reassignment. No new
    allocation is attempted. Returns None if the group does not exist.
    """
    group = db.get_group_by_ref(group_ref)
    if group is None:
        return None

    old_supervisor_id = group.assigned_supervisor_id
    try:
        capacity_allocator.release(db, old_supervisor_id)
        group.release_to_pending((reason or "").strip() or DEFAULT_RESET_REASON)
        db.save_group(group)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Supervisor %s reset on group %s.", old_supervisor_id, group.groupCode)
    return group


def override_supervisor(
    db: DatabaseService,
    group_ref: str,
    supervisor_id: str,
    admin_id: str,
    reason: Optional[str] = None,
    force: bool = False,
) -> Optional[Group]:
    """
    Assigns `supervisor_id` to the group.

    Re-assigning the current supervisor is a no-op that writes nothing.
    Raises `InvalidSupervisorError` if the target is not a Teacher and
    `CapacityConflictError` if the teacher is full and `force` is False; in
    that case nothing, including the old supervisor's count, is changed.
    Returns None if the group does not exist.
    """
    group = db.get_group_by_ref(group_ref)
    if group is None:
        return None

    if group.assigned_supervisor_id and group.assigned_supervisor_id == supervisor_id:
        return group

    supervisor = db.get_user_by_id(supervisor_id)
    if supervisor is None or supervisor.role != UserRole.TEACHER.value:
        raise InvalidSupervisorError("Supervisor must be a Teacher")

    before = group.state_snapshot()
    try:
        capacity_allocator.release(db, group.assigned_supervisor_id)
        if force:
            capacity_allocator.force_allocate(db, supervisor.id)
        elif capacity_allocator.try_allocate(db, [supervisor.id]) is None:
            raise CapacityConflictError("Selected supervisor has no remaining capacity. Use force override.")

        group.allocate_to(supervisor.id)
        db.save_group(group)
        db.add_override_log({
            "id": f"log_{uuid.uuid4().hex[:12]}",
            "admin_id": admin_id,
            "group_id": group.id,
            "action": OVERRIDE_ACTION,
            "from_state": before,
            "to_state": group.state_snapshot(),
            "reason": reason,
        })
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Group %s supervisor overridden %s -> %s by %s (force=%s).",
                group.groupCode, before["assignedSupervisor"], supervisor.id, admin_id, force)
    return group
