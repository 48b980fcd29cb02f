# /formify-backend/app/services/group_helpers/capacity_allocator.py

"""
Claims and releases teacher supervision slots.

Allocation is greedy and order-dependent: candidates are tried in the order
given and the first teacher with a free slot wins. Each attempt is a single
conditional UPDATE issued through the user repository, so concurrent requests
can never push a teacher past `teacherCapacity`.
"""

import logging
from typing import Iterable, Optional

from ..database_service import DatabaseService

logger = logging.getLogger(__name__)


def try_allocate(db: DatabaseService, candidate_teacher_ids: Iterable[str]) -> Optional[str]:
    """
    Returns the id of the first candidate whose slot was claimed, or None when
    every candidate is at capacity (or is not a Teacher).
    """
    tried = []
    for teacher_id in candidate_teacher_ids:
        tried.append(teacher_id)
        if db.increment_assigned_count_if_available(teacher_id):
            logger.info("Claimed supervision slot for teacher %s (preference #%d).", teacher_id, len(tried))
            return teacher_id
    logger.info("No capacity among candidate teachers %s.", tried)
    return None


def force_allocate(db: DatabaseService, teacher_id: str) -> bool:
    """Unconditional increment. Only the admin force override may call this."""
    changed = db.increment_assigned_count(teacher_id)
    logger.warning("Forced supervision slot for teacher %s, capacity check bypassed.", teacher_id)
    return changed


def release(db: DatabaseService, teacher_id: Optional[str]) -> bool:
    """Gives one slot back, never taking the count below zero."""
    if not teacher_id:
        return False
    return db.decrement_assigned_count(teacher_id)
