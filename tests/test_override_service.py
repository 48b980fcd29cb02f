# /tests/test_override_service.py

import pytest

from app.services import override_service
from app.services.group_helpers import group_resolver
from app.services.exceptions import CapacityConflictError, InvalidSupervisorError
from app.models.group_model import GroupStatus

METADATA = {"projectTitle": "Library Bot", "domain": "AI", "techStack": "Python"}


@pytest.fixture
def allocated_group(db_service, make_student, make_teacher):
    """A group allocated to T1 (capacity 2, one slot used)."""
    t1 = make_teacher("T1", capacity=2)
    student = make_student("S1")
    group = group_resolver.create_group(db_service, student.id, "S1", ["S2"], METADATA, [t1.id])
    db_service.commit()
    assert group.assigned_supervisor_id == t1.id
    return group, t1


def count(db, teacher):
    return db.get_user_by_id(teacher.id).assignedGroupsCount


# --- Reset ---

def test_reset_releases_supervisor_and_flags_group(db_service, allocated_group):
    group, t1 = allocated_group

    result = override_service.reset_supervisor(db_service, group.groupCode.lower(), reason=None)

    assert result.id == group.id
    assert result.status == GroupStatus.PENDING.value
    assert result.assigned_supervisor_id is None
    assert result.flaggedForAdmin is True
    assert result.flagReason == override_service.DEFAULT_RESET_REASON
    assert count(db_service, t1) == 0
    assert db_service.get_override_logs_by_group(group.id) == []


def test_reset_unknown_group_returns_none(db_service):
    assert override_service.reset_supervisor(db_service, "G-MISSING0") is None


# --- Override ---

def test_override_moves_one_slot_and_writes_audit_row(db_service, allocated_group, make_teacher, make_admin):
    group, t1 = allocated_group
    t2 = make_teacher("T2", capacity=1)
    admin = make_admin()

    result = override_service.override_supervisor(db_service, group.id, t2.id, admin_id=admin.id, reason="Domain fit")

    assert result.assigned_supervisor_id == t2.id
    assert result.status == GroupStatus.ALLOCATED.value
    assert count(db_service, t1) == 0
    assert count(db_service, t2) == 1

    logs = db_service.get_override_logs_by_group(group.id)
    assert len(logs) == 1
    assert logs[0].admin_id == admin.id
    assert logs[0].action == override_service.OVERRIDE_ACTION
    assert logs[0].from_state == {"assignedSupervisor": t1.id, "status": "Allocated", "flaggedForAdmin": False}
    assert logs[0].to_state == {"assignedSupervisor": t2.id, "status": "Allocated", "flaggedForAdmin": False}
    assert logs[0].reason == "Domain fit"


def test_override_with_current_supervisor_is_noop(db_service, allocated_group, make_admin):
    group, t1 = allocated_group
    admin = make_admin()

    result = override_service.override_supervisor(db_service, group.id, t1.id, admin_id=admin.id)

    assert result.assigned_supervisor_id == t1.id
    assert count(db_service, t1) == 1
    assert db_service.get_override_logs_by_group(group.id) == []


def test_override_to_full_teacher_conflicts_and_changes_nothing(db_service, allocated_group, make_teacher, make_admin):
    group, t1 = allocated_group
    full = make_teacher("T2", capacity=1, assigned=1)
    admin = make_admin()

    with pytest.raises(CapacityConflictError):
        override_service.override_supervisor(db_service, group.id, full.id, admin_id=admin.id)

    reloaded = db_service.get_group_by_id(group.id)
    assert reloaded.assigned_supervisor_id == t1.id
    assert count(db_service, t1) == 1
    assert count(db_service, full) == 1
    assert db_service.get_override_logs_by_group(group.id) == []


def test_forced_override_exceeds_capacity(db_service, allocated_group, make_teacher, make_admin):
    group, t1 = allocated_group
    full = make_teacher("T2", capacity=1, assigned=1)
    admin = make_admin()

    result = override_service.override_supervisor(db_service, group.id, full.id, admin_id=admin.id, force=True)

    assert result.assigned_supervisor_id == full.id
    assert count(db_service, full) == 2
    assert count(db_service, t1) == 0
    assert len(db_service.get_override_logs_by_group(group.id)) == 1


def test_override_pending_group_clears_flag(db_service, allocated_group, make_teacher, make_admin):
    group, t1 = allocated_group
    admin = make_admin()
    override_service.reset_supervisor(db_service, group.id)

    result = override_service.override_supervisor(db_service, group.id, t1.id, admin_id=admin.id)

    assert result.flaggedForAdmin is False
    assert result.flagReason is None
    assert count(db_service, t1) == 1
    log = db_service.get_override_logs_by_group(group.id)[0]
    assert log.from_state == {"assignedSupervisor": None, "status": "Pending", "flaggedForAdmin": True}


def test_override_to_non_teacher_is_rejected(db_service, allocated_group, make_student, make_admin):
    group, t1 = allocated_group
    other = make_student("S9")
    admin = make_admin()

    with pytest.raises(InvalidSupervisorError, match="Supervisor must be a Teacher"):
        override_service.override_supervisor(db_service, group.id, other.id, admin_id=admin.id)

    assert count(db_service, t1) == 1
