# /tests/test_capacity_allocator.py

import threading
import pytest

from app.services.database_service import DatabaseService
from app.services.group_helpers import capacity_allocator


def test_try_allocate_skips_full_teacher(db_service, make_teacher):
    """The first candidate with a free slot wins; full candidates are untouched."""
    full = make_teacher("T1", capacity=1, assigned=1)
    free = make_teacher("T2", capacity=2)
    spare = make_teacher("T3", capacity=2)

    chosen = capacity_allocator.try_allocate(db_service, [full.id, free.id, spare.id])
    db_service.commit()

    assert chosen == free.id
    assert db_service.get_user_by_id(full.id).assignedGroupsCount == 1
    assert db_service.get_user_by_id(free.id).assignedGroupsCount == 1
    assert db_service.get_user_by_id(spare.id).assignedGroupsCount == 0


def test_try_allocate_returns_none_when_all_full(db_service, make_teacher):
    teachers = [make_teacher(f"T{i}", capacity=1, assigned=1) for i in range(3)]

    assert capacity_allocator.try_allocate(db_service, [t.id for t in teachers]) is None
    for t in teachers:
        assert db_service.get_user_by_id(t.id).assignedGroupsCount == 1


def test_try_allocate_never_exceeds_capacity(db_service, make_teacher):
    teacher = make_teacher("T1", capacity=2)

    results = [capacity_allocator.try_allocate(db_service, [teacher.id]) for _ in range(5)]
    db_service.commit()

    assert results.count(teacher.id) == 2
    assert results.count(None) == 3
    assert db_service.get_user_by_id(teacher.id).assignedGroupsCount == 2


def test_concurrent_claims_stop_at_capacity(session_factory, make_teacher):
    """Sessions racing for the same teacher claim exactly `capacity` slots between them."""
    capacity, workers = 3, 10
    teacher_id = make_teacher("T1", capacity=capacity).id
    barrier = threading.Barrier(workers)
    results, errors = [], []

    def claim():
        session = session_factory()
        db = DatabaseService(db_session=session)
        try:
            barrier.wait()
            results.append(capacity_allocator.try_allocate(db, [teacher_id]))
            db.commit()
        except Exception as e:
            db.rollback()
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=claim) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert results.count(teacher_id) == capacity
    assert results.count(None) == workers - capacity

    session = session_factory()
    try:
        assert DatabaseService(db_session=session).get_user_by_id(teacher_id).assignedGroupsCount == capacity
    finally:
        session.close()


def test_try_allocate_ignores_non_teachers(db_service, make_student):
    student = make_student("S1")
    assert capacity_allocator.try_allocate(db_service, [student.id]) is None


def test_force_allocate_bypasses_capacity(db_service, make_teacher):
    teacher = make_teacher("T1", capacity=1, assigned=1)

    assert capacity_allocator.force_allocate(db_service, teacher.id) is True
    db_service.commit()

    assert db_service.get_user_by_id(teacher.id).assignedGroupsCount == 2


@pytest.mark.parametrize("assigned, expected", [(2, 1), (0, 0)])
def test_release_decrements_and_clamps_at_zero(db_service, make_teacher, assigned, expected):
    teacher = make_teacher("T1", capacity=3, assigned=assigned)

    capacity_allocator.release(db_service, teacher.id)
    db_service.commit()

    assert db_service.get_user_by_id(teacher.id).assignedGroupsCount == expected


def test_release_without_teacher_is_noop(mocker):
    db = mocker.MagicMock()
    assert capacity_allocator.release(db, None) is False
    db.decrement_assigned_count.assert_not_called()
