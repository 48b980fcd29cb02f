# /tests/test_roster_and_marking.py

import pytest

from app.services import roster_service, marking_service
from app.services.group_helpers import group_resolver
from app.services.exceptions import DuplicateRollNumberError, PermissionDeniedError
from app.models.user_model import UserCreate, UserUpdate, UserRole

METADATA = {"projectTitle": "Queue Tracker", "domain": "Web", "techStack": "Django"}


# --- Roster ---

def test_create_teacher_uses_default_capacity(db_service, mocker):
    mocker.patch.object(roster_service, "DEFAULT_TEACHER_CAPACITY", 7)

    teacher = roster_service.create_user(db_service, UserCreate(rollNumber="t1", name="Meera", role=UserRole.TEACHER))

    assert teacher.rollNumber == "T1"
    assert teacher.teacherCapacity == 7
    assert teacher.assignedGroupsCount == 0


def test_create_student_never_gets_capacity(db_service):
    student = roster_service.create_user(
        db_service, UserCreate(rollNumber="s1", name="Kiran", role=UserRole.STUDENT, teacherCapacity=4)
    )
    assert student.teacherCapacity == 0


def test_create_user_rejects_taken_roll(db_service, make_student):
    make_student("S1")
    with pytest.raises(DuplicateRollNumberError):
        roster_service.create_user(db_service, UserCreate(rollNumber=" s1", name="Dup", role=UserRole.STUDENT))


def test_student_roll_change_follows_into_group(db_service, make_student, make_teacher):
    teacher = make_teacher("T1")
    student = make_student("S1")
    group = group_resolver.create_group(db_service, student.id, "S1", [], METADATA, [teacher.id])
    db_service.commit()

    roster_service.update_student(db_service, student.id, UserUpdate(rollNumber="s1-new"))

    assert db_service.get_user_by_id(student.id).rollNumber == "S1-NEW"
    assert db_service.get_group_by_member_roll("S1-NEW").id == group.id


def test_student_roll_change_follows_into_expected_partners(db_service, make_student, make_teacher):
    teacher = make_teacher("T1")
    student = make_student("S1")
    waiting = group_resolver.create_group(db_service, make_student("S8").id, "S8", ["S1", "S4"], METADATA, [teacher.id])
    both = group_resolver.create_group(db_service, make_student("S9").id, "S9", ["S1", "S1-NEW"], METADATA, [teacher.id])
    db_service.commit()

    roster_service.update_student(db_service, student.id, UserUpdate(rollNumber="s1-new"))

    assert db_service.get_group_by_id(waiting.id).expectedPartnerRollNumbers == ["S1-NEW", "S4"]
    assert db_service.get_group_by_id(both.id).expectedPartnerRollNumbers == ["S1-NEW"]
    assert db_service.find_groups_matching_rolls(["S1"]) == []


def test_admin_teacher_listing_is_sorted_by_roll(db_service, make_teacher):
    make_teacher("T2", name="Adam")
    make_teacher("T1", name="Zoe")

    assert [t.rollNumber for t in roster_service.list_teachers(db_service)] == ["T1", "T2"]


def test_update_rejects_empty_payload(db_service, make_teacher):
    teacher = make_teacher("T1")
    with pytest.raises(ValueError, match="No valid fields to update"):
        roster_service.update_teacher(db_service, teacher.id, UserUpdate(name="  "))


def test_update_teacher_capacity_on_student_returns_none(db_service, make_student):
    student = make_student("S1")
    assert roster_service.update_teacher_capacity(db_service, student.id, 3) is None


# --- Marking ---

@pytest.fixture
def supervised(db_service, make_student, make_teacher):
    teacher = make_teacher("T1")
    student = make_student("S1")
    group = group_resolver.create_group(db_service, student.id, "S1", ["S2"], METADATA, [teacher.id])
    db_service.commit()
    return group, teacher, student


def test_marks_are_upserted_per_teacher(db_service, supervised):
    group, teacher, student = supervised

    marking_service.upsert_student_mark(db_service, group.id, teacher.id, student.id, 60)
    marking_service.upsert_student_mark(db_service, group.id, teacher.id, student.id, 72.5)
    marking_service.upsert_group_mark(db_service, group.id, teacher.id, 80, "Good teamwork")

    result = marking_service.get_group_marks(db_service, group.id, teacher.id)
    assert [row["marks"] for row in result["students"]] == [72.5]
    assert result["groupMark"]["remarks"] == "Good teamwork"
    assert len(db_service.get_student_marks(group.id, teacher.id)) == 1


def test_other_teacher_is_denied(db_service, supervised, make_teacher):
    group, _, _ = supervised
    outsider = make_teacher("T2")

    with pytest.raises(PermissionDeniedError):
        marking_service.get_group_marks(db_service, group.id, outsider.id)


def test_missing_group_returns_none(db_service, supervised):
    _, teacher, _ = supervised
    assert marking_service.get_group_submissions(db_service, "grp_missing", teacher.id) is None


def test_mark_for_non_member_is_rejected(db_service, supervised, make_student):
    group, teacher, _ = supervised
    stranger = make_student("S3")

    with pytest.raises(ValueError, match="Student is not a member of this group"):
        marking_service.upsert_student_mark(db_service, group.id, teacher.id, stranger.id, 50)
