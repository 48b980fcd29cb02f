# /tests/test_submission_service.py

import io
import pytest
from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError

from app.services.database_service import DatabaseService
from app.services.submission_service import SubmissionService
from app.services.group_helpers import group_resolver
from app.services.exceptions import (
    SubmissionValidationError, AmbiguousGroupingError, AlreadyGroupedError, NotFoundError
)


@pytest.fixture(autouse=True)
def uploads_dir(tmp_path, monkeypatch):
    """Redirects stored uploads into the test's temporary directory."""
    target = tmp_path / "uploads"
    monkeypatch.setattr("app.services.group_helpers.upload_storage.UPLOADS_DIR", str(target))
    return target


@pytest.fixture
def service(db_service):
    return SubmissionService(db_service)


@pytest.fixture
def teachers(make_teacher):
    return [make_teacher("T1", capacity=1, assigned=1), make_teacher("T2", capacity=2), make_teacher("T3", capacity=2)]


def upload(name: str, content: bytes = b"%PDF-1.4 test") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=name)


# --- Submitting ---

def test_submit_creates_group_and_links_submission(service, db_service, make_student, teachers, project_form):
    s1 = make_student("S1")
    form = project_form(s1, "s2 ", [t.id for t in teachers], member2Roll="S3")

    result = service.submit(s1, form, synopsis=upload("synopsis.pdf"))

    group = result["group"]
    assert group["status"] == "Allocated"
    assert group["assignedSupervisor"]["id"] == teachers[1].id
    assert group["memberRollNumbers"] == ["S1"]
    assert group["expectedPartnerRollNumbers"] == ["S2", "S3"]

    submission = db_service.get_submission_by_id(result["submissionId"])
    assert submission.group_id == group["id"]
    assert submission.member1Roll == "S2"
    assert submission.teacherPreferences == [t.id for t in teachers]
    assert submission.synopsisFile["originalName"] == "synopsis.pdf"
    assert submission.presentationFile is None


def test_resubmitting_keeps_a_single_submission(service, db_service, make_student, teachers, project_form):
    s1 = make_student("S1")
    ids = [t.id for t in teachers]
    first = service.submit(s1, project_form(s1, "S2", ids))
    first_stamp = db_service.get_submission_by_id(first["submissionId"]).submissionTimestamp

    second = service.submit(s1, project_form(s1, "S2", ids, comments="Updated plan"))

    rows = db_service.get_submissions_by_group(first["group"]["id"])
    assert len(rows) == 1
    assert second["submissionId"] == first["submissionId"]
    assert rows[0].comments == "Updated plan"
    assert rows[0].submissionTimestamp >= first_stamp


def test_resubmitting_without_synopsis_keeps_previous_file(service, db_service, make_student, teachers, project_form):
    s1 = make_student("S1")
    ids = [t.id for t in teachers]
    first = service.submit(s1, project_form(s1, "S2", ids), synopsis=upload("v1.pdf"))
    original = dict(db_service.get_submission_by_id(first["submissionId"]).synopsisFile)

    service.submit(s1, project_form(s1, "S2", ids), presentation=upload("slides.pptx"))

    stored = db_service.get_latest_submission(first["group"]["id"], s1.id)
    assert stored.synopsisFile == original
    assert stored.presentationFile["originalName"] == "slides.pptx"


def test_partner_submission_joins_existing_group(service, make_student, teachers, project_form):
    s1, s2 = make_student("S1"), make_student("S2")
    ids = [t.id for t in teachers]
    first = service.submit(s1, project_form(s1, "S2", ids))

    second = service.submit(s2, project_form(s2, "S1", ids, member2Roll="S4"))

    assert second["group"]["id"] == first["group"]["id"]
    assert second["group"]["memberRollNumbers"] == ["S1", "S2"]
    assert second["group"]["expectedPartnerRollNumbers"] == ["S4"]


# --- Conflicts ---

def test_ambiguous_submission_is_stored_unlinked(service, db_service, make_student, teachers, project_form):
    s5, s6, s7 = make_student("S5"), make_student("S6"), make_student("S7")
    ids = [t.id for t in teachers]
    metadata = project_form(s5, "S7", ids)
    for student in (s5, s6):
        group_resolver.create_group(db_service, student.id, student.rollNumber, ["S7"], {
            "projectTitle": metadata["tentativeProjectTitle"],
            "domain": metadata["projectDomain"],
            "techStack": metadata["technologyStack"],
        }, ids)
    db_service.commit()

    with pytest.raises(AmbiguousGroupingError) as excinfo:
        service.submit(s7, project_form(s7, "S8", ids))

    orphans = db_service.get_orphaned_submissions()
    assert len(orphans) == 1
    assert orphans[0].id == excinfo.value.submission_id
    assert orphans[0].student_id == s7.id
    assert db_service.get_group_by_member_roll("S7") is None
    assert len(db_service.get_all_groups()) == 2


def test_lost_race_on_member_roll_is_reported_as_already_grouped(
    service, db_service, session_factory, make_student, teachers, project_form, mocker
):
    s1 = make_student("S1")
    ids = [t.id for t in teachers]
    form = project_form(s1, "S2", ids)

    # Another request confirms S1 in its own group and commits first.
    rival_session = session_factory()
    rival = DatabaseService(db_session=rival_session)
    try:
        winner = group_resolver.create_group(rival, s1.id, "S1", ["S3"], {
            "projectTitle": form["tentativeProjectTitle"],
            "domain": form["projectDomain"],
            "techStack": form["technologyStack"],
        }, ids)
        rival.commit()
        winner_id = winner.id

        # This request matched before that commit, so it saw no group at all.
        mocker.patch.object(db_service, "find_groups_matching_rolls", return_value=[])
        mocker.patch.object(db_service, "get_group_by_member_roll", return_value=None)

        with pytest.raises(AlreadyGroupedError) as excinfo:
            service.submit(s1, form)

        assert excinfo.value.message == group_resolver.ALREADY_GROUPED_MESSAGE
        orphans = rival.get_orphaned_submissions()
        assert [o.id for o in orphans] == [excinfo.value.submission_id]
        assert [g.id for g in rival.get_all_groups()] == [winner_id]
        assert rival.get_submissions_by_group(winner_id) == []
    finally:
        rival_session.close()


def test_other_integrity_errors_are_not_reported_as_grouping_conflicts(
    service, db_service, make_student, teachers, project_form, mocker
):
    s1 = make_student("S1")
    ids = [t.id for t in teachers]
    first = service.submit(s1, project_form(s1, "S2", ids))

    # A stale read makes the reconciler insert a second row for the same (group, student).
    mocker.patch.object(db_service, "get_latest_submission", return_value=None)

    with pytest.raises(IntegrityError):
        service.submit(s1, project_form(s1, "S2", ids, comments="Second try"))

    mocker.stopall()
    assert db_service.get_orphaned_submissions() == []
    rows = db_service.get_submissions_by_group(first["group"]["id"])
    assert [row.id for row in rows] == [first["submissionId"]]


# --- Validation ---

@pytest.mark.parametrize("overrides, message", [
    ({"name": "  "}, "Name is required"),
    ({"mobile": "12345"}, "Mobile Number must be 10 digits"),
    ({"agreement": "false"}, "Agreement to continue as Major Project is required"),
    ({"member1Roll": "s1"}, "Group member roll numbers cannot include your own roll number"),
])
def test_invalid_form_is_rejected_without_writes(service, db_service, make_student, teachers, project_form, overrides, message):
    s1 = make_student("S1")
    form = project_form(s1, "S2", [t.id for t in teachers])
    form.update(overrides)

    with pytest.raises(SubmissionValidationError, match=message):
        service.submit(s1, form)

    assert db_service.get_all_groups() == []
    assert db_service.get_orphaned_submissions() == []


def test_repeated_preference_is_rejected(service, make_student, teachers, project_form):
    s1 = make_student("S1")
    ids = [teachers[0].id, teachers[0].id, teachers[1].id]

    with pytest.raises(SubmissionValidationError, match="must be distinct"):
        service.submit(s1, project_form(s1, "S2", ids))


def test_preference_that_is_not_a_teacher_is_rejected(service, make_student, teachers, project_form):
    s1, s2 = make_student("S1"), make_student("S2")
    ids = [teachers[1].id, teachers[2].id, s2.id]

    with pytest.raises(SubmissionValidationError, match="One or more supervisor preferences are invalid"):
        service.submit(s1, project_form(s1, "S3", ids))


# --- File uploads ---

def test_upload_attaches_to_existing_submission(service, db_service, make_student, teachers, project_form):
    s1 = make_student("S1")
    first = service.submit(s1, project_form(s1, "S2", [t.id for t in teachers]), synopsis=upload("v1.pdf"))

    result = service.upload_files(s1, presentation=upload("deck.pptx"))

    assert result["submissionId"] == first["submissionId"]
    stored = db_service.get_submission_by_id(first["submissionId"])
    assert stored.synopsisFile["originalName"] == "v1.pdf"
    assert stored.presentationFile["originalName"] == "deck.pptx"


def test_upload_without_group_is_not_found(service, make_student):
    s1 = make_student("S1")
    with pytest.raises(NotFoundError):
        service.upload_files(s1, synopsis=upload("v1.pdf"))


def test_upload_without_files_is_rejected(service, make_student, teachers, project_form):
    s1 = make_student("S1")
    service.submit(s1, project_form(s1, "S2", [t.id for t in teachers]))

    with pytest.raises(SubmissionValidationError, match="Upload at least one file"):
        service.upload_files(s1)


def test_saved_upload_is_written_to_disk(service, make_student, teachers, project_form, uploads_dir):
    s1 = make_student("S1")
    result = service.submit(s1, project_form(s1, "S2", [t.id for t in teachers]), synopsis=upload("plan.pdf", b"abc"))

    stored = service.get_latest_submission(s1)
    assert stored["id"] == result["submissionId"]
    saved = uploads_dir / stored["synopsisFile"]["filename"]
    assert saved.read_bytes() == b"abc"
    assert stored["synopsisFile"]["size"] == 3
    assert stored["synopsisFile"]["path"] == f"/uploads/{stored['synopsisFile']['filename']}"
