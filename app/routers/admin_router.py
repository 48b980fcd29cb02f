# /formify-backend/app/routers/admin_router.py

from fastapi import APIRouter, Depends, HTTPException, status, Response, Query
from fastapi.responses import StreamingResponse
from typing import List, Optional

from ..core.deps import require_admin
from ..models import group_model, submission_model, user_model
from ..services import exceptions, lifecycle_service, override_service, report_service, roster_service
from ..services.database_service import DatabaseService, get_db_service

router = APIRouter(dependencies=[Depends(require_admin)])


def _group_not_found(group_ref: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Group {group_ref} not found")


# --- USER DIRECTORY ENDPOINTS ---

@router.post("/users", response_model=user_model.Teacher, status_code=status.HTTP_201_CREATED, summary="Register a User")
def create_user(user_create: user_model.UserCreate, db: DatabaseService = Depends(get_db_service)):
    try:
        return roster_service.create_user(db, user_create)
    except exceptions.DuplicateRollNumberError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/teachers", response_model=List[user_model.Teacher], summary="List Teachers with Capacity")
def list_teachers(db: DatabaseService = Depends(get_db_service)):
    return roster_service.list_teachers(db)


@router.patch("/teachers/{teacher_id}", response_model=user_model.Teacher, summary="Update a Teacher")
def update_teacher(teacher_id: str, teacher_update: user_model.UserUpdate, db: DatabaseService = Depends(get_db_service)):
    try:
        teacher = roster_service.update_teacher(db, teacher_id, teacher_update)
    except exceptions.DuplicateRollNumberError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if teacher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return teacher


@router.patch("/teachers/{teacher_id}/capacity", response_model=user_model.Teacher, summary="Set a Teacher's Capacity")
def update_teacher_capacity(teacher_id: str, capacity_update: user_model.CapacityUpdate, db: DatabaseService = Depends(get_db_service)):
    teacher = roster_service.update_teacher_capacity(db, teacher_id, capacity_update.teacherCapacity)
    if teacher is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return teacher


@router.delete("/teachers/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a Teacher")
def delete_teacher(teacher_id: str, db: DatabaseService = Depends(get_db_service)):
    if not lifecycle_service.delete_teacher(db, teacher_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Teacher not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/students", response_model=List[user_model.UserSummary], summary="List Students")
def list_students(db: DatabaseService = Depends(get_db_service)):
    return roster_service.list_students(db)


@router.patch("/students/{student_id}", response_model=user_model.UserSummary, summary="Update a Student")
def update_student(student_id: str, student_update: user_model.UserUpdate, db: DatabaseService = Depends(get_db_service)):
    try:
        student = roster_service.update_student(db, student_id, student_update)
    except exceptions.DuplicateRollNumberError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return student


@router.delete("/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a Student")
def delete_student(student_id: str, db: DatabaseService = Depends(get_db_service)):
    if not lifecycle_service.delete_student(db, student_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- GROUP ENDPOINTS ---

@router.get("/groups", response_model=List[group_model.GroupRead], summary="List All Groups")
def list_groups(db: DatabaseService = Depends(get_db_service)):
    return report_service.list_groups(db)


@router.get("/groups/flagged", response_model=List[group_model.GroupRead], summary="List Groups Flagged for Review")
def list_flagged_groups(db: DatabaseService = Depends(get_db_service)):
    return report_service.list_groups(db, flagged_only=True)


@router.get("/groups/{group_ref}/submissions", response_model=List[submission_model.SubmissionRead], summary="Latest Submission per Member")
def get_group_submissions(group_ref: str, db: DatabaseService = Depends(get_db_service)):
    submissions = report_service.get_group_submissions(db, group_ref)
    if submissions is None:
        raise _group_not_found(group_ref)
    return submissions


@router.patch("/groups/{group_ref}/reset-supervisor", response_model=group_model.GroupEnvelope, summary="Clear a Group's Supervisor")
def reset_supervisor(
    group_ref: str,
    reset: Optional[group_model.SupervisorReset] = None,
    db: DatabaseService = Depends(get_db_service),
):
    group = override_service.reset_supervisor(db, group_ref, reason=reset.reason if reset else None)
    if group is None:
        raise _group_not_found(group_ref)
    return {"group": report_service.serialize_group(group)}


@router.patch("/groups/{group_ref}/override-supervisor", response_model=group_model.GroupEnvelope, summary="Assign a Supervisor Manually")
def override_supervisor(
    group_ref: str,
    override: group_model.SupervisorOverride,
    admin=Depends(require_admin),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        group = override_service.override_supervisor(
            db, group_ref, override.supervisorId, admin_id=admin.id, reason=override.reason, force=override.force
        )
    except exceptions.InvalidSupervisorError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except exceptions.CapacityConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if group is None:
        raise _group_not_found(group_ref)
    return {"group": report_service.serialize_group(group)}


@router.delete("/groups/{group_ref}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a Group")
def delete_group(group_ref: str, db: DatabaseService = Depends(get_db_service)):
    if not lifecycle_service.delete_group(db, group_ref):
        raise _group_not_found(group_ref)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- SUBMISSIONS, AUDIT AND EXPORT ---

@router.get("/submissions", response_model=List[submission_model.SubmissionRead], summary="Latest Submission per Student")
def list_submissions(db: DatabaseService = Depends(get_db_service)):
    return report_service.list_latest_submissions(db)


@router.get("/submissions/orphaned", response_model=List[submission_model.SubmissionRead], summary="Unlinked Conflict Submissions")
def list_orphaned_submissions(db: DatabaseService = Depends(get_db_service)):
    return report_service.list_orphaned_submissions(db)


@router.get("/override-logs", response_model=List[group_model.OverrideLogRead], summary="Supervisor Override History")
def list_override_logs(limit: int = Query(200, ge=1, le=1000), db: DatabaseService = Depends(get_db_service)):
    return report_service.list_override_logs(db, limit=limit)


@router.get("/export/groups", summary="Export All Groups as CSV", response_class=StreamingResponse)
def export_groups_csv(db: DatabaseService = Depends(get_db_service)):
    csv_string = report_service.export_groups_as_csv(db)
    return StreamingResponse(iter([csv_string]), media_type="text/csv", headers={"Content-Disposition": "attachment; filename=groups.csv"})


@router.post("/maintenance/reconcile-counts", response_model=List[user_model.CountDrift], summary="Audit Teachers' Assigned-Group Counts")
def reconcile_counts(apply: bool = Query(False), db: DatabaseService = Depends(get_db_service)):
    return lifecycle_service.reconcile_teacher_counts(db, apply=apply)
