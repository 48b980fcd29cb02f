# /formify-backend/app/routers/teacher_router.py

from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from ..core.deps import require_teacher
from ..models import group_model, mark_model, submission_model
from ..services import marking_service
from ..services.database_service import DatabaseService, get_db_service
from ..services.exceptions import PermissionDeniedError

router = APIRouter()


def _found_or_404(result):
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return result


@router.get("/groups", response_model=List[group_model.GroupRead], summary="List My Supervised Groups")
def list_my_groups(teacher=Depends(require_teacher), db: DatabaseService = Depends(get_db_service)):
    return marking_service.list_supervised_groups(db, teacher.id)


@router.get("/groups/{group_id}/submissions", response_model=List[submission_model.SubmissionRead], summary="Latest Submission per Member")
def get_group_submissions(group_id: str, teacher=Depends(require_teacher), db: DatabaseService = Depends(get_db_service)):
    try:
        return _found_or_404(marking_service.get_group_submissions(db, group_id, teacher.id))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.get("/groups/{group_id}/submissions/latest", response_model=submission_model.SubmissionEnvelope, summary="Most Recent Submission in a Group")
def get_latest_group_submission(group_id: str, teacher=Depends(require_teacher), db: DatabaseService = Depends(get_db_service)):
    try:
        return _found_or_404(marking_service.get_latest_group_submission(db, group_id, teacher.id))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.get("/groups/{group_id}/marks", summary="My Marks for a Group")
def get_group_marks(group_id: str, teacher=Depends(require_teacher), db: DatabaseService = Depends(get_db_service)):
    try:
        return _found_or_404(marking_service.get_group_marks(db, group_id, teacher.id))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.patch("/groups/{group_id}/marks/{student_id}", summary="Set a Student's Mark")
def upsert_student_mark(
    group_id: str,
    student_id: str,
    mark_update: mark_model.StudentMarkUpdate,
    teacher=Depends(require_teacher),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        mark = marking_service.upsert_student_mark(db, group_id, teacher.id, student_id, mark_update.marks)
        return {"mark": _found_or_404(mark)}
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/groups/{group_id}/group-mark", response_model=mark_model.GroupMarkRead, summary="Set the Group Mark")
def upsert_group_mark(
    group_id: str,
    mark_update: mark_model.GroupMarkUpdate,
    teacher=Depends(require_teacher),
    db: DatabaseService = Depends(get_db_service),
):
    try:
        mark = marking_service.upsert_group_mark(db, group_id, teacher.id, mark_update.marks, mark_update.remarks)
        return _found_or_404(mark)
    except PermissionDeniedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
