# /formify-backend/app/routers/student_router.py

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Form
from typing import List, Optional

from ..core.deps import require_student
from ..models import group_model, submission_model, user_model
from ..services import exceptions
from ..services.submission_service import SubmissionService, get_submission_service

router = APIRouter()


def conflict_detail(conflict: exceptions.GroupingConflictError) -> dict:
    return {
        "message": conflict.message,
        "submissionId": conflict.submission_id,
        "groupCodes": conflict.group_codes,
    }


@router.post("/submit", response_model=group_model.SubmitResponse, status_code=status.HTTP_201_CREATED, summary="Submit the Project Form")
def submit_project_form(
    name: Optional[str] = Form(None),
    universityRollNo: Optional[str] = Form(None),
    mobile: Optional[str] = Form(None),
    member1Roll: Optional[str] = Form(None),
    member2Roll: Optional[str] = Form(None),
    member1Name: Optional[str] = Form(None),
    member2Name: Optional[str] = Form(None),
    projectDomain: Optional[str] = Form(None),
    projectDomainOther: Optional[str] = Form(None),
    tentativeProjectTitle: Optional[str] = Form(None),
    projectDescription: Optional[str] = Form(None),
    technologyStack: Optional[str] = Form(None),
    expectedOutcomes: Optional[str] = Form(None),
    previousExperience: Optional[str] = Form(None),
    agreement: Optional[str] = Form(None),
    sdgMapping: Optional[str] = Form(None),
    pref1: Optional[str] = Form(None),
    pref2: Optional[str] = Form(None),
    pref3: Optional[str] = Form(None),
    comments: Optional[str] = Form(None),
    synopsis: Optional[UploadFile] = File(None),
    presentation: Optional[UploadFile] = File(None),
    student=Depends(require_student),
    service: SubmissionService = Depends(get_submission_service),
):
    """
    Validates the form, links the student to a group (creating one and
    allocating a supervisor if needed) and stores the submission.
    """
    values = locals()
    raw_form = {field: values[field] for field in submission_model.FORM_FIELDS}
    try:
        return service.submit(student, raw_form, synopsis=synopsis, presentation=presentation)
    except exceptions.SubmissionValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except exceptions.GroupingConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail(e))


@router.get("/me", response_model=group_model.GroupEnvelope, summary="Get My Group")
def get_my_group(student=Depends(require_student), service: SubmissionService = Depends(get_submission_service)):
    return {"group": service.get_my_group(student)}


@router.post("/upload", response_model=group_model.SubmitResponse, summary="Attach Files to My Submission")
def upload_files(
    synopsis: Optional[UploadFile] = File(None),
    presentation: Optional[UploadFile] = File(None),
    student=Depends(require_student),
    service: SubmissionService = Depends(get_submission_service),
):
    try:
        return service.upload_files(student, synopsis=synopsis, presentation=presentation)
    except exceptions.SubmissionValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except exceptions.NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/submissions/latest", response_model=submission_model.SubmissionEnvelope, summary="Get My Latest Submission")
def get_latest_submission(student=Depends(require_student), service: SubmissionService = Depends(get_submission_service)):
    return {"submission": service.get_latest_submission(student)}


@router.get("/teachers", response_model=List[user_model.Teacher], summary="List Teachers for Supervisor Preferences")
def list_teachers(student=Depends(require_student), service: SubmissionService = Depends(get_submission_service)):
    return service.list_teachers()
