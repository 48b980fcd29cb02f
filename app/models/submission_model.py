# /formify-backend/app/models/submission_model.py

"""
Pydantic contracts for the student project form.

`ProjectSubmissionForm` is the single place where the raw multipart fields
are validated and normalised. Every text field is trimmed, every roll number
is normalised, and each failure carries the human-readable message shown to
the student.
"""

import re
from datetime import datetime
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from ..services.group_helpers.roll_numbers import normalize_roll, unique_rolls

OTHER_DOMAIN = "Other"

# Labels used in "<label> is required" messages.
REQUIRED_FIELD_LABELS = {
    "name": "Name",
    "universityRollNo": "University Roll No.",
    "member1Roll": "1st Group Member University Roll Number",
    "member1Name": "1st Group Member Name",
    "projectDomain": "Project Domain",
    "tentativeProjectTitle": "Tentative Project Title",
    "projectDescription": "Project Description",
    "technologyStack": "Technology Stack",
    "expectedOutcomes": "Expected Outcomes",
    "sdgMapping": "Project Title / Objectives Map With SDGs",
    "pref1": "Supervisor Preference Priority 1",
    "pref2": "Supervisor Preference Priority 2",
    "pref3": "Supervisor Preference Priority 3",
}

ROLL_FIELDS = ("universityRollNo", "member1Roll", "member2Roll")

# Every field the multipart form may carry, required or not.
FORM_FIELDS = (
    "name", "universityRollNo", "mobile", "member1Roll", "member2Roll", "member1Name", "member2Name",
    "projectDomain", "projectDomainOther", "tentativeProjectTitle", "projectDescription", "technologyStack",
    "expectedOutcomes", "previousExperience", "agreement", "sdgMapping", "pref1", "pref2", "pref3", "comments",
)


class FileReference(BaseModel):
    """Metadata for one stored upload."""
    originalName: Optional[str] = None
    filename: str
    mimetype: Optional[str] = None
    size: Optional[int] = None
    path: str


class ProjectSubmissionForm(BaseModel):
    """The validated project form. Build it with `model_validate` on the raw form dict."""
    name: str
    universityRollNo: str
    mobile: str
    member1Roll: str
    member2Roll: Optional[str] = None
    member1Name: str
    member2Name: Optional[str] = None
    projectDomain: str
    projectDomainOther: Optional[str] = None
    tentativeProjectTitle: str
    projectDescription: str
    technologyStack: str
    expectedOutcomes: str
    previousExperience: Optional[str] = None
    agreement: bool
    sdgMapping: str
    pref1: str
    pref2: str
    pref3: str
    comments: Optional[str] = None

    @field_validator(*REQUIRED_FIELD_LABELS.keys(), mode='before')
    @classmethod
    def required_text(cls, v, info):
        text = str(v).strip() if v is not None else ""
        if not text:
            raise ValueError(f"{REQUIRED_FIELD_LABELS[info.field_name]} is required")
        if info.field_name in ROLL_FIELDS:
            return normalize_roll(text)
        return text

    @field_validator('member2Roll', 'member2Name', 'projectDomainOther', 'previousExperience', 'comments', mode='before')
    @classmethod
    def optional_text(cls, v, info):
        if v is None: return None
        text = str(v).strip()
        if not text: return None
        return normalize_roll(text) if info.field_name in ROLL_FIELDS else text

    @field_validator('mobile', mode='before')
    @classmethod
    def mobile_must_have_ten_digits(cls, v):
        digits = re.sub(r"\D", "", str(v or ""))
        if len(digits) != 10:
            raise ValueError("Mobile Number must be 10 digits")
        return digits

    @field_validator('agreement', mode='before')
    @classmethod
    def agreement_must_be_accepted(cls, v):
        if v is True or (isinstance(v, str) and v.strip().lower() == "true"):
            return True
        raise ValueError("Agreement to continue as Major Project is required")

    @model_validator(mode='after')
    def preferences_must_be_distinct(self):
        if len({self.pref1, self.pref2, self.pref3}) != 3:
            raise ValueError("All three supervisor preferences must be distinct")
        return self

    # --- Derived values ---

    @property
    def teacher_preference_ids(self) -> List[str]:
        return [self.pref1, self.pref2, self.pref3]

    @property
    def partner_rolls(self) -> List[str]:
        return unique_rolls([self.member1Roll, self.member2Roll])

    @property
    def domain_value(self) -> str:
        if self.projectDomain == OTHER_DOMAIN:
            return self.projectDomainOther or OTHER_DOMAIN
        return self.projectDomain

    def project_metadata(self) -> Dict[str, Any]:
        """The metadata a newly created group locks in permanently."""
        return {
            "projectTitle": self.tentativeProjectTitle,
            "domain": self.domain_value,
            "projectDomainOther": self.projectDomainOther if self.projectDomain == OTHER_DOMAIN else None,
            "techStack": self.technologyStack,
            "projectDescription": self.projectDescription,
            "expectedOutcomes": self.expectedOutcomes,
            "sdgMapping": self.sdgMapping,
        }

    def submission_fields(self) -> Dict[str, Any]:
        """The column values stored on the student's submission row."""
        return {
            "name": self.name,
            "universityRollNo": self.universityRollNo,
            "mobile": self.mobile,
            "member1Roll": self.member1Roll,
            "member2Roll": self.member2Roll,
            "member1Name": self.member1Name,
            "member2Name": self.member2Name,
            "projectDomain": self.projectDomain,
            "projectDomainOther": self.projectDomainOther if self.projectDomain == OTHER_DOMAIN else None,
            "tentativeProjectTitle": self.tentativeProjectTitle,
            "projectDescription": self.projectDescription,
            "technologyStack": self.technologyStack,
            "expectedOutcomes": self.expectedOutcomes,
            "previousExperience": self.previousExperience,
            "agreement": True,
            "sdgMapping": self.sdgMapping,
            "teacherPreferences": self.teacher_preference_ids,
            "comments": self.comments,
        }


class SubmissionRead(BaseModel):
    """A stored submission as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    group_id: Optional[str] = None
    studentRollNumber: Optional[str] = None
    studentName: Optional[str] = None

    name: Optional[str] = None
    universityRollNo: Optional[str] = None
    mobile: Optional[str] = None
    member1Roll: Optional[str] = None
    member2Roll: Optional[str] = None
    member1Name: Optional[str] = None
    member2Name: Optional[str] = None
    projectDomain: Optional[str] = None
    projectDomainOther: Optional[str] = None
    tentativeProjectTitle: Optional[str] = None
    projectDescription: Optional[str] = None
    technologyStack: Optional[str] = None
    expectedOutcomes: Optional[str] = None
    previousExperience: Optional[str] = None
    agreement: Optional[bool] = None
    sdgMapping: Optional[str] = None
    teacherPreferences: Optional[List[str]] = None
    comments: Optional[str] = None
    synopsisFile: Optional[FileReference] = None
    presentationFile: Optional[FileReference] = None
    submissionTimestamp: Optional[datetime] = None


class SubmissionEnvelope(BaseModel):
    submission: Optional[SubmissionRead] = None
