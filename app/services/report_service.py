# /formify-backend/app/services/report_service.py

"""
Read-side assembly for groups, submissions and the override audit trail.

Nothing in this module writes to the database. It turns ORM objects into the
plain dictionaries the routers return, and produces the CSV export of all
groups.
"""

from typing import List, Dict, Optional, Iterable

import pandas as pd

from .database_service import DatabaseService
from ..db.models.group_models import Group
from ..db.models.submission_models import StudentSubmission

SUBMISSION_COLUMNS = (
    "id", "student_id", "group_id", "name", "universityRollNo", "mobile", "member1Roll", "member2Roll",
    "member1Name", "member2Name", "projectDomain", "projectDomainOther", "tentativeProjectTitle",
    "projectDescription", "technologyStack", "expectedOutcomes", "previousExperience", "agreement",
    "sdgMapping", "teacherPreferences", "comments", "synopsisFile", "presentationFile", "submissionTimestamp",
)

EXPORT_COLUMNS = [
    'GroupID', 'Status', 'Flagged', 'FlagReason', 'LeaderRoll', 'LeaderName', 'Members',
    'ProjectTitle', 'Domain', 'TechStack', 'SupervisorRoll', 'SupervisorName', 'CreatedAt',
]


# --- Serialisers ---

def _person(user) -> Optional[Dict]:
    if user is None:
        return None
    return {"id": user.id, "rollNumber": user.rollNumber, "name": user.name}


def serialize_group(group: Group) -> Dict:
    return {
        "id": group.id,
        "groupCode": group.groupCode,
        "leader": _person(group.leader),
        "members": [_person(m.student) for m in group.members],
        "memberRollNumbers": group.memberRollNumbers,
        "expectedPartnerRollNumbers": group.expectedPartnerRollNumbers,
        "projectTitle": group.projectTitle,
        "domain": group.domain,
        "projectDomainOther": group.projectDomainOther,
        "techStack": group.techStack,
        "projectDescription": group.projectDescription,
        "expectedOutcomes": group.expectedOutcomes,
        "sdgMapping": group.sdgMapping,
        "teacherPreferences": [_person(p.teacher) for p in group.teacher_preferences],
        "assignedSupervisor": _person(group.supervisor),
        "status": group.status,
        "flaggedForAdmin": bool(group.flaggedForAdmin),
        "flagReason": group.flagReason,
        "createdAt": group.created_at,
    }


def serialize_submission(submission: StudentSubmission) -> Dict:
    data = {column: getattr(submission, column) for column in SUBMISSION_COLUMNS}
    student = submission.student
    data["studentRollNumber"] = student.rollNumber if student else None
    data["studentName"] = student.name if student else None
    return data


def latest_per_student(submissions: Iterable[StudentSubmission]) -> List[StudentSubmission]:
    """Keeps the first row seen per student. Input must already be newest first."""
    seen = set()
    latest = []
    for submission in submissions:
        if submission.student_id in seen:
            continue
        seen.add(submission.student_id)
        latest.append(submission)
    return latest


# --- Listings ---

def list_groups(db: DatabaseService, flagged_only: bool = False) -> List[Dict]:
    return [serialize_group(g) for g in db.get_all_groups(flagged_only=flagged_only)]


def get_group_submissions(db: DatabaseService, group_ref: str) -> Optional[List[Dict]]:
    """Latest submission per member of one group, or None if the group does not exist."""
    group = db.get_group_by_ref(group_ref)
    if group is None:
        return None
    return [serialize_submission(s) for s in latest_per_student(db.get_submissions_by_group(group.id))]


def list_latest_submissions(db: DatabaseService) -> List[Dict]:
    return [serialize_submission(s) for s in latest_per_student(db.get_linked_submissions())]


def list_orphaned_submissions(db: DatabaseService) -> List[Dict]:
    """Unlinked conflict submissions awaiting admin review, newest first."""
    return [serialize_submission(s) for s in db.get_orphaned_submissions()]


def list_override_logs(db: DatabaseService, limit: int = 200) -> List[Dict]:
    logs = db.get_recent_override_logs(limit)
    codes = {}
    for log in logs:
        if log.group_id not in codes:
            group = db.get_group_by_id(log.group_id)
            codes[log.group_id] = group.groupCode if group else None
    return [
        {
            "id": log.id,
            "adminId": log.admin_id,
            "groupId": log.group_id,
            "groupCode": codes[log.group_id],
            "action": log.action,
            "fromState": log.from_state,
            "toState": log.to_state,
            "reason": log.reason,
            "createdAt": log.created_at,
        }
        for log in logs
    ]


# --- Export ---

def export_groups_as_csv(db: DatabaseService) -> str:
    """One row per group, oldest first, for the admin spreadsheet export."""
    export_data = []
    for g in db.get_all_groups():
        export_data.append({
            'GroupID': g.groupCode,
            'Status': g.status,
            'Flagged': "YES" if g.flaggedForAdmin else "NO",
            'FlagReason': g.flagReason or "",
            'LeaderRoll': g.leader.rollNumber if g.leader else "",
            'LeaderName': g.leader.name if g.leader else "",
            'Members': " | ".join(f"{m.roll_number} - {m.student.name}" for m in g.members),
            'ProjectTitle': g.projectTitle,
            'Domain': g.domain,
            'TechStack': g.techStack,
            'SupervisorRoll': g.supervisor.rollNumber if g.supervisor else "",
            'SupervisorName': g.supervisor.name if g.supervisor else "",
            'CreatedAt': g.created_at.isoformat() if g.created_at else "",
        })

    df = pd.DataFrame(export_data) if export_data else pd.DataFrame(columns=EXPORT_COLUMNS)
    return df.to_csv(index=False)
