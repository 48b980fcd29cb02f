# /formify-backend/app/services/exceptions.py

"""
Domain errors raised by the service layer.

Services never build HTTP responses. They raise one of these classes and the
routers translate them into status codes: validation problems become 400,
grouping and capacity conflicts become 409, and missing records become 404.
"""

from typing import List, Optional


class SubmissionValidationError(ValueError):
    """A caller-recoverable problem with the submitted data. Nothing was written."""


class InvalidSupervisorError(ValueError):
    """The requested supervisor does not exist or is not a Teacher."""


class NotFoundError(LookupError):
    """A group, teacher, student or submission id did not resolve."""


class PermissionDeniedError(Exception):
    """The caller is not allowed to act on this resource (e.g. not the supervisor)."""


class DuplicateRollNumberError(Exception):
    """Another user already owns this roll number."""


class GroupingConflictError(Exception):
    """
    Base class for submissions that cannot be grouped automatically.

    The submission has already been stored without a group link when this is
    raised, so an admin can inspect it.
    """

    def __init__(self, message: str, submission_id: Optional[str] = None, group_codes: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.submission_id = submission_id
        self.group_codes = group_codes or []


class AmbiguousGroupingError(GroupingConflictError):
    """The submitter's roll-number set matched more than one existing group."""


class AlreadyGroupedError(GroupingConflictError):
    """The submitter is already a confirmed member of a different group."""


class CapacityConflictError(Exception):
    """An override targeted a teacher with no free slot and `force` was not set."""
