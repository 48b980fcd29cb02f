# /formify-backend/app/db/base.py

# This file acts as a central registry for all our SQLAlchemy models.
# By importing them all here, we ensure that the Base metadata knows about
# every table when the application creates the schema at startup.

# Import the Base class that all models inherit from.
from .base_class import Base

# Import all of our model classes from their respective files.
from .models.user_models import User
from .models.group_models import Group, GroupMember, GroupExpectedPartner, GroupTeacherPreference
from .models.submission_models import StudentSubmission
from .models.mark_models import StudentMark, GroupMark
from .models.audit_models import AdminOverrideLog
