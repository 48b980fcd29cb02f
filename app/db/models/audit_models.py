# /formify-backend/app/db/models/audit_models.py

from sqlalchemy import Column, String, JSON, DateTime
from datetime import datetime, timezone

from ..base_class import Base


class AdminOverrideLog(Base):
    """
    Immutable audit entry written for every supervisor override.

    `group_id` and `admin_id` are plain indexed columns rather than foreign
    keys so that the history survives deletion of the group it describes.
    """
    __tablename__ = "admin_override_logs"

    id = Column(String, primary_key=True, index=True)
    admin_id = Column(String, index=True, nullable=False)
    group_id = Column(String, index=True, nullable=False)
    action = Column(String, nullable=False)
    from_state = Column(JSON, nullable=True)
    to_state = Column(JSON, nullable=True)
    reason = Column(String, nullable=True)
    # Client-side timestamp keeps microsecond ordering on every backend.
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
