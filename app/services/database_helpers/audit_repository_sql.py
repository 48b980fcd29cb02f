# /formify-backend/app/services/database_helpers/audit_repository_sql.py

"""
Insert-and-read access to `admin_override_logs`. Audit rows are immutable
once written, so there is no update or delete method.
"""

from typing import List, Dict
from sqlalchemy.orm import Session

from app.db.models.audit_models import AdminOverrideLog


class AuditRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def add_log(self, record: Dict) -> AdminOverrideLog:
        log = AdminOverrideLog(**record)
        self.db.add(log)
        self.db.flush()
        return log

    def get_recent_logs(self, limit: int = 200) -> List[AdminOverrideLog]:
        return (
            self.db.query(AdminOverrideLog)
            .order_by(AdminOverrideLog.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_logs_by_group(self, group_id: str) -> List[AdminOverrideLog]:
        return (
            self.db.query(AdminOverrideLog)
            .filter(AdminOverrideLog.group_id == group_id)
            .order_by(AdminOverrideLog.created_at.desc())
            .all()
        )
