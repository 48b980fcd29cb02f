# /formify-backend/app/services/database_helpers/user_repository_sql.py

"""
This module contains all the raw SQLAlchemy queries for the `users` table.

Besides plain CRUD it owns the three statements that touch a teacher's
`assignedGroupsCount`. Each one is a single UPDATE evaluated by the database,
never a read followed by a write, so two requests competing for a teacher's
last slot cannot both win.

Repository methods only flush. The calling service decides when the unit of
work is committed.
"""

from typing import List, Dict, Optional, Iterable
from sqlalchemy import update, case, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from app.db.models.user_models import User
from app.models.user_model import UserRole

users_table = User.__table__


class UserRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    # --- Lookups ---

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_roll(self, roll_number: str) -> Optional[User]:
        """`roll_number` must already be normalised."""
        return self.db.query(User).filter(User.rollNumber == roll_number).first()

    def get_users_by_role(self, role: UserRole, order_by: str = "rollNumber") -> List[User]:
        return (
            self.db.query(User)
            .filter(User.role == role.value)
            .order_by(getattr(User, order_by), User.id)
            .all()
        )

    def get_teachers_by_ids(self, teacher_ids: Iterable[str]) -> List[User]:
        ids = list(teacher_ids)
        if not ids:
            return []
        return (
            self.db.query(User)
            .filter(User.id.in_(ids), User.role == UserRole.TEACHER.value)
            .all()
        )

    def lock_users_by_rolls(self, roll_numbers: Iterable[str]) -> List[User]:
        """
        Takes row locks on every user owning one of `roll_numbers`, in roll
        order so that two transactions never wait on each other in a cycle.
        Backends without row locking (SQLite) simply run the SELECT.
        """
        rolls = sorted(set(roll_numbers))
        if not rolls:
            return []
        stmt = (
            select(User)
            .where(User.rollNumber.in_(rolls))
            .order_by(User.rollNumber)
            .with_for_update()
        )
        return list(self.db.execute(stmt).scalars().all())

    # --- CRUD ---

    def add_user(self, record: Dict) -> User:
        new_user = User(**record)
        self.db.add(new_user)
        self.db.flush()
        return new_user

    def update_user(self, user: User, data: Dict) -> User:
        for key, value in data.items():
            setattr(user, key, value)
        self.db.flush()
        return user

    def delete_user(self, user: User) -> None:
        self.db.delete(user)
        self.db.flush()

    # --- Capacity counter statements ---

    def increment_assigned_count_if_available(self, teacher_id: str) -> bool:
        """
        Claims one supervision slot: +1 only when the row is a Teacher whose
        count is still below capacity. Returns True when the slot was taken.
        """
        stmt = (
            update(users_table)
            .where(
                users_table.c.id == teacher_id,
                users_table.c.role == UserRole.TEACHER.value,
                users_table.c.assignedGroupsCount < users_table.c.teacherCapacity,
            )
            .values(assignedGroupsCount=users_table.c.assignedGroupsCount + 1)
        )
        claimed = self.db.execute(stmt).rowcount == 1
        self._expire_cached_count(teacher_id)
        return claimed

    def increment_assigned_count(self, teacher_id: str) -> bool:
        """Unconditional +1, used only by forced admin overrides."""
        stmt = (
            update(users_table)
            .where(users_table.c.id == teacher_id, users_table.c.role == UserRole.TEACHER.value)
            .values(assignedGroupsCount=users_table.c.assignedGroupsCount + 1)
        )
        changed = self.db.execute(stmt).rowcount == 1
        self._expire_cached_count(teacher_id)
        return changed

    def decrement_assigned_count(self, teacher_id: str) -> bool:
        """-1 clamped at zero, in one statement."""
        count = users_table.c.assignedGroupsCount
        stmt = (
            update(users_table)
            .where(users_table.c.id == teacher_id, users_table.c.role == UserRole.TEACHER.value)
            .values(assignedGroupsCount=case((count > 0, count - 1), else_=0))
        )
        changed = self.db.execute(stmt).rowcount == 1
        self._expire_cached_count(teacher_id)
        return changed

    def set_assigned_count(self, teacher_id: str, value: int) -> None:
        stmt = update(users_table).where(users_table.c.id == teacher_id).values(assignedGroupsCount=value)
        self.db.execute(stmt)
        self._expire_cached_count(teacher_id)

    def _expire_cached_count(self, teacher_id: str) -> None:
        # Core UPDATEs bypass the identity map; drop any cached value so the
        # next attribute access re-reads the row.
        cached = self.db.identity_map.get(identity_key(User, teacher_id))
        if cached is not None:
            self.db.expire(cached, ["assignedGroupsCount"])
