# /formify-backend/app/services/database_helpers/group_repository_sql.py

"""
This module contains all the raw SQLAlchemy queries for the `groups` table and
its child tables (confirmed members, expected partners, ranked preferences).

The most important query here is `find_groups_matching_rolls`, which
implements the matching key used by the group resolver: a group matches when
any of its confirmed OR expected roll numbers is in the submitted set.
"""

from typing import List, Dict, Optional, Iterable
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.db.models.group_models import Group, GroupMember, GroupExpectedPartner, GroupTeacherPreference


class GroupRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    # --- Lookups ---

    def get_group_by_id(self, group_id: str) -> Optional[Group]:
        return self.db.query(Group).filter(Group.id == group_id).first()

    def get_group_by_code(self, group_code: str) -> Optional[Group]:
        return self.db.query(Group).filter(Group.groupCode == group_code).first()

    def get_group_by_ref(self, group_ref: str) -> Optional[Group]:
        """Resolves either the internal id or the human-readable group code."""
        ref = str(group_ref or "").strip()
        if not ref:
            return None
        return self.get_group_by_id(ref) or self.get_group_by_code(ref.upper())

    def get_all_groups(self, flagged_only: bool = False) -> List[Group]:
        query = self.db.query(Group)
        if flagged_only:
            query = query.filter(Group.flaggedForAdmin.is_(True))
        return query.order_by(Group.created_at, Group.id).all()

    def get_groups_by_supervisor(self, teacher_id: str) -> List[Group]:
        return (
            self.db.query(Group)
            .filter(Group.assigned_supervisor_id == teacher_id)
            .order_by(Group.created_at, Group.id)
            .all()
        )

    def get_group_by_member_roll(self, roll_number: str) -> Optional[Group]:
        """The group in which `roll_number` is a confirmed member, if any."""
        return (
            self.db.query(Group)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .filter(GroupMember.roll_number == roll_number)
            .first()
        )

    def get_groups_by_member_student(self, student_id: str) -> List[Group]:
        return (
            self.db.query(Group)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .filter(GroupMember.student_id == student_id)
            .order_by(Group.created_at, Group.id)
            .all()
        )

    def find_groups_matching_rolls(self, roll_numbers: Iterable[str]) -> List[Group]:
        """
        Every group whose confirmed or expected roll numbers intersect
        `roll_numbers`, oldest first.
        """
        rolls = list(roll_numbers)
        if not rolls:
            return []
        member_groups = select(GroupMember.group_id).where(GroupMember.roll_number.in_(rolls))
        expected_groups = select(GroupExpectedPartner.group_id).where(GroupExpectedPartner.roll_number.in_(rolls))
        return (
            self.db.query(Group)
            .filter(or_(Group.id.in_(member_groups), Group.id.in_(expected_groups)))
            .order_by(Group.created_at, Group.id)
            .all()
        )

    def count_groups_by_supervisor(self) -> Dict[str, int]:
        rows = (
            self.db.query(Group.assigned_supervisor_id, func.count(Group.id))
            .filter(Group.assigned_supervisor_id.isnot(None))
            .group_by(Group.assigned_supervisor_id)
            .all()
        )
        return {teacher_id: count for teacher_id, count in rows}

    # --- Mutations ---

    def add_group(
        self,
        record: Dict,
        leader_id: str,
        leader_roll: str,
        expected_rolls: List[str],
        teacher_ids: List[str],
    ) -> Group:
        """
        Creates a group with its leader as the only confirmed member.
        Flushing here surfaces a member-roll unique violation immediately.
        """
        group = Group(**record, leader_id=leader_id)
        group.members.append(GroupMember(student_id=leader_id, roll_number=leader_roll))
        for roll in expected_rolls:
            group.expected_partners.append(GroupExpectedPartner(roll_number=roll))
        for rank, teacher_id in enumerate(teacher_ids, start=1):
            group.teacher_preferences.append(GroupTeacherPreference(teacher_id=teacher_id, rank=rank))
        self.db.add(group)
        self.db.flush()
        return group

    def add_member(self, group: Group, student_id: str, roll_number: str) -> GroupMember:
        member = GroupMember(student_id=student_id, roll_number=roll_number)
        group.members.append(member)
        self.db.flush()
        return member

    def remove_member(self, group: Group, student_id: str) -> int:
        removed = [m for m in group.members if m.student_id == student_id]
        for member in removed:
            group.members.remove(member)
        self.db.flush()
        return len(removed)

    def add_expected_partner(self, group: Group, roll_number: str) -> None:
        group.expected_partners.append(GroupExpectedPartner(roll_number=roll_number))
        self.db.flush()

    def rename_member_roll(self, student_id: str, roll_number: str) -> int:
        members = self.db.query(GroupMember).filter(GroupMember.student_id == student_id).all()
        for member in members:
            member.roll_number = roll_number
        self.db.flush()
        return len(members)

    def rename_expected_roll(self, old_roll: str, new_roll: str) -> int:
        """
        Points expected-partner rows at a student's new roll number. A group
        that already lists the new roll just loses the stale row.
        """
        rows = self.db.query(GroupExpectedPartner).filter(GroupExpectedPartner.roll_number == old_roll).all()
        for row in rows:
            group = row.group
            if new_roll in group.expectedPartnerRollNumbers or new_roll in group.memberRollNumbers:
                group.expected_partners.remove(row)
            else:
                row.roll_number = new_roll
        self.db.flush()
        return len(rows)

    def remove_expected_partner(self, group: Group, roll_number: str) -> None:
        for partner in [p for p in group.expected_partners if p.roll_number == roll_number]:
            group.expected_partners.remove(partner)
        self.db.flush()

    def remove_teacher_from_preferences(self, teacher_id: str) -> int:
        """Strips `teacher_id` from every group's preference list."""
        prefs = self.db.query(GroupTeacherPreference).filter(GroupTeacherPreference.teacher_id == teacher_id).all()
        for pref in prefs:
            pref.group.teacher_preferences.remove(pref)
        self.db.flush()
        return len(prefs)

    def save_group(self, group: Group) -> Group:
        self.db.flush()
        return group

    def delete_group(self, group: Group) -> None:
        # Members, expected partners and preferences go with it (delete-orphan cascade).
        self.db.delete(group)
        self.db.flush()
