# /tests/conftest.py

import uuid
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db import base  # noqa: F401  (registers every model on Base.metadata)
from app.db.base_class import Base
from app.services.database_service import DatabaseService
from app.models.user_model import UserRole


@pytest.fixture
def engine(tmp_path):
    """A fresh SQLite file per test, with every table created."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_service(session_factory):
    """A real DatabaseService bound to the temporary database."""
    session = session_factory()
    try:
        yield DatabaseService(db_session=session)
    finally:
        session.close()


def _add_user(db: DatabaseService, roll: str, name: str, role: UserRole, capacity: int = 0, assigned: int = 0):
    user = db.add_user({
        "id": f"usr_{uuid.uuid4().hex[:12]}",
        "rollNumber": roll,
        "name": name,
        "role": role.value,
        "teacherCapacity": capacity,
        "assignedGroupsCount": assigned,
    })
    db.commit()
    return user


@pytest.fixture
def make_student(db_service):
    def factory(roll: str, name: str = None):
        return _add_user(db_service, roll, name or f"Student {roll}", UserRole.STUDENT)
    return factory


@pytest.fixture
def make_teacher(db_service):
    def factory(roll: str, capacity: int = 2, assigned: int = 0, name: str = None):
        return _add_user(db_service, roll, name or f"Teacher {roll}", UserRole.TEACHER, capacity, assigned)
    return factory


@pytest.fixture
def make_admin(db_service):
    def factory(roll: str = "ADM1", name: str = "Admin"):
        return _add_user(db_service, roll, name, UserRole.ADMIN)
    return factory


@pytest.fixture
def project_form():
    """Builds a valid raw form dict; keyword overrides replace individual fields."""
    def factory(student, member1Roll, teacher_ids, member2Roll=None, **overrides):
        form = {
            "name": student.name,
            "universityRollNo": student.rollNumber,
            "mobile": "9876543210",
            "member1Roll": member1Roll,
            "member2Roll": member2Roll,
            "member1Name": "First Teammate",
            "member2Name": "Second Teammate" if member2Roll else None,
            "projectDomain": "Web Development",
            "projectDomainOther": None,
            "tentativeProjectTitle": "Campus Event Planner",
            "projectDescription": "A portal for planning campus events.",
            "technologyStack": "FastAPI, React",
            "expectedOutcomes": "A deployed web application.",
            "previousExperience": None,
            "agreement": "true",
            "sdgMapping": "SDG 4",
            "pref1": teacher_ids[0],
            "pref2": teacher_ids[1],
            "pref3": teacher_ids[2],
            "comments": None,
        }
        form.update(overrides)
        return form
    return factory
