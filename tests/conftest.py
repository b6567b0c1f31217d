import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-school-core")
os.environ.setdefault("AUDIT_PURGE_INTERVAL_SECONDS", "0")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from jose import jwt

from schoolcore.database import get_db, get_session_factory
from schoolcore.models.base import Base
from schoolcore.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from schoolcore.models.school import School
from schoolcore.models.user import User
from schoolcore.models.custom_role import CustomRole, RolePermission
from schoolcore.models.student import Student
from schoolcore.models.department import Department
from schoolcore.models.subject import Subject
from schoolcore.models.faculty_workload import FacultyWorkload
from schoolcore.models.transport import TransportAssignment, TransportVehicle
from schoolcore.models.fee import FeeStructure
from schoolcore.models.audit_log import AuditLog
from schoolcore.models.role import SystemRole
# Import FastAPI app AFTER model imports
from schoolcore.main import app


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Fresh SQLite file per test.

    A file (not :memory:) so the audit recorder's own sessions and the
    request session use separate connections to the same database.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Session used by fixtures and by the app under test"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(db_session, session_factory):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id: int | str = 1, school_id: int | None = 1, expired: bool = False) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        school_id: School ID claim; None leaves the claim out
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": str(user_id), "exp": exp, "iat": datetime.now(UTC)}
    if school_id is not None:
        payload["school_id"] = school_id

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def headers_for(user: User) -> dict:
    """Authorization headers for a stored user"""
    token = create_test_token(user_id=user.id, school_id=user.school_id)
    return {"Authorization": f"Bearer {token}"}


def make_user(db, school: School, role: SystemRole, name: str, **kwargs) -> User:
    user = User(
        school_id=school.id,
        name=name,
        email=kwargs.pop("email", f"{name.lower().replace(' ', '.')}@school{school.id}.test"),
        role=role,
        **kwargs,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def school(db_session):
    school = School(name="Greenwood High")
    db_session.add(school)
    db_session.commit()
    db_session.refresh(school)
    return school


@pytest.fixture
def other_school(db_session):
    school = School(name="Riverside Academy")
    db_session.add(school)
    db_session.commit()
    db_session.refresh(school)
    return school


@pytest.fixture
def admin(db_session, school):
    return make_user(db_session, school, SystemRole.ADMIN, "Ada Admin")


@pytest.fixture
def teacher(db_session, school):
    return make_user(db_session, school, SystemRole.TEACHER, "Tom Teacher")


@pytest.fixture
def student_user(db_session, school):
    return make_user(db_session, school, SystemRole.STUDENT, "Sam Student")


@pytest.fixture
def parent(db_session, school):
    return make_user(db_session, school, SystemRole.PARENT, "Pat Parent")


@pytest.fixture
def other_admin(db_session, other_school):
    return make_user(db_session, other_school, SystemRole.ADMIN, "Olive Admin")


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture
def teacher_headers(teacher):
    return headers_for(teacher)


@pytest.fixture
def student_headers(student_user):
    return headers_for(student_user)


@pytest.fixture
def parent_headers(parent):
    return headers_for(parent)


@pytest.fixture
def other_admin_headers(other_admin):
    return headers_for(other_admin)
