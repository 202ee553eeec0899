import os

# Cheap bcrypt rounds for tests.
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.deps import get_db
from app.db.base import Base
from app.main import app
from app.models.department import Department
from app.models.grade import Grade
from app.models.professor import Professor
from app.models.room import Room, RoomType
from app.models.section import Section
from app.models.subject import Subject

DEFAULT_PASSWORD = "password123"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def academic(session_factory):
    """One department, one grade, and a handful of sections, subjects, professors and rooms."""
    db = session_factory()
    try:
        department = Department(name="Computer Science", code="CS")
        db.add(department)
        db.flush()

        grade = Grade(department_id=department.id, name="First Year", level=1)
        db.add(grade)
        db.flush()

        sections = [Section(grade_id=grade.id, name=name, capacity=30) for name in ("A", "B")]
        subjects = [
            Subject(grade_id=grade.id, name="Algorithms", code="CS101", credits=4, hours_per_week=4),
            Subject(grade_id=grade.id, name="Databases", code="CS102", credits=3, hours_per_week=3),
        ]
        professors = [
            Professor(
                department_id=department.id,
                first_name=first_name,
                last_name=last_name,
                email=f"{first_name.lower()}@example.com",
            )
            for first_name, last_name in (("Ada", "Lovelace"), ("Alan", "Turing"), ("Grace", "Hopper"))
        ]
        rooms = [
            Room(name=name, capacity=40, type=RoomType.lecture, building="Main")
            for name in ("R101", "R102", "R103")
        ]
        db.add_all([*sections, *subjects, *professors, *rooms])
        db.flush()

        data = SimpleNamespace(
            department_id=department.id,
            grade_id=grade.id,
            section_ids=[item.id for item in sections],
            subject_ids=[item.id for item in subjects],
            professor_ids=[item.id for item in professors],
            room_ids=[item.id for item in rooms],
        )
        db.commit()
    finally:
        db.close()
    return data


@pytest.fixture()
def auth_headers(client):
    """Register and log in a user with the given role; returns bearer headers."""

    def _auth_headers(role: str = "admin", email: str | None = None) -> dict[str, str]:
        email = email or f"{role}@example.com"
        register_response = client.post(
            "/api/auth/register",
            json={
                "first_name": role.replace("_", " ").title(),
                "last_name": "User",
                "email": email,
                "password": DEFAULT_PASSWORD,
                "role": role,
            },
        )
        assert register_response.status_code == 201
        login_response = client.post("/api/auth/login", json={"email": email, "password": DEFAULT_PASSWORD})
        assert login_response.status_code == 200
        return {"Authorization": f"Bearer {login_response.json()['access_token']}"}

    return _auth_headers
