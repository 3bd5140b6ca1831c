from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from klassflow.api.deps import get_db, get_mailer
from klassflow.core.clock import utcnow
from klassflow.core.errors import NotificationError
from klassflow.core.security import create_access_token
from klassflow.crud import user as crud_user
from klassflow.db import (
    Attendance,
    Base,
    ClassSession,
    Classroom,
    ClassroomEnrollment,
    Organization,
    SignatureToken,
)
from klassflow.main import app

# A Monday, used wherever a test drives the clock explicitly
NOW = datetime(2026, 3, 2, 10, 0)


class RecordingMailer:
    def __init__(self):
        self.sent = []
        self.failing = set()

    def send_signature_email(self, to, student_name, url, session, organization_name=None):
        if to in self.failing:
            raise NotificationError("boom")
        self.sent.append({"kind": "student", "to": to, "url": url, "session": session})

    def send_teacher_signature_request(self, to, teacher_name, url, session, pending, organization_name=None):
        self.sent.append({"kind": "teacher", "to": to, "url": url, "session": session, "pending": pending})


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def client(db, mailer):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class Factory:
    """Builds rows directly in the test database."""

    def __init__(self, db):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def organization(self, name="Acme Formation"):
        return self._save(Organization(name=name))

    def user(self, email, role="STUDENT", organization=None, name=None, password=None):
        return crud_user.create_user(
            self.db,
            email,
            name or email.split("@")[0],
            role,
            organization_id=organization.id if organization else None,
            password=password,
        )

    def classroom(self, organization, name="Python 101", teachers=()):
        classroom = Classroom(
            organization_id=organization.id,
            name=name,
            location_on_site="12 rue des Lilas",
            location_online="https://meet.example/room",
        )
        classroom.teachers = list(teachers)
        return self._save(classroom)

    def enroll(self, classroom, student):
        return self._save(ClassroomEnrollment(classroom_id=classroom.id, student_id=student.id))

    def session(self, classroom, start, hours=2, title="Session", type="ONSITE", teacher=None):
        return self._save(ClassSession(
            classroom_id=classroom.id,
            title=title,
            type=type,
            start_time=start,
            end_time=start + timedelta(hours=hours),
            teacher_id=teacher.id if teacher else None,
        ))

    def token(self, session, student, expires_at=None, used_at=None, value=None):
        token = SignatureToken(
            session_id=session.id,
            student_id=student.id,
            expires_at=expires_at or utcnow() + timedelta(hours=1),
            used_at=used_at,
        )
        if value:
            token.token = value
        return self._save(token)

    def attendance(self, session, student, status="PRESENT", signature_url=None):
        return self._save(Attendance(
            session_id=session.id,
            student_id=student.id,
            status=status,
            signature_url=signature_url,
        ))


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def org(factory):
    return factory.organization()


@pytest.fixture
def teacher(factory, org):
    return factory.user("teacher@acme.test", role="TEACHER", organization=org, name="Marie Curie")


@pytest.fixture
def student(factory, org):
    return factory.user("alice@acme.test", role="STUDENT", organization=org, name="Alice")


@pytest.fixture
def classroom(factory, org, teacher):
    return factory.classroom(org, teachers=[teacher])


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture
def headers_for():
    return auth_headers
