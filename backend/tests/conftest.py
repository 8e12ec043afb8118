"""Shared fixtures: an isolated in-memory database per test and an API client."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from sqlalchemy.orm import sessionmaker

from polylearn.database import Base, init_db, make_engine
from polylearn.models.user import User, ROLE_ADMIN, ROLE_STUDENT, ROLE_SUPERADMIN
from polylearn.services import department_service
from polylearn.services.file_storage import FileStorageService

PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\ntrailer << >>\n%%EOF\n"


@pytest.fixture
def db():
    engine = make_engine("sqlite://")
    init_db(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    department_service.seed_departments(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def storage(tmp_path, monkeypatch):
    """Point the shared file store at a temp dir for the duration of a test."""
    from polylearn.services.file_storage import file_storage

    monkeypatch.setattr(file_storage, "base_path", tmp_path)
    return file_storage


def make_user(db, email: str, role: str = ROLE_STUDENT, password_hash: str = "not-a-real-hash") -> User:
    user = User(
        email=email,
        password_hash=password_hash,
        first_name=email.split("@")[0].title(),
        last_name="Tester",
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def student(db):
    return make_user(db, "student@polylearn.test")


@pytest.fixture
def other_student(db):
    return make_user(db, "other@polylearn.test")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@polylearn.test", ROLE_ADMIN)


@pytest.fixture
def superadmin(db):
    return make_user(db, "root@polylearn.test", ROLE_SUPERADMIN)


@pytest.fixture
def submit_note(db, student, storage):
    """Submit a study note as ``student`` and return the pending upload."""
    from polylearn.services import upload_service

    def _submit(title: str = "DBMS Notes", user=None, resource_type: str = "study_note", **extra):
        fields = {
            "subject": "Database Management",
            "department": "computer",
            "semester": "4",
        }
        fields.update(extra)
        return upload_service.submit(
            db,
            user_id=(user or student).id,
            resource_type=resource_type,
            content=PDF_BYTES,
            filename="notes.pdf",
            content_type="application/pdf",
            title=title,
            **fields,
        )

    return _submit


@pytest.fixture
def client(db, storage):
    from fastapi.testclient import TestClient

    from polylearn.database import get_db
    from polylearn.main import app

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    from polylearn.middleware.auth import issue_token

    return {"Authorization": f"Bearer {issue_token(user)}"}


@pytest.fixture
def tmp_storage(tmp_path):
    """A standalone store with a small size limit."""
    return FileStorageService(base_path=str(tmp_path), max_bytes=1024)
