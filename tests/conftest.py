import os

# Configure the app for an in-memory database and local file storage before
# anything from campusconnect is imported.
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_MODE"] = "local"

import base64

import pytest
from fastapi.testclient import TestClient

from campusconnect.auth.session import SessionStore, get_session_store
from campusconnect.database import Base, SessionLocal, engine, get_db, init_db
from campusconnect.main import app
from campusconnect.models import Student
from campusconnect.storage.service import ObjectStorage, get_storage

ADMIN_CODE = "PROFESSOR2024"
OFFICE_CODE = "OFFICE2024"
STUDENT_CODE = "STUDENT2024"


@pytest.fixture()
def db_session():
    """A fresh schema for every test."""
    init_db(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def storage(tmp_path):
    return ObjectStorage(mode="local", local_root=str(tmp_path), public_base_url="")


@pytest.fixture()
def session_store():
    return SessionStore()


@pytest.fixture()
def client(db_session, storage, session_store):
    """
    An in-process client against the app, with the database, object storage
    and session store swapped for per-test instances.
    """
    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_session_store] = lambda: session_store

    with_client = TestClient(app)
    try:
        yield with_client
    finally:
        app.dependency_overrides.clear()


def _login(client: TestClient, code: str) -> str:
    response = client.post("/api/access", json={"access_code": code})
    assert response.status_code == 200, (
        f"Failed to enter access code. Status: {response.status_code}, "
        f"Response: {response.text}"
    )
    return response.json()["token"]


def _client_for(code: str, client: TestClient) -> TestClient:
    token = _login(client, code)
    role_client = TestClient(app)
    role_client.headers["Authorization"] = f"Bearer {token}"
    return role_client


@pytest.fixture()
def admin_client(client):
    return _client_for(ADMIN_CODE, client)


@pytest.fixture()
def office_client(client):
    return _client_for(OFFICE_CODE, client)


@pytest.fixture()
def student_client(client):
    return _client_for(STUDENT_CODE, client)


@pytest.fixture()
def class_roster(db_session):
    """Three students in class 10A and one in 9B."""
    students = [
        Student(full_name="Asha Rao", class_name="10A", roll_no=1),
        Student(full_name="Bilal Khan", class_name="10A", roll_no=2),
        Student(full_name="Chen Li", class_name="10A", roll_no=3),
        Student(full_name="Dev Patel", class_name="9B", roll_no=1),
    ]
    db_session.add_all(students)
    db_session.commit()
    for student in students:
        db_session.refresh(student)
    return students


def encode_file(content: bytes) -> str:
    return base64.b64encode(content).decode()
