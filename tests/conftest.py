import os

# config.py refuses to import without a secret
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi.testclient import TestClient
from sqlmodel import create_engine, select, SQLModel, Session
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
import pytest

from models import Role, Task, User

# --- Test Database Setup ---
# Use an in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(name="test_engine")
def test_engine_fixture():
    # StaticPool keeps a single connection so every session sees the same in-memory DB
    test_engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="test_db_session")
def test_db_session_fixture(test_engine: Engine):
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="app")
def app_fixture(test_db_session: Session):
    from main import create_app
    from database import get_session

    app = create_app(create_tables=False)

    def get_session_override():
        return test_db_session

    app.dependency_overrides[get_session] = get_session_override
    yield app
    app.dependency_overrides.clear()


@pytest.fixture(name="client")
def client_fixture(app):
    with TestClient(app) as client:
        yield client


def register(client: TestClient, email: str, password: str = "strong-password", name: str = "Test User") -> dict:
    """
    Registers a user through the API and returns the response data ({user, token}).
    """
    response = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def client_for(app, email: str, password: str = "strong-password", name: str = "Test User") -> TestClient:
    """
    A separate client registered as a new user, with its bearer token attached.
    """
    client = TestClient(app)
    data = register(client, email, password, name)
    client.headers["Authorization"] = f"Bearer {data['token']}"
    return client


@pytest.fixture(name="authenticated_client")
def authenticated_client_fixture(client: TestClient):
    """
    Registers a user and returns the client with its auth token set.
    """
    data = register(client, "authuser@example.com", "auth-password", "Auth User")
    client.headers["Authorization"] = f"Bearer {data['token']}"
    return client


@pytest.fixture(name="admin_client")
def admin_client_fixture(app, test_db_session: Session):
    client = client_for(app, "admin@example.com", "admin-password", "Admin")
    admin = test_db_session.exec(select(User).where(User.email == "admin@example.com")).one()
    admin.role = Role.admin.value
    test_db_session.add(admin)
    test_db_session.commit()
    return client


def create_task_for_user(client: TestClient, title: str, **fields) -> dict:
    """
    Creates a task for an already authenticated client and returns it.
    """
    response = client.post("/api/tasks", json={"title": title, **fields})
    assert response.status_code == 201, response.text
    return response.json()["data"]["task"]


# --- Direct store helpers for service-level tests ---

def make_user(session: Session, email: str, name: str = "Someone", hashed_password: str = "not-a-real-hash") -> User:
    user = User(name=name, email=email, hashed_password=hashed_password)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_task(session: Session, owner: User, title: str, created_at: Optional[datetime] = None, **fields) -> Task:
    created_at = created_at or datetime.now(timezone.utc)
    status = fields.pop("status", None)
    task = Task(user_id=owner.id, title=title, created_at=created_at, updated_at=created_at, **fields)
    if status is not None:
        task.apply_status(status, created_at)
    session.add(task)
    session.commit()
    session.refresh(task)
    return task


def days_ago(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)
