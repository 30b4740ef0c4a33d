from fastapi.testclient import TestClient
from sqlmodel import Session, select

from models import Task
from stores import TaskStore
from queries import TaskQuery, run_task_query
from user_service import UserService

from conftest import client_for, create_task_for_user, make_task, make_user


def user_id_of(client: TestClient) -> str:
    return client.get("/api/auth/me").json()["data"]["user"]["id"]


def test_admin_routes_forbidden_for_plain_users(app, authenticated_client: TestClient):
    target = user_id_of(client_for(app, "target@example.com"))

    for response in (
        authenticated_client.get("/api/users"),
        authenticated_client.put(f"/api/users/{target}/status", json={"isActive": False}),
        authenticated_client.delete(f"/api/users/{target}"),
        authenticated_client.get(f"/api/users/{target}"),
    ):
        assert response.status_code == 403
        assert response.json()["success"] is False


def test_user_can_read_own_record(authenticated_client: TestClient):
    create_task_for_user(authenticated_client, "Mine", status="completed")
    me = user_id_of(authenticated_client)
    response = authenticated_client.get(f"/api/users/{me}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["id"] == me
    assert data["taskStats"] == {"pending": 0, "in-progress": 0, "completed": 1, "total": 1}


def test_admin_lists_users_newest_first(app, admin_client: TestClient):
    client_for(app, "first@example.com")
    client_for(app, "second@example.com")

    response = admin_client.get("/api/users", params={"limit": 2})
    assert response.status_code == 200
    data = response.json()["data"]
    assert [u["email"] for u in data["users"]] == ["second@example.com", "first@example.com"]
    assert data["pagination"] == {
        "currentPage": 1,
        "totalPages": 2,
        "totalUsers": 3,
        "hasNext": True,
        "hasPrev": False,
    }
    assert all("hashedPassword" not in u for u in data["users"])


def test_admin_get_missing_user(admin_client: TestClient):
    response = admin_client.get("/api/users/nobody")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "User not found"}


def test_deactivation_blocks_login_and_existing_tokens(app, client: TestClient, admin_client: TestClient):
    member = client_for(app, "member@example.com", "member-password")
    member_id = user_id_of(member)

    response = admin_client.put(f"/api/users/{member_id}/status", json={"isActive": False})
    assert response.status_code == 200
    assert response.json()["data"]["user"]["isActive"] is False

    login = client.post("/api/auth/login", json={"email": "member@example.com", "password": "member-password"})
    assert login.status_code == 400
    assert login.json()["message"] == "Account is deactivated"
    login = client.post("/api/auth/login", json={"email": "member@example.com", "password": "not-the-password"})
    assert login.status_code == 400
    assert login.json()["message"] == "Account is deactivated"
    assert member.get("/api/tasks").status_code == 401

    admin_client.put(f"/api/users/{member_id}/status", json={"isActive": True})
    login = client.post("/api/auth/login", json={"email": "member@example.com", "password": "member-password"})
    assert login.status_code == 200


def test_status_update_requires_boolean(admin_client: TestClient):
    me = user_id_of(admin_client)
    response = admin_client.put(f"/api/users/{me}/status", json={})
    assert response.status_code == 400


def test_delete_user_cascades_tasks(app, admin_client: TestClient, test_db_session: Session):
    member = client_for(app, "doomed@example.com")
    member_id = user_id_of(member)
    for index in range(5):
        create_task_for_user(member, f"Task {index}")
    survivor = create_task_for_user(admin_client, "Admin's own task")

    response = admin_client.delete(f"/api/users/{member_id}")
    assert response.status_code == 200
    assert response.json()["message"] == "User and associated tasks deleted successfully"

    page = run_task_query(TaskStore(test_db_session), TaskQuery(owner_id=member_id, limit=100))
    assert page.pagination.total == 0
    assert test_db_session.exec(select(Task).where(Task.user_id == member_id)).all() == []
    assert admin_client.get(f"/api/tasks/{survivor['id']}").status_code == 200

    assert admin_client.get(f"/api/users/{member_id}").status_code == 404
    # The deleted user's token no longer resolves to anyone
    assert member.get("/api/tasks").status_code == 401


def test_delete_user_service_returns_removed_count(test_db_session: Session):
    owner = make_user(test_db_session, "counted@example.com")
    for index in range(3):
        make_task(test_db_session, owner, f"T{index}")

    assert UserService(test_db_session).delete_user(owner.id) == 3
