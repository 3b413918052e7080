"""
Tests for the practice API (auth gate, clients, packages, sessions, dashboard)
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.api.deps import get_db
from app.auth import create_user
from app.main import app


PASSWORD = "password123"


@pytest.fixture
def api(db_engine):
    """TestClient поверх in-memory SQLite (свой Session на каждый запрос)"""
    SessionLocal = sessionmaker(bind=db_engine, autoflush=False, autocommit=False)

    def _override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    with SessionLocal() as db:
        create_user(db, "coach@example.com", PASSWORD)
        create_user(db, "other@example.com", PASSWORD)

    yield TestClient(app)
    app.dependency_overrides.clear()


def _login(client, email="coach@example.com"):
    response = client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200
    return response.json()


def _create_client(client, name="Ana Pérez", **extra):
    response = client.post("/api/v1/clients/", json={"full_name": name, **extra})
    assert response.status_code == 200
    return response.json()["id"]


def _create_package(client, client_id, total=3, **extra):
    response = client.post("/api/v1/packages/", json={"client_id": client_id, "total_sessions": total, **extra})
    assert response.status_code == 200
    return response.json()


@pytest.mark.parametrize("method,path", [
    ("get", "/api/v1/clients/"),
    ("delete", "/api/v1/clients/some-id"),
    ("get", "/api/v1/packages/"),
    ("get", "/api/v1/sessions/"),
    ("get", "/api/v1/dashboard/"),
    ("get", "/api/v1/auth/me"),
])
def test_requires_login(api, method, path):
    response = getattr(api, method)(path)
    assert response.status_code == 401


def test_wrong_password(api):
    response = api.post("/api/v1/auth/login", json={"email": "coach@example.com", "password": "nope"})
    assert response.status_code == 401


def test_login_and_logout(api):
    user = _login(api)
    assert api.get("/api/v1/auth/me").json()["email"] == user["email"]

    api.post("/api/v1/auth/logout")
    assert api.get("/api/v1/auth/me").status_code == 401


def test_client_lifecycle(api):
    _login(api)
    client_id = _create_client(api, rut="12.345.678-5", email="ana@example.cl")

    response = api.patch(f"/api/v1/clients/{client_id}", json={"notes": "Lunes", "status": "active"})
    assert response.status_code == 200
    assert response.json()["notes"] == "Lunes"
    assert response.json()["rut"] == "12.345.678-5"

    board = api.get("/api/v1/clients/", params={"q": "ana"}).json()
    assert [card["client"]["id"] for card in board] == [client_id]
    assert board[0]["stats"]["status_tag"] == "active"
    assert board[0]["stats"]["computed_status"] == "inactive"

    response = api.delete(f"/api/v1/clients/{client_id}")
    assert response.status_code == 200
    assert response.json()["deleted"]["clients"] == 1
    assert api.get(f"/api/v1/clients/{client_id}").status_code == 404


def test_client_validation_errors(api):
    _login(api)
    assert api.post("/api/v1/clients/", json={"full_name": "  "}).status_code == 400
    assert api.get("/api/v1/clients/", params={"status": "vip"}).status_code == 400


def test_burn_flow_completes_package(api):
    _login(api)
    client_id = _create_client(api)
    package = _create_package(api, client_id, total=2, expiry_date="2030-01-01")
    assert package["status"] == "active"
    assert package["remaining_sessions"] == 2

    first = api.post(f"/api/v1/clients/{client_id}/burn", json={"note": "primera"})
    assert first.status_code == 200
    assert first.json()["package_id"] == package["id"]

    second = api.post(f"/api/v1/packages/{package['id']}/burn", json={"client_id": client_id})
    assert second.status_code == 200

    detail = api.get(f"/api/v1/clients/{client_id}").json()
    assert detail["packages"][0]["status"] == "completed"
    assert detail["packages"][0]["used_sessions"] == 2
    assert detail["stats"]["current_package"] is None
    assert detail["stats"]["consumed_count"] == 2
    assert len(detail["last_burns"]) == 2

    exhausted = api.post(f"/api/v1/packages/{package['id']}/burn", json={"client_id": client_id})
    assert exhausted.status_code == 400
    assert api.post(f"/api/v1/clients/{client_id}/burn", json={}).status_code == 400

    history = api.get(f"/api/v1/clients/{client_id}/burns").json()
    assert history["total"] == 2
    assert sum(len(g["sessions"]) for g in history["groups"]) == 2


def test_package_validation_and_extend(api):
    _login(api)
    client_id = _create_client(api)

    response = api.post("/api/v1/packages/", json={"client_id": client_id, "total_sessions": 0})
    assert response.status_code == 400

    package = _create_package(api, client_id, start_date="2026-01-01", expiry_date="2026-02-01")
    response = api.patch(f"/api/v1/packages/{package['id']}/expiry", json={"expiry_date": "2026-06-30"})
    assert response.status_code == 200
    assert response.json()["expiry_date"] == "2026-06-30"

    assert api.patch(f"/api/v1/packages/{package['id']}/expiry", json={}).status_code == 400

    response = api.delete(f"/api/v1/packages/{package['id']}")
    assert response.json()["deleted"]["packages"] == 1
    assert api.get("/api/v1/packages/").json() == []


def test_session_flow(api):
    _login(api)
    client_id = _create_client(api)
    package = _create_package(api, client_id, total=4)

    response = api.post("/api/v1/sessions/", json={
        "client_id": client_id, "package_id": package["id"],
        "session_date": "2099-03-20", "session_time": "10:30",
    })
    assert response.status_code == 200
    session_id = response.json()["id"]

    packages = api.get("/api/v1/packages/").json()
    assert packages[0]["used_sessions"] == 1

    dashboard = api.get("/api/v1/dashboard/").json()
    assert dashboard["scheduled_sessions"] == 1
    assert [item["id"] for item in dashboard["upcoming"]] == [session_id]
    assert dashboard["upcoming"][0]["client_name"] == "Ana Pérez"

    response = api.patch(f"/api/v1/sessions/{session_id}/status", json={"status": "completed"})
    assert response.status_code == 200
    assert response.json()["status"] == "completed"

    response = api.patch(f"/api/v1/sessions/{session_id}/status", json={"status": "cancelled"})
    assert response.status_code == 400

    assert api.delete(f"/api/v1/sessions/{session_id}").status_code == 200
    assert api.get("/api/v1/sessions/").json() == []


def test_other_account_rows_are_not_found(api):
    _login(api)
    client_id = _create_client(api)
    package = _create_package(api, client_id)
    session_id = api.post("/api/v1/sessions/", json={
        "client_id": client_id, "session_date": "2099-03-20", "session_time": "09:00",
    }).json()["id"]
    api.post("/api/v1/auth/logout")

    _login(api, "other@example.com")
    assert api.get(f"/api/v1/clients/{client_id}").status_code == 404
    assert api.patch(f"/api/v1/clients/{client_id}", json={"notes": "x"}).status_code == 404
    assert api.delete(f"/api/v1/clients/{client_id}").status_code == 404
    assert api.post(f"/api/v1/clients/{client_id}/burn", json={}).status_code == 404
    assert api.get(f"/api/v1/clients/{client_id}/burns").status_code == 404
    assert api.post(
        f"/api/v1/packages/{package['id']}/burn", json={"client_id": client_id}
    ).status_code == 404
    assert api.post("/api/v1/packages/", json={"client_id": client_id, "total_sessions": 3}).status_code == 404
    assert api.delete(f"/api/v1/packages/{package['id']}").status_code == 404
    assert api.patch(f"/api/v1/sessions/{session_id}/status", json={"status": "completed"}).status_code == 404
    assert api.delete(f"/api/v1/sessions/{session_id}").status_code == 404
    assert api.get("/api/v1/clients/").json() == []
    assert api.get("/api/v1/packages/").json() == []


def test_health(api):
    response = api.get("/health")
    assert response.status_code == 200
    assert response.text == "ok"
