import pytest

from printqueue.auth import AdminGuard
from tests.helpers import TEST_ADMIN_PASSWORD, build_client, make_admin_password_hash


@pytest.fixture(scope="module")
def admin_hash():
    return make_admin_password_hash()


@pytest.fixture
def guarded_client(database, admin_hash):
    with build_client(database, admin_guard=AdminGuard(admin_hash)) as c:
        yield c


def test_login_without_guard(client):
    response = client.post("/api/auth/login", json={"senha": "egal"})
    assert response.status_code == 200
    assert response.json() == {"token": None, "enabled": False}
    assert client.get("/api/queue").status_code == 200


def test_queue_requires_token(guarded_client):
    response = guarded_client.get("/api/queue")
    assert response.status_code == 401
    assert response.json()["detail"] == "Token de acesso requerido"

    response = guarded_client.get("/api/filaments", headers={"Authorization": "Bearer falsch"})
    assert response.status_code == 401


def test_login_wrong_password(guarded_client):
    response = guarded_client.post("/api/auth/login", json={"senha": "falsch"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Credenciais inválidas"


def test_login_and_use_token(guarded_client):
    response = guarded_client.post("/api/auth/login", json={"senha": TEST_ADMIN_PASSWORD})
    assert response.status_code == 200
    data = response.json()
    assert data["enabled"] is True
    assert data["expires_in"] == 3600

    headers = {"Authorization": f"Bearer {data['token']}"}
    assert guarded_client.get("/api/queue", headers=headers).status_code == 200
    assert guarded_client.get("/api/queue/summary", headers=headers).status_code == 200


def test_health_stays_public(guarded_client):
    assert guarded_client.get("/health").status_code == 200


def test_php_style_hash_is_accepted(admin_hash):
    guard = AdminGuard("$2y$" + admin_hash[4:])
    assert guard.verify_password(TEST_ADMIN_PASSWORD)
    assert not guard.verify_password("falsch")


def test_invalid_hash_never_verifies():
    guard = AdminGuard("kein-bcrypt-hash")
    assert guard.enabled
    assert not guard.verify_password(TEST_ADMIN_PASSWORD)


def test_expired_token_is_rejected(admin_hash):
    guard = AdminGuard(admin_hash, token_ttl=-1)
    token = guard.issue_token()
    assert not guard.is_token_active(token)
    assert not guard.is_token_active(None)
