from __future__ import annotations

from tests.conftest import PASSWORD, auth


def test_login_returns_bearer_token(client, rrhh):
    resp = client.post("/api/auth/login", data={"username": "rrhh", "password": PASSWORD})

    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["is_temp_password"] is False

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "rrhh"
    assert me.json()["rol"] == "RRHH"


def test_wrong_password_is_translated(client, rrhh):
    resp = client.post("/api/auth/login", data={"username": "rrhh", "password": "otra-clave"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Credenciales incorrectas. Verifica tu correo y contraseña."


def test_invalid_token(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer basura"})
    assert resp.status_code == 401


def test_refresh(client, consulta):
    resp = client.post("/api/auth/refresh", headers=auth(consulta))
    assert resp.status_code == 200
    assert resp.json()["access_token"]


def test_change_password(client, rrhh):
    incorrecta = client.post(
        "/api/auth/cambiar-password",
        json={"password_actual": "no-es", "password_nueva": "Nueva2026!"},
        headers=auth(rrhh),
    )
    assert incorrecta.status_code == 400

    igual = client.post(
        "/api/auth/cambiar-password",
        json={"password_actual": PASSWORD, "password_nueva": PASSWORD},
        headers=auth(rrhh),
    )
    assert igual.status_code == 400

    resp = client.post(
        "/api/auth/cambiar-password",
        json={"password_actual": PASSWORD, "password_nueva": "Nueva2026!"},
        headers=auth(rrhh),
    )
    assert resp.status_code == 200
    login = client.post("/api/auth/login", data={"username": "rrhh", "password": "Nueva2026!"})
    assert login.status_code == 200


def test_health(client):
    assert client.get("/api/health").json()["status"] == "ok"
