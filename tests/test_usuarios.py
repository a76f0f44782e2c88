from __future__ import annotations

from app.models.entrada_cache import EntradaCache
from app.models.usuario import Usuario
from app.services.usuario_service import CLAVE_CACHE_USUARIOS, get_all_user_profiles
from app.utils.security import hash_password
from tests.conftest import PASSWORD, auth, token_de

T = 1_780_000_000.0


def _otro_usuario(db, username="nuevo"):
    usuario = Usuario(
        username=username,
        email=f"{username}@empresa.com.co",
        password_hash=hash_password(PASSWORD),
        rol="CONSULTA",
        activo=True,
    )
    db.add(usuario)
    db.commit()
    return usuario


def test_cache_is_served_while_fresh(db, admin):
    primera = get_all_user_profiles(db, reloj=lambda: T)
    assert primera.from_cache is False
    assert len(primera.data) == 1

    _otro_usuario(db)

    fresca = get_all_user_profiles(db, reloj=lambda: T + 4 * 60)
    assert fresca.from_cache is True
    assert len(fresca.data) == 1

    vencida = get_all_user_profiles(db, reloj=lambda: T + 6 * 60)
    assert vencida.from_cache is False
    assert len(vencida.data) == 2


def test_corrupt_cache_entry_is_discarded(db, admin):
    db.add(EntradaCache(clave=CLAVE_CACHE_USUARIOS, valor="{no es json"))
    db.commit()

    resultado = get_all_user_profiles(db, reloj=lambda: T)

    assert resultado.from_cache is False
    assert [u.username for u in resultado.data] == ["admin"]
    assert get_all_user_profiles(db, reloj=lambda: T + 1).from_cache is True


def test_listing_requires_admin(client, db, admin, rrhh):
    assert client.get("/api/usuarios", headers=auth(rrhh)).status_code == 403
    resp = client.get("/api/usuarios", headers=auth(admin))
    assert resp.status_code == 200
    assert {u["username"] for u in resp.json()["data"]} == {"admin", "rrhh"}


def test_create_user(client, db, admin):
    payload = {
        "username": "analista",
        "email": "analista@empresa.com.co",
        "rol": "RRHH",
        "password": "Analista1!",
    }
    resp = client.post("/api/usuarios", json=payload, headers=auth(admin))
    assert resp.status_code == 201
    assert resp.json()["rol"] == "RRHH"

    duplicado = client.post("/api/usuarios", json=payload, headers=auth(admin))
    assert duplicado.status_code == 409


def test_toggle_user_status(client, db, admin, rrhh):
    resp = client.post(
        "/api/toggle-user-status",
        json={"userId": rrhh.id, "action": "deactivate", "userToken": token_de(admin)},
    )
    assert resp.status_code == 200
    assert resp.json()["message"] == "Usuario desactivado correctamente"
    assert resp.json()["user"]["activo"] is False

    login = client.post("/api/auth/login", data={"username": "rrhh", "password": PASSWORD})
    assert login.status_code == 401


def test_admin_cannot_deactivate_self(client, db, admin):
    resp = client.post(
        "/api/toggle-user-status",
        json={"userId": admin.id, "action": "deactivate", "userToken": token_de(admin)},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "No puedes desactivar tu propia cuenta"}


def test_toggle_errors_use_error_body(client, db, admin, rrhh):
    sin_token = client.post("/api/toggle-user-status", json={"userId": rrhh.id, "action": "deactivate"})
    assert sin_token.status_code == 400
    assert "error" in sin_token.json()

    token_invalido = client.post(
        "/api/toggle-user-status",
        json={"userId": rrhh.id, "action": "deactivate", "userToken": "no-es-un-jwt"},
    )
    assert token_invalido.status_code == 403
    assert token_invalido.json() == {"error": "Error verificando permisos"}

    no_admin = client.post(
        "/api/toggle-user-status",
        json={"userId": admin.id, "action": "deactivate", "userToken": token_de(rrhh)},
    )
    assert no_admin.status_code == 403

    accion = client.post(
        "/api/toggle-user-status",
        json={"userId": rrhh.id, "action": "suspend", "userToken": token_de(admin)},
    )
    assert accion.status_code == 400

    inexistente = client.post(
        "/api/toggle-user-status",
        json={"userId": 999, "action": "activate", "userToken": token_de(admin)},
    )
    assert inexistente.status_code == 404
    assert inexistente.json() == {"error": "Usuario no encontrado"}


def test_admin_reset_password(client, db, admin, rrhh):
    resp = client.post(
        "/api/admin-reset-password",
        json={"user_id": rrhh.id, "userToken": token_de(admin)},
    )

    assert resp.status_code == 200
    usuario = resp.json()["user"]
    assert usuario["is_temp_password"] is True
    assert usuario["notification_email"] == "rrhh@empresa.com.co"

    login = client.post(
        "/api/auth/login",
        data={"username": "rrhh", "password": usuario["temporary_password"]},
    )
    assert login.status_code == 200
    assert login.json()["is_temp_password"] is True


def test_admin_cannot_reset_own_password(client, db, admin):
    resp = client.post(
        "/api/admin-reset-password",
        json={"user_id": admin.id, "userToken": token_de(admin)},
    )
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("No puedes resetear tu propia contraseña")
