from __future__ import annotations

from tests.conftest import auth


def test_list_active_companies(client, db, consulta, empresa):
    resp = client.get("/api/empresas/", headers=auth(consulta))
    assert resp.status_code == 200
    assert [e["tax_id"] for e in resp.json()] == ["900.123.456-7"]


def test_create_company(client, db, rrhh):
    resp = client.post(
        "/api/empresas/",
        json={"name": "Logística del Caribe Ltda.", "tax_id": "830.555.201-3"},
        headers=auth(rrhh),
    )
    assert resp.status_code == 201
    assert resp.json()["activa"] is True


def test_same_nit_digits_conflict(client, db, rrhh, empresa):
    resp = client.post(
        "/api/empresas/",
        json={"name": "Andina Dos", "tax_id": "9001234567"},
        headers=auth(rrhh),
    )
    assert resp.status_code == 409


def test_read_only_role_cannot_create(client, db, consulta):
    resp = client.post(
        "/api/empresas/",
        json={"name": "Otra", "tax_id": "811222333"},
        headers=auth(consulta),
    )
    assert resp.status_code == 403
