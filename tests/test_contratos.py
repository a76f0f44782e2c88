from __future__ import annotations

import datetime

from app.models.novedad import NovedadTerminacion
from app.services.contrato_service import generar_numero_contrato, limpiar_nombre_empresa
from app.utils.fechas import hoy_colombia
from tests.conftest import auth, nuevo_contrato

PAYLOAD = {
    "primer_nombre": "Andrés",
    "primer_apellido": "Martínez",
    "tipo_identificacion": "CC",
    "numero_identificacion": "1020304050",
    "fecha_nacimiento": "1990-11-03",
    "empresa_interna": "CPS",
    "cargo": "Coordinador de bodega",
    "tipo_contrato": "fijo",
    "fecha_ingreso": "2026-02-01",
    "fecha_fin": "2027-01-31",
    "salario": 3_200_000,
    "auxilio_salarial": 300_000,
    "auxilio_salarial_concepto": "Bonificación por turnos",
    "auxilio_transporte": 200_000,
}


def _crear(client, usuario, empresa, **cambios):
    return client.post(
        "/api/contratos/",
        json={**PAYLOAD, "empresa_final_id": empresa.id, **cambios},
        headers=auth(usuario),
    )


def test_contract_number_format():
    assert generar_numero_contrato("1020304050", datetime.date(2026, 2, 1), "Andina S.A.S.") == (
        "1020304050-2026-02-01-ANDINA-SAS"
    )
    assert generar_numero_contrato(None, None, None) == "SIN-CEDULA-SIN-FECHA-SIN-EMPRESA"


def test_company_name_is_cleaned_and_truncated():
    assert limpiar_nombre_empresa("Logística del Caribe Ltda.") == "LOGSTICA-DEL-CA"
    assert limpiar_nombre_empresa(None) == "SIN-EMPRESA"


def test_create_fixed_term_draft(client, db, rrhh, empresa):
    resp = _crear(client, rrhh, empresa)

    assert resp.status_code == 201
    body = resp.json()
    assert body["status_aprobacion"] == "borrador"
    assert body["can_edit"] and body["can_delete"] and body["can_approve"]
    assert body["total_remuneracion"] == 3_500_000
    assert body["empresa_final_nombre"] == empresa.name
    assert body["progreso_onboarding"] == 0

    periodos = client.get(f"/api/contratos/{body['id']}/periodos", headers=auth(rrhh)).json()
    assert len(periodos) == 1
    assert periodos[0]["tipo_periodo"] == "inicial"
    assert periodos[0]["fecha_fin"] == "2027-01-31"


def test_duplicate_identification(client, db, rrhh, empresa):
    assert _crear(client, rrhh, empresa).status_code == 201
    resp = _crear(client, rrhh, empresa)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Ya existe un contrato para CC 1020304050"


def test_validation_errors(client, db, rrhh, empresa):
    assert _crear(client, rrhh, empresa, fecha_fin="2026-01-31").status_code == 422
    assert _crear(client, rrhh, empresa, tipo_identificacion="NIT").status_code == 422
    assert _crear(client, rrhh, empresa, fecha_nacimiento="1899-01-01").status_code == 422
    assert _crear(client, rrhh, empresa, empresa_final_id=999).status_code == 422


def test_read_only_role_cannot_create(client, db, consulta, empresa):
    assert _crear(client, consulta, empresa).status_code == 403


def test_missing_token(client, db, empresa):
    assert client.get("/api/contratos/").status_code == 401


def test_approve_generates_number_and_locks(client, db, rrhh, admin, empresa):
    contrato = nuevo_contrato(db, empresa, status_aprobacion="borrador")

    resp = client.post(f"/api/contratos/{contrato.id}/aprobar", headers=auth(admin))
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "error": None,
        "numero_contrato_helisa": "52123456-2025-03-01-COMERCIAL-ANDIN",
    }

    otra_vez = client.post(f"/api/contratos/{contrato.id}/aprobar", headers=auth(admin))
    assert otra_vez.status_code == 409

    editar = client.put(
        f"/api/contratos/{contrato.id}", json={"cargo": "Jefe"}, headers=auth(rrhh)
    )
    assert editar.status_code == 409
    assert client.delete(f"/api/contratos/{contrato.id}", headers=auth(rrhh)).status_code == 409

    detalle = client.get(f"/api/contratos/{contrato.id}", headers=auth(rrhh)).json()
    assert detalle["status_aprobacion"] == "aprobado"
    assert detalle["can_edit"] is False
    assert detalle["approved_by"] == admin.id


def test_approve_with_explicit_number(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa, status_aprobacion="borrador")
    resp = client.post(
        f"/api/contratos/{contrato.id}/aprobar",
        json={"contract_number": "HEL-0042"},
        headers=auth(rrhh),
    )
    assert resp.json()["numero_contrato_helisa"] == "HEL-0042"


def test_draft_update_and_delete(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa, status_aprobacion="borrador")

    resp = client.put(
        f"/api/contratos/{contrato.id}",
        json={"cargo": "Analista", "tipo_contrato": "fijo", "fecha_fin": "2026-02-28"},
        headers=auth(rrhh),
    )
    assert resp.status_code == 200
    assert resp.json()["cargo"] == "Analista"
    periodos = client.get(f"/api/contratos/{contrato.id}/periodos", headers=auth(rrhh)).json()
    assert len(periodos) == 1

    assert client.delete(f"/api/contratos/{contrato.id}", headers=auth(rrhh)).status_code == 200
    assert client.get(f"/api/contratos/{contrato.id}", headers=auth(rrhh)).status_code == 404


def test_table_filters(client, db, consulta, empresa):
    nuevo_contrato(db, empresa, numero_identificacion="111", cargo="Contador")
    nuevo_contrato(
        db,
        empresa,
        numero_identificacion="222",
        tipo_contrato="fijo",
        fecha_fin=datetime.date(2025, 12, 31),
    )
    nuevo_contrato(db, empresa, numero_identificacion="333", status_aprobacion="borrador")

    todos = client.get("/api/contratos/", headers=auth(consulta)).json()
    assert todos["total"] == 3

    busqueda = client.get("/api/contratos/", params={"search": "contador"}, headers=auth(consulta))
    assert [c["numero_identificacion"] for c in busqueda.json()["items"]] == ["111"]

    terminados = client.get(
        "/api/contratos/", params={"status_vigencia": "terminado"}, headers=auth(consulta)
    ).json()
    assert [c["numero_identificacion"] for c in terminados["items"]] == ["222"]
    assert terminados["items"][0]["vigencia_label"] == "Terminado"

    borradores = client.get(
        "/api/contratos/", params={"status_aprobacion": "borrador"}, headers=auth(consulta)
    ).json()
    assert borradores["total"] == 1


def test_expiring_contracts(client, db, consulta, empresa):
    hoy = hoy_colombia()
    cercano = nuevo_contrato(
        db, empresa, numero_identificacion="111", tipo_contrato="fijo",
        fecha_fin=hoy + datetime.timedelta(days=10),
    )
    nuevo_contrato(
        db, empresa, numero_identificacion="222", tipo_contrato="fijo",
        fecha_fin=hoy + datetime.timedelta(days=90),
    )
    nuevo_contrato(
        db, empresa, numero_identificacion="333", tipo_contrato="fijo",
        fecha_fin=hoy + datetime.timedelta(days=5), status_aprobacion="borrador",
    )
    terminado = nuevo_contrato(
        db, empresa, numero_identificacion="444", tipo_contrato="fijo",
        fecha_fin=hoy + datetime.timedelta(days=3),
    )
    db.add(NovedadTerminacion(contract_id=terminado.id, fecha=hoy, tipo_terminacion="vencimiento"))
    db.commit()

    resp = client.get("/api/contratos/por-vencer", headers=auth(consulta))

    assert resp.status_code == 200
    [item] = resp.json()
    assert item["id"] == cercano.id
    assert item["dias_restantes"] == 10

    amplio = client.get("/api/contratos/por-vencer", params={"dias": 120}, headers=auth(consulta))
    assert len(amplio.json()) == 2
