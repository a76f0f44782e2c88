from __future__ import annotations

import datetime

from app.utils.errores import TERMINACION_DUPLICADA
from app.utils.fechas import hoy_colombia
from tests.conftest import auth, nuevo_contrato


def _url(contrato, categoria=""):
    return f"/api/contratos/{contrato.id}/novedades/{categoria}"


def test_personal_data_change_fills_previous_value(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa, celular="3001112233")

    resp = client.post(
        _url(contrato, "datos-personales"),
        json={"cambios": [{"campo": "celular", "valor_nuevo": "3109998877"}]},
        headers=auth(rrhh),
    )

    assert resp.status_code == 201
    [row] = resp.json()
    assert row["valor_anterior"] == "3001112233"
    assert row["valor_nuevo"] == "3109998877"

    actuales = client.get(f"/api/contratos/{contrato.id}/datos-actuales", headers=auth(rrhh))
    assert actuales.json()["celular"] == "3109998877"


def test_unchanged_values_are_rejected(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)

    resp = client.post(
        _url(contrato, "economicas"),
        json={"cambios": [{"tipo": "salario", "valor_nuevo": 1_800_000}]},
        headers=auth(rrhh),
    )

    assert resp.status_code == 422
    assert resp.json()["detail"] == "Debes realizar al menos un cambio válido"


def test_latest_salary_change_drives_current_remuneration(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa, auxilio_no_salarial=100_000)
    for salario in (2_000_000, 2_300_000):
        resp = client.post(
            _url(contrato, "economicas"),
            json={"cambios": [{"tipo": "salario", "valor_nuevo": salario}]},
            headers=auth(rrhh),
        )
        assert resp.status_code == 201

    actuales = client.get(f"/api/contratos/{contrato.id}/datos-actuales", headers=auth(rrhh)).json()
    assert actuales["salario"] == 2_300_000
    assert actuales["total_remuneracion"] == 2_400_000

    historial = client.get(_url(contrato, "economicas"), headers=auth(rrhh)).json()
    assert [h["valor_nuevo"] for h in historial] == [2_300_000, 2_000_000]
    assert historial[0]["valor_anterior"] == 2_000_000


def test_allowance_requires_concept(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)
    resp = client.post(
        _url(contrato, "economicas"),
        json={"cambios": [{"tipo": "auxilio_salarial", "valor_nuevo": 150_000}]},
        headers=auth(rrhh),
    )
    assert resp.status_code == 422


def test_novedades_need_an_approved_contract(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa, status_aprobacion="borrador")
    resp = client.post(
        _url(contrato, "cambio-cargo"),
        json={"cargo_nuevo": "Coordinadora"},
        headers=auth(rrhh),
    )
    assert resp.status_code == 409


def test_read_only_role_cannot_register(client, db, consulta, empresa):
    contrato = nuevo_contrato(db, empresa)
    resp = client.post(
        _url(contrato, "cambio-cargo"),
        json={"cargo_nuevo": "Coordinadora"},
        headers=auth(consulta),
    )
    assert resp.status_code == 403


def test_vacation_days_count_both_ends(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)
    resp = client.post(
        _url(contrato, "tiempo-laboral"),
        json={
            "tipo_tiempo": "vacaciones",
            "fecha_inicio": "2026-04-06",
            "fecha_fin": "2026-04-20",
            "programadas": True,
            "motivo": "Vacaciones anuales",
        },
        headers=auth(rrhh),
    )
    assert resp.status_code == 201
    assert resp.json()["dias"] == 15
    assert resp.json()["programadas"] is True


def test_medical_leave_requires_responsible_entity(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)
    resp = client.post(
        _url(contrato, "incapacidades"),
        json={"tipo_incapacidad": "laboral", "fecha_inicio": "2026-05-04", "fecha_fin": "2026-05-08"},
        headers=auth(rrhh),
    )
    assert resp.status_code == 422


def test_past_termination_ends_the_contract(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)

    resp = client.post(
        _url(contrato, "terminacion"),
        json={"fecha": "2025-06-30", "tipo_terminacion": "mutuo_acuerdo"},
        headers=auth(rrhh),
    )
    assert resp.status_code == 201

    existe = client.get(_url(contrato, "terminacion/existe"), headers=auth(rrhh)).json()
    assert existe["existe"] is True
    assert existe["terminacion"]["tipo_terminacion"] == "mutuo_acuerdo"

    actuales = client.get(f"/api/contratos/{contrato.id}/datos-actuales", headers=auth(rrhh)).json()
    assert actuales["is_terminated"] is True
    assert actuales["status_vigencia"] == "terminado"
    assert actuales["vigencia_label"] == "Terminado"


def test_second_termination_is_rejected(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)
    payload = {"fecha": "2025-06-30", "tipo_terminacion": "justa_causa"}

    assert client.post(_url(contrato, "terminacion"), json=payload, headers=auth(rrhh)).status_code == 201
    resp = client.post(_url(contrato, "terminacion"), json=payload, headers=auth(rrhh))

    assert resp.status_code == 409
    assert resp.json()["detail"] == TERMINACION_DUPLICADA


def test_terminated_contract_accepts_no_more_novedades(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)
    client.post(
        _url(contrato, "terminacion"),
        json={"fecha": "2025-06-30", "tipo_terminacion": "vencimiento"},
        headers=auth(rrhh),
    )
    resp = client.post(
        _url(contrato, "cambio-cargo"),
        json={"cargo_nuevo": "Coordinadora"},
        headers=auth(rrhh),
    )
    assert resp.status_code == 409


def test_scheduled_termination_keeps_contract_active(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)
    futura = hoy_colombia() + datetime.timedelta(days=20)

    client.post(
        _url(contrato, "terminacion"),
        json={"fecha": futura.isoformat(), "tipo_terminacion": "sin_justa_causa"},
        headers=auth(rrhh),
    )

    actuales = client.get(f"/api/contratos/{contrato.id}/datos-actuales", headers=auth(rrhh)).json()
    assert actuales["is_terminated"] is True
    assert actuales["status_vigencia"] == "activo"
    assert actuales["days_until_expiry"] == 20
    assert actuales["vigencia_label"] == "Vence en 20 días"


def test_unknown_history_category(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)
    resp = client.get(_url(contrato, "bonificaciones"), headers=auth(rrhh))
    assert resp.status_code == 404


def test_salary_change_reaches_table_and_detail(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa, auxilio_salarial=100_000, auxilio_salarial_concepto="Bono")
    resp = client.post(
        _url(contrato, "economicas"),
        json={"cambios": [{"tipo": "salario", "valor_nuevo": 2_500_000}]},
        headers=auth(rrhh),
    )
    assert resp.status_code == 201
    resp = client.post(_url(contrato, "cambio-cargo"), json={"cargo_nuevo": "Coordinadora"}, headers=auth(rrhh))
    assert resp.status_code == 201

    detalle = client.get(f"/api/contratos/{contrato.id}", headers=auth(rrhh)).json()
    assert detalle["salario"] == 2_500_000
    assert detalle["total_remuneracion"] == 2_600_000
    assert detalle["cargo"] == "Coordinadora"

    [fila] = client.get("/api/contratos/", headers=auth(rrhh)).json()["items"]
    assert fila["salario"] == 2_500_000
    assert fila["total_remuneracion"] == 2_600_000

    actuales = client.get(f"/api/contratos/{contrato.id}/datos-actuales", headers=auth(rrhh)).json()
    assert actuales["total_remuneracion"] == detalle["total_remuneracion"]


def test_eps_falls_back_to_contract_value(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa, radicado_eps="Sura EPS")

    actuales = client.get(f"/api/contratos/{contrato.id}/datos-actuales", headers=auth(rrhh)).json()
    assert actuales["eps"] == "Sura EPS"

    resp = client.post(
        _url(contrato, "entidades"),
        json={"cambios": [{"tipo": "eps", "entidad_nueva": "Compensar EPS", "fecha": "2026-02-01"}]},
        headers=auth(rrhh),
    )
    assert resp.status_code == 201
    assert resp.json()[0]["entidad_anterior"] == "Sura EPS"
