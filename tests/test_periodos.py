from __future__ import annotations

import datetime
from types import SimpleNamespace

from app.services.periodo_service import build_fixed_status, clasificar_alerta, validate_extension
from tests.conftest import auth, nuevo_contrato

CREADO = datetime.datetime(2025, 1, 15, 12, 0)


def _periodos(*tramos):
    """Consecutive periods; the last one is current."""
    filas = []
    for numero, (inicio, fin) in enumerate(tramos, start=1):
        filas.append(
            SimpleNamespace(
                id=numero,
                contract_id=1,
                numero_periodo=numero,
                fecha_inicio=inicio,
                fecha_fin=fin,
                tipo_periodo="inicial" if numero == 1 else "prorroga_acordada",
                es_periodo_actual=numero == len(tramos),
                observaciones=None,
                created_by=None,
                created_at=CREADO,
            )
        )
    return filas


D = datetime.date

UN_ANIO = _periodos((D(2025, 1, 15), D(2026, 1, 14)))
TRES_ANIOS = _periodos((D(2023, 1, 1), D(2026, 1, 1)))
CINCO_TRIMESTRES = _periodos(
    (D(2024, 1, 1), D(2024, 3, 31)),
    (D(2024, 4, 1), D(2024, 6, 30)),
    (D(2024, 7, 1), D(2024, 9, 30)),
    (D(2024, 10, 1), D(2024, 12, 31)),
    (D(2025, 1, 1), D(2025, 3, 31)),
)
CUATRO_TRIMESTRES = _periodos(
    (D(2024, 1, 1), D(2024, 3, 31)),
    (D(2024, 4, 1), D(2024, 6, 30)),
    (D(2024, 7, 1), D(2024, 9, 30)),
    (D(2024, 10, 1), D(2024, 12, 31)),
)


def test_status_counts_days_from_first_start_to_current_end():
    estado = build_fixed_status(1, UN_ANIO)
    assert estado.total_periodos == 1
    assert estado.periodo_actual == 1
    assert estado.proximo_periodo == 2
    assert estado.dias_totales == 364
    assert estado.fecha_fin_actual == D(2026, 1, 14)
    assert not estado.debe_ser_indefinido
    assert estado.nivel_alerta == "success"


def test_status_without_periods_uses_base_end_date():
    estado = build_fixed_status(1, [], D(2026, 6, 30))
    assert estado.total_periodos == 0
    assert estado.periodo_actual is None
    assert estado.proximo_periodo == 1
    assert estado.fecha_fin_actual == D(2026, 6, 30)


def test_four_years_forces_indefinite():
    estado = build_fixed_status(1, _periodos((D(2022, 1, 1), D(2026, 1, 1))))
    assert estado.debe_ser_indefinido
    alerta = clasificar_alerta(estado)
    assert alerta.nivel == "danger"
    assert alerta.titulo == "DEBE SER CONTRATO INDEFINIDO"


def test_alert_for_proposed_extension_over_four_years():
    estado = build_fixed_status(1, UN_ANIO)
    alerta = clasificar_alerta(estado, D(2029, 6, 30))
    assert alerta.nivel == "danger"
    assert alerta.titulo == "PRÓRROGA EXCEDE 4 AÑOS"


def test_fifth_extension_warning():
    estado = build_fixed_status(1, CINCO_TRIMESTRES)
    assert estado.proximo_periodo == 6
    alerta = clasificar_alerta(estado)
    assert alerta.nivel == "warning"
    assert alerta.titulo.startswith("QUINTA PRÓRROGA")


def test_close_to_limit_warning():
    estado = build_fixed_status(1, TRES_ANIOS)
    assert clasificar_alerta(estado).nivel == "success"
    alerta = clasificar_alerta(estado, D(2026, 9, 1))
    assert alerta.nivel == "warning"
    assert alerta.titulo == "CERCA DEL LÍMITE DE 4 AÑOS"


def test_extension_must_move_end_date_forward():
    estado = build_fixed_status(1, UN_ANIO)
    assert validate_extension(estado, D(2026, 1, 14), D(2026, 1, 14)) == (
        "La nueva fecha debe ser posterior a la fecha actual de finalización"
    )
    assert validate_extension(estado, D(2026, 1, 14), D(2026, 7, 14)) is None


def test_fifth_extension_must_last_a_year():
    estado = build_fixed_status(1, CINCO_TRIMESTRES)
    fin = D(2025, 3, 31)
    assert validate_extension(estado, fin, fin + datetime.timedelta(days=180)) == (
        "La prórroga #5 debe ser mínimo de 1 año (365 días). Actualmente son 180 días."
    )
    assert validate_extension(estado, fin, fin + datetime.timedelta(days=365)) is None


def test_fourth_extension_may_be_short():
    estado = build_fixed_status(1, CUATRO_TRIMESTRES)
    assert estado.proximo_periodo == 5
    fin = D(2024, 12, 31)
    assert validate_extension(estado, fin, fin + datetime.timedelta(days=200)) is None


def test_extension_from_almost_four_years():
    inicio = D(2022, 1, 1)
    fin = inicio + datetime.timedelta(days=round(3.8 * 365))
    estado = build_fixed_status(1, _periodos((inicio, fin)))
    assert estado.anios_totales == 3.8

    mensaje = validate_extension(estado, fin, fin + datetime.timedelta(days=100))

    assert mensaje == (
        "No se puede prorrogar. Esta prórroga resultaría en 4.1 años totales. "
        "Después de 4 años debe ser contrato indefinido."
    )


def test_extension_past_four_years_is_blocked():
    estado = build_fixed_status(1, TRES_ANIOS)
    mensaje = validate_extension(estado, D(2026, 1, 1), D(2027, 6, 1))
    assert mensaje.startswith("No se puede prorrogar.")


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


def _contrato_fijo(db, empresa):
    return nuevo_contrato(
        db,
        empresa,
        tipo_contrato="fijo",
        fecha_ingreso=D(2025, 1, 15),
        fecha_fin=D(2026, 1, 14),
    )


def test_extension_creates_next_period(client, db, rrhh, empresa):
    contrato = _contrato_fijo(db, empresa)

    resp = client.post(
        f"/api/contratos/{contrato.id}/periodos/prorroga",
        json={"nueva_fecha_fin": "2027-01-14", "motivo": "Renovación acordada"},
        headers=auth(rrhh),
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["periodo"]["numero_periodo"] == 2
    assert body["periodo"]["fecha_inicio"] == "2026-01-15"
    assert body["periodo"]["es_periodo_actual"] is True
    assert body["estado"]["total_periodos"] == 2
    assert body["estado"]["dias_totales"] == 729
    assert "años_totales" in body["estado"]

    detalle = client.get(f"/api/contratos/{contrato.id}", headers=auth(rrhh)).json()
    assert detalle["fecha_fin"] == "2027-01-14"

    historial = client.get(
        f"/api/contratos/{contrato.id}/novedades/tiempo-laboral", headers=auth(rrhh)
    ).json()
    assert historial[0]["tipo_tiempo"] == "prorroga"
    assert historial[0]["dias"] == 365


def test_extension_through_work_time_novedad(client, db, rrhh, empresa):
    contrato = _contrato_fijo(db, empresa)

    resp = client.post(
        f"/api/contratos/{contrato.id}/novedades/tiempo-laboral",
        json={"tipo_tiempo": "prorroga", "nueva_fecha_fin": "2026-07-14", "motivo": "Prórroga"},
        headers=auth(rrhh),
    )

    assert resp.status_code == 201
    assert resp.json()["nueva_fecha_fin"] == "2026-07-14"
    periodos = client.get(f"/api/contratos/{contrato.id}/periodos", headers=auth(rrhh)).json()
    assert [p["numero_periodo"] for p in periodos] == [1, 2]


def test_extension_before_current_end_is_rejected(client, db, rrhh, empresa):
    contrato = _contrato_fijo(db, empresa)
    resp = client.post(
        f"/api/contratos/{contrato.id}/periodos/prorroga",
        json={"nueva_fecha_fin": "2025-12-31", "motivo": "Error"},
        headers=auth(rrhh),
    )
    assert resp.status_code == 422


def test_only_fixed_term_contracts_have_periods(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)
    resp = client.post(
        f"/api/contratos/{contrato.id}/periodos/prorroga",
        json={"nueva_fecha_fin": "2027-01-14", "motivo": "Renovación"},
        headers=auth(rrhh),
    )
    assert resp.status_code == 409


def test_status_preview_for_proposed_end_date(client, db, consulta, empresa):
    contrato = _contrato_fijo(db, empresa)
    resp = client.get(
        f"/api/contratos/{contrato.id}/periodos/estado",
        params={"nueva_fecha_fin": "2030-01-14"},
        headers=auth(consulta),
    )
    assert resp.status_code == 200
    assert resp.json()["nivel_alerta"] == "danger"
