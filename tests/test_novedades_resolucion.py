from __future__ import annotations

import datetime
from types import SimpleNamespace

from sqlalchemy.exc import OperationalError

from app.models.novedad import NovedadEconomica
from app.services import novedad_service
from app.services.novedad_service import (
    ERROR_CARGA,
    get_current_data,
    latest_by_key,
    resolve_chain,
    resolver_fecha_fin,
)
from tests.conftest import auth, nuevo_contrato

T0 = datetime.datetime(2026, 1, 10, 9, 0)


def _prorroga(id_, created_at, nueva_fecha_fin, tipo_tiempo="prorroga"):
    return SimpleNamespace(
        id=id_, created_at=created_at, tipo_tiempo=tipo_tiempo, nueva_fecha_fin=nueva_fecha_fin
    )


def test_latest_by_key_keeps_first_row_per_key():
    rows = [
        SimpleNamespace(id=3, tipo="salario", valor_nuevo=2_500_000),
        SimpleNamespace(id=2, tipo="auxilio_transporte", valor_nuevo=200_000),
        SimpleNamespace(id=1, tipo="salario", valor_nuevo=2_000_000),
    ]
    ultimos = latest_by_key(rows, lambda r: r.tipo)
    assert ultimos["salario"].id == 3
    assert ultimos["auxilio_transporte"].id == 2


def test_resolve_chain_skips_none_but_not_falsy():
    assert resolve_chain(None, "EPS Sura", "EPS Base") == "EPS Sura"
    assert resolve_chain(None, 0, 5) == 0
    assert resolve_chain(None, None) is None


def test_latest_prorroga_wins_over_periods_and_base():
    prorrogas = [
        _prorroga(1, T0, datetime.date(2026, 6, 30)),
        _prorroga(2, T0 + datetime.timedelta(days=3), datetime.date(2026, 12, 31)),
        _prorroga(3, T0 + datetime.timedelta(days=5), None, tipo_tiempo="vacaciones"),
    ]
    periodos = [SimpleNamespace(es_periodo_actual=True, fecha_fin=datetime.date(2026, 9, 30))]
    assert resolver_fecha_fin(prorrogas, periodos, datetime.date(2026, 1, 31)) == (
        datetime.date(2026, 12, 31)
    )


def test_same_timestamp_ties_break_on_id():
    prorrogas = [
        _prorroga(7, T0, datetime.date(2027, 1, 31)),
        _prorroga(8, T0, datetime.date(2027, 3, 31)),
    ]
    assert resolver_fecha_fin(prorrogas, [], None) == datetime.date(2027, 3, 31)


def test_current_period_then_base_end_date():
    periodos = [
        SimpleNamespace(es_periodo_actual=False, fecha_fin=datetime.date(2026, 1, 31)),
        SimpleNamespace(es_periodo_actual=True, fecha_fin=datetime.date(2027, 1, 31)),
    ]
    assert resolver_fecha_fin([], periodos, datetime.date(2026, 1, 31)) == datetime.date(2027, 1, 31)
    assert resolver_fecha_fin([], [], datetime.date(2026, 1, 31)) == datetime.date(2026, 1, 31)
    assert resolver_fecha_fin([], [], None) is None


def _falla_economicas(monkeypatch):
    fetch = novedad_service._fetch

    def _fetch(db, model, contract_id):
        if model is NovedadEconomica:
            raise OperationalError("SELECT novedades_economicas", {}, Exception("timeout"))
        return fetch(db, model, contract_id)

    monkeypatch.setattr(novedad_service, "_fetch", _fetch)


def test_failed_category_keeps_base_values(client, db, rrhh, empresa, monkeypatch):
    contrato = nuevo_contrato(db, empresa)
    url = f"/api/contratos/{contrato.id}/novedades"
    resp = client.post(
        f"{url}/economicas",
        json={"cambios": [{"tipo": "salario", "valor_nuevo": 2_500_000}]},
        headers=auth(rrhh),
    )
    assert resp.status_code == 201
    resp = client.post(f"{url}/cambio-cargo", json={"cargo_nuevo": "Coordinadora"}, headers=auth(rrhh))
    assert resp.status_code == 201

    _falla_economicas(monkeypatch)
    actuales = get_current_data(db, contrato.id)

    assert actuales.error == ERROR_CARGA
    assert actuales.salario == 1_800_000
    assert actuales.cargo == "Coordinadora"


def test_writes_refused_while_a_category_fails(client, db, rrhh, empresa, monkeypatch):
    contrato = nuevo_contrato(db, empresa)
    _falla_economicas(monkeypatch)

    resp = client.post(
        f"/api/contratos/{contrato.id}/novedades/cambio-cargo",
        json={"cargo_nuevo": "Coordinadora"},
        headers=auth(rrhh),
    )

    assert resp.status_code == 503
    assert resp.json()["detail"] == ERROR_CARGA
    assert client.get(
        f"/api/contratos/{contrato.id}/novedades/cambio-cargo", headers=auth(rrhh)
    ).json() == []
