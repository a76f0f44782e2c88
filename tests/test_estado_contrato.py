from __future__ import annotations

import datetime
from types import SimpleNamespace

from app.utils.estado_contrato import (
    days_until_expiry,
    dias_hasta_fecha,
    fecha_fin_efectiva,
    permisos,
    status_aprobacion,
    status_vigencia,
    total_remuneration,
    vigencia_label,
    vigencia_por_fecha,
)

HOY = datetime.date(2026, 3, 15)


def test_missing_approval_status_counts_as_approved():
    assert status_aprobacion(SimpleNamespace(status_aprobacion=None)) == "aprobado"
    assert status_aprobacion(SimpleNamespace()) == "aprobado"


def test_only_drafts_are_editable():
    borrador = permisos(SimpleNamespace(status_aprobacion="borrador"))
    aprobado = permisos(SimpleNamespace(status_aprobacion="aprobado"))
    assert borrador.can_edit and borrador.can_delete and borrador.can_approve
    assert not (aprobado.can_edit or aprobado.can_delete or aprobado.can_approve)


def test_effective_end_is_the_earlier_date():
    assert fecha_fin_efectiva("2026-06-30", "2026-04-01") == datetime.date(2026, 4, 1)
    assert fecha_fin_efectiva("2026-01-31", "2026-04-01") == datetime.date(2026, 1, 31)
    assert fecha_fin_efectiva(None, datetime.date(2026, 4, 1)) == datetime.date(2026, 4, 1)
    assert fecha_fin_efectiva(None, None) is None


def test_contract_ending_today_is_terminated():
    assert vigencia_por_fecha(HOY, HOY) == "terminado"
    assert vigencia_por_fecha(HOY + datetime.timedelta(days=1), HOY) == "activo"
    assert vigencia_por_fecha(None, HOY) == "activo"


def test_status_helpers_read_fecha_fin():
    contrato = SimpleNamespace(fecha_fin=datetime.date(2026, 3, 25))
    assert status_vigencia(contrato, HOY) == "activo"
    assert days_until_expiry(contrato, HOY) == 10
    assert days_until_expiry(SimpleNamespace(fecha_fin=None), HOY) is None
    assert dias_hasta_fecha("2026-03-10", HOY) == -5


def test_vigencia_label():
    assert vigencia_label("terminado", -3) == "Terminado"
    assert vigencia_label("activo", 12) == "Vence en 12 días"
    assert vigencia_label("activo", 30) == "Vence en 30 días"
    assert vigencia_label("activo", 31) == "Activo"
    assert vigencia_label("activo", None) == "Activo"


def test_total_remuneration_excludes_transport():
    contrato = SimpleNamespace(
        salario=2_000_000,
        auxilio_salarial=None,
        auxilio_no_salarial=300_000,
        auxilio_transporte=200_000,
    )
    assert total_remuneration(contrato) == 2_300_000


def test_total_remuneration_from_resolved_values():
    actuales = {"salario": 2_500_000.0, "auxilio_salarial": 100_000.0, "auxilio_transporte": 200_000.0}
    assert total_remuneration(actuales) == 2_600_000
