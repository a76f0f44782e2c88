"""
Derived contract state: approval, validity, permissions and remuneration.

All helpers are pure functions over any object exposing the contract
columns as attributes (ORM rows, Pydantic models, ``SimpleNamespace``), so
they can be unit-tested without a database.

Validity precedence
-------------------
A contract's *effective end date* is the earlier of its current
``fecha_fin`` and the effective date of a termination novedad, when either
exists.  The contract is ``terminado`` once that date is on or before today
(calendar-date comparison in Bogotá).  A termination dated in the future
therefore keeps the contract ``activo`` until that day, while an already
elapsed ``fecha_fin`` is never revived by a later-dated termination.
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from app.config import get_settings
from app.utils.constants import (
    ESTADO_APROBADO,
    ESTADO_BORRADOR,
    VIGENCIA_ACTIVO,
    VIGENCIA_TERMINADO,
)
from app.utils.fechas import hoy_colombia, to_local_date


@dataclass(frozen=True)
class PermisosContrato:
    can_edit: bool
    can_delete: bool
    can_approve: bool


def _as_date(value: Any) -> datetime.date | None:
    if value is None or value == "":
        return None
    return to_local_date(value)


def status_aprobacion(contrato: Any) -> str:
    """Approval state; legacy rows without a value count as approved."""
    return getattr(contrato, "status_aprobacion", None) or ESTADO_APROBADO


def permisos(contrato: Any) -> PermisosContrato:
    editable = status_aprobacion(contrato) == ESTADO_BORRADOR
    return PermisosContrato(
        can_edit=editable,
        can_delete=editable,
        can_approve=editable,
    )


def fecha_fin_efectiva(
    fecha_fin: Any,
    fecha_terminacion: Any = None,
) -> datetime.date | None:
    """Earlier of the contract end date and the termination date."""
    candidatas = [
        fecha for fecha in (_as_date(fecha_fin), _as_date(fecha_terminacion))
        if fecha is not None
    ]
    return min(candidatas) if candidatas else None


def vigencia_por_fecha(
    fecha_fin: Any,
    today: datetime.date | None = None,
) -> str:
    fin = _as_date(fecha_fin)
    if fin is None:
        return VIGENCIA_ACTIVO
    today = today or hoy_colombia()
    return VIGENCIA_TERMINADO if fin <= today else VIGENCIA_ACTIVO


def dias_hasta_fecha(
    fecha_fin: Any,
    today: datetime.date | None = None,
) -> int | None:
    fin = _as_date(fecha_fin)
    if fin is None:
        return None
    today = today or hoy_colombia()
    return (fin - today).days


def status_vigencia(contrato: Any, today: datetime.date | None = None) -> str:
    """``terminado`` iff the contract's ``fecha_fin`` is on or before today."""
    return vigencia_por_fecha(getattr(contrato, "fecha_fin", None), today)


def days_until_expiry(contrato: Any, today: datetime.date | None = None) -> int | None:
    """Days left until ``fecha_fin``, or ``None`` for open-ended contracts."""
    return dias_hasta_fecha(getattr(contrato, "fecha_fin", None), today)


def vigencia_label(estado: str, dias: int | None) -> str:
    """Badge text for the validity column."""
    if estado == VIGENCIA_TERMINADO:
        return "Terminado"
    limite = get_settings().EXPIRY_WARNING_DAYS
    if dias is not None and 0 < dias <= limite:
        return f"Vence en {dias} días"
    return "Activo"


def total_remuneration(contrato: Any) -> float:
    """salario + auxilio_salarial + auxilio_no_salarial (transport excluded).

    *contrato* may be a row object or a mapping of resolved current values.
    """
    total = 0.0
    for campo in ("salario", "auxilio_salarial", "auxilio_no_salarial"):
        if isinstance(contrato, Mapping):
            valor = contrato.get(campo)
        else:
            valor = getattr(contrato, campo, None)
        if valor is not None:
            total += float(valor)
    return total
