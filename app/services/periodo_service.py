"""
Fixed-term period engine (``historial_contratos_fijos``).

Tracks the sequential periods of ``fijo`` contracts and enforces the
Colombian labour-law limits on extensions (prórrogas).

Design notes
------------
- Period 1 is the ``inicial`` one.  An extension creates period ``N+1``
  starting the day after period ``N`` ends and moves ``es_periodo_actual``.
- Elapsed duration is measured from the first period's start to the current
  period's end; years are ``days / 365``.
- From the 5th extension on, each extension must last at least 365 days.
- The cumulative duration including a new extension may not exceed 4 years;
  past that the contract must become indefinite.
- A contract with a termination novedad, or that is no longer ``fijo``, is
  terminal and accepts no extension.
- ``build_fixed_status``, ``validate_extension`` and ``clasificar_alerta``
  are pure so the rules can be tested without a database.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.contrato import Contrato
from app.models.historial_contrato_fijo import HistorialContratoFijo
from app.models.novedad import NovedadTerminacion, NovedadTiempoLaboral
from app.models.usuario import Usuario
from app.schemas.periodo import (
    EstadoContratoFijoResponse,
    PeriodoResponse,
    ProrrogaResponse,
)
from app.utils.constants import (
    ANIOS_ALERTA_CERCA_LIMITE,
    DIAS_MINIMOS_PRORROGA_ANUAL,
    DIAS_POR_ANIO,
    MAX_ANIOS_CONTRATO_FIJO,
    PRORROGA_MINIMO_ANUAL_DESDE,
)
from app.utils.errores import raise_integrity_error
from app.utils.fechas import hoy_colombia

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertaLegal:
    nivel: str  # danger | warning | success
    titulo: str
    mensaje: str


# ---------------------------------------------------------------------------
# Pure rules
# ---------------------------------------------------------------------------


def periodo_actual_de(periodos: Sequence[Any]) -> Any | None:
    """Row flagged ``es_periodo_actual``; the highest-numbered one otherwise."""
    for periodo in periodos:
        if periodo.es_periodo_actual:
            return periodo
    if not periodos:
        return None
    return max(periodos, key=lambda p: p.numero_periodo)


def build_fixed_status(
    contract_id: int,
    periodos: Sequence[Any],
    fecha_fin_contrato: datetime.date | None = None,
) -> EstadoContratoFijoResponse:
    """Summarise a contract's period history.

    Args:
        contract_id: Contract the periods belong to.
        periodos: ``HistorialContratoFijo`` rows (any order).
        fecha_fin_contrato: Base ``fecha_fin``, used only when there are no
            periods.

    Returns:
        The status block, including the legal-alert classification.
    """
    ordenados = sorted(periodos, key=lambda p: p.numero_periodo)
    actual = periodo_actual_de(ordenados)

    if ordenados:
        fin_actual = actual.fecha_fin
        dias_totales = max((fin_actual - ordenados[0].fecha_inicio).days, 0)
        proximo = ordenados[-1].numero_periodo + 1
    else:
        fin_actual = fecha_fin_contrato
        dias_totales = 0
        proximo = 1

    anios = dias_totales / DIAS_POR_ANIO
    estado = EstadoContratoFijoResponse(
        contract_id=contract_id,
        total_periodos=len(ordenados),
        periodo_actual=actual.numero_periodo if actual is not None else None,
        proximo_periodo=proximo,
        anios_totales=round(anios, 2),
        dias_totales=dias_totales,
        debe_ser_indefinido=anios >= MAX_ANIOS_CONTRATO_FIJO,
        alerta_legal=None,
        nivel_alerta="success",
        fecha_fin_actual=fin_actual,
        periodos=[PeriodoResponse.model_validate(p) for p in ordenados],
    )
    alerta = clasificar_alerta(estado)
    estado.alerta_legal = f"{alerta.titulo}: {alerta.mensaje}"
    estado.nivel_alerta = alerta.nivel
    return estado


def _anios_con_prorroga(
    estado: EstadoContratoFijoResponse,
    nueva_fecha_fin: datetime.date | None,
) -> float:
    dias = estado.dias_totales
    if nueva_fecha_fin is not None and estado.fecha_fin_actual is not None:
        dias += (nueva_fecha_fin - estado.fecha_fin_actual).days
    return dias / DIAS_POR_ANIO


def clasificar_alerta(
    estado: EstadoContratoFijoResponse,
    nueva_fecha_fin: datetime.date | None = None,
) -> AlertaLegal:
    """Classify the contract's legal situation, optionally for a proposed end date.

    Checked in order: already at 4 years, the proposed extension exceeding
    4 years, the next extension being the 5th or later, closeness to the
    limit (more than 3.5 years), and otherwise a normal extension.
    """
    anios_actuales = estado.dias_totales / DIAS_POR_ANIO
    anios_con_prorroga = _anios_con_prorroga(estado, nueva_fecha_fin)
    numero_prorroga = estado.proximo_periodo - 1

    if estado.debe_ser_indefinido:
        return AlertaLegal(
            "danger",
            "DEBE SER CONTRATO INDEFINIDO",
            f"Con {anios_actuales:.1f} años trabajados, la ley exige que sea "
            f"contrato indefinido.",
        )
    if anios_con_prorroga > MAX_ANIOS_CONTRATO_FIJO:
        return AlertaLegal(
            "danger",
            "PRÓRROGA EXCEDE 4 AÑOS",
            f"Esta prórroga resultaría en {anios_con_prorroga:.1f} años totales. "
            f"Por ley colombiana, debe ser contrato indefinido.",
        )
    if numero_prorroga >= PRORROGA_MINIMO_ANUAL_DESDE:
        return AlertaLegal(
            "warning",
            "QUINTA PRÓRROGA - MÍNIMO 1 AÑO",
            f"La próxima será la prórroga #{numero_prorroga}. Por ley, debe ser "
            f"mínimo de 1 año.",
        )
    if anios_con_prorroga > ANIOS_ALERTA_CERCA_LIMITE:
        return AlertaLegal(
            "warning",
            "CERCA DEL LÍMITE DE 4 AÑOS",
            f"Con esta prórroga tendrá {anios_con_prorroga:.1f} años. "
            f"Considere contrato indefinido.",
        )
    return AlertaLegal(
        "success",
        "PRÓRROGA PERMITIDA",
        f"Puede hacer prórroga normal. Actualmente {anios_actuales:.1f} años trabajados.",
    )


def validate_extension(
    estado: EstadoContratoFijoResponse,
    fecha_fin_actual: datetime.date | None,
    nueva_fecha_fin: datetime.date,
) -> str | None:
    """Check a proposed extension against the fixed-term rules.

    Returns:
        ``None`` when the extension is allowed, otherwise the message that
        blocks it.
    """
    if fecha_fin_actual is not None and nueva_fecha_fin <= fecha_fin_actual:
        return "La nueva fecha debe ser posterior a la fecha actual de finalización"
    if fecha_fin_actual is None:
        return None

    dias_prorroga = (nueva_fecha_fin - fecha_fin_actual).days
    numero_prorroga = estado.proximo_periodo - 1
    if numero_prorroga >= PRORROGA_MINIMO_ANUAL_DESDE and dias_prorroga < DIAS_MINIMOS_PRORROGA_ANUAL:
        return (
            f"La prórroga #{numero_prorroga} debe ser mínimo de 1 año (365 días). "
            f"Actualmente son {dias_prorroga} días."
        )

    anios_totales = (estado.dias_totales + dias_prorroga) / DIAS_POR_ANIO
    if anios_totales > MAX_ANIOS_CONTRATO_FIJO:
        return (
            f"No se puede prorrogar. Esta prórroga resultaría en {anios_totales:.1f} "
            f"años totales. Después de 4 años debe ser contrato indefinido."
        )
    return None


# ---------------------------------------------------------------------------
# Database access
# ---------------------------------------------------------------------------


def _get_contrato(db: Session, contract_id: int) -> Contrato:
    contrato: Contrato | None = db.query(Contrato).filter(Contrato.id == contract_id).first()
    if contrato is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Contrato con ID {contract_id} no encontrado.",
        )
    return contrato


def list_periods(db: Session, contract_id: int) -> list[HistorialContratoFijo]:
    return (
        db.query(HistorialContratoFijo)
        .filter(HistorialContratoFijo.contract_id == contract_id)
        .order_by(HistorialContratoFijo.numero_periodo)
        .all()
    )


def create_initial_period(
    db: Session,
    contrato: Contrato,
    user_id: int | None,
) -> HistorialContratoFijo | None:
    """Add period #1 for a ``fijo`` contract with both dates (no commit).

    Returns ``None`` when the contract is not eligible.
    """
    if contrato.tipo_contrato != "fijo" or not contrato.fecha_ingreso or not contrato.fecha_fin:
        return None
    periodo = HistorialContratoFijo(
        contract_id=contrato.id,
        numero_periodo=1,
        fecha_inicio=contrato.fecha_ingreso,
        fecha_fin=contrato.fecha_fin,
        tipo_periodo="inicial",
        es_periodo_actual=True,
        created_by=user_id,
    )
    db.add(periodo)
    return periodo


def get_contract_fixed_status(
    db: Session,
    contract_id: int,
    nueva_fecha_fin: datetime.date | None = None,
) -> EstadoContratoFijoResponse:
    """Return the period summary of a contract.

    When *nueva_fecha_fin* is given, the legal alert is computed for that
    proposed extension instead of the current state.

    Raises:
        HTTPException 404: Unknown contract.
    """
    contrato = _get_contrato(db, contract_id)
    periodos = list_periods(db, contract_id)
    estado = build_fixed_status(contract_id, periodos, contrato.fecha_fin)
    if nueva_fecha_fin is not None:
        alerta = clasificar_alerta(estado, nueva_fecha_fin)
        estado.alerta_legal = f"{alerta.titulo}: {alerta.mensaje}"
        estado.nivel_alerta = alerta.nivel

    logger.debug(
        "get_contract_fixed_status: contract_id=%d periodos=%d dias=%d",
        contract_id, estado.total_periodos, estado.dias_totales,
    )
    return estado


def extend_contract_period(
    db: Session,
    contract_id: int,
    nueva_fecha_fin: datetime.date,
    tipo_periodo: str,
    motivo: str,
    user: Usuario,
) -> ProrrogaResponse:
    """Register an extension of a fixed-term contract.

    Creates period ``N+1``, flips ``es_periodo_actual``, moves the contract's
    ``fecha_fin`` and records a ``prorroga`` novedad, all in one transaction.

    Args:
        db: Active SQLAlchemy session.
        contract_id: Contract to extend.
        nueva_fecha_fin: End date of the new period.
        tipo_periodo: ``prorroga_automatica`` or ``prorroga_acordada``.
        motivo: Reason, stored as the period's ``observaciones``.
        user: User registering the extension.

    Returns:
        The new period and the refreshed status block.

    Raises:
        HTTPException 404: Unknown contract.
        HTTPException 409: Contract is not ``fijo`` or is terminated.
        HTTPException 422: The extension breaks a fixed-term rule or the
                           contract lacks the dates to build its first period.
    """
    contrato = _get_contrato(db, contract_id)

    if contrato.tipo_contrato != "fijo":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Solo los contratos a término fijo admiten prórrogas por períodos.",
        )
    terminado = (
        db.query(NovedadTerminacion.id)
        .filter(NovedadTerminacion.contract_id == contract_id)
        .first()
    )
    if terminado is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="El contrato tiene una terminación registrada; no admite prórrogas.",
        )

    periodos = list_periods(db, contract_id)
    if not periodos:
        inicial = create_initial_period(db, contrato, contrato.created_by)
        if inicial is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="El contrato no tiene fecha de ingreso y fecha fin para calcular sus períodos.",
            )
        db.flush()
        periodos = [inicial]

    estado = build_fixed_status(contract_id, periodos, contrato.fecha_fin)
    if estado.debe_ser_indefinido:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=(
                f"No se puede prorrogar. El contrato ya suma {estado.anios_totales:.1f} "
                f"años. Después de 4 años debe ser contrato indefinido."
            ),
        )
    error = validate_extension(estado, estado.fecha_fin_actual, nueva_fecha_fin)
    if error:
        logger.warning("extend_contract_period: contract_id=%d rejected: %s", contract_id, error)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=error)

    actual = periodo_actual_de(periodos)
    fecha_inicio = actual.fecha_fin + datetime.timedelta(days=1)
    dias_prorroga = (nueva_fecha_fin - actual.fecha_fin).days

    for periodo in periodos:
        periodo.es_periodo_actual = False
    nuevo = HistorialContratoFijo(
        contract_id=contract_id,
        numero_periodo=estado.proximo_periodo,
        fecha_inicio=fecha_inicio,
        fecha_fin=nueva_fecha_fin,
        tipo_periodo=tipo_periodo,
        es_periodo_actual=True,
        observaciones=motivo,
        created_by=user.id,
    )
    db.add(nuevo)
    db.add(
        NovedadTiempoLaboral(
            contract_id=contract_id,
            fecha=hoy_colombia(),
            tipo_tiempo="prorroga",
            fecha_inicio=fecha_inicio,
            nueva_fecha_fin=nueva_fecha_fin,
            dias=dias_prorroga,
            motivo=motivo,
            created_by=user.id,
        )
    )
    contrato.fecha_fin = nueva_fecha_fin
    contrato.updated_by = user.id

    try:
        db.commit()
    except IntegrityError as exc:
        raise_integrity_error(db, exc, "período")
    db.refresh(nuevo)

    logger.info(
        "extend_contract_period: contract_id=%d periodo=%d hasta=%s user=%s",
        contract_id, nuevo.numero_periodo, nueva_fecha_fin, user.username,
    )
    return ProrrogaResponse(
        success=True,
        periodo=PeriodoResponse.model_validate(nuevo),
        estado=get_contract_fixed_status(db, contract_id),
    )
