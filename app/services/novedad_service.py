"""
Novedades service: current-value resolution and change-event registration.

Novedades are append-only rows, one table per category.  The current value
of a contract field is the most recent novedad for that field, falling back
to the base ``Contrato`` column.

Design notes
------------
- Every category is fetched ordered by ``created_at`` descending (ties
  broken by ``id`` descending) and reduced with ``latest_by_key``; the
  overlay on the base record is an explicit ``resolve_chain`` per field.
- ``get_current_data`` loads each category independently.  A category whose
  query fails keeps the base values and sets the non-blocking ``error``
  field; nothing is retried.
- Current end date: latest prórroga ``nueva_fecha_fin``, then the current
  fixed-term period's ``fecha_fin``, then the base ``fecha_fin``.
- ``valor_anterior`` is always filled here from the resolved value, never
  taken from the client.  Unchanged values are skipped; a payload with no
  real change is rejected.
- Novedades are only accepted on approved contracts without a termination.
- A prórroga on a ``fijo`` contract goes through the fixed-term period
  engine; on any other contract type it is recorded directly.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Callable, Iterable, TypeVar

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.contrato import Contrato
from app.models.historial_contrato_fijo import HistorialContratoFijo
from app.models.novedad import (
    NovedadBeneficiario,
    NovedadCambioCargo,
    NovedadDatosPersonales,
    NovedadEconomica,
    NovedadEntidad,
    NovedadIncapacidad,
    NovedadTerminacion,
    NovedadTiempoLaboral,
)
from app.models.usuario import Usuario
from app.schemas.novedad import (
    DatosActualesResponse,
    NovedadBeneficiarioCreate,
    NovedadBeneficiarioResponse,
    NovedadCambioCargoCreate,
    NovedadCambioCargoResponse,
    NovedadDatosPersonalesCreate,
    NovedadDatosPersonalesResponse,
    NovedadEconomicaCreate,
    NovedadEconomicaResponse,
    NovedadEntidadCreate,
    NovedadEntidadResponse,
    NovedadIncapacidadCreate,
    NovedadIncapacidadResponse,
    NovedadTerminacionCreate,
    NovedadTerminacionResponse,
    NovedadTiempoLaboralCreate,
    NovedadTiempoLaboralResponse,
    TerminacionExistenteResponse,
)
from app.services import periodo_service
from app.utils.constants import ESTADO_APROBADO, TIPOS_ECONOMICOS_CON_CONCEPTO
from app.utils.errores import TERMINACION_DUPLICADA, raise_integrity_error
from app.utils.estado_contrato import (
    dias_hasta_fecha,
    fecha_fin_efectiva,
    status_aprobacion,
    total_remuneration,
    vigencia_label,
    vigencia_por_fecha,
)
from app.utils.fechas import hoy_colombia

logger = logging.getLogger(__name__)

ERROR_CARGA = "Error al cargar datos actualizados"

T = TypeVar("T")

# Category path segment -> (model, response schema)
CATEGORIAS: dict[str, tuple[type, type]] = {
    "datos-personales": (NovedadDatosPersonales, NovedadDatosPersonalesResponse),
    "economicas": (NovedadEconomica, NovedadEconomicaResponse),
    "entidades": (NovedadEntidad, NovedadEntidadResponse),
    "cambio-cargo": (NovedadCambioCargo, NovedadCambioCargoResponse),
    "beneficiarios": (NovedadBeneficiario, NovedadBeneficiarioResponse),
    "tiempo-laboral": (NovedadTiempoLaboral, NovedadTiempoLaboralResponse),
    "incapacidades": (NovedadIncapacidad, NovedadIncapacidadResponse),
    "terminacion": (NovedadTerminacion, NovedadTerminacionResponse),
}


# ---------------------------------------------------------------------------
# Resolution primitives
# ---------------------------------------------------------------------------


def latest_by_key(rows: Iterable[T], key: Callable[[T], Any]) -> dict[Any, T]:
    """First row per key from *rows*, which must be ordered newest first."""
    latest: dict[Any, T] = {}
    for row in rows:
        latest.setdefault(key(row), row)
    return latest


def resolve_chain(*candidates: Any) -> Any:
    """First candidate that is not ``None``."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _orden_reciente(rows: Iterable[T]) -> list[T]:
    return sorted(rows, key=lambda r: (r.created_at, r.id), reverse=True)


def resolver_fecha_fin(
    prorrogas: Iterable[Any],
    periodos: Iterable[Any],
    fecha_fin_base: datetime.date | None,
) -> datetime.date | None:
    """Current end date from prórroga novedades, periods and the base column."""
    ultima = next(
        (p for p in _orden_reciente(prorrogas) if p.tipo_tiempo == "prorroga" and p.nueva_fecha_fin),
        None,
    )
    actual = next((p for p in periodos if p.es_periodo_actual), None)
    return resolve_chain(
        ultima.nueva_fecha_fin if ultima else None,
        actual.fecha_fin if actual else None,
        fecha_fin_base,
    )


def fecha_fin_contrato(contrato: Contrato) -> datetime.date | None:
    """Resolved end date using the contract's loaded relationships."""
    return resolver_fecha_fin(
        contrato.novedades_tiempo_laboral, contrato.periodos, contrato.fecha_fin
    )


def _fetch(db: Session, model: type, contract_id: int) -> list[Any]:
    return (
        db.query(model)
        .filter(model.contract_id == contract_id)
        .order_by(model.created_at.desc(), model.id.desc())
        .all()
    )


def _float(value: Any) -> float | None:
    return float(value) if value is not None else None


# ---------------------------------------------------------------------------
# Current resolved state
# ---------------------------------------------------------------------------


def _get_contrato(db: Session, contract_id: int) -> Contrato:
    contrato: Contrato | None = db.query(Contrato).filter(Contrato.id == contract_id).first()
    if contrato is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Contrato con ID {contract_id} no encontrado.",
        )
    return contrato


def _base_values(contrato: Contrato) -> dict[str, Any]:
    return {
        "primer_nombre": contrato.primer_nombre,
        "segundo_nombre": contrato.segundo_nombre,
        "primer_apellido": contrato.primer_apellido,
        "segundo_apellido": contrato.segundo_apellido,
        "celular": contrato.celular,
        "email": contrato.email,
        "salario": _float(contrato.salario),
        "auxilio_salarial": _float(contrato.auxilio_salarial),
        "auxilio_salarial_concepto": contrato.auxilio_salarial_concepto,
        "auxilio_no_salarial": _float(contrato.auxilio_no_salarial),
        "auxilio_no_salarial_concepto": contrato.auxilio_no_salarial_concepto,
        "auxilio_transporte": _float(contrato.auxilio_transporte),
        "eps": contrato.radicado_eps,
        "fondo_pension": contrato.fondo_pension,
        "fondo_cesantias": contrato.fondo_cesantias,
        "cargo": contrato.cargo,
        "aporta_sena": bool(contrato.base_sena),
        "beneficiario_hijo": contrato.beneficiario_hijo or 0,
        "beneficiario_madre": contrato.beneficiario_madre or 0,
        "beneficiario_padre": contrato.beneficiario_padre or 0,
        "beneficiario_conyuge": contrato.beneficiario_conyuge or 0,
        "fecha_fin": contrato.fecha_fin,
        "terminacion": None,
    }


def _overlay_datos_personales(valores: dict[str, Any], rows: list[NovedadDatosPersonales]) -> None:
    ultimos = latest_by_key(rows, lambda r: r.campo)
    for campo, row in ultimos.items():
        valores[campo] = resolve_chain(row.valor_nuevo, valores.get(campo))


def _overlay_economicas(valores: dict[str, Any], rows: list[NovedadEconomica]) -> None:
    ultimos = latest_by_key(rows, lambda r: r.tipo)
    for tipo, row in ultimos.items():
        valores[tipo] = resolve_chain(_float(row.valor_nuevo), valores.get(tipo))
        if tipo in TIPOS_ECONOMICOS_CON_CONCEPTO:
            valores[f"{tipo}_concepto"] = resolve_chain(
                row.concepto, valores.get(f"{tipo}_concepto")
            )


def _overlay_entidades(valores: dict[str, Any], rows: list[NovedadEntidad]) -> None:
    ultimos = latest_by_key(rows, lambda r: r.tipo)
    for tipo, row in ultimos.items():
        valores[tipo] = resolve_chain(row.entidad_nueva, valores.get(tipo))


def _overlay_cambio_cargo(valores: dict[str, Any], rows: list[NovedadCambioCargo]) -> None:
    if rows:
        valores["cargo"] = resolve_chain(rows[0].cargo_nuevo, valores["cargo"])
    ultimo_sena = next((r for r in rows if r.aporta_sena is not None), None)
    if ultimo_sena is not None:
        valores["aporta_sena"] = bool(ultimo_sena.aporta_sena)


def _overlay_beneficiarios(valores: dict[str, Any], rows: list[NovedadBeneficiario]) -> None:
    ultimos = latest_by_key(rows, lambda r: r.tipo_beneficiario)
    for tipo, row in ultimos.items():
        clave = f"beneficiario_{tipo}"
        valores[clave] = resolve_chain(row.valor_nuevo, valores.get(clave))


def resolve_current_values(
    contrato: Contrato,
    novedades: dict[str, list[Any]],
    periodos: list[Any],
) -> dict[str, Any]:
    """Overlay already-fetched novedad rows on the base contract.

    *novedades* maps a category path segment to its rows, newest first; a
    missing category leaves the base values in place.
    """
    valores = _base_values(contrato)
    overlays: dict[str, Callable[[dict[str, Any], list[Any]], None]] = {
        "datos-personales": _overlay_datos_personales,
        "economicas": _overlay_economicas,
        "entidades": _overlay_entidades,
        "cambio-cargo": _overlay_cambio_cargo,
        "beneficiarios": _overlay_beneficiarios,
    }
    for categoria, overlay in overlays.items():
        if categoria in novedades:
            overlay(valores, novedades[categoria])

    valores["fecha_fin"] = resolver_fecha_fin(
        novedades.get("tiempo-laboral", []), periodos, contrato.fecha_fin
    )
    terminaciones = novedades.get("terminacion") or []
    valores["terminacion"] = terminaciones[0] if terminaciones else None
    return valores


def valores_contrato(contrato: Contrato) -> dict[str, Any]:
    """``resolve_current_values`` over the contract's loaded relationships."""
    novedades = {
        "datos-personales": _orden_reciente(contrato.novedades_datos_personales),
        "economicas": _orden_reciente(contrato.novedades_economicas),
        "entidades": _orden_reciente(contrato.novedades_entidades),
        "cambio-cargo": _orden_reciente(contrato.novedades_cambio_cargo),
        "beneficiarios": _orden_reciente(contrato.novedades_beneficiarios),
        "tiempo-laboral": _orden_reciente(contrato.novedades_tiempo_laboral),
        "terminacion": [contrato.terminacion] if contrato.terminacion is not None else [],
    }
    return resolve_current_values(contrato, novedades, contrato.periodos)


def get_current_data(
    db: Session,
    contract_id: int,
    today: datetime.date | None = None,
) -> DatosActualesResponse:
    """Return the contract's fields with every novedad category applied.

    Raises:
        HTTPException 404: Unknown contract.
    """
    contrato = _get_contrato(db, contract_id)
    today = today or hoy_colombia()

    novedades: dict[str, list[Any]] = {}
    error: str | None = None
    for categoria in (
        "datos-personales", "economicas", "entidades", "cambio-cargo",
        "beneficiarios", "tiempo-laboral", "terminacion",
    ):
        model = CATEGORIAS[categoria][0]
        try:
            novedades[categoria] = _fetch(db, model, contract_id)
        except SQLAlchemyError as exc:
            logger.warning(
                "get_current_data: contract_id=%d category=%s failed: %s",
                contract_id, categoria, exc,
            )
            db.rollback()
            error = ERROR_CARGA

    try:
        periodos = (
            db.query(HistorialContratoFijo)
            .filter(HistorialContratoFijo.contract_id == contract_id)
            .all()
        )
    except SQLAlchemyError as exc:
        logger.warning("get_current_data: contract_id=%d periods failed: %s", contract_id, exc)
        db.rollback()
        periodos = []
        error = ERROR_CARGA

    valores = resolve_current_values(contrato, novedades, periodos)
    terminacion: NovedadTerminacion | None = valores.pop("terminacion")

    fin = fecha_fin_efectiva(
        valores["fecha_fin"], terminacion.fecha if terminacion else None
    )
    vigencia = vigencia_por_fecha(fin, today)
    dias = dias_hasta_fecha(fin, today)
    total = total_remuneration(valores)

    return DatosActualesResponse(
        contract_id=contract_id,
        **{k: v for k, v in valores.items() if not k.startswith("beneficiario_")},
        total_remuneracion=total,
        beneficiario_hijo=int(valores["beneficiario_hijo"]),
        beneficiario_madre=bool(valores["beneficiario_madre"]),
        beneficiario_padre=bool(valores["beneficiario_padre"]),
        beneficiario_conyuge=bool(valores["beneficiario_conyuge"]),
        is_terminated=terminacion is not None,
        fecha_terminacion=terminacion.fecha if terminacion else None,
        tipo_terminacion=terminacion.tipo_terminacion if terminacion else None,
        status_vigencia=vigencia,
        vigencia_label=vigencia_label(vigencia, dias),
        days_until_expiry=dias,
        error=error,
    )


# ---------------------------------------------------------------------------
# Guards shared by the create operations
# ---------------------------------------------------------------------------


def _contrato_para_novedad(db: Session, contract_id: int) -> Contrato:
    contrato = _get_contrato(db, contract_id)
    if status_aprobacion(contrato) != ESTADO_APROBADO:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Solo se pueden registrar novedades en contratos aprobados",
        )
    if terminacion_existente(db, contract_id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="El contrato tiene una terminación registrada; no admite nuevas novedades",
        )
    return contrato


def _sin_cambios(mensaje: str = "Debes realizar al menos un cambio válido") -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=mensaje)


def _guardar(db: Session, rows: list[Any], entidad: str) -> list[Any]:
    db.add_all(rows)
    try:
        db.commit()
    except IntegrityError as exc:
        raise_integrity_error(db, exc, entidad)
    for row in rows:
        db.refresh(row)
    return rows


def _resueltos(db: Session, contract_id: int) -> DatosActualesResponse:
    actuales = get_current_data(db, contract_id)
    if actuales.error:
        # valor_anterior would be wrong if a category failed to load
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=actuales.error,
        )
    return actuales


# ---------------------------------------------------------------------------
# Create operations, one per category
# ---------------------------------------------------------------------------


def create_datos_personales(
    db: Session,
    contract_id: int,
    data: NovedadDatosPersonalesCreate,
    user: Usuario,
) -> list[NovedadDatosPersonales]:
    _contrato_para_novedad(db, contract_id)
    actuales = _resueltos(db, contract_id)
    fecha = data.fecha or hoy_colombia()

    rows: list[NovedadDatosPersonales] = []
    for cambio in data.cambios:
        anterior = getattr(actuales, cambio.campo)
        if cambio.valor_nuevo == anterior:
            continue
        rows.append(
            NovedadDatosPersonales(
                contract_id=contract_id,
                fecha=fecha,
                campo=cambio.campo,
                valor_anterior=anterior,
                valor_nuevo=cambio.valor_nuevo,
                observacion=cambio.observacion,
                created_by=user.id,
            )
        )
    if not rows:
        raise _sin_cambios()

    _guardar(db, rows, "novedad")
    logger.info(
        "create_datos_personales: contract_id=%d campos=%s user=%s",
        contract_id, [r.campo for r in rows], user.username,
    )
    return rows


def create_economicas(
    db: Session,
    contract_id: int,
    data: NovedadEconomicaCreate,
    user: Usuario,
) -> list[NovedadEconomica]:
    _contrato_para_novedad(db, contract_id)
    actuales = _resueltos(db, contract_id)
    fecha = data.fecha or hoy_colombia()

    rows: list[NovedadEconomica] = []
    for cambio in data.cambios:
        anterior = getattr(actuales, cambio.tipo)
        concepto_anterior = (
            getattr(actuales, f"{cambio.tipo}_concepto")
            if cambio.tipo in TIPOS_ECONOMICOS_CON_CONCEPTO
            else None
        )
        if anterior is not None and float(anterior) == cambio.valor_nuevo and cambio.concepto == concepto_anterior:
            continue
        rows.append(
            NovedadEconomica(
                contract_id=contract_id,
                fecha=fecha,
                tipo=cambio.tipo,
                concepto=cambio.concepto,
                valor_anterior=anterior,
                valor_nuevo=cambio.valor_nuevo,
                motivo=cambio.motivo,
                created_by=user.id,
            )
        )
    if not rows:
        raise _sin_cambios()

    _guardar(db, rows, "novedad")
    logger.info(
        "create_economicas: contract_id=%d tipos=%s user=%s",
        contract_id, [r.tipo for r in rows], user.username,
    )
    return rows


def create_entidades(
    db: Session,
    contract_id: int,
    data: NovedadEntidadCreate,
    user: Usuario,
) -> list[NovedadEntidad]:
    _contrato_para_novedad(db, contract_id)
    actuales = _resueltos(db, contract_id)

    rows: list[NovedadEntidad] = []
    for cambio in data.cambios:
        anterior = getattr(actuales, cambio.tipo)
        if cambio.entidad_nueva == anterior:
            continue
        rows.append(
            NovedadEntidad(
                contract_id=contract_id,
                fecha=cambio.fecha,
                tipo=cambio.tipo,
                entidad_anterior=anterior,
                entidad_nueva=cambio.entidad_nueva,
                observacion=cambio.observacion,
                created_by=user.id,
            )
        )
    if not rows:
        raise _sin_cambios()

    _guardar(db, rows, "novedad")
    logger.info(
        "create_entidades: contract_id=%d tipos=%s user=%s",
        contract_id, [r.tipo for r in rows], user.username,
    )
    return rows


def create_cambio_cargo(
    db: Session,
    contract_id: int,
    data: NovedadCambioCargoCreate,
    user: Usuario,
) -> NovedadCambioCargo:
    """Record a position change.

    ``cargo_nuevo`` defaults to the current position, and ``aporta_sena``
    is only stored when it differs from the current value.
    """
    _contrato_para_novedad(db, contract_id)
    actuales = _resueltos(db, contract_id)

    cargo_nuevo = (data.cargo_nuevo or "").strip() or actuales.cargo
    cambia_cargo = cargo_nuevo != actuales.cargo
    cambia_sena = data.aporta_sena is not None and data.aporta_sena != actuales.aporta_sena
    if not cambia_cargo and not cambia_sena:
        raise _sin_cambios("Debes cambiar al menos el cargo o la contribución al SENA")
    if not cargo_nuevo:
        raise _sin_cambios("El nuevo cargo es obligatorio")

    row = NovedadCambioCargo(
        contract_id=contract_id,
        fecha=data.fecha or hoy_colombia(),
        cargo_anterior=actuales.cargo,
        cargo_nuevo=cargo_nuevo,
        aporta_sena=data.aporta_sena if cambia_sena else None,
        motivo=data.motivo,
        created_by=user.id,
    )
    _guardar(db, [row], "novedad")
    logger.info(
        "create_cambio_cargo: contract_id=%d cargo=%r sena=%s user=%s",
        contract_id, cargo_nuevo, row.aporta_sena, user.username,
    )
    return row


def create_beneficiarios(
    db: Session,
    contract_id: int,
    data: NovedadBeneficiarioCreate,
    user: Usuario,
) -> list[NovedadBeneficiario]:
    _contrato_para_novedad(db, contract_id)
    actuales = _resueltos(db, contract_id)

    rows: list[NovedadBeneficiario] = []
    for cambio in data.cambios:
        anterior = int(getattr(actuales, f"beneficiario_{cambio.tipo_beneficiario}"))
        if cambio.valor_nuevo == anterior:
            continue
        rows.append(
            NovedadBeneficiario(
                contract_id=contract_id,
                fecha=data.fecha,
                tipo_beneficiario=cambio.tipo_beneficiario,
                valor_anterior=anterior,
                valor_nuevo=cambio.valor_nuevo,
                observacion=data.observacion,
                created_by=user.id,
            )
        )
    if not rows:
        raise _sin_cambios()

    _guardar(db, rows, "novedad")
    logger.info(
        "create_beneficiarios: contract_id=%d tipos=%s user=%s",
        contract_id, [r.tipo_beneficiario for r in rows], user.username,
    )
    return rows


def create_tiempo_laboral(
    db: Session,
    contract_id: int,
    data: NovedadTiempoLaboralCreate,
    user: Usuario,
) -> NovedadTiempoLaboral:
    """Record an extension, vacation or suspension.

    Vacation and suspension days count both ends (``fin - inicio + 1``).

    Raises:
        HTTPException 422: The new end date is not after the current one, or
                           a fixed-term rule is broken.
    """
    contrato = _contrato_para_novedad(db, contract_id)

    if data.tipo_tiempo == "prorroga" and contrato.tipo_contrato == "fijo":
        periodo_service.extend_contract_period(
            db,
            contract_id,
            data.nueva_fecha_fin,
            data.tipo_prorroga,
            data.motivo,
            user,
        )
        return _fetch(db, NovedadTiempoLaboral, contract_id)[0]

    row = NovedadTiempoLaboral(
        contract_id=contract_id,
        fecha=hoy_colombia(),
        tipo_tiempo=data.tipo_tiempo,
        fecha_inicio=data.fecha_inicio,
        fecha_fin=data.fecha_fin,
        motivo=data.motivo,
        created_by=user.id,
    )
    if data.tipo_tiempo == "prorroga":
        fin_actual = fecha_fin_contrato(contrato)
        if fin_actual is not None and data.nueva_fecha_fin <= fin_actual:
            raise _sin_cambios(
                "La nueva fecha debe ser posterior a la fecha actual de finalización"
            )
        row.nueva_fecha_fin = data.nueva_fecha_fin
        row.fecha_inicio = data.fecha_inicio or (
            fin_actual + datetime.timedelta(days=1) if fin_actual else None
        )
        if fin_actual is not None:
            row.dias = (data.nueva_fecha_fin - fin_actual).days
    else:
        row.dias = (data.fecha_fin - data.fecha_inicio).days + 1
        if data.tipo_tiempo == "vacaciones":
            row.programadas = data.programadas
            row.disfrutadas = data.disfrutadas

    _guardar(db, [row], "novedad")
    logger.info(
        "create_tiempo_laboral: contract_id=%d tipo=%s dias=%s user=%s",
        contract_id, row.tipo_tiempo, row.dias, user.username,
    )
    return row


def create_incapacidad(
    db: Session,
    contract_id: int,
    data: NovedadIncapacidadCreate,
    user: Usuario,
) -> NovedadIncapacidad:
    _contrato_para_novedad(db, contract_id)
    row = NovedadIncapacidad(
        contract_id=contract_id,
        fecha=data.fecha_inicio,
        tipo_incapacidad=data.tipo_incapacidad,
        fecha_inicio=data.fecha_inicio,
        fecha_fin=data.fecha_fin,
        dias=(data.fecha_fin - data.fecha_inicio).days + 1,
        entidad=data.entidad,
        soporte_url=data.soporte_url,
        observacion=data.observacion,
        created_by=user.id,
    )
    _guardar(db, [row], "novedad")
    logger.info(
        "create_incapacidad: contract_id=%d tipo=%s dias=%d user=%s",
        contract_id, row.tipo_incapacidad, row.dias, user.username,
    )
    return row


# ---------------------------------------------------------------------------
# Termination
# ---------------------------------------------------------------------------


def terminacion_existente(db: Session, contract_id: int) -> NovedadTerminacion | None:
    return (
        db.query(NovedadTerminacion)
        .filter(NovedadTerminacion.contract_id == contract_id)
        .first()
    )


def check_terminacion(db: Session, contract_id: int) -> TerminacionExistenteResponse:
    """Pre-submission check used before showing the termination form."""
    _get_contrato(db, contract_id)
    existente = terminacion_existente(db, contract_id)
    return TerminacionExistenteResponse(
        existe=existente is not None,
        terminacion=(
            NovedadTerminacionResponse.model_validate(existente) if existente else None
        ),
    )


def create_terminacion(
    db: Session,
    contract_id: int,
    data: NovedadTerminacionCreate,
    user: Usuario,
) -> NovedadTerminacion:
    """Register the contract's termination; at most one per contract.

    A future ``fecha`` schedules the termination: the contract stays
    ``activo`` until that day.

    Raises:
        HTTPException 409: A termination already exists (checked up front and
                           enforced by ``unique_terminacion_por_contrato``).
    """
    contrato = _get_contrato(db, contract_id)
    if terminacion_existente(db, contract_id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=TERMINACION_DUPLICADA)
    if status_aprobacion(contrato) != ESTADO_APROBADO:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Solo se pueden registrar novedades en contratos aprobados",
        )

    row = NovedadTerminacion(
        contract_id=contract_id,
        fecha=data.fecha,
        tipo_terminacion=data.tipo_terminacion,
        observacion=data.observacion,
        created_by=user.id,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("create_terminacion: duplicate for contract_id=%d", contract_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=TERMINACION_DUPLICADA
        ) from exc
    db.refresh(row)

    logger.info(
        "create_terminacion: contract_id=%d tipo=%s fecha=%s user=%s",
        contract_id, row.tipo_terminacion, row.fecha, user.username,
    )
    return row


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


def list_history(db: Session, contract_id: int, categoria: str) -> list[Any]:
    """Rows of one category for a contract, newest first.

    Raises:
        HTTPException 404: Unknown contract or category.
    """
    if categoria not in CATEGORIAS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Categoría de novedad desconocida: {categoria}",
        )
    _get_contrato(db, contract_id)
    model, schema = CATEGORIAS[categoria]
    return [schema.model_validate(r) for r in _fetch(db, model, contract_id)]
