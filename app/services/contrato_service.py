"""
Contract lifecycle service layer.

All database access for the ``/api/contratos`` endpoints lives here.
Functions receive a SQLAlchemy ``Session`` and produce schema instances or ORM
objects ready for serialisation by FastAPI.

Design notes
------------
- Derived fields (validity, permissions, remuneration, onboarding progress)
  are computed in Python by ``_build_response`` from the contract's loaded
  relationships, so listings and detail always agree.
- Personal, economic and position fields, like ``fecha_fin``, are the
  resolved current values (``novedad_service.valores_contrato``), so the
  table, the detail, the export and ``/datos-actuales`` agree.
- The effective end date is the earlier of the resolved ``fecha_fin``
  (latest prórroga, current period, base column) and the termination date.
- Contracts are mutable only while ``borrador``.  Approval is a one-way
  transition that also fixes ``numero_contrato_helisa``.
- Filtering by ``status_vigencia`` depends on derived state and is applied in
  Python after the SQL filters; every other filter runs in SQL.
"""

from __future__ import annotations

import datetime
import logging
import re
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.contrato import Contrato
from app.models.empresa import Empresa
from app.models.historial_contrato_fijo import HistorialContratoFijo
from app.models.usuario import Usuario
from app.schemas.common import PaginationParams
from app.schemas.contrato import (
    AprobarContratoResponse,
    ContratoCreate,
    ContratoFiltros,
    ContratoPorVencer,
    ContratoResponse,
    ContratoUpdate,
    TablaContratosResponse,
)
from app.services.novedad_service import fecha_fin_contrato, valores_contrato
from app.services.onboarding_service import calcular_progreso
from app.services.periodo_service import create_initial_period
from app.utils import estado_contrato
from app.utils.constants import ESTADO_APROBADO, ESTADO_BORRADOR
from app.utils.errores import raise_integrity_error
from app.utils.fechas import format_date_colombia, hoy_colombia

logger = logging.getLogger(__name__)

_LARGO_EMPRESA_NUMERO = 15

# Columns whose current value comes from novedad resolution
_CAMPOS_RESUELTOS: tuple[str, ...] = (
    "primer_nombre",
    "segundo_nombre",
    "primer_apellido",
    "segundo_apellido",
    "celular",
    "email",
    "cargo",
    "salario",
    "auxilio_salarial",
    "auxilio_salarial_concepto",
    "auxilio_no_salarial",
    "auxilio_no_salarial_concepto",
    "auxilio_transporte",
    "fondo_pension",
    "fondo_cesantias",
)


# ---------------------------------------------------------------------------
# Contract number
# ---------------------------------------------------------------------------


def limpiar_nombre_empresa(nombre: str | None) -> str:
    """Upper-case, whitespace to ``-``, keep ``[A-Z0-9-]``, at most 15 chars."""
    if not nombre:
        return "SIN-EMPRESA"
    limpio = re.sub(r"\s+", "-", nombre.upper())
    limpio = re.sub(r"[^A-Z0-9-]", "", limpio)
    return limpio[:_LARGO_EMPRESA_NUMERO]


def generar_numero_contrato(
    numero_identificacion: str | None,
    fecha_ingreso: datetime.date | None,
    nombre_empresa: str | None,
) -> str:
    """Build ``{cedula}-{fecha_ingreso}-{EMPRESA}`` for a newly approved contract.

    Example:
        ``generar_numero_contrato("1020304050", date(2026, 2, 1), "Andina S.A.S.")``
        returns ``"1020304050-2026-02-01-ANDINA-SAS"``.
    """
    cedula = numero_identificacion or "SIN-CEDULA"
    fecha = fecha_ingreso.isoformat() if fecha_ingreso else "SIN-FECHA"
    return f"{cedula}-{fecha}-{limpiar_nombre_empresa(nombre_empresa)}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def fecha_fin_efectiva(contrato: Contrato) -> datetime.date | None:
    terminacion = contrato.terminacion
    return estado_contrato.fecha_fin_efectiva(
        fecha_fin_contrato(contrato),
        terminacion.fecha if terminacion is not None else None,
    )


def _build_response(
    contrato: Contrato,
    today: datetime.date | None = None,
) -> ContratoResponse:
    """Convert a ``Contrato`` ORM row into a ``ContratoResponse`` with derived state."""
    today = today or hoy_colombia()
    actuales = valores_contrato(contrato)
    terminacion = actuales["terminacion"]
    fin = estado_contrato.fecha_fin_efectiva(
        actuales["fecha_fin"], terminacion.fecha if terminacion is not None else None
    )
    vigencia = estado_contrato.vigencia_por_fecha(fin, today)
    dias = estado_contrato.dias_hasta_fecha(fin, today)
    permisos = estado_contrato.permisos(contrato)

    valores: dict[str, Any] = {
        columna.name: getattr(contrato, columna.name)
        for columna in Contrato.__table__.columns
    }
    # Current values: latest novedad per field over the base columns
    valores.update({campo: actuales[campo] for campo in _CAMPOS_RESUELTOS})
    valores.update(
        base_sena=actuales["aporta_sena"],
        beneficiario_hijo=int(actuales["beneficiario_hijo"]),
        beneficiario_madre=int(actuales["beneficiario_madre"]),
        beneficiario_padre=int(actuales["beneficiario_padre"]),
        beneficiario_conyuge=int(actuales["beneficiario_conyuge"]),
    )
    nombres = ("primer_nombre", "segundo_nombre", "primer_apellido", "segundo_apellido")
    valores.update(
        nombre_completo=" ".join(actuales[n] for n in nombres if actuales[n]),
        empresa_final_nombre=contrato.empresa_final.name if contrato.empresa_final else None,
        fecha_fin=actuales["fecha_fin"],
        status_aprobacion=estado_contrato.status_aprobacion(contrato),
        status_vigencia=vigencia,
        vigencia_label=estado_contrato.vigencia_label(vigencia, dias),
        days_until_expiry=dias,
        can_edit=permisos.can_edit,
        can_delete=permisos.can_delete,
        can_approve=permisos.can_approve,
        total_remuneracion=estado_contrato.total_remuneration(actuales),
        progreso_onboarding=calcular_progreso(contrato),
    )
    return ContratoResponse.model_validate(valores)


def _get_contrato(db: Session, contract_id: int) -> Contrato:
    contrato: Contrato | None = db.query(Contrato).filter(Contrato.id == contract_id).first()
    if contrato is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Contrato con ID {contract_id} no encontrado.",
        )
    return contrato


def _require_editable(contrato: Contrato, accion: str) -> None:
    if not estado_contrato.permisos(contrato).can_edit:
        logger.warning("%s rejected: contract id=%d is approved", accion, contrato.id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="El contrato está aprobado y no puede modificarse; registre una novedad",
        )


def _require_empresa(db: Session, empresa_id: int) -> Empresa:
    empresa: Empresa | None = db.query(Empresa).filter(Empresa.id == empresa_id).first()
    if empresa is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Empresa con ID {empresa_id} no existe.",
        )
    return empresa


def _identificacion_duplicada(
    db: Session,
    tipo: str,
    numero: str,
    excluir_id: int | None = None,
) -> bool:
    q = db.query(Contrato.id).filter(
        Contrato.tipo_identificacion == tipo,
        Contrato.numero_identificacion == numero,
    )
    if excluir_id is not None:
        q = q.filter(Contrato.id != excluir_id)
    return q.first() is not None


def _apply_filters(query: Any, filters: ContratoFiltros) -> Any:
    if filters.search:
        patron = f"%{filters.search.strip()}%"
        query = query.filter(
            or_(
                Contrato.primer_nombre.ilike(patron),
                Contrato.segundo_nombre.ilike(patron),
                Contrato.primer_apellido.ilike(patron),
                Contrato.segundo_apellido.ilike(patron),
                Contrato.numero_identificacion.ilike(patron),
                Contrato.cargo.ilike(patron),
                Contrato.numero_contrato_helisa.ilike(patron),
            )
        )
    if filters.empresa_final_id is not None:
        query = query.filter(Contrato.empresa_final_id == filters.empresa_final_id)
    if filters.empresa_interna:
        query = query.filter(Contrato.empresa_interna == filters.empresa_interna)
    if filters.tipo_contrato:
        query = query.filter(Contrato.tipo_contrato == filters.tipo_contrato)
    if filters.status_aprobacion == ESTADO_APROBADO:
        # Legacy rows without a value count as approved
        query = query.filter(
            or_(
                Contrato.status_aprobacion == ESTADO_APROBADO,
                Contrato.status_aprobacion.is_(None),
            )
        )
    elif filters.status_aprobacion:
        query = query.filter(Contrato.status_aprobacion == filters.status_aprobacion)
    return query


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------


def get_tabla(
    db: Session,
    filters: ContratoFiltros,
    pagination: PaginationParams,
) -> TablaContratosResponse:
    """Return a paginated table of contracts with their derived state.

    Args:
        db: Active SQLAlchemy session.
        filters: Search text and column filters.
        pagination: Page number and page size.

    Returns:
        A ``TablaContratosResponse`` with the current page and total count.
    """
    base_q = _apply_filters(db.query(Contrato), filters)
    base_q = base_q.order_by(Contrato.created_at.desc(), Contrato.id.desc())
    offset = (pagination.page - 1) * pagination.page_size
    today = hoy_colombia()

    if filters.status_vigencia:
        items = [
            item for item in (_build_response(c, today) for c in base_q.all())
            if item.status_vigencia == filters.status_vigencia
        ]
        total = len(items)
        items = items[offset:offset + pagination.page_size]
    else:
        total = base_q.count()
        rows = base_q.offset(offset).limit(pagination.page_size).all()
        items = [_build_response(c, today) for c in rows]

    logger.debug(
        "get_tabla: page=%d size=%d total=%d returned=%d",
        pagination.page, pagination.page_size, total, len(items),
    )
    return TablaContratosResponse(
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
        items=items,
    )


def get_detalle(db: Session, contract_id: int) -> ContratoResponse:
    """Return a single contract with its derived state.

    Raises:
        HTTPException 404: If no contract with the given ID exists.
    """
    return _build_response(_get_contrato(db, contract_id))


def create_contrato(db: Session, data: ContratoCreate, user: Usuario) -> ContratoResponse:
    """Create a contract in ``borrador``.

    For ``fijo`` contracts with both dates the initial period is added in the
    same transaction.

    Args:
        db: Active SQLAlchemy session.
        data: Validated creation payload.
        user: Authenticated author.

    Returns:
        The new contract with its derived state.

    Raises:
        HTTPException 409: Identification already registered.
        HTTPException 422: Unknown company.
    """
    _require_empresa(db, data.empresa_final_id)
    if _identificacion_duplicada(db, data.tipo_identificacion, data.numero_identificacion):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                f"Ya existe un contrato para {data.tipo_identificacion} "
                f"{data.numero_identificacion}"
            ),
        )

    contrato = Contrato(
        **data.model_dump(),
        status_aprobacion=ESTADO_BORRADOR,
        created_by=user.id,
        updated_by=user.id,
    )
    db.add(contrato)
    try:
        db.flush()
        create_initial_period(db, contrato, user.id)
        db.commit()
    except IntegrityError as exc:
        raise_integrity_error(db, exc, "contrato")
    db.refresh(contrato)

    logger.info(
        "create_contrato: id=%d doc=%s tipo=%s by=%s",
        contrato.id, contrato.numero_identificacion, contrato.tipo_contrato, user.username,
    )
    return _build_response(contrato)


def _sincronizar_periodo_inicial(db: Session, contrato: Contrato, user_id: int) -> None:
    """Keep period #1 of a draft contract in step with its dates."""
    periodos: list[HistorialContratoFijo] = list(contrato.periodos)
    if contrato.tipo_contrato != "fijo" or not contrato.fecha_ingreso or not contrato.fecha_fin:
        for periodo in periodos:
            db.delete(periodo)
        return
    if not periodos:
        create_initial_period(db, contrato, user_id)
        return
    inicial = periodos[0]
    inicial.fecha_inicio = contrato.fecha_ingreso
    inicial.fecha_fin = contrato.fecha_fin


def update_contrato(
    db: Session,
    contract_id: int,
    data: ContratoUpdate,
    user: Usuario,
) -> ContratoResponse:
    """Apply a partial update to a ``borrador`` contract.

    Only fields explicitly included in the payload are written.

    Raises:
        HTTPException 404: Unknown contract.
        HTTPException 409: Contract already approved, or duplicate identification.
        HTTPException 422: Unknown company or incoherent dates.
    """
    contrato = _get_contrato(db, contract_id)
    _require_editable(contrato, "update_contrato")

    cambios = data.model_dump(exclude_unset=True)
    if cambios.get("empresa_final_id") is not None:
        _require_empresa(db, cambios["empresa_final_id"])

    tipo = cambios.get("tipo_identificacion") or contrato.tipo_identificacion
    numero = cambios.get("numero_identificacion") or contrato.numero_identificacion
    if _identificacion_duplicada(db, tipo, numero, excluir_id=contrato.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Ya existe un contrato para {tipo} {numero}",
        )

    for field, value in cambios.items():
        if value is None and not Contrato.__table__.columns[field].nullable:
            continue
        setattr(contrato, field, value)

    if contrato.fecha_ingreso and contrato.fecha_fin and contrato.fecha_fin <= contrato.fecha_ingreso:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="La fecha de fin debe ser posterior a la fecha de ingreso",
        )

    contrato.updated_by = user.id
    try:
        _sincronizar_periodo_inicial(db, contrato, user.id)
        db.commit()
    except IntegrityError as exc:
        raise_integrity_error(db, exc, "contrato")
    db.refresh(contrato)

    logger.info(
        "update_contrato: id=%d fields=%s by=%s", contrato.id, sorted(cambios), user.username
    )
    return _build_response(contrato)


def delete_contrato(db: Session, contract_id: int, user: Usuario) -> None:
    """Delete a ``borrador`` contract and its periods.

    Raises:
        HTTPException 404: Unknown contract.
        HTTPException 409: Contract already approved.
    """
    contrato = _get_contrato(db, contract_id)
    _require_editable(contrato, "delete_contrato")
    db.delete(contrato)
    db.commit()
    logger.info("delete_contrato: id=%d by=%s", contract_id, user.username)


def approve_contract(
    db: Session,
    contract_id: int,
    approver: Usuario,
    contract_number: str | None = None,
) -> AprobarContratoResponse:
    """Move a contract from ``borrador`` to ``aprobado``.

    Business rejections are returned as ``{success: False, error}``; only a
    missing contract raises.

    Args:
        db: Active SQLAlchemy session.
        contract_id: Contract to approve.
        approver: Authenticated approver.
        contract_number: Explicit Helisa number; generated when omitted.

    Returns:
        ``AprobarContratoResponse`` with the stored contract number.

    Raises:
        HTTPException 404: Unknown contract.
    """
    contrato = _get_contrato(db, contract_id)
    if estado_contrato.status_aprobacion(contrato) != ESTADO_BORRADOR:
        logger.warning("approve_contract rejected: id=%d already approved", contract_id)
        return AprobarContratoResponse(
            success=False,
            error="El contrato ya está aprobado",
        )

    numero = (contract_number or "").strip() or generar_numero_contrato(
        contrato.numero_identificacion,
        contrato.fecha_ingreso,
        contrato.empresa_final.name if contrato.empresa_final else None,
    )
    contrato.status_aprobacion = ESTADO_APROBADO
    contrato.approved_by = approver.id
    contrato.approved_at = datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)
    contrato.numero_contrato_helisa = numero
    contrato.updated_by = approver.id
    db.commit()

    logger.info(
        "approve_contract: id=%d numero=%s by=%s", contract_id, numero, approver.username
    )
    return AprobarContratoResponse(success=True, numero_contrato_helisa=numero)


def get_por_vencer(
    db: Session,
    dias: int,
    today: datetime.date | None = None,
) -> list[ContratoPorVencer]:
    """Approved, non-terminated contracts ending within the next *dias* days.

    Sorted by days remaining, closest first.
    """
    today = today or hoy_colombia()
    candidatos = (
        db.query(Contrato)
        .filter(
            or_(
                Contrato.status_aprobacion == ESTADO_APROBADO,
                Contrato.status_aprobacion.is_(None),
            )
        )
        .all()
    )

    resultado: list[ContratoPorVencer] = []
    for contrato in candidatos:
        if contrato.terminacion is not None:
            continue
        fin = fecha_fin_contrato(contrato)
        restantes = estado_contrato.dias_hasta_fecha(fin, today)
        if restantes is None or not 0 <= restantes <= dias:
            continue
        resultado.append(
            ContratoPorVencer(
                id=contrato.id,
                nombre_completo=contrato.nombre_completo,
                numero_identificacion=contrato.numero_identificacion,
                empresa_final_nombre=contrato.empresa_final.name if contrato.empresa_final else None,
                cargo=contrato.cargo,
                fecha_vencimiento=fin,
                fecha_vencimiento_texto=format_date_colombia(fin),
                dias_restantes=restantes,
            )
        )

    resultado.sort(key=lambda c: (c.dias_restantes, c.id))
    logger.debug("get_por_vencer: dias=%d found=%d", dias, len(resultado))
    return resultado
