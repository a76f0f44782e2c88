"""
Onboarding checklist: field dependency graph, confirmation states and toggles.

The checklist has 14 fields in seven request/confirmation pairs.  Five of
the confirmations are *virtual*: they have no column of their own and are
considered done when their name/number and date columns are filled in.

Design notes
------------
- ``CAMPOS`` is the single static table describing every field; the rest of
  the module only reads it.
- ``confirmation_state`` is tri-state: ``empty`` (base flag not set, or
  prerequisite missing for a virtual field), ``pending`` (set, detail data
  missing) and ``confirmed``.
- Unmarking a confirmed field discards data, so the caller must send
  ``confirmar=true``.  ``_LIMPIEZA`` lists what each field clears.
- Only one toggle per contract may run at a time; a second concurrent
  toggle on the same contract is rejected with 409.
- Checklist changes are only allowed while the contract is ``borrador``.
"""

from __future__ import annotations

import datetime
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.contrato import Contrato
from app.models.usuario import Usuario
from app.schemas.onboarding import (
    CampoOnboardingEstado,
    OnboardingResponse,
    ToggleOnboardingRequest,
    ToggleOnboardingResponse,
)
from app.utils.estado_contrato import permisos
from app.utils.fechas import format_date_colombia

logger = logging.getLogger(__name__)

ESTADO_VACIO = "empty"
ESTADO_PENDIENTE = "pending"
ESTADO_CONFIRMADO = "confirmed"


class CampoOnboarding(str, Enum):
    PROGRAMACION_CITA_EXAMENES = "programacion_cita_examenes"
    EXAMENES = "examenes"
    ENVIO_CONTRATO = "envio_contrato"
    RECIBIDO_CONTRATO_FIRMADO = "recibido_contrato_firmado"
    SOLICITUD_INSCRIPCION_ARL = "solicitud_inscripcion_arl"
    CONFIRMACION_ARL = "confirmacion_arl"
    SOLICITUD_EPS = "solicitud_eps"
    CONFIRMACION_EPS = "confirmacion_eps"
    ENVIO_INSCRIPCION_CAJA = "envio_inscripcion_caja"
    CONFIRMACION_CAJA = "confirmacion_caja"
    SOLICITUD_CESANTIAS = "solicitud_cesantias"
    CONFIRMACION_CESANTIAS = "confirmacion_cesantias"
    SOLICITUD_FONDO_PENSION = "solicitud_fondo_pension"
    CONFIRMACION_PENSION = "confirmacion_pension"


@dataclass(frozen=True)
class DefinicionCampo:
    """Static description of one checklist field.

    Attributes:
        label: Short column label.
        depends_on: Field that must be set before this one can be marked.
        virtual: No column of its own; state derives from ``columna_texto``
            and ``columna_fecha``.
        requires_detail: Marking it needs a confirmation date.
        columna_fecha: Column holding the confirmation date.
        columna_texto: Column holding the entity name or filing number.
    """

    label: str
    depends_on: CampoOnboarding | None = None
    virtual: bool = False
    requires_detail: bool = False
    columna_fecha: str | None = None
    columna_texto: str | None = None


C = CampoOnboarding

CAMPOS: dict[CampoOnboarding, DefinicionCampo] = {
    C.PROGRAMACION_CITA_EXAMENES: DefinicionCampo("Prog Cita"),
    C.EXAMENES: DefinicionCampo(
        "Exámenes",
        depends_on=C.PROGRAMACION_CITA_EXAMENES,
        requires_detail=True,
        columna_fecha="examenes_fecha",
    ),
    C.ENVIO_CONTRATO: DefinicionCampo("Envío"),
    C.RECIBIDO_CONTRATO_FIRMADO: DefinicionCampo(
        "Contrato Firmado",
        depends_on=C.ENVIO_CONTRATO,
        requires_detail=True,
        columna_fecha="contrato_fecha_confirmacion",
    ),
    C.SOLICITUD_INSCRIPCION_ARL: DefinicionCampo("Sol ARL"),
    C.CONFIRMACION_ARL: DefinicionCampo(
        "ARL Conf",
        depends_on=C.SOLICITUD_INSCRIPCION_ARL,
        virtual=True,
        columna_fecha="arl_fecha_confirmacion",
        columna_texto="arl_nombre",
    ),
    C.SOLICITUD_EPS: DefinicionCampo("Sol EPS"),
    C.CONFIRMACION_EPS: DefinicionCampo(
        "EPS Conf",
        depends_on=C.SOLICITUD_EPS,
        virtual=True,
        columna_fecha="eps_fecha_confirmacion",
        columna_texto="radicado_eps",
    ),
    C.ENVIO_INSCRIPCION_CAJA: DefinicionCampo("Env Caja"),
    C.CONFIRMACION_CAJA: DefinicionCampo(
        "Caja Conf",
        depends_on=C.ENVIO_INSCRIPCION_CAJA,
        virtual=True,
        columna_fecha="caja_fecha_confirmacion",
        columna_texto="radicado_ccf",
    ),
    C.SOLICITUD_CESANTIAS: DefinicionCampo("Sol Cesantías"),
    C.CONFIRMACION_CESANTIAS: DefinicionCampo(
        "Cesantías Conf",
        depends_on=C.SOLICITUD_CESANTIAS,
        virtual=True,
        columna_fecha="cesantias_fecha_confirmacion",
        columna_texto="fondo_cesantias",
    ),
    C.SOLICITUD_FONDO_PENSION: DefinicionCampo("Sol Pensión"),
    C.CONFIRMACION_PENSION: DefinicionCampo(
        "Pensión Conf",
        depends_on=C.SOLICITUD_FONDO_PENSION,
        virtual=True,
        columna_fecha="pension_fecha_confirmacion",
        columna_texto="fondo_pension",
    ),
}

# Request field -> its virtual confirmation, so clearing a request also
# clears the confirmation data hanging off it.
_CONFIRMACION_DE: dict[CampoOnboarding, CampoOnboarding] = {
    definicion.depends_on: campo
    for campo, definicion in CAMPOS.items()
    if definicion.virtual
}


def _columnas_a_limpiar(campo: CampoOnboarding) -> dict[str, Any]:
    definicion = CAMPOS[campo]
    if definicion.virtual:
        return {definicion.columna_texto: None, definicion.columna_fecha: None}

    cambios: dict[str, Any] = {campo.value: False}
    if definicion.columna_fecha:
        cambios[definicion.columna_fecha] = None
    confirmacion = _CONFIRMACION_DE.get(campo)
    if confirmacion is not None:
        cambios.update(_columnas_a_limpiar(confirmacion))
    return cambios


_LIMPIEZA: dict[CampoOnboarding, dict[str, Any]] = {
    campo: _columnas_a_limpiar(campo) for campo in CampoOnboarding
}


# ---------------------------------------------------------------------------
# Pure state helpers
# ---------------------------------------------------------------------------


def parse_campo(campo: str) -> CampoOnboarding:
    try:
        return CampoOnboarding(campo)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Campo de onboarding desconocido: {campo}",
        ) from None


def confirmation_state(contrato: Any, campo: CampoOnboarding) -> str:
    """Tri-state of *campo* for *contrato*: ``empty``, ``pending`` or ``confirmed``."""
    definicion = CAMPOS[campo]

    if definicion.virtual:
        if not getattr(contrato, definicion.depends_on.value, False):
            return ESTADO_VACIO
        texto = getattr(contrato, definicion.columna_texto, None)
        fecha = getattr(contrato, definicion.columna_fecha, None)
        return ESTADO_CONFIRMADO if texto and fecha else ESTADO_PENDIENTE

    if not getattr(contrato, campo.value, False):
        return ESTADO_VACIO
    if definicion.requires_detail:
        fecha = getattr(contrato, definicion.columna_fecha, None)
        return ESTADO_CONFIRMADO if fecha else ESTADO_PENDIENTE
    return ESTADO_CONFIRMADO


def can_mark(contrato: Any, campo: CampoOnboarding) -> tuple[bool, str | None]:
    """Whether *campo*'s prerequisite is met; otherwise the blocking message."""
    dependencia = CAMPOS[campo].depends_on
    if dependencia is None or getattr(contrato, dependencia.value, False):
        return True, None
    return False, f"Primero debe completar: {CAMPOS[dependencia].label}"


def calcular_progreso(contrato: Any) -> int:
    """Confirmed fields over the 14 checklist fields, as a rounded percentage."""
    confirmados = sum(
        1 for campo in CampoOnboarding
        if confirmation_state(contrato, campo) == ESTADO_CONFIRMADO
    )
    return round(confirmados / len(CAMPOS) * 100)


def build_onboarding(contrato: Any) -> OnboardingResponse:
    campos: list[CampoOnboardingEstado] = []
    for campo, definicion in CAMPOS.items():
        puede, mensaje = can_mark(contrato, campo)
        campos.append(
            CampoOnboardingEstado(
                campo=campo.value,
                label=definicion.label,
                estado=confirmation_state(contrato, campo),
                depends_on=definicion.depends_on.value if definicion.depends_on else None,
                virtual=definicion.virtual,
                requires_detail=definicion.requires_detail or definicion.virtual,
                puede_marcar=puede,
                mensaje_bloqueo=mensaje,
            )
        )
    return OnboardingResponse(
        contract_id=contrato.id,
        progreso=calcular_progreso(contrato),
        editable=permisos(contrato).can_edit,
        campos=campos,
    )


# ---------------------------------------------------------------------------
# In-flight guard
# ---------------------------------------------------------------------------

_lock = threading.Lock()
_toggles_en_curso: set[int] = set()


@contextmanager
def toggle_en_curso(contract_id: int) -> Iterator[None]:
    """Reserve *contract_id* for the duration of one toggle.

    Raises:
        HTTPException 409: Another toggle on the same contract is running.
    """
    with _lock:
        if contract_id in _toggles_en_curso:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Ya hay una actualización en curso para este contrato",
            )
        _toggles_en_curso.add(contract_id)
    try:
        yield
    finally:
        with _lock:
            _toggles_en_curso.discard(contract_id)


# ---------------------------------------------------------------------------
# Service functions
# ---------------------------------------------------------------------------


def _get_contrato(db: Session, contract_id: int) -> Contrato:
    contrato: Contrato | None = db.query(Contrato).filter(Contrato.id == contract_id).first()
    if contrato is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Contrato con ID {contract_id} no encontrado.",
        )
    return contrato


def get_onboarding(db: Session, contract_id: int) -> OnboardingResponse:
    return build_onboarding(_get_contrato(db, contract_id))


def _requiere_confirmacion(data: ToggleOnboardingRequest, label: str) -> None:
    if not data.confirmar:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=(
                f"Al desmarcar \"{label}\" se perderán los datos asociados "
                f"(fechas, nombres, etc.). Envíe confirmar=true para continuar."
            ),
        )


def _requiere_fecha(data: ToggleOnboardingRequest) -> datetime.date:
    if data.fecha is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="La fecha de confirmación es obligatoria",
        )
    return data.fecha


def _aplicar(contrato: Contrato, cambios: dict[str, Any]) -> None:
    for columna, valor in cambios.items():
        setattr(contrato, columna, valor)


def _plan_toggle(
    contrato: Contrato,
    campo: CampoOnboarding,
    data: ToggleOnboardingRequest,
) -> tuple[dict[str, Any], str]:
    """Decide the column changes and success message for one toggle."""
    definicion = CAMPOS[campo]
    label = definicion.label
    estado = confirmation_state(contrato, campo)

    if definicion.virtual:
        if estado == ESTADO_CONFIRMADO:
            _requiere_confirmacion(data, label)
            return _LIMPIEZA[campo], f"Datos de confirmación de {label} eliminados"
        if estado == ESTADO_VACIO:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Primero debe marcar la solicitud correspondiente",
            )
        fecha = _requiere_fecha(data)
        texto = (data.texto or "").strip()
        if not texto:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="El nombre o número de radicado es obligatorio",
            )
        cambios = {definicion.columna_texto: texto, definicion.columna_fecha: fecha}
        return cambios, f"{label} confirmado correctamente con fecha {format_date_colombia(fecha)}"

    marcado = bool(getattr(contrato, campo.value, False))
    if marcado:
        if estado == ESTADO_CONFIRMADO:
            _requiere_confirmacion(data, label)
            return _LIMPIEZA[campo], f"{label} y sus datos asociados han sido eliminados"
        return {campo.value: False}, f"{label} desmarcado correctamente"

    puede, mensaje = can_mark(contrato, campo)
    if not puede:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=mensaje)
    if definicion.requires_detail:
        fecha = _requiere_fecha(data)
        cambios = {campo.value: True, definicion.columna_fecha: fecha}
        return cambios, f"{label} confirmado correctamente con fecha {format_date_colombia(fecha)}"
    return {campo.value: True}, f"{label} marcado correctamente"


def toggle_field(
    db: Session,
    contract_id: int,
    campo: str,
    data: ToggleOnboardingRequest,
    user: Usuario,
) -> ToggleOnboardingResponse:
    """Mark or unmark one checklist field.

    Args:
        db: Active SQLAlchemy session.
        contract_id: Contract whose checklist changes.
        campo: Field name, one of ``CampoOnboarding``.
        data: Confirmation flag and detail payload.
        user: User performing the change.

    Returns:
        The success message and the refreshed checklist.

    Raises:
        HTTPException 404: Unknown contract or field.
        HTTPException 409: Approved contract, toggle already running, or
                           unconfirmed removal of associated data.
        HTTPException 422: Prerequisite missing or detail data missing.
    """
    campo_enum = parse_campo(campo)

    with toggle_en_curso(contract_id):
        contrato = _get_contrato(db, contract_id)
        if not permisos(contrato).can_edit:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Este contrato no se puede editar porque ya está aprobado",
            )

        cambios, mensaje = _plan_toggle(contrato, campo_enum, data)
        _aplicar(contrato, cambios)
        contrato.updated_by = user.id
        db.commit()
        db.refresh(contrato)

    logger.info(
        "toggle_field: contract_id=%d campo=%s cambios=%s user=%s",
        contract_id, campo_enum.value, sorted(cambios), user.username,
    )
    return ToggleOnboardingResponse(
        success=True,
        message=mensaje,
        onboarding=build_onboarding(contrato),
    )
