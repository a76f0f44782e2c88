"""
Contratos router.

Mounts under ``/api/contratos`` (prefix set in ``main.py``).

All endpoints require a valid JWT token (``get_current_user`` dependency).
Write operations additionally enforce that the caller holds one of the
``ADMIN`` or ``RRHH`` roles via ``require_role``.

Endpoints
---------
GET    /                                  - Paginated contract table with derived state.
GET    /por-vencer                        - Approved contracts ending in the next N days.
GET    /{id}                              - Contract detail.
POST   /                                  - Create a contract in borrador.
PUT    /{id}                              - Partial update of a borrador contract.
DELETE /{id}                              - Delete a borrador contract.
POST   /{id}/aprobar                      - Approve and assign the contract number.
GET    /{id}/datos-actuales               - Current values after applying novedades.
GET    /{id}/onboarding                   - Checklist state and progress.
POST   /{id}/onboarding/{campo}/toggle    - Mark or unmark a checklist field.
GET    /{id}/periodos                     - Fixed-term period history.
GET    /{id}/periodos/estado              - Period summary and legal alert.
POST   /{id}/periodos/prorroga            - Extend a fixed-term contract.
"""

from __future__ import annotations

import datetime
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.usuario import Usuario
from app.schemas.common import MessageResponse, PaginationParams
from app.schemas.contrato import (
    AprobarContratoRequest,
    AprobarContratoResponse,
    ContratoCreate,
    ContratoFiltros,
    ContratoPorVencer,
    ContratoResponse,
    ContratoUpdate,
    TablaContratosResponse,
)
from app.schemas.novedad import DatosActualesResponse
from app.schemas.onboarding import (
    OnboardingResponse,
    ToggleOnboardingRequest,
    ToggleOnboardingResponse,
)
from app.schemas.periodo import (
    EstadoContratoFijoResponse,
    PeriodoResponse,
    ProrrogaRequest,
    ProrrogaResponse,
)
from app.services import contrato_service, novedad_service, onboarding_service, periodo_service
from app.services.auth_service import get_current_user, require_role
from app.utils.constants import ROLES_ESCRITURA

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Contratos"])


# ---------------------------------------------------------------------------
# Shared dependencies - filter and pagination params
# ---------------------------------------------------------------------------


def contrato_filter_params(
    search: Annotated[
        str | None,
        Query(description="Texto libre: nombres, documento, cargo o número de contrato.", max_length=100),
    ] = None,
    empresa_final_id: Annotated[
        int | None, Query(description="ID de la empresa cliente.", ge=1)
    ] = None,
    empresa_interna: Annotated[
        str | None, Query(description="Good | CPS")
    ] = None,
    status_aprobacion: Annotated[
        str | None, Query(description="borrador | aprobado")
    ] = None,
    status_vigencia: Annotated[
        str | None, Query(description="activo | terminado")
    ] = None,
    tipo_contrato: Annotated[
        str | None, Query(description="indefinido | fijo | obra | aprendizaje")
    ] = None,
) -> ContratoFiltros:
    """Assemble ``ContratoFiltros`` from URL query strings."""
    return ContratoFiltros(
        search=search,
        empresa_final_id=empresa_final_id,
        empresa_interna=empresa_interna,
        status_aprobacion=status_aprobacion,
        status_vigencia=status_vigencia,
        tipo_contrato=tipo_contrato,
    )


def _pagination_params(
    page: Annotated[int, Query(description="Página (base 1).", ge=1)] = 1,
    page_size: Annotated[
        int, Query(description="Registros por página (máx. 200).", ge=1, le=200)
    ] = 20,
) -> PaginationParams:
    return PaginationParams(page=page, page_size=page_size)


_Escritor = Annotated[Usuario, Depends(require_role(*ROLES_ESCRITURA))]
_Lector = Annotated[Usuario, Depends(get_current_user)]
_DB = Annotated[Session, Depends(get_db)]


# ---------------------------------------------------------------------------
# Table and lookups
# ---------------------------------------------------------------------------


@router.get(
    "/",
    response_model=TablaContratosResponse,
    summary="Tabla paginada de contratos",
    description=(
        "Lista los contratos con su estado derivado (vigencia, permisos, "
        "remuneración total y progreso de onboarding). Acepta búsqueda libre "
        "y filtros por empresa, aprobación, vigencia y tipo de contrato."
    ),
    responses={
        200: {"description": "Página de contratos."},
        401: {"description": "Token JWT ausente o inválido."},
    },
)
def get_tabla(
    filters: Annotated[ContratoFiltros, Depends(contrato_filter_params)],
    pagination: Annotated[PaginationParams, Depends(_pagination_params)],
    db: _DB,
    _current_user: _Lector,
) -> TablaContratosResponse:
    logger.debug(
        "GET /contratos search=%s page=%d size=%d",
        filters.search, pagination.page, pagination.page_size,
    )
    return contrato_service.get_tabla(db, filters, pagination)


@router.get(
    "/por-vencer",
    response_model=list[ContratoPorVencer],
    summary="Contratos próximos a vencer",
    description=(
        "Contratos aprobados y sin terminación cuya fecha fin efectiva cae "
        "dentro de los próximos ``dias`` días (30 por defecto), del más próximo "
        "al más lejano."
    ),
    responses={
        200: {"description": "Contratos por vencer."},
        401: {"description": "Token JWT ausente o inválido."},
    },
)
def get_por_vencer(
    db: _DB,
    _current_user: _Lector,
    dias: Annotated[
        int | None, Query(description="Ventana en días.", ge=0, le=365)
    ] = None,
) -> list[ContratoPorVencer]:
    ventana = dias if dias is not None else get_settings().EXPIRY_WARNING_DAYS
    return contrato_service.get_por_vencer(db, ventana)


@router.get(
    "/{contrato_id}",
    response_model=ContratoResponse,
    summary="Detalle de un contrato",
    responses={
        200: {"description": "Contrato encontrado."},
        401: {"description": "Token JWT ausente o inválido."},
        404: {"description": "Contrato no encontrado."},
    },
)
def get_detalle(contrato_id: int, db: _DB, _current_user: _Lector) -> ContratoResponse:
    return contrato_service.get_detalle(db, contrato_id)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@router.post(
    "/",
    response_model=ContratoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crear contrato",
    description=(
        "Crea un contrato en estado ``borrador``. Para contratos a término fijo "
        "con fecha de ingreso y fecha fin se crea también el período inicial. "
        "Requiere rol ADMIN o RRHH."
    ),
    responses={
        201: {"description": "Contrato creado."},
        403: {"description": "Rol insuficiente."},
        409: {"description": "Ya existe un contrato con esa identificación."},
        422: {"description": "Datos inválidos o empresa inexistente."},
    },
)
def create_contrato(payload: ContratoCreate, db: _DB, current_user: _Escritor) -> ContratoResponse:
    logger.info("POST /contratos by=%s doc=%s", current_user.username, payload.numero_identificacion)
    return contrato_service.create_contrato(db, payload, current_user)


@router.put(
    "/{contrato_id}",
    response_model=ContratoResponse,
    summary="Actualizar contrato en borrador",
    description=(
        "Actualización parcial: solo se escriben los campos enviados. Un contrato "
        "aprobado no se modifica; sus cambios se registran como novedades."
    ),
    responses={
        200: {"description": "Contrato actualizado."},
        404: {"description": "Contrato no encontrado."},
        409: {"description": "El contrato ya está aprobado."},
    },
)
def update_contrato(
    contrato_id: int,
    payload: ContratoUpdate,
    db: _DB,
    current_user: _Escritor,
) -> ContratoResponse:
    return contrato_service.update_contrato(db, contrato_id, payload, current_user)


@router.delete(
    "/{contrato_id}",
    response_model=MessageResponse,
    summary="Eliminar contrato en borrador",
    responses={
        200: {"description": "Contrato eliminado."},
        404: {"description": "Contrato no encontrado."},
        409: {"description": "El contrato ya está aprobado."},
    },
)
def delete_contrato(contrato_id: int, db: _DB, current_user: _Escritor) -> MessageResponse:
    contrato_service.delete_contrato(db, contrato_id, current_user)
    return MessageResponse(message="Contrato eliminado correctamente")


@router.post(
    "/{contrato_id}/aprobar",
    response_model=AprobarContratoResponse,
    summary="Aprobar contrato",
    description=(
        "Pasa el contrato de ``borrador`` a ``aprobado`` y asigna el número de "
        "contrato (``{cedula}-{fecha_ingreso}-{EMPRESA}`` si no se envía uno)."
    ),
    responses={
        200: {"description": "Contrato aprobado."},
        404: {"description": "Contrato no encontrado."},
        409: {"description": "El contrato ya estaba aprobado."},
    },
)
def aprobar_contrato(
    contrato_id: int,
    db: _DB,
    current_user: _Escritor,
    payload: AprobarContratoRequest | None = None,
) -> AprobarContratoResponse:
    numero = payload.contract_number if payload else None
    resultado = contrato_service.approve_contract(db, contrato_id, current_user, numero)
    if not resultado.success:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=resultado.error)
    return resultado


# ---------------------------------------------------------------------------
# Current values
# ---------------------------------------------------------------------------


@router.get(
    "/{contrato_id}/datos-actuales",
    response_model=DatosActualesResponse,
    summary="Datos actuales del contrato",
    description=(
        "Valores vigentes tras aplicar las novedades más recientes de cada "
        "categoría sobre el contrato base, junto con la vigencia y la terminación. "
        "Si una categoría no se puede cargar se conservan los valores base y se "
        "informa en ``error``."
    ),
    responses={
        200: {"description": "Datos resueltos."},
        404: {"description": "Contrato no encontrado."},
    },
)
def get_datos_actuales(contrato_id: int, db: _DB, _current_user: _Lector) -> DatosActualesResponse:
    return novedad_service.get_current_data(db, contrato_id)


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------


@router.get(
    "/{contrato_id}/onboarding",
    response_model=OnboardingResponse,
    summary="Checklist de onboarding",
    responses={
        200: {"description": "Estado de los 14 campos y progreso."},
        404: {"description": "Contrato no encontrado."},
    },
)
def get_onboarding(contrato_id: int, db: _DB, _current_user: _Lector) -> OnboardingResponse:
    return onboarding_service.get_onboarding(db, contrato_id)


@router.post(
    "/{contrato_id}/onboarding/{campo}/toggle",
    response_model=ToggleOnboardingResponse,
    summary="Marcar o desmarcar un campo de onboarding",
    description=(
        "Marca un campo vacío o elimina uno marcado. Los campos con detalle "
        "requieren ``fecha`` (y ``texto`` en las confirmaciones de entidades); "
        "desmarcar un campo con datos requiere ``confirmar=true``."
    ),
    responses={
        200: {"description": "Campo actualizado."},
        404: {"description": "Contrato o campo desconocido."},
        409: {"description": "Contrato aprobado, actualización en curso o falta confirmación."},
        422: {"description": "Dependencia incumplida o faltan datos del detalle."},
    },
)
def toggle_onboarding(
    contrato_id: int,
    campo: str,
    payload: ToggleOnboardingRequest,
    db: _DB,
    current_user: _Escritor,
) -> ToggleOnboardingResponse:
    return onboarding_service.toggle_field(db, contrato_id, campo, payload, current_user)


# ---------------------------------------------------------------------------
# Fixed-term periods
# ---------------------------------------------------------------------------


@router.get(
    "/{contrato_id}/periodos",
    response_model=list[PeriodoResponse],
    summary="Historial de períodos del contrato fijo",
)
def list_periodos(contrato_id: int, db: _DB, _current_user: _Lector) -> list[PeriodoResponse]:
    return periodo_service.get_contract_fixed_status(db, contrato_id).periodos


@router.get(
    "/{contrato_id}/periodos/estado",
    response_model=EstadoContratoFijoResponse,
    summary="Estado del contrato a término fijo",
    description=(
        "Total de períodos, tiempo acumulado y alerta legal. Con "
        "``nueva_fecha_fin`` la alerta evalúa esa prórroga propuesta."
    ),
    responses={
        200: {"description": "Resumen de períodos."},
        404: {"description": "Contrato no encontrado."},
    },
)
def get_estado_periodos(
    contrato_id: int,
    db: _DB,
    _current_user: _Lector,
    nueva_fecha_fin: Annotated[
        datetime.date | None, Query(description="Fecha fin propuesta para la prórroga.")
    ] = None,
) -> EstadoContratoFijoResponse:
    return periodo_service.get_contract_fixed_status(db, contrato_id, nueva_fecha_fin)


@router.post(
    "/{contrato_id}/periodos/prorroga",
    response_model=ProrrogaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Prorrogar contrato a término fijo",
    description=(
        "Crea el siguiente período a partir del día siguiente al fin del actual, "
        "actualiza la fecha fin del contrato y registra la novedad de prórroga."
    ),
    responses={
        201: {"description": "Prórroga registrada."},
        404: {"description": "Contrato no encontrado."},
        409: {"description": "El contrato no es fijo o está terminado."},
        422: {"description": "La prórroga incumple las reglas del contrato fijo."},
    },
)
def prorrogar(
    contrato_id: int,
    payload: ProrrogaRequest,
    db: _DB,
    current_user: _Escritor,
) -> ProrrogaResponse:
    logger.info(
        "POST /contratos/%d/periodos/prorroga hasta=%s by=%s",
        contrato_id, payload.nueva_fecha_fin, current_user.username,
    )
    return periodo_service.extend_contract_period(
        db,
        contrato_id,
        payload.nueva_fecha_fin,
        payload.tipo_periodo,
        payload.motivo,
        current_user,
    )
