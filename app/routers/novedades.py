"""
Novedades router.

Mounts under ``/api/contratos/{contrato_id}/novedades`` (prefix set in
``main.py``).

Every novedad is append-only.  Creation requires the ``ADMIN`` or ``RRHH``
role and an approved contract without a registered termination; reading the
history only needs a valid token.

Endpoints
---------
POST /datos-personales     - Name, phone or email changes.
POST /economicas           - Salary and allowance changes.
POST /entidades            - EPS, pension fund or severance fund changes.
POST /cambio-cargo         - Position and SENA contribution change.
POST /beneficiarios        - Dependant changes.
POST /tiempo-laboral       - Extension, vacation or suspension.
POST /incapacidades        - Medical leave.
POST /terminacion          - Contract termination (at most one).
GET  /terminacion/existe   - Whether a termination is already registered.
GET  /{categoria}          - History of one category, newest first.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.schemas.novedad import (
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
from app.services import novedad_service
from app.services.auth_service import get_current_user, require_role
from app.utils.constants import ROLES_ESCRITURA

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Novedades"])

_Escritor = Annotated[Usuario, Depends(require_role(*ROLES_ESCRITURA))]
_DB = Annotated[Session, Depends(get_db)]

_RESPUESTAS_CREACION: dict[int | str, dict[str, Any]] = {
    201: {"description": "Novedad registrada."},
    403: {"description": "Rol insuficiente."},
    404: {"description": "Contrato no encontrado."},
    409: {"description": "Contrato no aprobado o ya terminado."},
    422: {"description": "Datos inválidos o sin cambios reales."},
}


@router.post(
    "/datos-personales",
    response_model=list[NovedadDatosPersonalesResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Registrar cambio de datos personales",
    responses=_RESPUESTAS_CREACION,
)
def create_datos_personales(
    contrato_id: int,
    payload: NovedadDatosPersonalesCreate,
    db: _DB,
    current_user: _Escritor,
) -> list[Any]:
    return novedad_service.create_datos_personales(db, contrato_id, payload, current_user)


@router.post(
    "/economicas",
    response_model=list[NovedadEconomicaResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Registrar novedad económica",
    description="Un registro por concepto que cambió; los valores sin cambio se omiten.",
    responses=_RESPUESTAS_CREACION,
)
def create_economicas(
    contrato_id: int,
    payload: NovedadEconomicaCreate,
    db: _DB,
    current_user: _Escritor,
) -> list[Any]:
    return novedad_service.create_economicas(db, contrato_id, payload, current_user)


@router.post(
    "/entidades",
    response_model=list[NovedadEntidadResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Registrar cambio de entidades",
    responses=_RESPUESTAS_CREACION,
)
def create_entidades(
    contrato_id: int,
    payload: NovedadEntidadCreate,
    db: _DB,
    current_user: _Escritor,
) -> list[Any]:
    return novedad_service.create_entidades(db, contrato_id, payload, current_user)


@router.post(
    "/cambio-cargo",
    response_model=NovedadCambioCargoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar cambio de cargo",
    responses=_RESPUESTAS_CREACION,
)
def create_cambio_cargo(
    contrato_id: int,
    payload: NovedadCambioCargoCreate,
    db: _DB,
    current_user: _Escritor,
) -> Any:
    return novedad_service.create_cambio_cargo(db, contrato_id, payload, current_user)


@router.post(
    "/beneficiarios",
    response_model=list[NovedadBeneficiarioResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Registrar cambio de beneficiarios",
    responses=_RESPUESTAS_CREACION,
)
def create_beneficiarios(
    contrato_id: int,
    payload: NovedadBeneficiarioCreate,
    db: _DB,
    current_user: _Escritor,
) -> list[Any]:
    return novedad_service.create_beneficiarios(db, contrato_id, payload, current_user)


@router.post(
    "/tiempo-laboral",
    response_model=NovedadTiempoLaboralResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar prórroga, vacaciones o suspensión",
    description=(
        "Una prórroga sobre un contrato a término fijo crea además el siguiente "
        "período del contrato y aplica las reglas del límite de 4 años."
    ),
    responses=_RESPUESTAS_CREACION,
)
def create_tiempo_laboral(
    contrato_id: int,
    payload: NovedadTiempoLaboralCreate,
    db: _DB,
    current_user: _Escritor,
) -> Any:
    return novedad_service.create_tiempo_laboral(db, contrato_id, payload, current_user)


@router.post(
    "/incapacidades",
    response_model=NovedadIncapacidadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar incapacidad",
    responses=_RESPUESTAS_CREACION,
)
def create_incapacidad(
    contrato_id: int,
    payload: NovedadIncapacidadCreate,
    db: _DB,
    current_user: _Escritor,
) -> Any:
    return novedad_service.create_incapacidad(db, contrato_id, payload, current_user)


@router.post(
    "/terminacion",
    response_model=NovedadTerminacionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar terminación del contrato",
    description="Solo se admite una terminación por contrato; una fecha futura la programa.",
    responses=_RESPUESTAS_CREACION,
)
def create_terminacion(
    contrato_id: int,
    payload: NovedadTerminacionCreate,
    db: _DB,
    current_user: _Escritor,
) -> Any:
    logger.info(
        "POST /contratos/%d/novedades/terminacion tipo=%s by=%s",
        contrato_id, payload.tipo_terminacion, current_user.username,
    )
    return novedad_service.create_terminacion(db, contrato_id, payload, current_user)


@router.get(
    "/terminacion/existe",
    response_model=TerminacionExistenteResponse,
    summary="¿El contrato ya tiene terminación?",
)
def check_terminacion(
    contrato_id: int,
    db: _DB,
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> TerminacionExistenteResponse:
    return novedad_service.check_terminacion(db, contrato_id)


@router.get(
    "/{categoria}",
    summary="Historial de una categoría de novedades",
    description=(
        "Categorías: datos-personales, economicas, entidades, cambio-cargo, "
        "beneficiarios, tiempo-laboral, incapacidades, terminacion."
    ),
    responses={
        200: {"description": "Registros de la categoría, del más reciente al más antiguo."},
        404: {"description": "Contrato o categoría desconocida."},
    },
)
def list_history(
    contrato_id: int,
    categoria: str,
    db: _DB,
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> list[Any]:
    logger.debug("GET /contratos/%d/novedades/%s", contrato_id, categoria)
    return novedad_service.list_history(db, contrato_id, categoria)
