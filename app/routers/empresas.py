"""
Empresas router.

Mounts under ``/api/empresas`` (prefix set in ``main.py``).

Endpoints
---------
GET  /  - Client companies, active only unless ``todas=true``.
POST /  - Register a client company (ADMIN or RRHH).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.schemas.empresa import EmpresaCreate, EmpresaResponse
from app.services import empresa_service
from app.services.auth_service import get_current_user, require_role
from app.utils.constants import ROLES_ESCRITURA

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Empresas"])


@router.get(
    "/",
    response_model=list[EmpresaResponse],
    summary="Listar empresas cliente",
)
def list_empresas(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
    todas: Annotated[
        bool, Query(description="Incluir empresas inactivas.")
    ] = False,
) -> list[EmpresaResponse]:
    return [
        EmpresaResponse.model_validate(e)
        for e in empresa_service.list_empresas(db, solo_activas=not todas)
    ]


@router.post(
    "/",
    response_model=EmpresaResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar empresa cliente",
    responses={
        403: {"description": "Rol insuficiente."},
        409: {"description": "Ya existe una empresa con el mismo NIT."},
    },
)
def create_empresa(
    payload: EmpresaCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*ROLES_ESCRITURA))],
) -> EmpresaResponse:
    logger.info("POST /empresas nit=%s by=%s", payload.tax_id, current_user.username)
    return EmpresaResponse.model_validate(empresa_service.create_empresa(db, payload))
