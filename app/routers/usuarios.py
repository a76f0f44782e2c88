"""
User administration router.

Mounted at ``/api`` (prefix set in ``main.py``).

``toggle-user-status`` and ``admin-reset-password`` keep the contract of the
admin screens: the caller's JWT travels in the body as ``userToken`` and
failures answer ``{"error": "..."}`` with the matching status code instead
of FastAPI's ``{"detail": ...}``.

Endpoints
---------
GET  /usuarios              - All user profiles (cached, ADMIN only).
POST /usuarios              - Create an account (ADMIN only).
POST /toggle-user-status    - Activate or deactivate an account.
POST /admin-reset-password  - Issue a temporary password for another user.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.schemas.usuario import (
    AdminResetPasswordRequest,
    AdminResetPasswordResponse,
    ToggleUserStatusRequest,
    ToggleUserStatusResponse,
    UsuarioCreate,
    UsuarioPerfil,
    UsuariosListResponse,
)
from app.services import usuario_service
from app.services.auth_service import require_role

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Usuarios"])

_Admin = Annotated[Usuario, Depends(require_role("ADMIN"))]
_DB = Annotated[Session, Depends(get_db)]

_ERROR_BODY = {
    "content": {"application/json": {"example": {"error": "Usuario no encontrado"}}}
}


def _error_response(exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@router.get(
    "/usuarios",
    response_model=UsuariosListResponse,
    summary="Listar usuarios",
    description="Perfiles de todos los usuarios. La lista se guarda en caché durante 5 minutos.",
    responses={403: {"description": "Rol insuficiente."}},
)
def list_usuarios(db: _DB, _admin: _Admin) -> UsuariosListResponse:
    return usuario_service.get_all_user_profiles(db)


@router.post(
    "/usuarios",
    response_model=UsuarioPerfil,
    status_code=status.HTTP_201_CREATED,
    summary="Crear usuario",
    responses={
        403: {"description": "Rol insuficiente."},
        409: {"description": "Usuario o correo ya registrado."},
    },
)
def create_usuario(payload: UsuarioCreate, db: _DB, admin: _Admin) -> UsuarioPerfil:
    logger.info("POST /usuarios username=%s by=%s", payload.username, admin.username)
    return UsuarioPerfil.model_validate(usuario_service.create_user(db, payload))


@router.post(
    "/toggle-user-status",
    response_model=ToggleUserStatusResponse,
    summary="Activar o desactivar un usuario",
    responses={
        400: {"description": "Datos faltantes, acción inválida o auto-desactivación.", **_ERROR_BODY},
        403: {"description": "Token inválido o sin permisos de administración.", **_ERROR_BODY},
        404: {"description": "Usuario no encontrado.", **_ERROR_BODY},
    },
)
def toggle_user_status(payload: ToggleUserStatusRequest, db: _DB):
    try:
        return usuario_service.toggle_user_status(db, payload)
    except HTTPException as exc:
        logger.warning("toggle-user-status rejected: %s", exc.detail)
        return _error_response(exc)


@router.post(
    "/admin-reset-password",
    response_model=AdminResetPasswordResponse,
    summary="Resetear la contraseña de otro usuario",
    description=(
        "Asigna una contraseña temporal (la indicada o una generada) que vence "
        "en ``TEMP_PASSWORD_DAYS`` días y obliga a cambiarla en el próximo ingreso."
    ),
    responses={
        400: {"description": "Datos faltantes o auto-reseteo.", **_ERROR_BODY},
        403: {"description": "Token inválido o sin permisos de administración.", **_ERROR_BODY},
        404: {"description": "Usuario no encontrado.", **_ERROR_BODY},
    },
)
def admin_reset_password(payload: AdminResetPasswordRequest, db: _DB):
    try:
        return usuario_service.admin_reset_password(db, payload)
    except HTTPException as exc:
        logger.warning("admin-reset-password rejected: %s", exc.detail)
        return _error_response(exc)
