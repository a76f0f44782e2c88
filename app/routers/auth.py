"""
Authentication router for the Dashboard Contratos API.

Mounts under ``/api/auth`` (prefix set in ``main.py``).

Endpoints:
    POST /login            - Authenticate with username + password, receive JWT.
    POST /refresh          - Exchange a valid token for a new one (extend session).
    GET  /me               - Return the currently authenticated user's profile.
    POST /cambiar-password - Change one's own password (clears a temporary one).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.schemas.auth import CambiarPasswordRequest, TokenResponse, UserResponse
from app.schemas.common import MessageResponse
from app.services.auth_service import authenticate_user, change_password, get_current_user
from app.utils.errores import translate_error
from app.utils.security import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _token_for(user: Usuario) -> TokenResponse:
    token = create_access_token(
        data={
            "sub": str(user.id),
            "username": user.username,
            "rol": user.rol,
        }
    )
    return TokenResponse(access_token=token, is_temp_password=bool(user.is_temp_password))


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Iniciar sesión",
    description=(
        "Autentica al usuario con sus credenciales y retorna un JWT de acceso "
        "válido por el tiempo configurado en ``JWT_EXPIRATION_MINUTES`` (default 8 h). "
        "``is_temp_password`` indica que debe cambiar la contraseña."
    ),
    responses={
        200: {"description": "Autenticación exitosa; se incluye el token JWT."},
        401: {"description": "Credenciales incorrectas, cuenta inactiva o contraseña temporal vencida."},
        422: {"description": "Cuerpo de la solicitud inválido."},
    },
)
def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """Authenticate a user and issue a JWT access token.

    Accepts the standard OAuth2 ``application/x-www-form-urlencoded`` form,
    which also enables the Swagger UI "Authorize" button.

    Raises:
        HTTPException 401: If credentials are invalid or the account is inactive.
    """
    user = authenticate_user(db, form_data.username, form_data.password)

    if user is None:
        logger.warning("Failed login attempt for username='%s'", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=translate_error("Invalid login credentials"),
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("Successful login for username='%s' rol='%s'", user.username, user.rol)
    return _token_for(user)


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Renovar token",
    description=(
        "Emite un nuevo JWT a partir de un token válido (no expirado). "
        "Permite extender la sesión sin re-autenticación."
    ),
    responses={
        200: {"description": "Token renovado exitosamente."},
        401: {"description": "Token inválido o expirado."},
    },
)
def refresh_token(
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> TokenResponse:
    logger.info("Token refreshed for username='%s'", current_user.username)
    return _token_for(current_user)


# ---------------------------------------------------------------------------
# GET /me
# ---------------------------------------------------------------------------


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Perfil del usuario autenticado",
    responses={
        200: {"description": "Perfil del usuario autenticado."},
        401: {"description": "Token ausente, inválido o expirado."},
    },
)
def get_me(
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> UserResponse:
    return UserResponse.model_validate(current_user)


# ---------------------------------------------------------------------------
# POST /cambiar-password
# ---------------------------------------------------------------------------


@router.post(
    "/cambiar-password",
    response_model=MessageResponse,
    summary="Cambiar contraseña propia",
    description=(
        "Reemplaza la contraseña del usuario autenticado. Obligatorio tras un "
        "reseteo administrativo; limpia la marca de contraseña temporal."
    ),
    responses={
        200: {"description": "Contraseña actualizada."},
        400: {"description": "Contraseña actual incorrecta o nueva igual a la anterior."},
        401: {"description": "Token ausente, inválido o expirado."},
    },
)
def cambiar_password(
    payload: CambiarPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(get_current_user)],
) -> MessageResponse:
    change_password(db, current_user, payload.password_actual, payload.password_nueva)
    return MessageResponse(message="Contraseña actualizada correctamente")
