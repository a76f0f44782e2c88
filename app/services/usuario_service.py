"""
User administration service and the users-list cache.

Design notes
------------
- ``get_all_user_profiles`` is read-through cached under the key
  ``users_cache`` in ``cache_entries``.  The stored JSON is
  ``{"data": [...], "timestamp": <epoch ms>}`` and is fresh for
  ``USERS_CACHE_TTL_SECONDS`` (5 minutes).  An entry that cannot be parsed
  is deleted and the list is fetched again.
- Every mutation of a user invalidates the cache.
- ``toggle_user_status`` and ``admin_reset_password`` authenticate the
  caller from the ``userToken`` in the request body and require the ADMIN
  role.  Errors are raised as ``HTTPException``; the router turns them into
  ``{"error": ...}`` bodies.
- The clock is injectable (``reloj``) so cache expiry can be tested without
  waiting.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.entrada_cache import EntradaCache
from app.models.usuario import Usuario
from app.schemas.usuario import (
    AdminResetPasswordRequest,
    AdminResetPasswordResponse,
    ToggleUserStatusRequest,
    ToggleUserStatusResponse,
    UsuarioCreate,
    UsuarioPasswordTemporal,
    UsuarioPerfil,
    UsuariosListResponse,
)
from app.services.auth_service import get_user_from_token
from app.utils.security import generate_temp_password, hash_password

logger = logging.getLogger(__name__)

CLAVE_CACHE_USUARIOS = "users_cache"

Reloj = Callable[[], float]


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


def _leer_cache(db: Session, ahora_ms: float) -> list[UsuarioPerfil] | None:
    """Return the cached list if present and fresh; drop corrupt entries."""
    entrada: EntradaCache | None = db.get(EntradaCache, CLAVE_CACHE_USUARIOS)
    if entrada is None:
        return None

    try:
        contenido = json.loads(entrada.valor)
        timestamp = float(contenido["timestamp"])
        data = [UsuarioPerfil.model_validate(u) for u in contenido["data"]]
    except (ValueError, TypeError, KeyError) as exc:
        logger.warning("users cache entry is corrupt, discarding: %s", exc)
        db.delete(entrada)
        db.commit()
        return None

    ttl_ms = get_settings().USERS_CACHE_TTL_SECONDS * 1000
    if ahora_ms - timestamp >= ttl_ms:
        logger.debug("users cache expired (age=%.0f ms)", ahora_ms - timestamp)
        return None
    return data


def _escribir_cache(db: Session, data: list[UsuarioPerfil], ahora_ms: float) -> None:
    valor = json.dumps(
        {"data": [u.model_dump(mode="json") for u in data], "timestamp": ahora_ms}
    )
    entrada: EntradaCache | None = db.get(EntradaCache, CLAVE_CACHE_USUARIOS)
    if entrada is None:
        db.add(EntradaCache(clave=CLAVE_CACHE_USUARIOS, valor=valor))
    else:
        entrada.valor = valor
    db.commit()


def invalidate_users_cache(db: Session) -> None:
    deleted = (
        db.query(EntradaCache)
        .filter(EntradaCache.clave == CLAVE_CACHE_USUARIOS)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted:
        logger.debug("users cache invalidated")


def get_all_user_profiles(db: Session, reloj: Reloj = time.time) -> UsuariosListResponse:
    """List every user profile, served from the cache when it is fresh.

    Args:
        db: Active SQLAlchemy session.
        reloj: Returns the current time in seconds since the epoch.

    Returns:
        The profiles and whether they came from the cache.
    """
    ahora_ms = reloj() * 1000
    cacheados = _leer_cache(db, ahora_ms)
    if cacheados is not None:
        return UsuariosListResponse(data=cacheados, from_cache=True)

    usuarios = db.query(Usuario).order_by(Usuario.created_at.desc(), Usuario.id.desc()).all()
    data = [UsuarioPerfil.model_validate(u) for u in usuarios]
    _escribir_cache(db, data, ahora_ms)
    logger.debug("get_all_user_profiles: fetched %d users", len(data))
    return UsuariosListResponse(data=data, from_cache=False)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def create_user(db: Session, data: UsuarioCreate) -> Usuario:
    """Create an account.

    Raises:
        HTTPException 409: Username or email already taken.
    """
    usuario = Usuario(
        username=data.username,
        email=data.email,
        alias=data.alias,
        nombre_completo=data.nombre_completo,
        rol=data.rol,
        password_hash=hash_password(data.password),
        activo=True,
    )
    db.add(usuario)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Ya existe un usuario con ese nombre de usuario o correo",
        ) from exc
    db.refresh(usuario)
    invalidate_users_cache(db)
    logger.info("create_user: id=%d username=%s rol=%s", usuario.id, usuario.username, usuario.rol)
    return usuario


def _admin_desde_token(db: Session, token: str | None, mensaje_sin_permiso: str) -> Usuario:
    admin = get_user_from_token(db, token)
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Error verificando permisos",
        )
    if admin.rol != "ADMIN":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=mensaje_sin_permiso)
    return admin


def _get_usuario(db: Session, user_id: int) -> Usuario:
    usuario: Usuario | None = db.query(Usuario).filter(Usuario.id == user_id).first()
    if usuario is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuario no encontrado")
    return usuario


def toggle_user_status(db: Session, data: ToggleUserStatusRequest) -> ToggleUserStatusResponse:
    """Activate or deactivate an account.

    Raises:
        HTTPException 400: Missing fields, unknown action, or self-deactivation.
        HTTPException 403: Caller token invalid or caller is not ADMIN.
        HTTPException 404: Target user does not exist.
    """
    if not data.userId or not data.action or not data.userToken:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="userId, action y token de usuario son requeridos",
        )
    if data.action not in ("activate", "deactivate"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Action debe ser "activate" o "deactivate"',
        )

    admin = _admin_desde_token(db, data.userToken, "No tienes permisos para gestionar usuarios")
    if data.userId == admin.id and data.action == "deactivate":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No puedes desactivar tu propia cuenta",
        )

    usuario = _get_usuario(db, data.userId)
    usuario.activo = data.action == "activate"
    db.commit()
    db.refresh(usuario)
    invalidate_users_cache(db)

    accion = "activado" if usuario.activo else "desactivado"
    logger.info(
        "toggle_user_status: user id=%d %s by admin=%s", usuario.id, accion, admin.username
    )
    return ToggleUserStatusResponse(
        success=True,
        message=f"Usuario {accion} correctamente",
        user=UsuarioPerfil.model_validate(usuario),
    )


def admin_reset_password(
    db: Session,
    data: AdminResetPasswordRequest,
) -> AdminResetPasswordResponse:
    """Set a temporary password on another user's account.

    Uses ``new_password`` when given, otherwise generates one.  The password
    is flagged temporary and expires after ``TEMP_PASSWORD_DAYS``.

    Raises:
        HTTPException 400: Missing fields or self-reset.
        HTTPException 403: Caller token invalid or caller is not ADMIN.
        HTTPException 404: Target user does not exist.
    """
    if not data.user_id or not data.userToken:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="ID de usuario y token son requeridos",
        )

    admin = _admin_desde_token(db, data.userToken, "No tienes permisos para resetear contraseñas")
    if data.user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                "No puedes resetear tu propia contraseña. "
                "Usa el proceso de recuperación normal."
            ),
        )

    usuario = _get_usuario(db, data.user_id)
    temporal = data.new_password or generate_temp_password()
    dias = get_settings().TEMP_PASSWORD_DAYS

    usuario.password_hash = hash_password(temporal)
    usuario.is_temp_password = True
    usuario.temp_password_expires_at = (
        datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(days=dias)
    )
    db.commit()
    db.refresh(usuario)
    invalidate_users_cache(db)

    logger.info(
        "admin_reset_password: user id=%d reset by admin=%s", usuario.id, admin.username
    )
    return AdminResetPasswordResponse(
        success=True,
        user=UsuarioPasswordTemporal(
            id=usuario.id,
            alias=usuario.alias,
            notification_email=usuario.email,
            temporary_password=temporal,
            is_temp_password=True,
        ),
    )
