"""
Authentication business logic for Dashboard Contratos.

Provides:
- ``authenticate_user`` - credential check, honouring temporary-password expiry.
- ``get_user_from_token`` - resolves an active user from a raw JWT.
- ``get_current_user`` - FastAPI dependency over the ``Authorization`` header.
- ``require_role`` - dependency factory enforcing role-based access.
- ``change_password`` - self-service password change that clears the
  temporary-password flag.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.utils.security import hash_password, verify_password, verify_token

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


def authenticate_user(db: Session, username: str, password: str) -> Usuario | None:
    """Verify username/password against the database.

    Returns ``None`` instead of raising so the router owns the HTTP error.
    A temporary password past its ``temp_password_expires_at`` no longer
    authenticates.

    Args:
        db: Active SQLAlchemy session.
        username: Login name submitted by the client.
        password: Plain-text password submitted by the client.

    Returns:
        The ``Usuario`` on success, otherwise ``None``.
    """
    user: Usuario | None = (
        db.query(Usuario)
        .filter(Usuario.username == username, Usuario.activo.is_(True))
        .first()
    )
    if user is None:
        logger.debug("authenticate_user: unknown or inactive user '%s'", username)
        return None

    if not verify_password(password, user.password_hash):
        logger.debug("authenticate_user: wrong password for user '%s'", username)
        return None

    if (
        user.is_temp_password
        and user.temp_password_expires_at is not None
        and user.temp_password_expires_at < _utcnow_naive()
    ):
        logger.warning("authenticate_user: expired temporary password for '%s'", username)
        return None

    user.ultimo_acceso = _utcnow_naive()
    db.commit()
    return user


def change_password(
    db: Session,
    user: Usuario,
    password_actual: str,
    password_nueva: str,
) -> Usuario:
    """Replace *user*'s password after checking the current one.

    Raises:
        HTTPException 400: Wrong current password, or the new one is unchanged.
    """
    if not verify_password(password_actual, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La contraseña actual es incorrecta.",
        )
    if password_actual == password_nueva:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="La nueva contraseña debe ser diferente a la anterior.",
        )

    user.password_hash = hash_password(password_nueva)
    user.is_temp_password = False
    user.temp_password_expires_at = None
    db.commit()
    db.refresh(user)
    logger.info("change_password: user id=%d changed password", user.id)
    return user


# ---------------------------------------------------------------------------
# Token resolution
# ---------------------------------------------------------------------------


def get_user_from_token(db: Session, token: str | None) -> Usuario | None:
    """Return the active user a JWT belongs to, or ``None`` if it does not verify."""
    if not token:
        return None
    try:
        payload = verify_token(token)
    except ValueError:
        return None

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    return (
        db.query(Usuario)
        .filter(Usuario.id == user_id, Usuario.activo.is_(True))
        .first()
    )


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> Usuario:
    """FastAPI dependency resolving the caller from ``Authorization: Bearer``.

    Raises:
        HTTPException 401: Invalid or expired token, or the user no longer
                           exists or was deactivated.
    """
    user = get_user_from_token(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No se pudo validar las credenciales",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_role(*roles: str):
    """Return a dependency that only lets users holding one of *roles* through.

    .. code-block:: python

        @router.post("/")
        def create(_user: Annotated[Usuario, Depends(require_role("ADMIN", "RRHH"))]):
            ...

    Raises:
        HTTPException 403: The authenticated user's role is not allowed.
    """
    allowed = frozenset(roles)

    def _check_role(
        current_user: Annotated[Usuario, Depends(get_current_user)],
    ) -> Usuario:
        if current_user.rol not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    f"Acceso denegado. Se requiere uno de los roles: "
                    f"{sorted(allowed)}"
                ),
            )
        return current_user

    return _check_role
