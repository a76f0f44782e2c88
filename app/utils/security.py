"""
Credential helpers for Dashboard Contratos.

JWT signing and verification use python-jose; password hashes use bcrypt
directly.  Secrets and lifetimes come from the settings singleton.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from app.config import get_settings
from app.utils.constants import ADJETIVOS_PASSWORD, SUSTANTIVOS_PASSWORD

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Check *plain* against a stored bcrypt hash; malformed hashes never match."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("verify_password: stored hash is not a valid bcrypt hash")
        return False


def generate_temp_password() -> str:
    """Readable temporary password such as ``FuerteAcceso482``.

    An adjective, a noun and a number between 100 and 1098.
    """
    adjetivo = secrets.choice(ADJETIVOS_PASSWORD)
    sustantivo = secrets.choice(SUSTANTIVOS_PASSWORD)
    numero = 100 + secrets.randbelow(999)
    return f"{adjetivo}{sustantivo}{numero}"


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------


def create_access_token(data: dict[str, Any]) -> str:
    """Sign *data* as a JWT valid for ``JWT_EXPIRATION_MINUTES``.

    Args:
        data: Claims to embed; the caller sets ``sub`` to ``str(user.id)``.
              ``exp`` and ``iat`` are added here.

    Returns:
        The compact JWT string.
    """
    settings = get_settings()
    ahora = datetime.now(timezone.utc)
    payload = data.copy()
    payload["iat"] = ahora
    payload["exp"] = ahora + timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict[str, Any]:
    """Decode *token*, checking signature and expiry.

    Raises:
        ValueError: If the token is malformed, tampered with or expired.
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as exc:
        logger.debug("JWT verification failed: %s", exc)
        raise ValueError("Token inválido o expirado") from exc
