"""
User-facing translation of database and authentication errors.

Database constraint violations reach the services as
``sqlalchemy.exc.IntegrityError``; ``raise_integrity_error`` rolls the
session back and re-raises them as an ``HTTPException`` whose ``detail``
carries a friendly Spanish title and message.  Nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorAmigable:
    titulo: str
    mensaje: str

    def as_detail(self) -> str:
        return f"{self.titulo}: {self.mensaje}"


# ---------------------------------------------------------------------------
# Constraint-name lookups
# ---------------------------------------------------------------------------

# Fixed-term period constraints (historial_contratos_fijos)
_CONSTRAINTS_PERIODO: dict[str, str] = {
    "check_fechas_validas": (
        "Las fechas del período no son válidas. La fecha de inicio debe ser "
        "anterior a la fecha de fin."
    ),
    "unique_numero_periodo_por_contrato": (
        "Ya existe un período con ese número para este contrato."
    ),
    "check_numero_periodo_positivo": "El número de período debe ser mayor a cero.",
    "check_tipo_periodo_valido": (
        "El tipo de período no es válido. Debe ser: inicial, prórroga "
        "automática o prórroga acordada."
    ),
}

TERMINACION_DUPLICADA = "Este contrato ya tiene una terminación registrada"


def classify_db_error(message: str | None, entidad: str = "registro") -> ErrorAmigable:
    """Map a raw backend error message to a friendly title and message.

    Checks known substrings in order: ``fecha``, ``foreign key``,
    ``permission`` and ``duplicate``/``unique``.  Anything else becomes a
    generic technical error that still shows the raw text.

    Args:
        message: Raw error text from the database driver.
        entidad: Noun used in the generic messages, e.g. ``"novedad"``.

    Returns:
        An ``ErrorAmigable`` ready to be shown to the user.
    """
    if not message:
        return ErrorAmigable("Error al guardar", f"No se pudo guardar el {entidad}.")

    texto = message.lower()
    for constraint, mensaje in _CONSTRAINTS_PERIODO.items():
        if constraint in texto:
            return ErrorAmigable("Error en el historial de períodos", mensaje)

    if "fecha" in texto:
        return ErrorAmigable(
            "Error de fecha",
            "Hay un problema con el formato de fecha. Verifica que todas las "
            "fechas sean válidas.",
        )
    if "foreign key" in texto:
        return ErrorAmigable(
            "Error de referencia",
            "No se pudo encontrar el contrato. Por favor, recarga la página e "
            "intenta nuevamente.",
        )
    if "permission" in texto:
        return ErrorAmigable(
            "Sin permisos",
            f"No tienes los permisos necesarios para guardar este {entidad}.",
        )
    if "duplicate" in texto or "unique" in texto:
        return ErrorAmigable(
            "Registro duplicado",
            "Ya existe un registro similar. Verifica los datos e intenta nuevamente.",
        )
    return ErrorAmigable("Error al guardar", f"Error técnico: {message}")


def raise_integrity_error(
    db: Session,
    exc: IntegrityError,
    entidad: str = "registro",
) -> None:
    """Roll back *db* and raise the translated ``HTTPException`` (409)."""
    db.rollback()
    error = classify_db_error(str(exc.orig) if exc.orig is not None else str(exc), entidad)
    logger.warning("IntegrityError on %s: %s", entidad, exc.orig)
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=error.as_detail(),
    ) from exc


# ---------------------------------------------------------------------------
# Authentication messages
# ---------------------------------------------------------------------------

_TRADUCCIONES: dict[str, str] = {
    "Invalid login credentials": "Credenciales incorrectas. Verifica tu correo y contraseña.",
    "Invalid email or password": "Correo o contraseña incorrectos.",
    "User not found": "No existe una cuenta con este correo electrónico.",
    "Wrong password": "La contraseña es incorrecta.",
    "New password should be different from the old password": (
        "La nueva contraseña debe ser diferente a la anterior."
    ),
    "Password should be at least 6 characters": (
        "La contraseña debe tener al menos 6 caracteres."
    ),
    "JWT expired": "Tu sesión ha expirado. Por favor inicia sesión nuevamente.",
    "Invalid JWT": "Sesión inválida. Por favor inicia sesión nuevamente.",
    "No authorization header": "Error de autorización. Inicia sesión nuevamente.",
    "Internal server error": "Error interno del servidor. Intenta más tarde.",
}


def translate_error(message: str | None) -> str:
    """Translate an English backend message to Spanish.

    Exact matches win; otherwise the first known phrase contained in the
    message (case-insensitive) is used, falling back to ``Error: <msg>``.
    """
    if not message:
        return "Error desconocido"
    if message in _TRADUCCIONES:
        return _TRADUCCIONES[message]
    texto = message.lower()
    for original, traducido in _TRADUCCIONES.items():
        if original.lower() in texto:
            return traducido
    return f"Error: {message}"
