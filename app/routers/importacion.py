"""
Import (Importacion) router.

Mounts under ``/api/importacion`` (prefix set in ``main.py``).

The upload endpoint requires the ADMIN or RRHH role (enforced via
``require_role``).  The history endpoint is readable by any authenticated user.

Endpoints
---------
POST /contratos  - Upload an Excel or CSV file with new contracts.
GET  /historial  - List past import records (most-recent-first).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.parsers.contratos_parser import REQUIRED_HEADERS
from app.schemas.importacion import HistorialImportacion, ImportacionContratosResponse
from app.services import importacion_service
from app.services.auth_service import get_current_user, require_role
from app.utils.constants import ROLES_ESCRITURA

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Importación"])


# ---------------------------------------------------------------------------
# Shared content-type validation helper
# ---------------------------------------------------------------------------

_ALLOWED_CONTENT_TYPES: frozenset[str] = frozenset(
    {
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",  # .xlsx
        "application/vnd.ms-excel",  # .xls, also sent for .csv by some browsers
        "text/csv",
        "application/octet-stream",
    }
)


def _check_content_type(file: UploadFile) -> None:
    """Log uploads with an unexpected MIME type; pandas decides the format."""
    content_type = file.content_type or ""
    if content_type not in _ALLOWED_CONTENT_TYPES:
        logger.warning(
            "Unexpected content_type='%s' for file='%s', proceeding anyway",
            content_type,
            file.filename,
        )


# ---------------------------------------------------------------------------
# POST /contratos
# ---------------------------------------------------------------------------


@router.post(
    "/contratos",
    response_model=ImportacionContratosResponse,
    status_code=status.HTTP_200_OK,
    summary="Importar contratos desde Excel o CSV",
    description=(
        "Carga masiva de contratos. La primera fila debe traer los encabezados "
        f"obligatorios: {', '.join(REQUIRED_HEADERS)}. Si alguna fila tiene errores "
        "de validación no se importa ninguna; las filas con identificación "
        "duplicada o NIT desconocido se omiten. Requiere rol ADMIN o RRHH."
    ),
    responses={
        200: {"description": "Resumen del procesamiento con errores por fila."},
        400: {"description": "Archivo vacío, ilegible o sin las columnas obligatorias."},
        401: {"description": "Token JWT ausente o inválido."},
        403: {"description": "Rol insuficiente."},
    },
)
async def upload_contratos(
    file: Annotated[UploadFile, File(description="Archivo .xlsx o .csv")],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(require_role(*ROLES_ESCRITURA))],
) -> ImportacionContratosResponse:
    """Process an uploaded contract spreadsheet.

    Raises:
        HTTPException 400: If the file is empty, unreadable or lacks the
            required columns.
    """
    _check_content_type(file)
    logger.info(
        "upload_contratos: user='%s' file='%s'", current_user.username, file.filename
    )
    try:
        return await importacion_service.process_upload(db, file, current_user)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


# ---------------------------------------------------------------------------
# GET /historial
# ---------------------------------------------------------------------------


@router.get(
    "/historial",
    response_model=list[HistorialImportacion],
    summary="Historial de importaciones",
    description="Lista las importaciones ordenadas de la más reciente a la más antigua.",
    responses={
        200: {"description": "Lista de importaciones registradas."},
        401: {"description": "Token JWT ausente o inválido."},
    },
)
def get_historial(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
    limit: Annotated[int, Query(description="Máximo de registros.", ge=1, le=500)] = 50,
) -> list[HistorialImportacion]:
    logger.debug("GET /importacion/historial limit=%d", limit)
    return importacion_service.get_historial(db, limit=limit)
