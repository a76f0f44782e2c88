"""
Export (Exportacion) router.

Mounts under ``/api/exportar`` (prefix set in ``main.py``).

Generates the contract table as an Excel workbook and streams it back as a
``StreamingResponse``.  The ``Content-Disposition`` header uses the
``attachment; filename=...`` pattern so that browsers prompt a download
rather than displaying the file inline.

Endpoints
---------
GET /contratos/excel  - Export the filtered contract table to .xlsx
                        (same query filters as ``GET /api/contratos``).
"""

from __future__ import annotations

import io
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.routers.contratos import contrato_filter_params
from app.schemas.contrato import ContratoFiltros
from app.services import exportacion_service
from app.services.auth_service import get_current_user
from app.utils.fechas import hoy_colombia

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Exportación"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _make_filename(ext: str) -> str:
    """Timestamped download name, e.g. ``"contratos_2026-02-17.xlsx"``."""
    return f"contratos_{hoy_colombia().isoformat()}.{ext}"


@router.get(
    "/contratos/excel",
    summary="Exportar contratos a Excel (.xlsx)",
    description=(
        "Genera y descarga la tabla de contratos con los filtros indicados. "
        "Incluye título, filtros aplicados, KPIs y la tabla con formato de "
        "pesos y fechas. Requiere autenticación."
    ),
    response_class=StreamingResponse,
    responses={
        200: {
            "description": "Archivo Excel generado exitosamente.",
            "content": {_XLSX_MEDIA_TYPE: {}},
        },
        401: {"description": "Token JWT ausente o inválido."},
        500: {"description": "Error generando el archivo."},
    },
)
def export_contratos_excel(
    filters: Annotated[ContratoFiltros, Depends(contrato_filter_params)],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> StreamingResponse:
    """Generate and stream the contract table as an Excel file.

    Raises:
        HTTPException 500: If workbook generation fails unexpectedly.
    """
    logger.info("GET /exportar/contratos/excel filters=%s", filters.model_dump(exclude_none=True))

    try:
        file_bytes = exportacion_service.export_excel(db, filters)
    except Exception as exc:
        logger.exception("export_contratos_excel failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error generando el archivo Excel: {exc}",
        ) from exc

    headers = {
        "Content-Disposition": f'attachment; filename="{_make_filename("xlsx")}"',
        "Content-Length": str(len(file_bytes)),
    }
    return StreamingResponse(
        io.BytesIO(file_bytes),
        media_type=_XLSX_MEDIA_TYPE,
        headers=headers,
    )
