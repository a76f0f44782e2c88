"""
Export service layer.

Builds the Excel download of the contract table.  Reuses
``contrato_service.get_tabla`` so the exported rows carry exactly the
derived state the table endpoint shows, then hands them to
``ExcelExporter``.

Design notes
------------
- A single large page (``_EXPORT_PAGINATION``) is requested, so exports are
  bounded at 5,000 rows.
- Money columns and date columns are identified by index so the exporter can
  apply the peso and ``dd/mm/yyyy`` formats.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.exporters.excel_exporter import ExcelExporter
from app.schemas.contrato import ContratoFiltros, ContratoResponse
from app.services import contrato_service
from app.utils.constants import ESTADO_BORRADOR, VIGENCIA_ACTIVO, VIGENCIA_TERMINADO

logger = logging.getLogger(__name__)


class _ExportPagination:
    """Lightweight pagination for exports; bypasses the PaginationParams cap."""
    page: int = 1
    page_size: int = 5_000


_EXPORT_PAGINATION = _ExportPagination()

_HEADERS: list[str] = [
    "Nombre",
    "Tipo doc.",
    "Documento",
    "Empresa interna",
    "Empresa cliente",
    "Cargo",
    "Ciudad",
    "Tipo contrato",
    "Fecha ingreso",
    "Fecha fin",
    "Salario",
    "Remuneración total",
    "Aprobación",
    "Vigencia",
    "N° contrato",
    "Onboarding %",
]
_MONEY_COLS: set[int] = {10, 11}
_DATE_COLS: set[int] = {8, 9}

_ETIQUETAS_FILTRO: dict[str, str] = {
    "search": "Búsqueda",
    "empresa_final_id": "Empresa cliente ID",
    "empresa_interna": "Empresa interna",
    "status_aprobacion": "Aprobación",
    "status_vigencia": "Vigencia",
    "tipo_contrato": "Tipo de contrato",
}


def _fila(c: ContratoResponse) -> list[Any]:
    return [
        c.nombre_completo,
        c.tipo_identificacion,
        c.numero_identificacion,
        c.empresa_interna,
        c.empresa_final_nombre,
        c.cargo,
        c.ciudad_labora,
        c.tipo_contrato,
        c.fecha_ingreso,
        c.fecha_fin,
        c.salario,
        c.total_remuneracion,
        c.status_aprobacion,
        c.vigencia_label,
        c.numero_contrato_helisa,
        c.progreso_onboarding,
    ]


def export_excel(db: Session, filters: ContratoFiltros) -> bytes:
    """Generate the ``.xlsx`` export of the filtered contract table.

    Args:
        db: Active SQLAlchemy session.
        filters: Same filters as the table endpoint.

    Returns:
        Raw bytes of the ``.xlsx`` file.
    """
    tabla = contrato_service.get_tabla(db, filters, _EXPORT_PAGINATION)
    contratos = tabla.items

    kpis: dict[str, Any] = {
        "Contratos": tabla.total,
        "Activos": sum(1 for c in contratos if c.status_vigencia == VIGENCIA_ACTIVO),
        "Terminados": sum(1 for c in contratos if c.status_vigencia == VIGENCIA_TERMINADO),
        "Borradores": sum(1 for c in contratos if c.status_aprobacion == ESTADO_BORRADOR),
    }
    filtros_aplicados = {
        _ETIQUETAS_FILTRO[k]: str(v)
        for k, v in filters.model_dump(exclude_none=True).items()
    }

    exporter = ExcelExporter(title="Contratos", filters=filtros_aplicados)
    exporter.add_header(num_cols=len(_HEADERS))
    exporter.add_kpi_row(kpis)
    exporter.add_data_table(
        _HEADERS,
        [_fila(c) for c in contratos],
        money_cols=_MONEY_COLS,
        date_cols=_DATE_COLS,
    )
    file_bytes = exporter.finalize()

    logger.info("export_excel: rows=%d bytes=%d", len(contratos), len(file_bytes))
    return file_bytes
