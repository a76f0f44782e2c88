"""
Excel export helper wrapping xlsxwriter.

Provides ``ExcelExporter``, a stateful builder that constructs a styled
contracts workbook in memory and returns its bytes for streaming via
FastAPI's ``StreamingResponse``.

Usage example::

    exporter = ExcelExporter(title="Contratos", filters={"Empresa": "Good"})
    exporter.add_header()
    exporter.add_kpi_row({"Total": 120, "Activos": 97})
    exporter.add_data_table(headers, rows, money_cols={9}, date_cols={6, 7})
    file_bytes = exporter.finalize()

Design notes
------------
- Uses ``xlsxwriter`` in in-memory mode (``BytesIO``).
- Column widths follow the longest value in each column, capped at 50.
- Money columns use Colombian pesos without decimals (``$ #,##0``); date
  columns are real Excel dates shown as ``dd/mm/yyyy``.
- The generation timestamp in the header is Bogotá local time.
"""

from __future__ import annotations

import datetime
import io
from typing import Any, Sequence

import xlsxwriter

from app.utils.fechas import zona_colombia

_COLOR_PRIMARY = "#0F766E"
_COLOR_SUBHEADER_BG = "#134E4A"
_COLOR_WHITE = "#FFFFFF"
_COLOR_ALT_ROW = "#F0FDFA"
_COLOR_BORDER = "#D1D5DB"

_FORMATO_PESOS = '"$" #,##0'
_FORMATO_FECHA = "dd/mm/yyyy"

_MAX_COL_WIDTH = 50
_MIN_COL_WIDTH = 8


class ExcelExporter:
    """Workbook builder for contract exports.

    Creates a single worksheet with a title block, optional KPI summary
    row, and a styled data table.

    Args:
        title: Report title, e.g. ``"Contratos"``.
        filters: Applied filter labels shown under the title,
                 e.g. ``{"Estado": "aprobado"}``.
        sheet_name: Name of the worksheet tab (default: ``"Contratos"``).
    """

    def __init__(
        self,
        title: str,
        filters: dict[str, str] | None = None,
        sheet_name: str = "Contratos",
    ) -> None:
        self._title = title
        self._filters = filters or {}

        self._buffer = io.BytesIO()
        self._workbook = xlsxwriter.Workbook(self._buffer, {"in_memory": True})
        self._worksheet = self._workbook.add_worksheet(sheet_name)

        self._current_row: int = 0
        self._num_cols: int = 1
        self._formats: dict[str, Any] = self._build_formats()

    # -----------------------------------------------------------------------
    # Format factory
    # -----------------------------------------------------------------------

    def _build_formats(self) -> dict[str, Any]:
        wb = self._workbook
        celda = {
            "font_size": 9,
            "font_color": "#111827",
            "valign": "vcenter",
            "border": 1,
            "border_color": _COLOR_BORDER,
        }
        formats: dict[str, Any] = {
            "header_main": wb.add_format({
                "bold": True,
                "font_size": 16,
                "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_PRIMARY,
                "align": "center",
                "valign": "vcenter",
            }),
            "header_sub": wb.add_format({
                "font_size": 10,
                "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_SUBHEADER_BG,
                "align": "center",
                "valign": "vcenter",
            }),
            "filter_key": wb.add_format({
                "bold": True,
                "font_size": 9,
                "bg_color": "#E5E7EB",
                "align": "right",
            }),
            "filter_value": wb.add_format({"font_size": 9, "align": "left"}),
            "kpi_label": wb.add_format({
                "bold": True,
                "font_size": 10,
                "bg_color": _COLOR_ALT_ROW,
                "align": "center",
                "border": 1,
                "border_color": _COLOR_BORDER,
            }),
            "kpi_value": wb.add_format({
                "bold": True,
                "font_size": 12,
                "font_color": _COLOR_PRIMARY,
                "bg_color": _COLOR_ALT_ROW,
                "align": "center",
                "border": 1,
                "border_color": _COLOR_BORDER,
            }),
            "col_header": wb.add_format({
                "bold": True,
                "font_size": 10,
                "font_color": _COLOR_WHITE,
                "bg_color": _COLOR_SUBHEADER_BG,
                "align": "center",
                "valign": "vcenter",
                "border": 1,
                "text_wrap": True,
            }),
        }

        # Plain, money and date cells, each with an alternate-row variant
        for nombre, extra in (
            ("text", {"align": "left"}),
            ("money", {"align": "right", "num_format": _FORMATO_PESOS}),
            ("date", {"align": "center", "num_format": _FORMATO_FECHA}),
        ):
            formats[nombre] = wb.add_format({**celda, **extra, "bg_color": _COLOR_WHITE})
            formats[f"{nombre}_alt"] = wb.add_format({**celda, **extra, "bg_color": _COLOR_ALT_ROW})
        return formats

    # -----------------------------------------------------------------------
    # Public builder methods
    # -----------------------------------------------------------------------

    def add_header(self, num_cols: int = 8) -> "ExcelExporter":
        """Write the title, generation time and one row per applied filter."""
        ws = self._worksheet
        ultima = max(num_cols, 2) - 1

        ws.set_row(self._current_row, 30)
        ws.merge_range(
            self._current_row, 0, self._current_row, ultima,
            f"Dashboard Contratos: {self._title}",
            self._formats["header_main"],
        )
        self._current_row += 1

        generado = datetime.datetime.now(zona_colombia()).strftime("%d/%m/%Y %H:%M")
        ws.merge_range(
            self._current_row, 0, self._current_row, ultima,
            f"Generado: {generado} (hora Colombia)",
            self._formats["header_sub"],
        )
        self._current_row += 1

        for key, value in self._filters.items():
            ws.write(self._current_row, 0, key, self._formats["filter_key"])
            ws.merge_range(
                self._current_row, 1, self._current_row, ultima,
                value, self._formats["filter_value"],
            )
            self._current_row += 1

        self._current_row += 1
        return self

    def add_kpi_row(self, kpis: dict[str, Any]) -> "ExcelExporter":
        """Write labelled KPI cells side by side (label row above value row)."""
        ws = self._worksheet
        for col, (label, value) in enumerate(kpis.items()):
            ws.write(self._current_row, col, label, self._formats["kpi_label"])
            ws.write(self._current_row + 1, col, value, self._formats["kpi_value"])
        self._current_row += 3
        return self

    def add_data_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        money_cols: set[int] | None = None,
        date_cols: set[int] | None = None,
    ) -> "ExcelExporter":
        """Write a styled data table with alternating row shading.

        Args:
            headers: Column header strings.
            rows: Data rows, each matching the length of ``headers``.
            money_cols: Zero-based indices of peso amounts.
            date_cols: Zero-based indices holding ``date`` values.

        Returns:
            ``self`` for method chaining.
        """
        ws = self._worksheet
        money_cols = money_cols or set()
        date_cols = date_cols or set()
        self._num_cols = len(headers)
        col_widths: list[int] = [len(str(h)) for h in headers]

        ws.set_row(self._current_row, 20)
        for ci, hdr in enumerate(headers):
            ws.write(self._current_row, ci, hdr, self._formats["col_header"])
        self._current_row += 1

        for ri, data_row in enumerate(rows):
            sufijo = "_alt" if ri % 2 == 1 else ""
            for ci, cell_val in enumerate(data_row):
                if ci in date_cols and isinstance(cell_val, datetime.date):
                    ws.write_datetime(
                        self._current_row, ci,
                        datetime.datetime.combine(cell_val, datetime.time()),
                        self._formats[f"date{sufijo}"],
                    )
                    ancho = 10
                elif ci in money_cols and cell_val is not None:
                    ws.write_number(
                        self._current_row, ci, float(cell_val), self._formats[f"money{sufijo}"]
                    )
                    ancho = len(f"{float(cell_val):,.0f}") + 2
                else:
                    texto = "" if cell_val is None else cell_val
                    ws.write(self._current_row, ci, texto, self._formats[f"text{sufijo}"])
                    ancho = len(str(texto))
                col_widths[ci] = min(_MAX_COL_WIDTH, max(col_widths[ci], ancho))
            self._current_row += 1

        for ci, width in enumerate(col_widths):
            ws.set_column(ci, ci, max(width + 2, _MIN_COL_WIDTH))
        ws.freeze_panes(self._current_row - len(rows), 0)
        return self

    def finalize(self) -> bytes:
        """Close the workbook and return the ``.xlsx`` bytes.

        After calling ``finalize`` the exporter instance should not be reused.
        """
        self._workbook.close()
        self._buffer.seek(0)
        return self._buffer.read()
