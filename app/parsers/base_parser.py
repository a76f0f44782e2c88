"""Base class for tabular upload parsers (Excel workbooks and CSV files).

Provides shared infrastructure for loading the first sheet of an upload into
a string-typed DataFrame, normalising headers and cell values, and
collecting per-row problems before subclasses apply their domain rules.
"""

from __future__ import annotations

import io
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass
class RowError:
    """Problem found in one data row.

    ``row`` is the 1-based line number in the file, the header being row 1.
    """

    row: int
    empleado: str
    field: str | None
    message: str
    numero_identificacion: str | None = None


@dataclass
class ParseResult:
    """Container returned by every parser after processing a file.

    Attributes:
        records: One dict per valid row, keyed by model field name, plus the
            ``_row`` line number.
        row_errors: Per-row validation problems.
        errors: Structural problems (unreadable file, missing columns).
        total_rows: Non-empty data rows read.
    """

    records: list[dict[str, Any]] = field(default_factory=list)
    row_errors: list[RowError] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    total_rows: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors and not self.row_errors

    def summary(self) -> str:
        status = "OK" if self.ok else "ERROR"
        return (
            f"[{status}] rows={self.total_rows} "
            f"records={len(self.records)} "
            f"row_errors={len(self.row_errors)} "
            f"errors={len(self.errors)}"
        )


# ---------------------------------------------------------------------------
# Base parser
# ---------------------------------------------------------------------------


class BaseParser(ABC):
    """Abstract base for upload parsers.

    The constructor accepts a file path string, raw bytes, or an open
    binary-mode file object so it works both from the filesystem and from
    FastAPI ``UploadFile.read()``.  Files whose name ends in ``.csv`` are read
    with ``pd.read_csv``; anything else goes through openpyxl.

    Attributes:
        filename: Original filename, used to choose the reader.
        content: Raw bytes of the upload.
        result: Accumulated ``ParseResult`` (populated during ``parse()``).
    """

    def __init__(self, source: str | bytes | BinaryIO, filename: str | None = None) -> None:
        self.filename = filename or (source if isinstance(source, str) else "upload.xlsx")
        self.content: bytes = self._read_source(source)
        self.result = ParseResult()

    @staticmethod
    def _read_source(source: str | bytes | BinaryIO) -> bytes:
        if isinstance(source, bytes):
            return source
        if isinstance(source, str):
            return Path(source).read_bytes()
        data = source.read()
        return data if isinstance(data, bytes) else data.encode()

    @property
    def is_csv(self) -> bool:
        return str(self.filename).lower().endswith(".csv")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_table(self) -> pd.DataFrame:
        """Load the upload with every cell as a string and lower-cased headers.

        Returns:
            The DataFrame, or an empty one when the file cannot be read (the
            problem is recorded in ``result.errors``).
        """
        try:
            if self.is_csv:
                df = pd.read_csv(
                    io.BytesIO(self.content),
                    dtype=str,
                    keep_default_na=False,
                    skip_blank_lines=True,
                    encoding="utf-8-sig",
                )
            else:
                df = pd.read_excel(
                    io.BytesIO(self.content),
                    sheet_name=0,
                    dtype=str,
                    keep_default_na=False,
                    engine="openpyxl",
                )
        except Exception as exc:
            msg = f"No se pudo leer el archivo '{self.filename}': {exc}"
            logger.error(msg)
            self.result.errors.append(msg)
            return pd.DataFrame()

        df.columns = [self._clean_str(c).lower() for c in df.columns]
        return df

    # ------------------------------------------------------------------
    # Value normalisation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _clean_str(value: Any) -> str:
        """Return a stripped string, converting NaN/None to empty string."""
        if value is None:
            return ""
        if isinstance(value, float) and pd.isna(value):
            return ""
        return str(value).strip()

    @staticmethod
    def _to_pesos(value: Any) -> float | None:
        """Parse an amount written as ``1300000``, ``1.300.000`` or ``$ 1,300,000``.

        Returns ``None`` for blank or unparsable cells.
        """
        text = BaseParser._clean_str(value)
        if not text:
            return None
        cleaned = re.sub(r"[^\d,.\-]", "", text)
        if re.fullmatch(r"-?\d{1,3}(\.\d{3})+(,\d+)?", cleaned):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
        try:
            return float(cleaned)
        except ValueError:
            return None

    @staticmethod
    def _is_empty_row(row: pd.Series) -> bool:
        return not any(BaseParser._clean_str(val) for val in row)

    def _missing_headers(self, df: pd.DataFrame, required: list[str]) -> list[str]:
        return [h for h in required if h not in df.columns]

    # ------------------------------------------------------------------
    # Abstract interface
    # ------------------------------------------------------------------

    @abstractmethod
    def validate_structure(self, df: pd.DataFrame) -> list[str]:
        """Verify that the DataFrame has the required columns.

        Returns:
            List of error messages.  Empty list means structure is valid.
        """

    @abstractmethod
    def parse(self) -> ParseResult:
        """Execute the full parsing pipeline and return a ``ParseResult``."""
