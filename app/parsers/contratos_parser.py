"""Parser for the employee contract upload (CSV or Excel).

Expected layout: one header row with lower-case column names, one employee
per data row.  Required columns:

    primer_nombre | primer_apellido | tipo_identificacion |
    numero_identificacion | fecha_nacimiento | empresa_interna |
    empresa_final_nit | fecha_ingreso

Optional columns: segundo_nombre, segundo_apellido,
fecha_expedicion_documento, celular, email, ciudad_labora, cargo,
tipo_contrato, fecha_fin, tipo_salario, salario, auxilio_transporte,
eps_nombre, arl_nombre, fondo_pension, fondo_cesantias, caja_compensacion.

Dates are accepted as ``YYYY-MM-DD``, ``DD/MM/YYYY`` or ``DD-MM-YYYY``.
Enumerations are matched case-insensitively (``Fijo`` and ``fijo`` are the
same contract type).  Company resolution by NIT and duplicate checks need
the database and happen in the import service, not here.
"""

from __future__ import annotations

import datetime
import logging
import re
from typing import Any

import pandas as pd

from app.utils.constants import (
    EMPRESAS_INTERNAS,
    TIPOS_CONTRATO,
    TIPOS_IDENTIFICACION,
    TIPOS_SALARIO,
)

from .base_parser import BaseParser, ParseResult, RowError

logger = logging.getLogger(__name__)

REQUIRED_HEADERS: list[str] = [
    "primer_nombre",
    "primer_apellido",
    "tipo_identificacion",
    "numero_identificacion",
    "fecha_nacimiento",
    "empresa_interna",
    "empresa_final_nit",
    "fecha_ingreso",
]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[ T]00:00:00)?$")
_COLOMBIANA_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")

_MENSAJE_FORMATO_FECHA = "(formato: DD/MM/YYYY o DD-MM-YYYY)"

_TEXTOS_OPCIONALES: list[str] = [
    "segundo_nombre",
    "segundo_apellido",
    "celular",
    "ciudad_labora",
    "cargo",
    "eps_nombre",
    "arl_nombre",
    "fondo_pension",
    "fondo_cesantias",
    "caja_compensacion",
]


def parse_fecha_colombiana(value: str | None) -> datetime.date | None:
    """Parse ``YYYY-MM-DD``, ``DD/MM/YYYY`` or ``DD-MM-YYYY``; ``None`` if invalid."""
    if not value or not value.strip():
        return None
    texto = value.strip()

    iso = _ISO_RE.match(texto)
    if iso:
        anio, mes, dia = (int(p) for p in iso.groups())
    else:
        colombiana = _COLOMBIANA_RE.match(texto)
        if not colombiana:
            return None
        dia, mes, anio = (int(p) for p in colombiana.groups())

    try:
        return datetime.date(anio, mes, dia)
    except ValueError:
        return None


def _match_choice(value: str, choices: list[str]) -> str | None:
    """Canonical spelling of *value* in *choices*, ignoring case."""
    por_minuscula = {c.lower(): c for c in choices}
    return por_minuscula.get(value.lower())


class ContratosParser(BaseParser):
    """Reads the contract upload and validates every row.

    Each valid row becomes a dict with the ``Contrato`` column names, plus
    ``empresa_final_nit``, the optional entity names and ``_row``.
    """

    def validate_structure(self, df: pd.DataFrame) -> list[str]:
        faltantes = self._missing_headers(df, REQUIRED_HEADERS)
        if faltantes:
            return [f"Faltan columnas requeridas: {', '.join(faltantes)}"]
        return []

    def parse(self) -> ParseResult:
        df = self._load_table()
        if self.result.errors:
            return self.result

        self.result.errors.extend(self.validate_structure(df))
        if self.result.errors:
            return self.result

        filas = [(idx, row) for idx, row in df.iterrows() if not self._is_empty_row(row)]
        if not filas:
            self.result.errors.append(
                "El archivo debe tener al menos una fila de encabezados y una fila de datos"
            )
            return self.result

        for idx, row in filas:
            # Header is line 1, first data row is line 2
            numero_fila = int(idx) + 2
            self.result.total_rows += 1
            registro = self._parse_row(numero_fila, row)
            if registro is not None:
                self.result.records.append(registro)

        logger.info("ContratosParser: %s", self.result.summary())
        return self.result

    # ------------------------------------------------------------------
    # Row validation
    # ------------------------------------------------------------------

    def _parse_row(self, numero_fila: int, row: pd.Series) -> dict[str, Any] | None:
        celdas = {col: self._clean_str(row.get(col)) for col in row.index}
        empleado = f"{celdas.get('primer_nombre', '')} {celdas.get('primer_apellido', '')}".strip()
        numero_id = re.sub(r"\.0$", "", celdas.get("numero_identificacion", ""))
        errores: list[RowError] = []

        def error(campo: str, mensaje: str) -> None:
            errores.append(
                RowError(
                    row=numero_fila,
                    empleado=empleado,
                    field=campo,
                    message=mensaje,
                    numero_identificacion=numero_id or None,
                )
            )

        if not celdas.get("primer_nombre"):
            error("primer_nombre", "El primer nombre es requerido")
        if not celdas.get("primer_apellido"):
            error("primer_apellido", "El primer apellido es requerido")

        tipo_id = celdas.get("tipo_identificacion", "")
        tipo_id_canonico = _match_choice(tipo_id, TIPOS_IDENTIFICACION) if tipo_id else None
        if not tipo_id:
            error("tipo_identificacion", "El tipo de identificación es requerido")
        elif tipo_id_canonico is None:
            error(
                "tipo_identificacion",
                "Tipo de identificación inválido. Debe ser uno de: "
                + ", ".join(TIPOS_IDENTIFICACION),
            )

        if not numero_id:
            error("numero_identificacion", "El número de identificación es requerido")

        fechas: dict[str, datetime.date | None] = {}
        for campo, etiqueta, requerida in (
            ("fecha_nacimiento", "La fecha de nacimiento", True),
            ("fecha_ingreso", "La fecha de ingreso", True),
            ("fecha_expedicion_documento", "La fecha de expedición", False),
        ):
            texto = celdas.get(campo, "")
            fechas[campo] = parse_fecha_colombiana(texto)
            if not texto:
                if requerida:
                    error(campo, f"{etiqueta} es requerida")
            elif fechas[campo] is None:
                error(campo, f"{etiqueta} no es válida {_MENSAJE_FORMATO_FECHA}")

        empresa_interna = celdas.get("empresa_interna", "")
        empresa_canonica = _match_choice(empresa_interna, EMPRESAS_INTERNAS) if empresa_interna else None
        if not empresa_interna:
            error("empresa_interna", "La empresa interna es requerida")
        elif empresa_canonica is None:
            error(
                "empresa_interna",
                f"Empresa interna inválida. Debe ser: {' o '.join(EMPRESAS_INTERNAS)}",
            )

        if not celdas.get("empresa_final_nit"):
            error("empresa_final_nit", "El NIT de la empresa final es requerido")

        email = celdas.get("email", "").lower()
        if email and not _EMAIL_RE.match(email):
            error("email", "El email no es válido")

        tipo_contrato = celdas.get("tipo_contrato", "")
        tipo_contrato_canonico = _match_choice(tipo_contrato, TIPOS_CONTRATO) if tipo_contrato else None
        if tipo_contrato and tipo_contrato_canonico is None:
            error(
                "tipo_contrato",
                "Tipo de contrato inválido. Debe ser uno de: "
                + ", ".join(t.capitalize() for t in TIPOS_CONTRATO),
            )

        tipo_salario = celdas.get("tipo_salario", "")
        tipo_salario_canonico = _match_choice(tipo_salario, TIPOS_SALARIO) if tipo_salario else None
        if tipo_salario and tipo_salario_canonico is None:
            error(
                "tipo_salario",
                "Tipo de salario inválido. Debe ser: "
                + " o ".join(t.capitalize() for t in TIPOS_SALARIO),
            )

        fecha_fin_texto = celdas.get("fecha_fin", "")
        fecha_fin = parse_fecha_colombiana(fecha_fin_texto)
        if tipo_contrato_canonico == "fijo":
            if not fecha_fin_texto:
                error("fecha_fin", "La fecha de fin es requerida para contratos Fijos")
            elif fecha_fin is None:
                error("fecha_fin", f"La fecha de fin no es válida {_MENSAJE_FORMATO_FECHA}")
        if fecha_fin and fechas["fecha_ingreso"] and fecha_fin <= fechas["fecha_ingreso"]:
            error("fecha_fin", "La fecha de fin debe ser posterior a la fecha de ingreso")

        if errores:
            self.result.row_errors.extend(errores)
            return None

        registro: dict[str, Any] = {
            "_row": numero_fila,
            "primer_nombre": celdas["primer_nombre"],
            "primer_apellido": celdas["primer_apellido"],
            "tipo_identificacion": tipo_id_canonico,
            "numero_identificacion": numero_id,
            "fecha_nacimiento": fechas["fecha_nacimiento"],
            "fecha_expedicion_documento": fechas["fecha_expedicion_documento"],
            "fecha_ingreso": fechas["fecha_ingreso"],
            "empresa_interna": empresa_canonica,
            "empresa_final_nit": celdas["empresa_final_nit"],
            "email": email or None,
            "tipo_contrato": tipo_contrato_canonico,
            "fecha_fin": fecha_fin,
            "tipo_salario": tipo_salario_canonico,
            "salario": self._to_pesos(celdas.get("salario")) or 0.0,
            "auxilio_transporte": self._to_pesos(celdas.get("auxilio_transporte")) or 0.0,
        }
        for campo in _TEXTOS_OPCIONALES:
            registro[campo] = celdas.get(campo) or None
        return registro
