from __future__ import annotations

import datetime
import io

import pandas as pd

from app.parsers import ContratosParser
from app.parsers.contratos_parser import REQUIRED_HEADERS, parse_fecha_colombiana

ENCABEZADO = ",".join(REQUIRED_HEADERS + ["tipo_contrato", "fecha_fin", "salario", "email"])


def _csv(*filas: str) -> bytes:
    return "\n".join([ENCABEZADO, *filas]).encode("utf-8")


def _parse(contenido: bytes, filename: str = "contratos.csv"):
    return ContratosParser(contenido, filename=filename).parse()


def test_accepted_date_formats():
    assert parse_fecha_colombiana("2026-03-01") == datetime.date(2026, 3, 1)
    assert parse_fecha_colombiana("01/03/2026") == datetime.date(2026, 3, 1)
    assert parse_fecha_colombiana("1-3-2026") == datetime.date(2026, 3, 1)
    assert parse_fecha_colombiana("2026-03-01 00:00:00") == datetime.date(2026, 3, 1)
    assert parse_fecha_colombiana("31/02/2026") is None
    assert parse_fecha_colombiana("marzo 1") is None
    assert parse_fecha_colombiana("") is None


def test_valid_rows_become_records():
    resultado = _parse(
        _csv(
            "Laura,Gómez,cc,52123456,12/05/1994,good,900.123.456-7,01/03/2026,Fijo,28/02/2027,"
            '"1.800.000",Laura@Correo.com',
            "Andrés,Martínez,CE,E98765,03-11-1990,CPS,9001234567,2026-02-01,,,,",
        )
    )

    assert resultado.ok
    assert resultado.total_rows == 2
    laura, andres = resultado.records
    assert laura["_row"] == 2
    assert laura["tipo_identificacion"] == "CC"
    assert laura["empresa_interna"] == "Good"
    assert laura["tipo_contrato"] == "fijo"
    assert laura["fecha_fin"] == datetime.date(2027, 2, 28)
    assert laura["salario"] == 1_800_000
    assert laura["email"] == "laura@correo.com"
    assert andres["fecha_nacimiento"] == datetime.date(1990, 11, 3)
    assert andres["tipo_contrato"] is None
    assert andres["salario"] == 0.0


def test_row_errors_carry_line_numbers():
    resultado = _parse(
        _csv(
            "Laura,Gómez,CC,52123456,12/05/1994,Good,900123456,01/03/2026,,,,",
            ",Rojas,NIT,,1994-13-01,Otra,,01/03/2026,fijo,,,correo-malo",
        )
    )

    assert not resultado.ok
    assert len(resultado.records) == 1
    errores = {e.field: e for e in resultado.row_errors}
    assert {e.row for e in resultado.row_errors} == {3}
    assert set(errores) == {
        "primer_nombre",
        "tipo_identificacion",
        "numero_identificacion",
        "fecha_nacimiento",
        "empresa_interna",
        "empresa_final_nit",
        "email",
        "fecha_fin",
    }
    assert errores["fecha_fin"].message == "La fecha de fin es requerida para contratos Fijos"
    assert errores["fecha_nacimiento"].message == (
        "La fecha de nacimiento no es válida (formato: DD/MM/YYYY o DD-MM-YYYY)"
    )


def test_end_date_must_follow_start():
    resultado = _parse(
        _csv("Laura,Gómez,CC,52123456,12/05/1994,Good,900123456,01/03/2026,fijo,01/03/2026,,")
    )
    [error] = resultado.row_errors
    assert error.message == "La fecha de fin debe ser posterior a la fecha de ingreso"


def test_missing_headers():
    resultado = _parse(b"primer_nombre,primer_apellido\nLaura,Gomez\n")
    assert resultado.errors == [
        "Faltan columnas requeridas: tipo_identificacion, numero_identificacion, "
        "fecha_nacimiento, empresa_interna, empresa_final_nit, fecha_ingreso"
    ]


def test_blank_rows_are_ignored():
    resultado = _parse(_csv(",,,,,,,,,,,"))
    assert resultado.errors == [
        "El archivo debe tener al menos una fila de encabezados y una fila de datos"
    ]


def test_reads_excel_workbooks():
    df = pd.DataFrame(
        [
            {
                "Primer_Nombre": "Laura",
                "primer_apellido": "Gómez",
                "tipo_identificacion": "CC",
                "numero_identificacion": "52123456",
                "fecha_nacimiento": "1994-05-12",
                "empresa_interna": "Good",
                "empresa_final_nit": "900123456",
                "fecha_ingreso": "2026-03-01",
            }
        ]
    )
    buffer = io.BytesIO()
    df.to_excel(buffer, index=False, engine="openpyxl")

    resultado = _parse(buffer.getvalue(), filename="empleados.xlsx")

    assert resultado.ok
    assert resultado.records[0]["primer_nombre"] == "Laura"
