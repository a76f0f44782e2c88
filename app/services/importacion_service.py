"""
Import (Importacion) service layer.

Handles contract spreadsheet uploads end-to-end:

1. Parse the CSV or Excel file with ``ContratosParser``.
2. If any row fails validation, import nothing and report every problem.
3. Resolve each row's client company by NIT and skip identifications that
   already exist (in the database or earlier in the same file).
4. Insert the remaining rows as approved contracts in one transaction.
5. Write a ``RegistroImportacion`` audit row.
6. Return an ``ImportacionContratosResponse`` summary to the calling router.

Design notes
------------
- Imported rows describe employees already working, so they are created
  ``aprobado`` with the onboarding checklist complete; confirmations whose
  entity name is missing from the file stay pending.
- NITs are compared on their digits only, so ``900.123.456-7`` and
  ``9001234567`` resolve to the same company.
- ``fijo`` contracts get their initial fixed-term period, like contracts
  created through the API.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.contrato import Contrato
from app.models.empresa import Empresa
from app.models.registro_importacion import RegistroImportacion
from app.models.usuario import Usuario
from app.parsers import ContratosParser, ParseResult, RowError
from app.schemas.importacion import (
    ErrorFilaImportacion,
    HistorialImportacion,
    ImportacionContratosResponse,
)
from app.services.empresa_service import solo_digitos
from app.services.periodo_service import create_initial_period
from app.utils.constants import ESTADO_APROBADO
from app.utils.errores import raise_integrity_error

logger = logging.getLogger(__name__)

# Optional entity column in the file -> (name column, confirmation date column)
_ENTIDADES_ONBOARDING: dict[str, tuple[str, str]] = {
    "eps_nombre": ("radicado_eps", "eps_fecha_confirmacion"),
    "arl_nombre": ("arl_nombre", "arl_fecha_confirmacion"),
    "fondo_pension": ("fondo_pension", "pension_fecha_confirmacion"),
    "fondo_cesantias": ("fondo_cesantias", "cesantias_fecha_confirmacion"),
    "caja_compensacion": ("radicado_ccf", "caja_fecha_confirmacion"),
}

_COLUMNAS_DIRECTAS: tuple[str, ...] = (
    "primer_nombre",
    "segundo_nombre",
    "primer_apellido",
    "segundo_apellido",
    "tipo_identificacion",
    "numero_identificacion",
    "fecha_expedicion_documento",
    "fecha_nacimiento",
    "celular",
    "email",
    "empresa_interna",
    "ciudad_labora",
    "cargo",
    "fecha_ingreso",
    "tipo_contrato",
    "fecha_fin",
    "tipo_salario",
    "salario",
    "auxilio_transporte",
)


def _to_schema(err: RowError) -> ErrorFilaImportacion:
    return ErrorFilaImportacion(
        row=err.row,
        empleado=err.empleado,
        numero_identificacion=err.numero_identificacion,
        field=err.field,
        message=err.message,
    )


def _omitido(rec: dict[str, Any], field: str, message: str) -> ErrorFilaImportacion:
    return ErrorFilaImportacion(
        row=rec["_row"],
        empleado=f"{rec['primer_nombre']} {rec['primer_apellido']}".strip(),
        numero_identificacion=rec["numero_identificacion"],
        field=field,
        message=message,
    )


def build_contract(rec: dict[str, Any], empresa_id: int, user_id: int) -> Contrato:
    """Build an approved ``Contrato`` with a complete checklist from a parsed row."""
    valores: dict[str, Any] = {col: rec.get(col) for col in _COLUMNAS_DIRECTAS}
    fecha = rec["fecha_ingreso"]
    valores.update(
        empresa_final_id=empresa_id,
        base_sena=True,
        status_aprobacion=ESTADO_APROBADO,
        created_by=user_id,
        updated_by=user_id,
        programacion_cita_examenes=True,
        examenes=True,
        examenes_fecha=fecha,
        envio_contrato=True,
        recibido_contrato_firmado=True,
        contrato_fecha_confirmacion=fecha,
        solicitud_inscripcion_arl=True,
        solicitud_eps=True,
        envio_inscripcion_caja=True,
        solicitud_cesantias=True,
        solicitud_fondo_pension=True,
    )
    for columna_archivo, (columna_nombre, columna_fecha) in _ENTIDADES_ONBOARDING.items():
        nombre = rec.get(columna_archivo)
        if nombre:
            valores[columna_nombre] = nombre
            valores[columna_fecha] = fecha
    return Contrato(**valores)


def _write_audit_log(
    db: Session,
    *,
    archivo_nombre: str,
    user: Usuario,
    registros_ok: int,
    registros_error: int,
    problemas: list[ErrorFilaImportacion],
    estado: str,
) -> None:
    """Persist a ``RegistroImportacion`` row as an import audit record."""
    db.add(
        RegistroImportacion(
            archivo_nombre=archivo_nombre,
            fecha=datetime.now(timezone.utc).replace(tzinfo=None),
            usuario_id=user.id,
            usuario_username=user.username,
            registros_ok=registros_ok,
            registros_error=registros_error,
            estado=estado,
            errors_json=(
                json.dumps([p.model_dump() for p in problemas], ensure_ascii=False)
                if problemas else None
            ),
        )
    )


def _estado(importados: int, total: int) -> str:
    if total > 0 and importados == total:
        return "EXITOSO"
    if importados > 0:
        return "PARCIAL"
    return "FALLIDO"


def _insert_records(
    db: Session,
    records: list[dict[str, Any]],
    user: Usuario,
) -> tuple[int, list[ErrorFilaImportacion]]:
    """Add the parsed rows that pass the database checks (no commit)."""
    empresas: dict[str, int] = {
        solo_digitos(e.tax_id): e.id for e in db.query(Empresa).all()
    }
    existentes: set[tuple[str, str]] = {
        (tipo, numero)
        for tipo, numero in db.query(
            Contrato.tipo_identificacion, Contrato.numero_identificacion
        ).all()
    }

    omitidos: list[ErrorFilaImportacion] = []
    importados = 0
    for rec in records:
        clave = (rec["tipo_identificacion"], rec["numero_identificacion"])
        if clave in existentes:
            omitidos.append(
                _omitido(
                    rec,
                    "numero_identificacion",
                    "Ya existe un contrato con este número de identificación",
                )
            )
            continue

        empresa_id = empresas.get(solo_digitos(rec["empresa_final_nit"]))
        if empresa_id is None:
            omitidos.append(
                _omitido(
                    rec,
                    "empresa_final_nit",
                    f"No se encontró empresa con NIT: {rec['empresa_final_nit']}",
                )
            )
            continue

        contrato = build_contract(rec, empresa_id, user.id)
        db.add(contrato)
        db.flush()
        create_initial_period(db, contrato, user.id)
        existentes.add(clave)
        importados += 1

    return importados, omitidos


async def process_upload(
    db: Session,
    file: UploadFile,
    user: Usuario,
) -> ImportacionContratosResponse:
    """Process an uploaded contract spreadsheet end-to-end.

    Raises:
        ValueError: Empty file, unreadable file or missing required columns.
            The attempt is still recorded in the import history.
    """
    raw: bytes = await file.read()
    filename: str = file.filename or "contratos.xlsx"
    if not raw:
        raise ValueError("El archivo está vacío.")

    logger.info("process_upload: file='%s' user='%s'", filename, user.username)
    result: ParseResult = ContratosParser(raw, filename=filename).parse()

    if result.errors:
        _write_audit_log(
            db,
            archivo_nombre=filename,
            user=user,
            registros_ok=0,
            registros_error=0,
            problemas=[],
            estado="FALLIDO",
        )
        db.commit()
        logger.warning("process_upload rejected '%s': %s", filename, result.errors)
        raise ValueError("; ".join(result.errors))

    errores_validacion = [_to_schema(e) for e in result.row_errors]
    omitidos: list[ErrorFilaImportacion] = []
    importados = 0

    if not errores_validacion:
        try:
            importados, omitidos = _insert_records(db, result.records, user)
            db.flush()
        except IntegrityError as exc:
            raise_integrity_error(db, exc, "contrato")

    problemas = errores_validacion + omitidos
    filas_con_error = len({p.row for p in problemas})
    estado = _estado(importados, result.total_rows)

    _write_audit_log(
        db,
        archivo_nombre=filename,
        user=user,
        registros_ok=importados,
        registros_error=filas_con_error,
        problemas=problemas,
        estado=estado,
    )
    db.commit()

    logger.info(
        "process_upload: file='%s' rows=%d imported=%d invalid=%d skipped=%d estado=%s",
        filename, result.total_rows, importados,
        len(errores_validacion), len(omitidos), estado,
    )
    return ImportacionContratosResponse(
        archivo=filename,
        total_filas=result.total_rows,
        importados=importados,
        errores_validacion=errores_validacion,
        omitidos=omitidos,
        estado=estado,
    )


def get_historial(db: Session, limit: int = 50) -> list[HistorialImportacion]:
    """Return the import history list, most-recent first."""
    records = (
        db.query(RegistroImportacion)
        .order_by(RegistroImportacion.fecha.desc(), RegistroImportacion.id.desc())
        .limit(limit)
        .all()
    )
    logger.debug("get_historial: %d records returned", len(records))
    return [HistorialImportacion.model_validate(rec) for rec in records]
