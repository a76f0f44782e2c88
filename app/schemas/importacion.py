"""
Pydantic v2 schemas for the contract import module.

Covers the upload result (with per-row validation errors and rows skipped
during insertion) and the import history list.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ErrorFilaImportacion(BaseModel):
    """Validation or insertion problem attached to a single spreadsheet row."""

    row: int = Field(..., ge=1, description="Número de fila en el archivo (encabezado = 1)")
    empleado: str = Field(..., description="Nombre del empleado según el archivo")
    numero_identificacion: str | None = None
    field: str | None = Field(default=None, description="Columna con el problema")
    message: str


class ImportacionContratosResponse(BaseModel):
    """Summary returned after processing a contract spreadsheet."""

    archivo: str
    total_filas: int = Field(..., ge=0)
    importados: int = Field(..., ge=0)
    errores_validacion: list[ErrorFilaImportacion] = Field(default_factory=list)
    omitidos: list[ErrorFilaImportacion] = Field(
        default_factory=list,
        description="Filas válidas que no se insertaron (duplicadas o sin empresa)",
    )
    estado: str = Field(..., description="EXITOSO | PARCIAL | FALLIDO")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "archivo": "empleados_marzo.xlsx",
                "total_filas": 3,
                "importados": 2,
                "errores_validacion": [],
                "omitidos": [
                    {
                        "row": 4,
                        "empleado": "Carlos Pérez",
                        "numero_identificacion": "80123456",
                        "field": "numero_identificacion",
                        "message": "Ya existe un contrato con esta identificación",
                    }
                ],
                "estado": "PARCIAL",
            }
        }
    )


class HistorialImportacion(BaseModel):
    """Single row in the import history list."""

    id: int
    archivo_nombre: str
    fecha: datetime
    usuario_username: str
    registros_ok: int = Field(..., ge=0)
    registros_error: int = Field(..., ge=0)
    estado: str

    model_config = ConfigDict(from_attributes=True)
