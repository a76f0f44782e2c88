"""
Pydantic v2 schemas for the fixed-term period engine.

``EstadoContratoFijoResponse`` serialises ``anios_totales`` under the key
``años_totales`` so clients keep the field name the status procedure has
always returned.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.constants import TIPOS_PERIODO


class PeriodoResponse(BaseModel):
    """One row of ``historial_contratos_fijos``."""

    id: int
    contract_id: int
    numero_periodo: int
    fecha_inicio: datetime.date
    fecha_fin: datetime.date
    tipo_periodo: str
    es_periodo_actual: bool
    observaciones: str | None
    created_by: int | None
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class EstadoContratoFijoResponse(BaseModel):
    """Summary of a fixed-term contract's period history.

    Attributes:
        total_periodos: Number of recorded periods.
        periodo_actual: ``numero_periodo`` of the current period.
        proximo_periodo: Number the next extension would receive.
        anios_totales: Elapsed contract duration in years (days / 365).
        dias_totales: Days from the first period start to the current end.
        debe_ser_indefinido: True once the 4-year ceiling is reached.
        alerta_legal: Human-readable legal warning, if any.
        nivel_alerta: ``danger``, ``warning`` or ``success``.
    """

    contract_id: int
    total_periodos: int
    periodo_actual: int | None
    proximo_periodo: int
    anios_totales: float = Field(..., serialization_alias="años_totales")
    dias_totales: int
    debe_ser_indefinido: bool
    alerta_legal: str | None
    nivel_alerta: str
    fecha_fin_actual: datetime.date | None
    periodos: list[PeriodoResponse] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ProrrogaRequest(BaseModel):
    """Payload for ``POST /api/contratos/{id}/periodos/prorroga``."""

    nueva_fecha_fin: datetime.date = Field(..., description="Nueva fecha de finalización")
    tipo_periodo: str = Field(
        default="prorroga_acordada",
        description="prorroga_automatica | prorroga_acordada",
    )
    motivo: str = Field(..., min_length=1, max_length=2000)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "nueva_fecha_fin": "2027-12-31",
                "tipo_periodo": "prorroga_acordada",
                "motivo": "Renovación acordada con el cliente",
            }
        }
    )

    @field_validator("tipo_periodo")
    @classmethod
    def _tipo_periodo(cls, v: str) -> str:
        if v not in TIPOS_PERIODO[1:]:
            raise ValueError(f"tipo_periodo inválido. Valores permitidos: {TIPOS_PERIODO[1:]}")
        return v

    @field_validator("motivo")
    @classmethod
    def _motivo(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("El motivo es obligatorio")
        return v


class ProrrogaResponse(BaseModel):
    success: bool
    periodo: PeriodoResponse
    estado: EstadoContratoFijoResponse
