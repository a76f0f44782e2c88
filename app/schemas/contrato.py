"""
Pydantic v2 schemas for contract endpoints.

Write schemas validate enumerations and date windows with the same rules the
contract form enforces; the read schema adds the derived state (validity,
permissions, remuneration, onboarding progress) computed by the service
layer.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from app.utils.constants import (
    EMPRESAS_INTERNAS,
    MAX_BENEFICIARIOS_HIJO,
    TIPOS_CONTRATO,
    TIPOS_IDENTIFICACION,
    TIPOS_SALARIO,
)
from app.utils.fechas import validate_date_range


def _check_choice(value: str | None, choices: list[str], campo: str) -> str | None:
    if value is not None and value not in choices:
        raise ValueError(f"{campo} inválido. Valores permitidos: {choices}")
    return value


def _check_range(value: datetime.date | None, kind: str) -> datetime.date | None:
    error = validate_date_range(value, kind)
    if error:
        raise ValueError(error)
    return value


class _ContratoCampos(BaseModel):
    """Editable contract columns; every field optional."""

    segundo_nombre: str | None = Field(default=None, max_length=100)
    segundo_apellido: str | None = Field(default=None, max_length=100)
    fecha_expedicion_documento: datetime.date | None = Field(
        default=None, description="Fecha de expedición del documento"
    )
    celular: str | None = Field(default=None, max_length=30)
    email: EmailStr | None = Field(default=None, description="Correo personal del empleado")

    ciudad_labora: str | None = Field(default=None, max_length=100)
    cargo: str | None = Field(default=None, max_length=200)
    numero_contrato_helisa: str | None = Field(default=None, max_length=50)
    base_sena: bool = Field(default=True, description="Aporta a SENA según la base")
    fecha_ingreso: datetime.date | None = Field(default=None, description="Fecha de ingreso")
    tipo_contrato: str | None = Field(
        default=None, description=f"Tipo de contrato: {TIPOS_CONTRATO}"
    )
    fecha_fin: datetime.date | None = Field(
        default=None, description="Fecha de finalización (contratos a término fijo)"
    )
    tipo_salario: str | None = Field(default=None, description=f"Tipo de salario: {TIPOS_SALARIO}")
    salario: float | None = Field(default=None, ge=0, description="Salario mensual en COP")
    auxilio_salarial: float | None = Field(default=None, ge=0)
    auxilio_salarial_concepto: str | None = Field(default=None, max_length=200)
    auxilio_no_salarial: float | None = Field(default=None, ge=0)
    auxilio_no_salarial_concepto: str | None = Field(default=None, max_length=200)
    auxilio_transporte: float | None = Field(default=None, ge=0)
    tiene_condicion_medica: bool = False
    condicion_medica_detalle: str | None = None

    beneficiario_hijo: int = Field(default=0, ge=0, le=MAX_BENEFICIARIOS_HIJO)
    beneficiario_madre: int = Field(default=0, ge=0, le=1)
    beneficiario_padre: int = Field(default=0, ge=0, le=1)
    beneficiario_conyuge: int = Field(default=0, ge=0, le=1)

    observacion: str | None = None

    @field_validator("tipo_contrato")
    @classmethod
    def _tipo_contrato(cls, v: str | None) -> str | None:
        return _check_choice(v, TIPOS_CONTRATO, "tipo_contrato")

    @field_validator("tipo_salario")
    @classmethod
    def _tipo_salario(cls, v: str | None) -> str | None:
        return _check_choice(v, TIPOS_SALARIO, "tipo_salario")

    @field_validator("fecha_expedicion_documento")
    @classmethod
    def _fecha_expedicion(cls, v: datetime.date | None) -> datetime.date | None:
        return _check_range(v, "document")

    @field_validator("fecha_ingreso", "fecha_fin")
    @classmethod
    def _fechas_laborales(cls, v: datetime.date | None) -> datetime.date | None:
        return _check_range(v, "work")


class ContratoCreate(_ContratoCampos):
    """Payload for ``POST /api/contratos``.

    The contract is always created in ``borrador``; for ``fijo`` contracts
    with both dates the initial fixed-term period is created as well.
    """

    primer_nombre: str = Field(..., min_length=1, max_length=100)
    primer_apellido: str = Field(..., min_length=1, max_length=100)
    tipo_identificacion: str = Field(
        ..., description=f"Tipo de documento: {TIPOS_IDENTIFICACION}"
    )
    numero_identificacion: str = Field(..., min_length=3, max_length=30)
    fecha_nacimiento: datetime.date = Field(..., description="Fecha de nacimiento")
    empresa_interna: str = Field(..., description=f"Empresa interna: {EMPRESAS_INTERNAS}")
    empresa_final_id: int = Field(..., ge=1, description="ID de la empresa cliente")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "primer_nombre": "Laura",
                "primer_apellido": "Gómez",
                "tipo_identificacion": "CC",
                "numero_identificacion": "1020304050",
                "fecha_nacimiento": "1992-04-18",
                "empresa_interna": "Good",
                "empresa_final_id": 1,
                "cargo": "Analista de nómina",
                "tipo_contrato": "fijo",
                "fecha_ingreso": "2026-02-01",
                "fecha_fin": "2027-01-31",
                "salario": 2800000,
            }
        }
    )

    @field_validator("tipo_identificacion")
    @classmethod
    def _tipo_identificacion(cls, v: str) -> str:
        return _check_choice(v, TIPOS_IDENTIFICACION, "tipo_identificacion")

    @field_validator("empresa_interna")
    @classmethod
    def _empresa_interna(cls, v: str) -> str:
        return _check_choice(v, EMPRESAS_INTERNAS, "empresa_interna")

    @field_validator("fecha_nacimiento")
    @classmethod
    def _fecha_nacimiento(cls, v: datetime.date) -> datetime.date:
        return _check_range(v, "birth")

    @model_validator(mode="after")
    def _fechas_coherentes(self) -> "ContratoCreate":
        if self.fecha_ingreso and self.fecha_fin and self.fecha_fin <= self.fecha_ingreso:
            raise ValueError("La fecha de fin debe ser posterior a la fecha de ingreso")
        return self


class ContratoUpdate(_ContratoCampos):
    """Partial update of a ``borrador`` contract (``PUT /api/contratos/{id}``)."""

    primer_nombre: str | None = Field(default=None, min_length=1, max_length=100)
    primer_apellido: str | None = Field(default=None, min_length=1, max_length=100)
    tipo_identificacion: str | None = None
    numero_identificacion: str | None = Field(default=None, min_length=3, max_length=30)
    fecha_nacimiento: datetime.date | None = None
    empresa_interna: str | None = None
    empresa_final_id: int | None = Field(default=None, ge=1)

    @field_validator("tipo_identificacion")
    @classmethod
    def _tipo_identificacion(cls, v: str | None) -> str | None:
        return _check_choice(v, TIPOS_IDENTIFICACION, "tipo_identificacion")

    @field_validator("empresa_interna")
    @classmethod
    def _empresa_interna(cls, v: str | None) -> str | None:
        return _check_choice(v, EMPRESAS_INTERNAS, "empresa_interna")

    @field_validator("fecha_nacimiento")
    @classmethod
    def _fecha_nacimiento(cls, v: datetime.date | None) -> datetime.date | None:
        return _check_range(v, "birth")


class ContratoResponse(BaseModel):
    """Contract row plus derived state."""

    id: int
    primer_nombre: str
    segundo_nombre: str | None
    primer_apellido: str
    segundo_apellido: str | None
    nombre_completo: str
    tipo_identificacion: str
    numero_identificacion: str
    fecha_expedicion_documento: datetime.date | None
    fecha_nacimiento: datetime.date
    celular: str | None
    email: str | None

    empresa_interna: str
    empresa_final_id: int
    empresa_final_nombre: str | None = None
    ciudad_labora: str | None
    cargo: str | None
    numero_contrato_helisa: str | None
    base_sena: bool
    fecha_ingreso: datetime.date | None
    tipo_contrato: str | None
    fecha_fin: datetime.date | None
    tipo_salario: str | None
    salario: float | None
    auxilio_salarial: float | None
    auxilio_salarial_concepto: str | None
    auxilio_no_salarial: float | None
    auxilio_no_salarial_concepto: str | None
    auxilio_transporte: float | None
    tiene_condicion_medica: bool
    condicion_medica_detalle: str | None

    beneficiario_hijo: int
    beneficiario_madre: int
    beneficiario_padre: int
    beneficiario_conyuge: int

    programacion_cita_examenes: bool
    examenes: bool
    examenes_fecha: datetime.date | None
    envio_contrato: bool
    recibido_contrato_firmado: bool
    contrato_fecha_confirmacion: datetime.date | None
    solicitud_inscripcion_arl: bool
    arl_nombre: str | None
    arl_fecha_confirmacion: datetime.date | None
    solicitud_eps: bool
    radicado_eps: str | None
    eps_fecha_confirmacion: datetime.date | None
    envio_inscripcion_caja: bool
    radicado_ccf: str | None
    caja_fecha_confirmacion: datetime.date | None
    solicitud_cesantias: bool
    fondo_cesantias: str | None
    cesantias_fecha_confirmacion: datetime.date | None
    solicitud_fondo_pension: bool
    fondo_pension: str | None
    pension_fecha_confirmacion: datetime.date | None
    observacion: str | None

    status_aprobacion: str = Field(..., description="borrador | aprobado")
    approved_by: int | None
    approved_at: datetime.datetime | None
    created_by: int | None
    updated_by: int | None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    # Derived
    status_vigencia: str = Field(..., description="activo | terminado")
    vigencia_label: str
    days_until_expiry: int | None
    can_edit: bool
    can_delete: bool
    can_approve: bool
    total_remuneracion: float
    progreso_onboarding: int = Field(..., ge=0, le=100)

    model_config = ConfigDict(from_attributes=True)


class TablaContratosResponse(BaseModel):
    """Paginated contract listing."""

    total: int
    page: int
    page_size: int
    items: list[ContratoResponse]


class ContratoFiltros(BaseModel):
    """Filters for the contract table; every axis optional."""

    search: str | None = Field(
        default=None,
        max_length=100,
        description="Texto libre sobre nombres, documento, cargo o número de contrato",
    )
    empresa_final_id: int | None = Field(default=None, ge=1)
    empresa_interna: str | None = None
    status_aprobacion: str | None = None
    status_vigencia: str | None = None
    tipo_contrato: str | None = None


class AprobarContratoRequest(BaseModel):
    """Optional explicit contract number; generated when omitted."""

    contract_number: str | None = Field(
        default=None,
        max_length=50,
        description="Número de contrato Helisa; se genera automáticamente si se omite",
    )


class AprobarContratoResponse(BaseModel):
    success: bool
    error: str | None = None
    numero_contrato_helisa: str | None = None


class ContratoPorVencer(BaseModel):
    """Approved contract whose effective end date is close."""

    id: int
    nombre_completo: str
    numero_identificacion: str
    empresa_final_nombre: str | None
    cargo: str | None
    fecha_vencimiento: datetime.date
    fecha_vencimiento_texto: str
    dias_restantes: int
