"""
Pydantic v2 schemas for novedades (contract change events).

Each category accepts the same payload the corresponding capture form
submits.  Categories that change several fields at once take a ``cambios``
list; ``valor_anterior`` is never taken from the client, the service fills it
from the contract's current resolved value.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.utils.constants import (
    CAMPOS_DATOS_PERSONALES,
    MAX_BENEFICIARIOS_HIJO,
    TIPOS_BENEFICIARIO,
    TIPOS_ECONOMICOS_CON_CONCEPTO,
    TIPOS_ENTIDAD,
    TIPOS_INCAPACIDAD,
    TIPOS_NOVEDAD_ECONOMICA,
    TIPOS_PERIODO,
    TIPOS_TERMINACION,
    TIPOS_TIEMPO_LABORAL,
)

_ETIQUETAS_ECONOMICAS: dict[str, str] = {
    "salario": "Salario",
    "auxilio_salarial": "Auxilio Salarial",
    "auxilio_no_salarial": "Auxilio No Salarial",
    "auxilio_transporte": "Auxilio de Transporte",
}

_ETIQUETAS_BENEFICIARIO: dict[str, str] = {
    "hijo": "Hijos",
    "madre": "Madre",
    "padre": "Padre",
    "conyuge": "Cónyuge",
}

# Entity that must issue each kind of medical leave
ENTIDAD_RESPONSABLE_INCAPACIDAD: dict[str, str] = {
    "comun": "EPS",
    "laboral": "ARL",
    "maternidad": "EPS",
}


def _en(value: str, choices: list[str], campo: str) -> str:
    if value not in choices:
        raise ValueError(f"{campo} inválido. Valores permitidos: {choices}")
    return value


# ---------------------------------------------------------------------------
# Datos personales
# ---------------------------------------------------------------------------


class CambioDatoPersonal(BaseModel):
    campo: str = Field(..., description=f"Campo a modificar: {CAMPOS_DATOS_PERSONALES}")
    valor_nuevo: str = Field(..., min_length=1, max_length=300)
    observacion: str | None = None

    @field_validator("campo")
    @classmethod
    def _campo(cls, v: str) -> str:
        return _en(v, CAMPOS_DATOS_PERSONALES, "campo")

    @field_validator("valor_nuevo")
    @classmethod
    def _valor(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Debes realizar al menos un cambio válido")
        return v


class NovedadDatosPersonalesCreate(BaseModel):
    """Payload for ``POST /api/contratos/{id}/novedades/datos-personales``."""

    fecha: datetime.date | None = Field(
        default=None, description="Fecha efectiva; por defecto, hoy"
    )
    cambios: list[CambioDatoPersonal] = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "cambios": [
                    {"campo": "celular", "valor_nuevo": "3104567890"},
                ]
            }
        }
    )


# ---------------------------------------------------------------------------
# Económicas
# ---------------------------------------------------------------------------


class CambioEconomico(BaseModel):
    tipo: str = Field(..., description=f"Tipo: {TIPOS_NOVEDAD_ECONOMICA}")
    valor_nuevo: float = Field(..., description="Nuevo valor mensual en COP")
    concepto: str | None = Field(
        default=None,
        max_length=200,
        description="Obligatorio para auxilio salarial y no salarial",
    )
    motivo: str | None = None

    @field_validator("tipo")
    @classmethod
    def _tipo(cls, v: str) -> str:
        return _en(v, TIPOS_NOVEDAD_ECONOMICA, "tipo")

    @model_validator(mode="after")
    def _reglas(self) -> "CambioEconomico":
        etiqueta = _ETIQUETAS_ECONOMICAS[self.tipo]
        if self.tipo in TIPOS_ECONOMICOS_CON_CONCEPTO:
            if not (self.concepto and self.concepto.strip()):
                raise ValueError(f"El concepto es obligatorio para {etiqueta}")
            self.concepto = self.concepto.strip()
        else:
            self.concepto = None
        if self.valor_nuevo < 0:
            raise ValueError(
                f"El valor de {etiqueta} debe ser un número válido mayor o igual a 0"
            )
        return self


class NovedadEconomicaCreate(BaseModel):
    fecha: datetime.date | None = None
    cambios: list[CambioEconomico] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Entidades
# ---------------------------------------------------------------------------


class CambioEntidad(BaseModel):
    tipo: str = Field(..., description=f"Tipo de entidad: {TIPOS_ENTIDAD}")
    entidad_nueva: str = Field(..., min_length=1, max_length=200)
    fecha: datetime.date
    observacion: str | None = None

    @field_validator("tipo")
    @classmethod
    def _tipo(cls, v: str) -> str:
        return _en(v, TIPOS_ENTIDAD, "tipo")

    @field_validator("entidad_nueva")
    @classmethod
    def _entidad(cls, v: str) -> str:
        return v.strip()


class NovedadEntidadCreate(BaseModel):
    cambios: list[CambioEntidad] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Cambio de cargo
# ---------------------------------------------------------------------------


class NovedadCambioCargoCreate(BaseModel):
    """At least one of ``cargo_nuevo`` or ``aporta_sena`` must differ from the current value."""

    cargo_nuevo: str | None = Field(default=None, max_length=200)
    aporta_sena: bool | None = None
    fecha: datetime.date | None = None
    motivo: str | None = None


# ---------------------------------------------------------------------------
# Beneficiarios
# ---------------------------------------------------------------------------


class CambioBeneficiario(BaseModel):
    tipo_beneficiario: str = Field(..., description=f"Tipo: {TIPOS_BENEFICIARIO}")
    valor_nuevo: int = Field(..., description="Cantidad (hijo) o 0/1 (demás tipos)")

    @field_validator("tipo_beneficiario")
    @classmethod
    def _tipo(cls, v: str) -> str:
        return _en(v, TIPOS_BENEFICIARIO, "tipo_beneficiario")

    @field_validator("valor_nuevo", mode="before")
    @classmethod
    def _bool_a_entero(cls, v):
        if isinstance(v, bool):
            return int(v)
        return v

    @model_validator(mode="after")
    def _rango(self) -> "CambioBeneficiario":
        etiqueta = _ETIQUETAS_BENEFICIARIO[self.tipo_beneficiario].lower()
        maximo = MAX_BENEFICIARIOS_HIJO if self.tipo_beneficiario == "hijo" else 1
        if self.valor_nuevo < 0:
            raise ValueError(f"El número de {etiqueta} no puede ser negativo")
        if self.valor_nuevo > maximo:
            raise ValueError(f"El número de {etiqueta} no puede ser mayor a {maximo}")
        return self


class NovedadBeneficiarioCreate(BaseModel):
    fecha: datetime.date
    observacion: str | None = None
    cambios: list[CambioBeneficiario] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Tiempo laboral
# ---------------------------------------------------------------------------


class NovedadTiempoLaboralCreate(BaseModel):
    """Extension, vacation or suspension.

    For ``fijo`` contracts a ``prorroga`` is routed through the fixed-term
    period engine, which applies the labour-law checks.
    """

    tipo_tiempo: str = Field(..., description=f"Tipo: {TIPOS_TIEMPO_LABORAL}")
    fecha_inicio: datetime.date | None = None
    fecha_fin: datetime.date | None = None
    nueva_fecha_fin: datetime.date | None = None
    tipo_prorroga: str = Field(
        default="prorroga_acordada",
        description="Tipo de período para prórrogas de contratos fijos",
    )
    programadas: bool = False
    disfrutadas: bool = False
    motivo: str = Field(default="", max_length=2000)

    @field_validator("tipo_tiempo")
    @classmethod
    def _tipo(cls, v: str) -> str:
        return _en(v, TIPOS_TIEMPO_LABORAL, "tipo_tiempo")

    @field_validator("tipo_prorroga")
    @classmethod
    def _tipo_prorroga(cls, v: str) -> str:
        return _en(v, TIPOS_PERIODO[1:], "tipo_prorroga")

    @model_validator(mode="after")
    def _reglas(self) -> "NovedadTiempoLaboralCreate":
        if self.tipo_tiempo == "prorroga" and self.nueva_fecha_fin is None:
            raise ValueError("La nueva fecha de finalización es obligatoria para prórrogas")
        if self.tipo_tiempo in ("vacaciones", "suspension"):
            if self.fecha_inicio is None or self.fecha_fin is None:
                raise ValueError("Las fechas de inicio y fin son obligatorias")
            if self.fecha_fin <= self.fecha_inicio:
                raise ValueError("La fecha de fin debe ser posterior a la fecha de inicio")
        self.motivo = self.motivo.strip()
        if not self.motivo:
            raise ValueError("El motivo es obligatorio")
        return self


# ---------------------------------------------------------------------------
# Incapacidades
# ---------------------------------------------------------------------------


class NovedadIncapacidadCreate(BaseModel):
    tipo_incapacidad: str = Field(..., description=f"Tipo: {TIPOS_INCAPACIDAD}")
    fecha_inicio: datetime.date
    fecha_fin: datetime.date
    entidad: str = Field(default="", max_length=200)
    soporte_url: str | None = Field(default=None, max_length=500)
    observacion: str | None = None

    @field_validator("tipo_incapacidad")
    @classmethod
    def _tipo(cls, v: str) -> str:
        return _en(v, TIPOS_INCAPACIDAD, "tipo_incapacidad")

    @field_validator("soporte_url")
    @classmethod
    def _url(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError("La URL del soporte debe ser válida (http:// o https://)")
        return v

    @model_validator(mode="after")
    def _reglas(self) -> "NovedadIncapacidadCreate":
        if self.fecha_fin <= self.fecha_inicio:
            raise ValueError("La fecha de fin debe ser posterior a la fecha de inicio")
        self.entidad = self.entidad.strip()
        if not self.entidad:
            responsable = ENTIDAD_RESPONSABLE_INCAPACIDAD[self.tipo_incapacidad]
            raise ValueError(f"La {responsable} es obligatoria")
        return self


# ---------------------------------------------------------------------------
# Terminación
# ---------------------------------------------------------------------------


class NovedadTerminacionCreate(BaseModel):
    """Future dates are allowed: the termination is then scheduled."""

    fecha: datetime.date
    tipo_terminacion: str = Field(..., description=f"Tipo: {TIPOS_TERMINACION}")
    observacion: str | None = None

    @field_validator("tipo_terminacion")
    @classmethod
    def _tipo(cls, v: str) -> str:
        return _en(v, TIPOS_TERMINACION, "tipo_terminacion")


# ---------------------------------------------------------------------------
# Read schemas
# ---------------------------------------------------------------------------


class _NovedadResponse(BaseModel):
    id: int
    contract_id: int
    fecha: datetime.date | None
    created_at: datetime.datetime
    created_by: int | None

    model_config = ConfigDict(from_attributes=True)


class NovedadDatosPersonalesResponse(_NovedadResponse):
    campo: str
    valor_anterior: str | None
    valor_nuevo: str
    observacion: str | None


class NovedadEconomicaResponse(_NovedadResponse):
    tipo: str
    concepto: str | None
    valor_anterior: float | None
    valor_nuevo: float
    motivo: str | None


class NovedadEntidadResponse(_NovedadResponse):
    tipo: str
    entidad_anterior: str | None
    entidad_nueva: str
    observacion: str | None


class NovedadCambioCargoResponse(_NovedadResponse):
    cargo_anterior: str | None
    cargo_nuevo: str
    aporta_sena: bool | None
    motivo: str | None


class NovedadBeneficiarioResponse(_NovedadResponse):
    tipo_beneficiario: str
    valor_anterior: int | None
    valor_nuevo: int
    observacion: str | None


class NovedadTiempoLaboralResponse(_NovedadResponse):
    tipo_tiempo: str
    fecha_inicio: datetime.date | None
    fecha_fin: datetime.date | None
    nueva_fecha_fin: datetime.date | None
    dias: int | None
    programadas: bool
    disfrutadas: bool
    motivo: str | None


class NovedadIncapacidadResponse(_NovedadResponse):
    tipo_incapacidad: str
    fecha_inicio: datetime.date
    fecha_fin: datetime.date
    dias: int
    entidad: str
    soporte_url: str | None
    observacion: str | None


class NovedadTerminacionResponse(_NovedadResponse):
    tipo_terminacion: str
    observacion: str | None


class TerminacionExistenteResponse(BaseModel):
    """Result of the pre-submission termination existence check."""

    existe: bool
    terminacion: NovedadTerminacionResponse | None = None


# ---------------------------------------------------------------------------
# Current resolved state
# ---------------------------------------------------------------------------


class DatosActualesResponse(BaseModel):
    """Contract fields with the novedad log overlaid on the base record.

    ``error`` is set (and the affected fields keep their base value) when a
    category could not be loaded.
    """

    contract_id: int

    primer_nombre: str | None
    segundo_nombre: str | None
    primer_apellido: str | None
    segundo_apellido: str | None
    celular: str | None
    email: str | None

    salario: float | None
    auxilio_salarial: float | None
    auxilio_salarial_concepto: str | None
    auxilio_no_salarial: float | None
    auxilio_no_salarial_concepto: str | None
    auxilio_transporte: float | None
    total_remuneracion: float

    eps: str | None
    fondo_pension: str | None
    fondo_cesantias: str | None

    cargo: str | None
    aporta_sena: bool

    beneficiario_hijo: int
    beneficiario_madre: bool
    beneficiario_padre: bool
    beneficiario_conyuge: bool

    fecha_fin: datetime.date | None
    is_terminated: bool
    fecha_terminacion: datetime.date | None
    tipo_terminacion: str | None

    status_vigencia: str
    vigencia_label: str
    days_until_expiry: int | None

    error: str | None = None
