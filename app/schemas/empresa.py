"""Pydantic v2 schemas for client companies (``/api/empresas``)."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EmpresaCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=300, description="Razón social")
    tax_id: str = Field(..., min_length=5, max_length=30, description="NIT")

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Comercial Andina S.A.S.", "tax_id": "900.123.456-7"}}
    )

    @field_validator("name", "tax_id")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


class EmpresaResponse(BaseModel):
    id: int
    name: str
    tax_id: str
    activa: bool
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)
