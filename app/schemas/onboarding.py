"""Pydantic v2 schemas for the onboarding checklist endpoints."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, Field


class CampoOnboardingEstado(BaseModel):
    """State of a single checklist field for one contract."""

    campo: str
    label: str
    estado: str = Field(..., description="empty | pending | confirmed")
    depends_on: str | None
    virtual: bool
    requires_detail: bool
    puede_marcar: bool
    mensaje_bloqueo: str | None = None


class OnboardingResponse(BaseModel):
    contract_id: int
    progreso: int = Field(..., ge=0, le=100)
    editable: bool
    campos: list[CampoOnboardingEstado]


class ToggleOnboardingRequest(BaseModel):
    """Toggle payload.

    ``fecha`` (and ``texto`` for affiliation confirmations) are required when
    marking a field that carries confirmation data.  ``confirmar`` must be
    true to unmark a field whose associated data will be discarded.
    """

    confirmar: bool = False
    fecha: datetime.date | None = Field(default=None, description="Fecha de confirmación")
    texto: str | None = Field(
        default=None,
        max_length=200,
        description="Nombre de la ARL / radicado / fondo según el campo",
    )


class ToggleOnboardingResponse(BaseModel):
    success: bool
    message: str
    onboarding: OnboardingResponse
