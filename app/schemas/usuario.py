"""
Pydantic v2 schemas for user administration endpoints.

``ToggleUserStatusRequest`` and ``AdminResetPasswordRequest`` keep the
camelCase / snake_case mix of the payloads the admin screens already send;
every field is optional so the service can answer missing values with the
same 400 messages as before.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.utils.constants import ROLES


class UsuarioPerfil(BaseModel):
    """Row returned by ``get_all_user_profiles`` (no password data)."""

    id: int
    username: str
    email: str
    alias: str | None
    nombre_completo: str | None
    rol: str | None
    activo: bool
    is_temp_password: bool
    ultimo_acceso: datetime.datetime | None
    created_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class UsuariosListResponse(BaseModel):
    data: list[UsuarioPerfil]
    from_cache: bool = Field(..., description="True si la lista salió de la caché")


class ToggleUserStatusRequest(BaseModel):
    userId: int | None = Field(default=None, description="ID del usuario a modificar")
    action: str | None = Field(default=None, description="activate | deactivate")
    userToken: str | None = Field(default=None, description="JWT del administrador")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"userId": 7, "action": "deactivate", "userToken": "eyJhbGciOi..."}
        }
    )


class ToggleUserStatusResponse(BaseModel):
    success: bool
    message: str
    user: UsuarioPerfil


class AdminResetPasswordRequest(BaseModel):
    user_id: int | None = None
    new_password: str | None = Field(default=None, min_length=6, max_length=128)
    userToken: str | None = None


class UsuarioPasswordTemporal(BaseModel):
    id: int
    alias: str | None
    notification_email: str
    temporary_password: str
    is_temp_password: bool


class AdminResetPasswordResponse(BaseModel):
    success: bool
    user: UsuarioPasswordTemporal


class UsuarioCreate(BaseModel):
    """Payload for ``POST /api/usuarios`` (ADMIN only)."""

    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    alias: str | None = Field(default=None, max_length=100)
    nombre_completo: str | None = Field(default=None, max_length=300)
    rol: str = Field(default="CONSULTA", description=f"Rol: {ROLES}")
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("rol")
    @classmethod
    def _rol(cls, v: str) -> str:
        if v not in ROLES:
            raise ValueError(f"rol inválido. Valores permitidos: {ROLES}")
        return v
