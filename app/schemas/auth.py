"""
Pydantic v2 schemas for the authentication endpoints.

Covers the JWT token response, the password change payload and the profile
returned by ``GET /api/auth/me``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """Signed JWT for the ``Authorization: Bearer <token>`` header.

    ``is_temp_password`` tells the client it must force a password change
    before showing the dashboard.
    """

    access_token: str = Field(..., description="JWT de acceso firmado")
    token_type: str = Field(default="bearer", description="Tipo de token OAuth2")
    is_temp_password: bool = Field(
        default=False, description="True si la sesión usa una contraseña temporal"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer",
                "is_temp_password": False,
            }
        }
    )


class UserResponse(BaseModel):
    """Public profile of the authenticated user (no password data).

    Attributes:
        id: Primary key.
        username: Login name.
        email: Email on record.
        alias: Short display handle.
        nombre_completo: Full display name.
        rol: One of ``constants.ROLES``.
        activo: Whether the account is enabled.
        is_temp_password: Whether the current password was issued by an admin reset.
    """

    id: int
    username: str
    email: str
    alias: str | None
    nombre_completo: str | None
    rol: str | None
    activo: bool
    is_temp_password: bool

    model_config = ConfigDict(from_attributes=True)


class CambiarPasswordRequest(BaseModel):
    """Payload for ``POST /api/auth/cambiar-password``."""

    password_actual: str = Field(..., min_length=1, max_length=128)
    password_nueva: str = Field(..., min_length=6, max_length=128)
