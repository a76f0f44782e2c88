"""
Shared Pydantic v2 schemas reused across modules.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    """Pagination parameters for list endpoints.

    Attributes:
        page: 1-based page number.
        page_size: Rows per page (capped at 200).
    """

    page: int = Field(
        default=1,
        ge=1,
        description="Número de página (base 1).",
    )
    page_size: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Registros por página (máximo 200).",
    )


class MessageResponse(BaseModel):
    """Confirmation envelope for operations that return no resource.

    Attributes:
        message: Short result summary.
        detail: Optional extra information.
    """

    message: str = Field(..., description="Resumen del resultado de la operación.")
    detail: str | None = Field(
        default=None,
        description="Información adicional.",
    )
