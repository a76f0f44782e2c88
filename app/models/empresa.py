"""Empresa model - client company where the employee is placed."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Empresa(Base):
    """Client company referenced by ``Contrato.empresa_final_id``.

    Attributes:
        id: Primary key.
        name: Legal name, used in listings and contract-number generation.
        tax_id: NIT; unique.  Imports resolve companies by its digits.
        activa: Whether new contracts may reference the company.
        created_at: Record creation timestamp.
    """

    __tablename__ = "empresas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(300), nullable=False)
    tax_id = Column(String(30), unique=True, nullable=False)
    activa = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    contratos = relationship("Contrato", back_populates="empresa_final", lazy="select")
