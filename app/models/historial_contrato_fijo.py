"""HistorialContratoFijo model - one row per period of a fixed-term contract."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class HistorialContratoFijo(Base):
    """Contiguous period of a ``fijo`` contract.

    Period 1 is the ``inicial`` one; each extension starts the day after the
    previous period ends.  Exactly one row per contract carries
    ``es_periodo_actual = True``.

    Attributes:
        id: Primary key.
        contract_id: FK to ``contracts``.
        numero_periodo: 1-based sequence number, unique per contract.
        fecha_inicio / fecha_fin: Inclusive period bounds.
        tipo_periodo: "inicial", "prorroga_automatica" or "prorroga_acordada".
        es_periodo_actual: Whether this is the contract's current period.
        observaciones: Free-text reason supplied with the extension.
        created_by: FK to ``usuario``.
        created_at: Record creation timestamp.
    """

    __tablename__ = "historial_contratos_fijos"
    __table_args__ = (
        UniqueConstraint(
            "contract_id", "numero_periodo", name="unique_numero_periodo_por_contrato"
        ),
        CheckConstraint("numero_periodo > 0", name="check_numero_periodo_positivo"),
        CheckConstraint("fecha_fin > fecha_inicio", name="check_fechas_validas"),
        CheckConstraint(
            "tipo_periodo IN ('inicial', 'prorroga_automatica', 'prorroga_acordada')",
            name="check_tipo_periodo_valido",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    contract_id = Column(
        Integer,
        ForeignKey("contracts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    numero_periodo = Column(Integer, nullable=False)
    fecha_inicio = Column(Date, nullable=False)
    fecha_fin = Column(Date, nullable=False)
    tipo_periodo = Column(String(30), nullable=False)
    es_periodo_actual = Column(Boolean, default=False, nullable=False)
    observaciones = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    contrato = relationship("Contrato", back_populates="periodos", lazy="select")
