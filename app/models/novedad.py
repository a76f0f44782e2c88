"""Novedad models - append-only change events recorded against a contract.

Each category lives in its own table.  Rows are never updated: the current
value of a contract field is the ``valor_nuevo`` of the most recently created
row for that field, falling back to the base ``Contrato`` column.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declared_attr, relationship
from sqlalchemy.sql import func

from app.database import Base


class NovedadMixin:
    """Columns shared by every novedad table.

    Attributes:
        id: Primary key.
        contract_id: FK to ``contracts``.
        fecha: Effective date of the change.
        created_at: Insertion timestamp; orders the log.
        created_by: FK to the ``usuario`` who registered the change.
    """

    id = Column(Integer, primary_key=True, autoincrement=True)
    fecha = Column(Date, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    @declared_attr
    def contract_id(cls):
        return Column(
            Integer,
            ForeignKey("contracts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    @declared_attr
    def created_by(cls):
        return Column(Integer, ForeignKey("usuario.id"), nullable=True)


class NovedadDatosPersonales(NovedadMixin, Base):
    """Change to a name, phone or email field (``campo``)."""

    __tablename__ = "novedades_datos_personales"

    campo = Column(String(50), nullable=False)
    valor_anterior = Column(String(300), nullable=True)
    valor_nuevo = Column(String(300), nullable=False)
    observacion = Column(Text, nullable=True)

    contrato = relationship(
        "Contrato", back_populates="novedades_datos_personales", lazy="select"
    )


class NovedadEconomica(NovedadMixin, Base):
    """Change to salary or an allowance; auxilios may carry a ``concepto`` label."""

    __tablename__ = "novedades_economicas"

    tipo = Column(String(30), nullable=False)
    # "salario", "auxilio_salarial", "auxilio_no_salarial", "auxilio_transporte"
    concepto = Column(String(200), nullable=True)
    valor_anterior = Column(Numeric(15, 2), nullable=True)
    valor_nuevo = Column(Numeric(15, 2), nullable=False)
    motivo = Column(Text, nullable=True)

    contrato = relationship(
        "Contrato", back_populates="novedades_economicas", lazy="select"
    )


class NovedadEntidad(NovedadMixin, Base):
    """Change of EPS, pension fund or severance fund."""

    __tablename__ = "novedades_entidades"

    tipo = Column(String(30), nullable=False)  # "eps", "fondo_pension", "fondo_cesantias"
    entidad_anterior = Column(String(200), nullable=True)
    entidad_nueva = Column(String(200), nullable=False)
    observacion = Column(Text, nullable=True)

    contrato = relationship(
        "Contrato", back_populates="novedades_entidades", lazy="select"
    )


class NovedadCambioCargo(NovedadMixin, Base):
    """Position change; ``aporta_sena`` is only stored when it changed."""

    __tablename__ = "novedades_cambio_cargo"

    cargo_anterior = Column(String(200), nullable=True)
    cargo_nuevo = Column(String(200), nullable=False)
    aporta_sena = Column(Boolean, nullable=True)
    motivo = Column(Text, nullable=True)

    contrato = relationship(
        "Contrato", back_populates="novedades_cambio_cargo", lazy="select"
    )


class NovedadBeneficiario(NovedadMixin, Base):
    """Dependant change; ``hijo`` is a count, the other types are 0/1."""

    __tablename__ = "novedades_beneficiarios"

    tipo_beneficiario = Column(String(20), nullable=False)
    valor_anterior = Column(Integer, nullable=True)
    valor_nuevo = Column(Integer, nullable=False)
    observacion = Column(Text, nullable=True)

    contrato = relationship(
        "Contrato", back_populates="novedades_beneficiarios", lazy="select"
    )


class NovedadTiempoLaboral(NovedadMixin, Base):
    """Extension (prórroga), vacation or suspension."""

    __tablename__ = "novedades_tiempo_laboral"

    tipo_tiempo = Column(String(20), nullable=False)  # "prorroga", "vacaciones", "suspension"
    fecha_inicio = Column(Date, nullable=True)
    fecha_fin = Column(Date, nullable=True)
    nueva_fecha_fin = Column(Date, nullable=True)
    dias = Column(Integer, nullable=True)
    programadas = Column(Boolean, default=False, nullable=False)
    disfrutadas = Column(Boolean, default=False, nullable=False)
    motivo = Column(Text, nullable=True)

    contrato = relationship(
        "Contrato", back_populates="novedades_tiempo_laboral", lazy="select"
    )


class NovedadIncapacidad(NovedadMixin, Base):
    """Medical leave with its issuing entity and optional support document URL."""

    __tablename__ = "novedades_incapacidad"

    tipo_incapacidad = Column(String(20), nullable=False)  # "comun", "laboral", "maternidad"
    fecha_inicio = Column(Date, nullable=False)
    fecha_fin = Column(Date, nullable=False)
    dias = Column(Integer, nullable=False)
    entidad = Column(String(200), nullable=False)
    soporte_url = Column(String(500), nullable=True)
    observacion = Column(Text, nullable=True)

    contrato = relationship(
        "Contrato", back_populates="novedades_incapacidad", lazy="select"
    )


class NovedadTerminacion(NovedadMixin, Base):
    """Contract termination; at most one per contract."""

    __tablename__ = "novedades_terminacion"
    __table_args__ = (
        UniqueConstraint("contract_id", name="unique_terminacion_por_contrato"),
    )

    tipo_terminacion = Column(String(30), nullable=False)
    observacion = Column(Text, nullable=True)

    contrato = relationship("Contrato", back_populates="terminacion", lazy="select")
