"""Contrato model - employee contract with onboarding checklist and approval state."""

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
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Contrato(Base):
    """Base record of an employment contract.

    Created in ``borrador`` and freely editable until approved.  Once
    ``aprobado`` the row is only changed through novedades (and the fixed-term
    extension procedure, which moves ``fecha_fin``).  ``status_aprobacion`` is
    nullable for legacy rows, which count as approved.

    Attributes:
        id: Primary key.
        primer_nombre .. email: Employee identity and contact data.
        empresa_interna: Employing entity, "Good" or "CPS".
        empresa_final_id: FK to the client company (``empresas``).
        tipo_contrato: "indefinido", "fijo", "obra" or "aprendizaje".
        fecha_ingreso / fecha_fin: Start and (for fixed-term) end dates.
        salario, auxilio_*: Monthly remuneration components in COP.
        beneficiario_*: Dependants; ``hijo`` is a count, the rest 0/1.
        programacion_cita_examenes .. pension_fecha_confirmacion:
            Onboarding checklist flags plus their confirmation data.
        status_aprobacion: "borrador" or "aprobado".
        approved_by / approved_at: Approval audit.
        created_by / updated_by: FK to ``usuario``.
    """

    __tablename__ = "contracts"
    __table_args__ = (
        UniqueConstraint(
            "tipo_identificacion",
            "numero_identificacion",
            name="unique_identificacion_contrato",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    primer_nombre = Column(String(100), nullable=False)
    segundo_nombre = Column(String(100), nullable=True)
    primer_apellido = Column(String(100), nullable=False)
    segundo_apellido = Column(String(100), nullable=True)
    tipo_identificacion = Column(String(20), nullable=False)
    numero_identificacion = Column(String(30), nullable=False, index=True)
    fecha_expedicion_documento = Column(Date, nullable=True)
    fecha_nacimiento = Column(Date, nullable=False)
    celular = Column(String(30), nullable=True)
    email = Column(String(200), nullable=True)

    # Employment
    empresa_interna = Column(String(20), nullable=False)
    empresa_final_id = Column(Integer, ForeignKey("empresas.id"), nullable=False)
    ciudad_labora = Column(String(100), nullable=True)
    cargo = Column(String(200), nullable=True)
    numero_contrato_helisa = Column(String(50), nullable=True)
    base_sena = Column(Boolean, default=True, nullable=False)
    fecha_ingreso = Column(Date, nullable=True)
    tipo_contrato = Column(String(20), nullable=True)
    fecha_fin = Column(Date, nullable=True)
    tipo_salario = Column(String(20), nullable=True)
    salario = Column(Numeric(15, 2), nullable=True)
    auxilio_salarial = Column(Numeric(15, 2), nullable=True)
    auxilio_salarial_concepto = Column(String(200), nullable=True)
    auxilio_no_salarial = Column(Numeric(15, 2), nullable=True)
    auxilio_no_salarial_concepto = Column(String(200), nullable=True)
    auxilio_transporte = Column(Numeric(15, 2), nullable=True)
    tiene_condicion_medica = Column(Boolean, default=False, nullable=False)
    condicion_medica_detalle = Column(Text, nullable=True)

    # Dependants
    beneficiario_hijo = Column(Integer, default=0, nullable=False)
    beneficiario_madre = Column(Integer, default=0, nullable=False)
    beneficiario_padre = Column(Integer, default=0, nullable=False)
    beneficiario_conyuge = Column(Integer, default=0, nullable=False)

    # Onboarding checklist
    programacion_cita_examenes = Column(Boolean, default=False, nullable=False)
    examenes = Column(Boolean, default=False, nullable=False)
    examenes_fecha = Column(Date, nullable=True)
    envio_contrato = Column(Boolean, default=False, nullable=False)
    recibido_contrato_firmado = Column(Boolean, default=False, nullable=False)
    contrato_fecha_confirmacion = Column(Date, nullable=True)
    solicitud_inscripcion_arl = Column(Boolean, default=False, nullable=False)
    arl_nombre = Column(String(200), nullable=True)
    arl_fecha_confirmacion = Column(Date, nullable=True)
    solicitud_eps = Column(Boolean, default=False, nullable=False)
    radicado_eps = Column(String(200), nullable=True)
    eps_fecha_confirmacion = Column(Date, nullable=True)
    envio_inscripcion_caja = Column(Boolean, default=False, nullable=False)
    radicado_ccf = Column(String(200), nullable=True)
    caja_fecha_confirmacion = Column(Date, nullable=True)
    solicitud_cesantias = Column(Boolean, default=False, nullable=False)
    fondo_cesantias = Column(String(200), nullable=True)
    cesantias_fecha_confirmacion = Column(Date, nullable=True)
    solicitud_fondo_pension = Column(Boolean, default=False, nullable=False)
    fondo_pension = Column(String(200), nullable=True)
    pension_fecha_confirmacion = Column(Date, nullable=True)
    observacion = Column(Text, nullable=True)

    # Approval
    status_aprobacion = Column(String(20), default="borrador", nullable=True)
    approved_by = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)

    # Audit
    created_by = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    empresa_final = relationship("Empresa", back_populates="contratos", lazy="select")
    periodos = relationship(
        "HistorialContratoFijo",
        back_populates="contrato",
        order_by="HistorialContratoFijo.numero_periodo",
        lazy="select",
        cascade="all, delete-orphan",
    )
    novedades_datos_personales = relationship(
        "NovedadDatosPersonales", back_populates="contrato",
        lazy="select", cascade="all, delete-orphan",
    )
    novedades_economicas = relationship(
        "NovedadEconomica", back_populates="contrato",
        lazy="select", cascade="all, delete-orphan",
    )
    novedades_entidades = relationship(
        "NovedadEntidad", back_populates="contrato",
        lazy="select", cascade="all, delete-orphan",
    )
    novedades_cambio_cargo = relationship(
        "NovedadCambioCargo", back_populates="contrato",
        lazy="select", cascade="all, delete-orphan",
    )
    novedades_beneficiarios = relationship(
        "NovedadBeneficiario", back_populates="contrato",
        lazy="select", cascade="all, delete-orphan",
    )
    novedades_tiempo_laboral = relationship(
        "NovedadTiempoLaboral", back_populates="contrato",
        lazy="select", cascade="all, delete-orphan",
    )
    novedades_incapacidad = relationship(
        "NovedadIncapacidad", back_populates="contrato",
        lazy="select", cascade="all, delete-orphan",
    )
    terminacion = relationship(
        "NovedadTerminacion", back_populates="contrato",
        uselist=False, lazy="select", cascade="all, delete-orphan",
    )

    @property
    def nombre_completo(self) -> str:
        partes = [
            self.primer_nombre,
            self.segundo_nombre,
            self.primer_apellido,
            self.segundo_apellido,
        ]
        return " ".join(p for p in partes if p)
