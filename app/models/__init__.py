"""SQLAlchemy models package for Dashboard Contratos.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` or Alembic migrations run.
The import order follows the foreign-key dependency graph so that parent
tables are always registered before their children.

Usage from other modules:
    from app.models import Contrato, NovedadEconomica
"""

# Leaf tables
from app.models.usuario import Usuario  # noqa: F401
from app.models.empresa import Empresa  # noqa: F401
from app.models.entrada_cache import EntradaCache  # noqa: F401
from app.models.registro_importacion import RegistroImportacion  # noqa: F401

# Contract and its fixed-term periods
from app.models.contrato import Contrato  # noqa: F401
from app.models.historial_contrato_fijo import HistorialContratoFijo  # noqa: F401

# Novedades (append-only change log)
from app.models.novedad import (  # noqa: F401
    NovedadBeneficiario,
    NovedadCambioCargo,
    NovedadDatosPersonales,
    NovedadEconomica,
    NovedadEntidad,
    NovedadIncapacidad,
    NovedadTerminacion,
    NovedadTiempoLaboral,
)

__all__ = [
    "Usuario",
    "Empresa",
    "EntradaCache",
    "RegistroImportacion",
    "Contrato",
    "HistorialContratoFijo",
    "NovedadBeneficiario",
    "NovedadCambioCargo",
    "NovedadDatosPersonales",
    "NovedadEconomica",
    "NovedadEntidad",
    "NovedadIncapacidad",
    "NovedadTerminacion",
    "NovedadTiempoLaboral",
]
