"""
Application-wide constants for the Dashboard Contratos system.

Defines domain enumerations, labour-law thresholds, and lookup lists used
across routers, services, and models.
"""

from typing import Final

# ---------------------------------------------------------------------------
# User roles
# ---------------------------------------------------------------------------

ROLES: Final[list[str]] = [
    "ADMIN",
    "RRHH",
    "CONSULTA",
]

# Roles allowed to create or modify contracts and novedades
ROLES_ESCRITURA: Final[tuple[str, ...]] = ("ADMIN", "RRHH")

# ---------------------------------------------------------------------------
# Contract enumerations
# ---------------------------------------------------------------------------

TIPOS_IDENTIFICACION: Final[list[str]] = ["CC", "CE", "Pasaporte", "PEP", "Otro"]

EMPRESAS_INTERNAS: Final[list[str]] = ["Good", "CPS"]

TIPOS_CONTRATO: Final[list[str]] = [
    "indefinido",
    "fijo",
    "obra",
    "aprendizaje",
]

TIPOS_SALARIO: Final[list[str]] = ["integral", "ordinario"]

ESTADO_BORRADOR: Final[str] = "borrador"
ESTADO_APROBADO: Final[str] = "aprobado"
ESTADOS_APROBACION: Final[list[str]] = [ESTADO_BORRADOR, ESTADO_APROBADO]

VIGENCIA_ACTIVO: Final[str] = "activo"
VIGENCIA_TERMINADO: Final[str] = "terminado"

# ---------------------------------------------------------------------------
# Novedad enumerations
# ---------------------------------------------------------------------------

CAMPOS_DATOS_PERSONALES: Final[list[str]] = [
    "primer_nombre",
    "segundo_nombre",
    "primer_apellido",
    "segundo_apellido",
    "celular",
    "email",
]

TIPOS_NOVEDAD_ECONOMICA: Final[list[str]] = [
    "salario",
    "auxilio_salarial",
    "auxilio_no_salarial",
    "auxilio_transporte",
]

# Economic types that carry a free-text ``concepto`` label
TIPOS_ECONOMICOS_CON_CONCEPTO: Final[frozenset[str]] = frozenset(
    {"auxilio_salarial", "auxilio_no_salarial"}
)

TIPOS_ENTIDAD: Final[list[str]] = ["eps", "fondo_pension", "fondo_cesantias"]

TIPOS_BENEFICIARIO: Final[list[str]] = ["hijo", "madre", "padre", "conyuge"]
MAX_BENEFICIARIOS_HIJO: Final[int] = 10

TIPOS_TIEMPO_LABORAL: Final[list[str]] = ["prorroga", "vacaciones", "suspension"]

TIPOS_INCAPACIDAD: Final[list[str]] = ["comun", "laboral", "maternidad"]

TIPOS_TERMINACION: Final[list[str]] = [
    "justa_causa",
    "sin_justa_causa",
    "mutuo_acuerdo",
    "vencimiento",
]

# ---------------------------------------------------------------------------
# Fixed-term contracts (Código Sustantivo del Trabajo, art. 46)
# ---------------------------------------------------------------------------

TIPOS_PERIODO: Final[list[str]] = [
    "inicial",
    "prorroga_automatica",
    "prorroga_acordada",
]

MAX_ANIOS_CONTRATO_FIJO: Final[int] = 4
PRORROGA_MINIMO_ANUAL_DESDE: Final[int] = 5  # 5th extension onwards
DIAS_MINIMOS_PRORROGA_ANUAL: Final[int] = 365
DIAS_POR_ANIO: Final[int] = 365
ANIOS_ALERTA_CERCA_LIMITE: Final[float] = 3.5

NIVELES_ALERTA: Final[list[str]] = ["danger", "warning", "success"]

# ---------------------------------------------------------------------------
# Temporary passwords (admin reset)
# ---------------------------------------------------------------------------

ADJETIVOS_PASSWORD: Final[list[str]] = [
    "Rapido", "Fuerte", "Nuevo", "Activo", "Facil", "Seguro",
]
SUSTANTIVOS_PASSWORD: Final[list[str]] = [
    "Usuario", "Acceso", "Inicio", "Portal", "Sistema", "Cuenta",
]
