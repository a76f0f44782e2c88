import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _seed_admin_user() -> None:
    """Create the configured admin account if it does not exist yet."""
    from app.database import SessionLocal
    from app.models.usuario import Usuario
    from app.utils.security import hash_password

    db = SessionLocal()
    try:
        admin = db.query(Usuario).filter(Usuario.username == settings.ADMIN_USERNAME).first()
        if admin is not None:
            logger.info("[SEED] Admin '%s' ya existe", settings.ADMIN_USERNAME)
            return
        db.add(
            Usuario(
                username=settings.ADMIN_USERNAME,
                email=settings.ADMIN_EMAIL,
                password_hash=hash_password(settings.ADMIN_PASSWORD),
                nombre_completo="Administrador",
                rol="ADMIN",
                activo=True,
            )
        )
        db.commit()
        logger.info("[SEED] Admin creado: %s", settings.ADMIN_USERNAME)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("[SEED] No se pudo crear el admin (¿migraciones aplicadas?): %s", exc)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: ensure an admin account exists
    _seed_admin_user()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from app.routers import auth  # noqa: E402

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])

# Contract table, approval, onboarding and fixed-term periods
from app.routers import contratos  # noqa: E402

app.include_router(
    contratos.router,
    prefix="/api/contratos",
    tags=["Contratos"],
)

# Novedades per contract
from app.routers import novedades  # noqa: E402

app.include_router(
    novedades.router,
    prefix="/api/contratos/{contrato_id}/novedades",
    tags=["Novedades"],
)

# Client companies
from app.routers import empresas  # noqa: E402

app.include_router(
    empresas.router,
    prefix="/api/empresas",
    tags=["Empresas"],
)

# User administration
from app.routers import usuarios  # noqa: E402

app.include_router(
    usuarios.router,
    prefix="/api",
    tags=["Usuarios"],
)

# Import module
from app.routers import importacion  # noqa: E402

app.include_router(
    importacion.router,
    prefix="/api/importacion",
    tags=["Importación"],
)

# Exportación (Excel)
from app.routers import exportacion  # noqa: E402

app.include_router(
    exportacion.router,
    prefix="/api/exportar",
    tags=["Exportación"],
)
