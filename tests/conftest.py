"""Shared pytest fixtures: in-memory SQLite database, API client and users."""

from __future__ import annotations

import datetime
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, get_db
from app.main import app
from app.models.contrato import Contrato
from app.models.empresa import Empresa
from app.models.usuario import Usuario
from app.utils.security import create_access_token, hash_password

PASSWORD = "Secreta123!"


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(engine):
    testing_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _override_get_db():
        session = testing_session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users and tokens
# ---------------------------------------------------------------------------


def _crear_usuario(db, username: str, rol: str) -> Usuario:
    usuario = Usuario(
        username=username,
        email=f"{username}@empresa.com.co",
        alias=username.capitalize(),
        password_hash=hash_password(PASSWORD),
        nombre_completo=f"Usuario {username}",
        rol=rol,
        activo=True,
    )
    db.add(usuario)
    db.commit()
    db.refresh(usuario)
    return usuario


def token_de(usuario: Usuario) -> str:
    return create_access_token(
        {"sub": str(usuario.id), "username": usuario.username, "rol": usuario.rol}
    )


def auth(usuario: Usuario) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_de(usuario)}"}


@pytest.fixture()
def admin(db) -> Usuario:
    return _crear_usuario(db, "admin", "ADMIN")


@pytest.fixture()
def rrhh(db) -> Usuario:
    return _crear_usuario(db, "rrhh", "RRHH")


@pytest.fixture()
def consulta(db) -> Usuario:
    return _crear_usuario(db, "consulta", "CONSULTA")


# ---------------------------------------------------------------------------
# Domain data
# ---------------------------------------------------------------------------


@pytest.fixture()
def empresa(db) -> Empresa:
    empresa = Empresa(name="Comercial Andina S.A.S.", tax_id="900.123.456-7", activa=True)
    db.add(empresa)
    db.commit()
    db.refresh(empresa)
    return empresa


def nuevo_contrato(db, empresa: Empresa, **overrides) -> Contrato:
    """Insert a contract directly; approved, indefinite and without dates by default."""
    valores = dict(
        primer_nombre="Laura",
        primer_apellido="Gómez",
        tipo_identificacion="CC",
        numero_identificacion="52123456",
        fecha_nacimiento=datetime.date(1994, 5, 12),
        empresa_interna="Good",
        empresa_final_id=empresa.id,
        cargo="Auxiliar administrativa",
        fecha_ingreso=datetime.date(2025, 3, 1),
        tipo_contrato="indefinido",
        tipo_salario="ordinario",
        salario=1_800_000,
        status_aprobacion="aprobado",
    )
    valores.update(overrides)
    contrato = Contrato(**valores)
    db.add(contrato)
    db.commit()
    db.refresh(contrato)
    return contrato
