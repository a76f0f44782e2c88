"""Seed data script for the Dashboard Contratos database.

Populates the database with demo data for development: users for each role,
client companies, and a handful of contracts in different states (borrador,
aprobado, a término fijo with its initial period, terminado).
The script is idempotent: it checks for existing records before inserting.

Usage (from the repository root, after ``alembic upgrade head``):
    python seed_data.py
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from app.database import SessionLocal
from app.models import Contrato, Empresa, NovedadTerminacion, Usuario
from app.services.contrato_service import generar_numero_contrato
from app.services.periodo_service import create_initial_period
from app.utils.security import hash_password

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _d(year: int, month: int, day: int) -> date:
    """Shorthand date constructor."""
    return date(year, month, day)


def _pesos(value: int) -> Decimal:
    return Decimal(value)


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------


def seed_usuarios(session) -> dict[str, Usuario]:
    """Insert one user per role if the table is empty."""
    if session.query(Usuario).count() > 0:
        print("  [SKIP] Usuario - table already has data.")
        return {u.username: u for u in session.query(Usuario).all()}

    registros = [
        Usuario(
            username="admin",
            email="admin@empresa.com.co",
            alias="Admin",
            password_hash=hash_password("Admin123!"),
            nombre_completo="Administrador del sistema",
            rol="ADMIN",
            activo=True,
        ),
        Usuario(
            username="rrhh",
            email="rrhh@empresa.com.co",
            alias="Talento Humano",
            password_hash=hash_password("Rrhh2026!"),
            nombre_completo="Analista de Talento Humano",
            rol="RRHH",
            activo=True,
        ),
        Usuario(
            username="consulta",
            email="consulta@empresa.com.co",
            alias="Consulta",
            password_hash=hash_password("Consulta2026!"),
            nombre_completo="Usuario de consulta",
            rol="CONSULTA",
            activo=True,
        ),
    ]
    session.add_all(registros)
    session.flush()
    print(f"  [OK] Usuario - {len(registros)} registros insertados.")
    return {u.username: u for u in registros}


def seed_empresas(session) -> list[Empresa]:
    """Insert the demo client companies."""
    if session.query(Empresa).count() > 0:
        print("  [SKIP] Empresa - table already has data.")
        return session.query(Empresa).order_by(Empresa.id).all()

    registros = [
        Empresa(name="Comercial Andina S.A.S.", tax_id="900.123.456-7", activa=True),
        Empresa(name="Logística del Caribe Ltda.", tax_id="830.555.201-3", activa=True),
        Empresa(name="Servicios Integrales Bogotá", tax_id="901.777.012-1", activa=True),
    ]
    session.add_all(registros)
    session.flush()
    print(f"  [OK] Empresa - {len(registros)} registros insertados.")
    return registros


def seed_contratos(session, empresas: list[Empresa], usuarios: dict[str, Usuario]) -> None:
    """Insert contracts covering the main states of the table."""
    if session.query(Contrato).count() > 0:
        print("  [SKIP] Contrato - table already has data.")
        return

    rrhh = usuarios.get("rrhh") or next(iter(usuarios.values()))
    ahora = datetime.utcnow()

    borrador = Contrato(
        primer_nombre="Laura",
        primer_apellido="Gómez",
        segundo_apellido="Rincón",
        tipo_identificacion="CC",
        numero_identificacion="52123456",
        fecha_nacimiento=_d(1994, 5, 12),
        celular="3001234567",
        email="laura.gomez@correo.com",
        empresa_interna="Good",
        empresa_final_id=empresas[0].id,
        ciudad_labora="Bogotá",
        cargo="Auxiliar administrativa",
        fecha_ingreso=_d(2026, 3, 1),
        tipo_contrato="indefinido",
        tipo_salario="ordinario",
        salario=_pesos(1_800_000),
        auxilio_transporte=_pesos(200_000),
        status_aprobacion="borrador",
        programacion_cita_examenes=True,
        created_by=rrhh.id,
    )

    fijo = Contrato(
        primer_nombre="Andrés",
        segundo_nombre="Felipe",
        primer_apellido="Martínez",
        tipo_identificacion="CC",
        numero_identificacion="1020304050",
        fecha_nacimiento=_d(1990, 11, 3),
        empresa_interna="CPS",
        empresa_final_id=empresas[1].id,
        ciudad_labora="Barranquilla",
        cargo="Coordinador de bodega",
        fecha_ingreso=_d(2025, 1, 15),
        tipo_contrato="fijo",
        fecha_fin=_d(2026, 1, 14),
        tipo_salario="ordinario",
        salario=_pesos(3_200_000),
        auxilio_salarial=_pesos(300_000),
        auxilio_salarial_concepto="Bonificación por turnos",
        status_aprobacion="aprobado",
        approved_by=usuarios["admin"].id if "admin" in usuarios else rrhh.id,
        approved_at=ahora,
        created_by=rrhh.id,
    )

    terminado = Contrato(
        primer_nombre="Camila",
        primer_apellido="Rojas",
        tipo_identificacion="CE",
        numero_identificacion="E987654",
        fecha_nacimiento=_d(1988, 2, 20),
        empresa_interna="Good",
        empresa_final_id=empresas[2].id,
        ciudad_labora="Medellín",
        cargo="Analista contable",
        fecha_ingreso=_d(2024, 6, 1),
        tipo_contrato="indefinido",
        tipo_salario="integral",
        salario=_pesos(14_000_000),
        status_aprobacion="aprobado",
        approved_by=rrhh.id,
        approved_at=ahora,
        created_by=rrhh.id,
    )

    session.add_all([borrador, fijo, terminado])
    session.flush()

    for contrato in (fijo, terminado):
        contrato.numero_contrato_helisa = generar_numero_contrato(
            contrato.numero_identificacion,
            contrato.fecha_ingreso,
            contrato.empresa_final.name,
        )
    create_initial_period(session, fijo, rrhh.id)

    session.add(
        NovedadTerminacion(
            contract_id=terminado.id,
            tipo_terminacion="mutuo_acuerdo",
            fecha=_d(2026, 2, 28),
            observacion="Terminación por mutuo acuerdo",
            created_by=rrhh.id,
        )
    )
    session.flush()
    print("  [OK] Contrato - 3 registros insertados (1 período, 1 terminación).")


def main() -> None:
    """Run the complete seed process within a single database transaction."""
    print("=" * 60)
    print("  Dashboard Contratos - Seed Data Script")
    print("=" * 60)

    session = SessionLocal()
    try:
        print("\n[1/3] Usuarios...")
        usuarios = seed_usuarios(session)

        print("\n[2/3] Empresas cliente...")
        empresas = seed_empresas(session)

        print("\n[3/3] Contratos...")
        seed_contratos(session, empresas, usuarios)

        session.commit()
        print("\n" + "=" * 60)
        print("  Seed completado exitosamente.")
        print("=" * 60)

    except Exception as exc:
        session.rollback()
        print("\n[ERROR] Seed fallido - se hizo rollback.")
        print(f"  Detalle: {exc}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
