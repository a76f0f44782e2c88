"""initial_schema

Crea el esquema completo de Dashboard Contratos: usuarios, empresas,
contratos, períodos de contratos a término fijo, las ocho tablas de
novedades, la caché y el historial de importaciones.

Revision ID: 3c8e5d1a9f42
Revises:
Create Date: 2026-03-02 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op

import app.models  # noqa: F401
from app.database import Base

# revision identifiers, used by Alembic.
revision: str = '3c8e5d1a9f42'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    conn = op.get_bind()
    Base.metadata.create_all(bind=conn)
    print(f"[MIGRATION] Tablas creadas: {len(Base.metadata.tables)}")


def downgrade() -> None:
    conn = op.get_bind()
    Base.metadata.drop_all(bind=conn)
