"""Usuario model - application user with role-based access control."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from app.database import Base


class Usuario(Base):
    """System user with a role that controls dashboard access levels.

    Roles:
        - ADMIN: Full access including user management.
        - RRHH: Creates and approves contracts, records novedades.
        - CONSULTA: Read-only access.

    Attributes:
        id: Primary key.
        username: Unique login username.
        email: Unique email address.
        alias: Optional short display handle shown in the user list.
        password_hash: Bcrypt-hashed password (never store plain text).
        nombre_completo: Full display name.
        rol: Role identifier controlling permissions.
        activo: Whether the account is active.
        is_temp_password: Set after an admin reset until the user changes it.
        temp_password_expires_at: Expiry of the temporary password.
        ultimo_acceso: Timestamp of the last successful login.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "usuario"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    email = Column(String(200), unique=True, nullable=False)
    alias = Column(String(100), nullable=True)
    password_hash = Column(String(200), nullable=False)
    nombre_completo = Column(String(300), nullable=True)
    rol = Column(String(50), nullable=True)
    # "ADMIN", "RRHH", "CONSULTA"
    activo = Column(Boolean, default=True, nullable=False)
    is_temp_password = Column(Boolean, default=False, nullable=False)
    temp_password_expires_at = Column(DateTime, nullable=True)
    ultimo_acceso = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
