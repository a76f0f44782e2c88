"""RegistroImportacion model - audit log of contract spreadsheet imports."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from app.database import Base


class RegistroImportacion(Base):
    """One row per upload, whatever its outcome.

    Attributes:
        id: Primary key.
        archivo_nombre: Filename submitted by the client.
        fecha: Processing timestamp.
        usuario_id: FK to the ``usuario`` who uploaded the file.
        usuario_username: Username snapshot, kept for the history view.
        registros_ok: Contracts created.
        registros_error: Rows rejected by validation or skipped on insert.
        estado: ``"EXITOSO"``, ``"PARCIAL"`` or ``"FALLIDO"``.
        errors_json: JSON list of the per-row problems.
    """

    __tablename__ = "registro_importacion"

    id = Column(Integer, primary_key=True, autoincrement=True)
    archivo_nombre = Column(String(500), nullable=False)
    fecha = Column(DateTime, default=func.now(), nullable=False)
    usuario_id = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    usuario_username = Column(String(100), nullable=False)
    registros_ok = Column(Integer, default=0, nullable=False)
    registros_error = Column(Integer, default=0, nullable=False)
    estado = Column(String(20), nullable=False)  # EXITOSO | PARCIAL | FALLIDO
    errors_json = Column(Text, nullable=True)
