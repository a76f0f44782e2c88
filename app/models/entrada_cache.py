"""EntradaCache model - string key/value store backing read-through caches."""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from app.database import Base


class EntradaCache(Base):
    """Serialised cache entry, e.g. ``users_cache`` → ``{"data": [...], "timestamp": ...}``.

    The value is opaque text; readers must tolerate malformed content.
    """

    __tablename__ = "cache_entries"

    clave = Column(String(100), primary_key=True)
    valor = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
