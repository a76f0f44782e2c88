"""Client company service: listing, creation and lookup by NIT."""

from __future__ import annotations

import logging
import re

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.empresa import Empresa
from app.schemas.empresa import EmpresaCreate
from app.utils.errores import raise_integrity_error

logger = logging.getLogger(__name__)


def solo_digitos(nit: str | None) -> str:
    return re.sub(r"\D", "", nit or "")


def list_empresas(db: Session, solo_activas: bool = True) -> list[Empresa]:
    q = db.query(Empresa)
    if solo_activas:
        q = q.filter(Empresa.activa.is_(True))
    return q.order_by(Empresa.name).all()


def get_por_nit(db: Session, nit: str) -> Empresa | None:
    """Company whose NIT has the same digits as *nit*, ignoring punctuation."""
    buscado = solo_digitos(nit)
    if not buscado:
        return None
    for empresa in db.query(Empresa).all():
        if solo_digitos(empresa.tax_id) == buscado:
            return empresa
    return None


def create_empresa(db: Session, data: EmpresaCreate) -> Empresa:
    """Register a client company.

    Raises:
        HTTPException 409: Another company already has the same NIT digits.
    """
    if get_por_nit(db, data.tax_id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Ya existe una empresa con NIT {data.tax_id}",
        )
    empresa = Empresa(name=data.name, tax_id=data.tax_id, activa=True)
    db.add(empresa)
    try:
        db.commit()
    except IntegrityError as exc:
        raise_integrity_error(db, exc, "empresa")
    db.refresh(empresa)
    logger.info("create_empresa: id=%d nit=%s", empresa.id, empresa.tax_id)
    return empresa
