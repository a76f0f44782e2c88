"""
Date and currency display helpers anchored to Colombian local time.

Date-only values (``YYYY-MM-DD``) are calendar dates and are never shifted
across a timezone boundary; full timestamps are converted to
``America/Bogota`` before formatting.  Naive timestamps coming from the
database are stored in UTC.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from decimal import Decimal
from zoneinfo import ZoneInfo

from app.config import get_settings

logger = logging.getLogger(__name__)

_MESES_CORTOS: list[str] = [
    "",
    "ene", "feb", "mar", "abr", "may", "jun",
    "jul", "ago", "sept", "oct", "nov", "dic",
]

FECHA_VACIA = "-"
FECHA_INVALIDA = "Fecha inválida"

DateInput = str | datetime.date | datetime.datetime | None


def zona_colombia() -> ZoneInfo:
    return ZoneInfo(get_settings().TIMEZONE)


def hoy_colombia() -> datetime.date:
    """Return today's calendar date in Bogotá."""
    return datetime.datetime.now(zona_colombia()).date()


def to_local_date(value: str | datetime.date | datetime.datetime) -> datetime.date:
    """Resolve *value* to the calendar date it represents in Bogotá.

    Raises:
        ValueError: If a string cannot be parsed as an ISO date or timestamp.
    """
    if isinstance(value, datetime.datetime):
        moment = value
    elif isinstance(value, datetime.date):
        return value
    else:
        text = value.strip()
        if "T" not in text and " " not in text:
            return datetime.date.fromisoformat(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        moment = datetime.datetime.fromisoformat(text)

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return moment.astimezone(zona_colombia()).date()


def format_date_colombia(value: DateInput) -> str:
    """Format a date or timestamp as ``dd/mm/yyyy`` in Colombian time.

    Args:
        value: ISO date string, ISO timestamp, ``date`` or ``datetime``.

    Returns:
        The formatted date, ``"-"`` for empty input, or ``"Fecha inválida"``
        when the value cannot be parsed.
    """
    if value is None or value == "":
        return FECHA_VACIA
    try:
        fecha = to_local_date(value)
    except ValueError:
        logger.debug("format_date_colombia: unparsable value %r", value)
        return FECHA_INVALIDA
    return fecha.strftime("%d/%m/%Y")


def format_date_colombia_long(value: DateInput) -> str:
    """Format a date as ``d mmm yyyy`` with Spanish month abbreviations."""
    if value is None or value == "":
        return FECHA_VACIA
    try:
        fecha = to_local_date(value)
    except ValueError:
        logger.debug("format_date_colombia_long: unparsable value %r", value)
        return FECHA_INVALIDA
    return f"{fecha.day} {_MESES_CORTOS[fecha.month]} {fecha.year}"


def date_iso_to_input(value: str | None) -> str:
    """Return the ``YYYY-MM-DD`` part of an ISO string, without conversion."""
    if not value:
        return ""
    return value.split("T")[0]


def format_currency(amount: float | int | Decimal | None) -> str:
    """Format an amount as Colombian pesos without decimals: ``$ 1.300.000``."""
    if amount is None:
        amount = 0
    redondeado = round(float(amount))
    cuerpo = f"{abs(redondeado):,}".replace(",", ".")
    signo = "-" if redondeado < 0 else ""
    return f"{signo}$ {cuerpo}"


def dias_entre(inicio: datetime.date, fin: datetime.date) -> int:
    """Whole days from *inicio* to *fin* (negative when *fin* is earlier)."""
    return (fin - inicio).days


def sumar_anios(fecha: datetime.date, anios: int) -> datetime.date:
    """Add calendar years, clamping 29 February to the 28th."""
    try:
        return fecha.replace(year=fecha.year + anios)
    except ValueError:
        return fecha.replace(year=fecha.year + anios, day=28)


# ---------------------------------------------------------------------------
# Date range validation
# ---------------------------------------------------------------------------

FECHA_MINIMA = datetime.date(1900, 1, 1)


@dataclass(frozen=True)
class LimitesFecha:
    minimo: datetime.date
    maximo: datetime.date
    mensaje: str


def get_date_limits(kind: str, today: datetime.date | None = None) -> LimitesFecha:
    """Return the accepted window for a date input of the given *kind*.

    Kinds: ``birth``, ``document``, ``work``, ``future`` and ``past``.
    Unknown kinds accept 1900 through 2100.
    """
    today = today or hoy_colombia()
    en_diez_anios = sumar_anios(today, 10)

    if kind == "birth":
        return LimitesFecha(
            FECHA_MINIMA, today, "La fecha de nacimiento debe estar entre 1900 y hoy"
        )
    if kind == "document":
        return LimitesFecha(
            FECHA_MINIMA, today, "La fecha de expedición debe estar entre 1900 y hoy"
        )
    if kind == "work":
        return LimitesFecha(
            FECHA_MINIMA,
            en_diez_anios,
            "La fecha debe estar entre 1900 y 10 años en el futuro",
        )
    if kind == "future":
        return LimitesFecha(
            today,
            en_diez_anios,
            "La fecha debe ser hoy o en el futuro (máximo 10 años)",
        )
    if kind == "past":
        return LimitesFecha(FECHA_MINIMA, today, "La fecha debe estar entre 1900 y hoy")
    return LimitesFecha(
        FECHA_MINIMA,
        datetime.date(2100, 12, 31),
        "La fecha debe estar entre 1900 y 2100",
    )


def validate_date_range(
    value: datetime.date | None,
    kind: str,
    today: datetime.date | None = None,
) -> str | None:
    """Check *value* against the limits for *kind*.

    Returns:
        ``None`` when the date is empty or inside the window, otherwise the
        user-facing error message.
    """
    if value is None:
        return None
    limites = get_date_limits(kind, today)
    if value < limites.minimo or value > limites.maximo:
        return limites.mensaje
    return None
