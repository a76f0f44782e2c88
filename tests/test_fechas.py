from __future__ import annotations

import datetime

from app.utils.fechas import (
    date_iso_to_input,
    format_currency,
    format_date_colombia,
    format_date_colombia_long,
    sumar_anios,
    to_local_date,
    validate_date_range,
)

HOY = datetime.date(2026, 3, 15)


def test_date_only_values_are_not_shifted():
    assert format_date_colombia("2026-03-01") == "01/03/2026"
    assert format_date_colombia(datetime.date(2026, 12, 31)) == "31/12/2026"


def test_utc_timestamp_converted_to_bogota():
    # 03:00 UTC is still the previous evening in Bogotá (UTC-5)
    assert format_date_colombia("2026-03-01T03:00:00Z") == "28/02/2026"
    assert format_date_colombia("2026-03-01T12:00:00+00:00") == "01/03/2026"


def test_naive_datetime_is_read_as_utc():
    assert to_local_date(datetime.datetime(2026, 1, 1, 2, 30)) == datetime.date(2025, 12, 31)


def test_empty_and_invalid_inputs():
    assert format_date_colombia(None) == "-"
    assert format_date_colombia("") == "-"
    assert format_date_colombia("no-es-fecha") == "Fecha inválida"
    assert format_date_colombia_long("31/02/2026") == "Fecha inválida"


def test_long_format_uses_spanish_months():
    assert format_date_colombia_long("2026-09-07") == "7 sept 2026"
    assert format_date_colombia_long(datetime.date(2026, 1, 20)) == "20 ene 2026"


def test_date_iso_to_input_strips_time_without_conversion():
    assert date_iso_to_input("2026-03-01T03:00:00Z") == "2026-03-01"
    assert date_iso_to_input(None) == ""


def test_format_currency():
    assert format_currency(1_300_000) == "$ 1.300.000"
    assert format_currency(None) == "$ 0"
    assert format_currency(999.6) == "$ 1.000"
    assert format_currency(-2500) == "-$ 2.500"


def test_sumar_anios_clamps_leap_day():
    assert sumar_anios(datetime.date(2024, 2, 29), 1) == datetime.date(2025, 2, 28)
    assert sumar_anios(datetime.date(2026, 3, 15), 10) == datetime.date(2036, 3, 15)


def test_birth_date_window():
    assert validate_date_range(datetime.date(1990, 1, 1), "birth", HOY) is None
    assert validate_date_range(datetime.date(1899, 12, 31), "birth", HOY) == (
        "La fecha de nacimiento debe estar entre 1900 y hoy"
    )
    assert validate_date_range(datetime.date(2026, 3, 16), "birth", HOY) is not None


def test_work_and_future_windows():
    assert validate_date_range(datetime.date(2036, 3, 15), "work", HOY) is None
    assert validate_date_range(datetime.date(2036, 3, 16), "work", HOY) is not None
    assert validate_date_range(datetime.date(2026, 3, 14), "future", HOY) == (
        "La fecha debe ser hoy o en el futuro (máximo 10 años)"
    )
    assert validate_date_range(None, "future", HOY) is None
