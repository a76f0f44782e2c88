from __future__ import annotations

from app.utils.errores import classify_db_error, translate_error


def test_period_constraint_names_are_recognised_first():
    error = classify_db_error('violates check constraint "check_fechas_validas"', "período")
    assert error.titulo == "Error en el historial de períodos"
    assert "fecha de inicio" in error.mensaje


def test_substring_classification():
    assert classify_db_error("invalid input syntax for type fecha").titulo == "Error de fecha"
    assert classify_db_error("FOREIGN KEY constraint failed").titulo == "Error de referencia"
    assert classify_db_error("permission denied for table x").titulo == "Sin permisos"
    assert classify_db_error("UNIQUE constraint failed: empresas.tax_id").titulo == (
        "Registro duplicado"
    )


def test_unknown_errors_keep_the_raw_text():
    error = classify_db_error("disk I/O error", "novedad")
    assert error.titulo == "Error al guardar"
    assert error.mensaje == "Error técnico: disk I/O error"
    assert classify_db_error(None, "novedad").mensaje == "No se pudo guardar el novedad."


def test_translate_error():
    assert translate_error("Invalid login credentials") == (
        "Credenciales incorrectas. Verifica tu correo y contraseña."
    )
    assert translate_error("AuthApiError: JWT expired") == (
        "Tu sesión ha expirado. Por favor inicia sesión nuevamente."
    )
    assert translate_error("boom") == "Error: boom"
    assert translate_error(None) == "Error desconocido"
