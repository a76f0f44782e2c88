from __future__ import annotations

from app.models.contrato import Contrato
from app.parsers.contratos_parser import REQUIRED_HEADERS
from app.services.onboarding_service import calcular_progreso
from tests.conftest import auth, nuevo_contrato

ENCABEZADO = ",".join(REQUIRED_HEADERS + ["tipo_contrato", "fecha_fin", "arl_nombre"])


def _subir(client, usuario, *filas, nombre="contratos.csv"):
    contenido = "\n".join([ENCABEZADO, *filas]).encode("utf-8")
    return client.post(
        "/api/importacion/contratos",
        files={"file": (nombre, contenido, "text/csv")},
        headers=auth(usuario),
    )


def test_import_creates_approved_contracts(client, db, rrhh, empresa):
    resp = _subir(
        client,
        rrhh,
        "Laura,Gómez,CC,52123456,12/05/1994,Good,9001234567,01/03/2026,fijo,28/02/2027,ARL Sura",
        "Andrés,Martínez,CC,1020304050,03/11/1990,CPS,900.123.456-7,01/02/2026,indefinido,,",
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["estado"] == "EXITOSO"
    assert body["importados"] == 2
    assert body["omitidos"] == []

    laura = db.query(Contrato).filter(Contrato.numero_identificacion == "52123456").one()
    assert laura.status_aprobacion == "aprobado"
    assert laura.empresa_final_id == empresa.id
    assert laura.arl_nombre == "ARL Sura"
    assert [p.numero_periodo for p in laura.periodos] == [1]
    # confirmations without an entity name in the file stay pending
    assert 0 < calcular_progreso(laura) < 100


def test_duplicates_and_unknown_companies_are_skipped(client, db, rrhh, empresa):
    nuevo_contrato(db, empresa, numero_identificacion="52123456")

    resp = _subir(
        client,
        rrhh,
        "Laura,Gómez,CC,52123456,12/05/1994,Good,900123456-7,01/03/2026,,,",
        "Camila,Rojas,CE,E987654,20/02/1988,Good,800999111,01/03/2026,,,",
        "Andrés,Martínez,CC,1020304050,03/11/1990,CPS,900123456-7,01/02/2026,,,",
        "Andrés,Martínez,CC,1020304050,03/11/1990,CPS,900123456-7,01/02/2026,,,",
    )

    body = resp.json()
    assert body["estado"] == "PARCIAL"
    assert body["importados"] == 1
    assert [(o["row"], o["field"]) for o in body["omitidos"]] == [
        (2, "numero_identificacion"),
        (3, "empresa_final_nit"),
        (5, "numero_identificacion"),
    ]
    assert body["omitidos"][1]["message"] == "No se encontró empresa con NIT: 800999111"


def test_validation_errors_block_the_whole_file(client, db, rrhh, empresa):
    resp = _subir(
        client,
        rrhh,
        "Laura,Gómez,CC,52123456,12/05/1994,Good,900123456-7,01/03/2026,,,",
        "Camila,Rojas,CE,E987654,20/02/1988,Good,900123456-7,01/03/2026,fijo,,",
    )

    body = resp.json()
    assert body["estado"] == "FALLIDO"
    assert body["importados"] == 0
    assert body["errores_validacion"][0]["row"] == 3
    assert db.query(Contrato).count() == 0


def test_missing_columns_are_rejected_and_logged(client, db, rrhh, consulta):
    resp = client.post(
        "/api/importacion/contratos",
        files={"file": ("malo.csv", b"nombre,apellido\nLaura,Gomez\n", "text/csv")},
        headers=auth(rrhh),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Faltan columnas requeridas")

    historial = client.get("/api/importacion/historial", headers=auth(consulta)).json()
    assert historial[0]["archivo_nombre"] == "malo.csv"
    assert historial[0]["estado"] == "FALLIDO"


def test_empty_file(client, db, rrhh):
    resp = client.post(
        "/api/importacion/contratos",
        files={"file": ("vacio.csv", b"", "text/csv")},
        headers=auth(rrhh),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "El archivo está vacío."


def test_read_only_role_cannot_import(client, db, consulta, empresa):
    assert _subir(client, consulta, "Laura,Gómez,CC,1,12/05/1994,Good,1,01/03/2026,,,").status_code == 403
