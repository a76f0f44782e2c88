from __future__ import annotations

import datetime
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from app.services.onboarding_service import (
    CAMPOS,
    CampoOnboarding,
    calcular_progreso,
    can_mark,
    confirmation_state,
    toggle_en_curso,
)
from tests.conftest import auth, nuevo_contrato

FECHA = datetime.date(2026, 3, 2)


def _checklist(**valores):
    campos = {}
    for campo, definicion in CAMPOS.items():
        if not definicion.virtual:
            campos[campo.value] = False
        for columna in (definicion.columna_fecha, definicion.columna_texto):
            if columna:
                campos[columna] = None
    campos.update(valores)
    return SimpleNamespace(**campos)


def test_plain_field_is_confirmed_once_set():
    contrato = _checklist(envio_contrato=True)
    assert confirmation_state(contrato, CampoOnboarding.ENVIO_CONTRATO) == "confirmed"
    assert confirmation_state(contrato, CampoOnboarding.PROGRAMACION_CITA_EXAMENES) == "empty"


def test_detail_field_is_pending_without_date():
    pendiente = _checklist(programacion_cita_examenes=True, examenes=True)
    confirmado = _checklist(programacion_cita_examenes=True, examenes=True, examenes_fecha=FECHA)
    assert confirmation_state(pendiente, CampoOnboarding.EXAMENES) == "pending"
    assert confirmation_state(confirmado, CampoOnboarding.EXAMENES) == "confirmed"


def test_virtual_confirmation_depends_on_request_and_data():
    sin_solicitud = _checklist(arl_nombre="Sura", arl_fecha_confirmacion=FECHA)
    pendiente = _checklist(solicitud_inscripcion_arl=True, arl_nombre="Sura")
    confirmado = _checklist(
        solicitud_inscripcion_arl=True, arl_nombre="Sura", arl_fecha_confirmacion=FECHA
    )
    assert confirmation_state(sin_solicitud, CampoOnboarding.CONFIRMACION_ARL) == "empty"
    assert confirmation_state(pendiente, CampoOnboarding.CONFIRMACION_ARL) == "pending"
    assert confirmation_state(confirmado, CampoOnboarding.CONFIRMACION_ARL) == "confirmed"


def test_prerequisite_blocks_marking():
    puede, mensaje = can_mark(_checklist(), CampoOnboarding.EXAMENES)
    assert not puede
    assert mensaje == "Primero debe completar: Prog Cita"
    assert can_mark(_checklist(), CampoOnboarding.ENVIO_CONTRATO) == (True, None)


def test_progress_over_fourteen_fields():
    assert calcular_progreso(_checklist()) == 0
    contrato = _checklist(
        programacion_cita_examenes=True,
        examenes=True,
        examenes_fecha=FECHA,
        envio_contrato=True,
        solicitud_eps=True,
    )
    # 4 confirmed of 14
    assert calcular_progreso(contrato) == 29


def test_concurrent_toggle_on_same_contract_is_rejected():
    with toggle_en_curso(99):
        with pytest.raises(HTTPException) as exc_info:
            with toggle_en_curso(99):
                pass
        assert exc_info.value.status_code == 409
        with toggle_en_curso(100):
            pass
    with toggle_en_curso(99):
        pass


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


def _toggle(client, usuario, contrato, campo, **payload):
    return client.post(
        f"/api/contratos/{contrato.id}/onboarding/{campo}/toggle",
        json=payload,
        headers=auth(usuario),
    )


def test_mark_and_confirm_exams(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa, status_aprobacion="borrador")

    bloqueado = _toggle(client, rrhh, contrato, "examenes", fecha="2026-03-02")
    assert bloqueado.status_code == 422

    assert _toggle(client, rrhh, contrato, "programacion_cita_examenes").status_code == 200
    assert _toggle(client, rrhh, contrato, "examenes").status_code == 422

    resp = _toggle(client, rrhh, contrato, "examenes", fecha="2026-03-02")
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Exámenes confirmado correctamente con fecha 02/03/2026"
    estados = {c["campo"]: c["estado"] for c in body["onboarding"]["campos"]}
    assert estados["examenes"] == "confirmed"
    assert body["onboarding"]["progreso"] == 14


def test_unmarking_confirmed_field_needs_confirmation(client, db, rrhh, empresa):
    contrato = nuevo_contrato(
        db,
        empresa,
        status_aprobacion="borrador",
        programacion_cita_examenes=True,
        examenes=True,
        examenes_fecha=FECHA,
    )

    assert _toggle(client, rrhh, contrato, "programacion_cita_examenes").status_code == 409

    resp = _toggle(client, rrhh, contrato, "programacion_cita_examenes", confirmar=True)
    assert resp.status_code == 200
    db.refresh(contrato)
    assert contrato.programacion_cita_examenes is False
    assert contrato.examenes is True
    assert contrato.examenes_fecha == FECHA


def test_affiliation_confirmation_needs_name_and_date(client, db, rrhh, empresa):
    contrato = nuevo_contrato(
        db, empresa, status_aprobacion="borrador", solicitud_inscripcion_arl=True
    )

    sin_texto = _toggle(client, rrhh, contrato, "confirmacion_arl", fecha="2026-03-05")
    assert sin_texto.status_code == 422

    resp = _toggle(
        client, rrhh, contrato, "confirmacion_arl", fecha="2026-03-05", texto="ARL Sura"
    )
    assert resp.status_code == 200
    db.refresh(contrato)
    assert contrato.arl_nombre == "ARL Sura"

    limpiar = _toggle(client, rrhh, contrato, "solicitud_inscripcion_arl", confirmar=True)
    assert limpiar.status_code == 200
    db.refresh(contrato)
    assert contrato.arl_nombre is None
    assert contrato.arl_fecha_confirmacion is None


def test_approved_checklist_is_locked(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa)
    resp = _toggle(client, rrhh, contrato, "envio_contrato")
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Este contrato no se puede editar porque ya está aprobado"


def test_unknown_field(client, db, rrhh, empresa):
    contrato = nuevo_contrato(db, empresa, status_aprobacion="borrador")
    assert _toggle(client, rrhh, contrato, "vacunas").status_code == 404


def test_checklist_view(client, db, consulta, empresa):
    contrato = nuevo_contrato(db, empresa, status_aprobacion="borrador")
    resp = client.get(f"/api/contratos/{contrato.id}/onboarding", headers=auth(consulta))
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["campos"]) == 14
    assert body["editable"] is True
    examenes = next(c for c in body["campos"] if c["campo"] == "examenes")
    assert examenes["puede_marcar"] is False
