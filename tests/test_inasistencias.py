"""Acumulado ponderado de inasistencias."""
from datetime import date, timedelta

import pytest

from app.models import Asistencia
from app.services.asistencia_service import calcular_resumen, resumen_por_alumno
from tests.factories import crear_alumno, crear_curso

EVENTOS = [
    ("Retiro", None),
    ("Inasistencia", "Justificado"),
    ("Tardanza", None),
    ("Inasistencia", None),
]


def test_calcular_resumen_pondera_por_tipo():
    resumen = calcular_resumen(EVENTOS)

    assert resumen.acumulado == 2.83
    assert resumen.justificadas == 1
    assert resumen.total_registros == 4
    assert resumen.inasistencias_justificadas == 1
    assert resumen.conteo == {"Asistencia": 0, "Tardanza": 1, "Retiro": 1, "Inasistencia": 2}


def test_calcular_resumen_sin_eventos():
    resumen = calcular_resumen([])

    assert resumen.acumulado == 0
    assert resumen.total_registros == 0


def test_asistencias_no_suman():
    assert calcular_resumen([("Asistencia", None)] * 5).acumulado == 0


async def _alumno_con_eventos(session_factory, fechas):
    async with session_factory() as s:
        curso = await crear_curso(s)
        alumno = await crear_alumno(s, curso)
        for fecha, (tipo, justificacion) in zip(fechas, EVENTOS):
            s.add(Asistencia(alumno_id=alumno.id, fecha=fecha, tipo_evento=tipo, justificacion=justificacion))
        await s.commit()
    return alumno


async def test_resumen_por_alumno_excluye_anios_anteriores(session_factory):
    hoy = date(2025, 12, 31)
    fechas = [date(2025, 3, 10), date(2025, 3, 11), date(2025, 3, 12), date(2024, 11, 5)]
    alumno = await _alumno_con_eventos(session_factory, fechas)

    async with session_factory() as s:
        resumen = (await resumen_por_alumno(s, [alumno.id], hoy=hoy))[alumno.id]

    # la inasistencia del año anterior queda afuera
    assert resumen.acumulado == 1.83
    assert resumen.total_registros == 3


@pytest.mark.skipif(date.today().timetuple().tm_yday < 4, reason="requiere cuatro días del año en curso")
async def test_endpoint_acumulado(client, session_factory):
    inicio = date(date.today().year, 1, 1)
    alumno = await _alumno_con_eventos(session_factory, [inicio + timedelta(days=i) for i in range(4)])

    resp = await client.get(f"/api/asistencias/alumno/{alumno.id}/acumulado")

    assert resp.status_code == 200
    cuerpo = resp.json()
    assert cuerpo["acumulado"] == 2.83
    assert cuerpo["justificadas"] == 1
    assert cuerpo["totalRegistros"] == 4
    assert cuerpo["inasistencias_total"] == 2
    assert cuerpo["tardanzas_total"] == 1
    assert cuerpo["retiros_total"] == 1
    assert cuerpo["desde"] == inicio.isoformat()


async def test_endpoint_acumulado_alumno_inexistente(client):
    resp = await client.get("/api/asistencias/alumno/999/acumulado")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Estudiante no encontrado"}


async def test_reporte_pdf(client, session_factory):
    alumno = await _alumno_con_eventos(session_factory, [date.today()])

    resp = await client.get(f"/api/asistencias/alumno/{alumno.id}/reporte")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")
