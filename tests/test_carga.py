"""Porcentaje de carga de notas por docente."""
import pytest

from app.services.carga_service import porcentaje_carga
from tests.factories import (
    crear_alumno,
    crear_asignacion,
    crear_curso,
    crear_docente,
    crear_instancia,
    crear_materia,
)


@pytest.mark.parametrize(
    ("cargadas", "esperadas", "porcentaje"),
    [(0, 0, 0), (0, 10, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13), (10, 10, 100)],
)
def test_porcentaje_carga(cargadas, esperadas, porcentaje):
    assert porcentaje_carga(cargadas, esperadas) == porcentaje


async def test_ver_carga(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s)
        alumnos = [await crear_alumno(s, curso, nombre=n) for n in ("Ana", "Beto", "Carla")]
        docente = await crear_docente(s, "Jorge", "Luna")
        materia = await crear_materia(s, "Física")
        await crear_asignacion(s, docente, materia, curso)
        instancia = await crear_instancia(s, "1er Trimestre")
        await crear_instancia(s, "2do Trimestre")
        await s.commit()

    await client.post(
        "/api/notas",
        json={
            "instancia_id": str(instancia.id),
            "materia_id": str(materia.id),
            "docente_id": str(docente.id),
            "curso_id": str(curso.id),
            "notas": [{"alumno_id": str(a.id), "nota": 8} for a in alumnos[:2]],
        },
    )

    general = await client.get("/api/ver-carga")
    assert general.status_code == 200
    fila = general.json()[0]
    assert fila["docente"] == "Jorge Luna"
    assert fila["cursos"] == ["3° B"]
    assert fila["notas_cargadas"] == 2
    assert fila["notas_esperadas"] == 6
    assert fila["porcentajeCarga"] == 33

    detalle = await client.get("/api/ver-carga", params={"docente_id": docente.id})
    asignacion = detalle.json()["asignaciones"][0]
    assert asignacion["materia"] == "Física"
    assert asignacion["total_alumnos"] == 3
    assert asignacion["porcentajeCarga"] == 33

    por_curso = await client.get(
        "/api/ver-carga",
        params={"docente_id": docente.id, "curso_id": curso.id, "materia_id": materia.id},
    )
    notas = {a["nombre"]: a["notas"][str(instancia.id)] for a in por_curso.json()["alumnos"]}
    assert notas == {"Ana": 8, "Beto": 8, "Carla": None}


async def test_ver_carga_docente_inexistente(client):
    resp = await client.get("/api/ver-carga", params={"docente_id": 999})

    assert resp.status_code == 404
