"""Tutores con alumnos a cargo, cursos visibles por rol y borrado de cursos."""
from sqlalchemy import select

from app.models import Alumno, Asignacion
from tests.factories import (
    crear_alumno,
    crear_asignacion,
    crear_curso,
    crear_docente,
    crear_materia,
    crear_rol,
    crear_tutor,
    crear_usuario,
)


async def test_asignar_alumnos_reemplaza_los_anteriores(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s)
        ana = await crear_alumno(s, curso, nombre="Ana")
        beto = await crear_alumno(s, curso, nombre="Beto")
        tutor = await crear_tutor(s, alumnos=[ana])
        await s.commit()

    resp = await client.post(
        "/api/tutores/assign", json={"tutor_id": str(tutor.id), "alumno_ids": [str(beto.id)]}
    )

    assert resp.status_code == 200
    assert [a["id"] for a in resp.json()["alumnos"]] == [str(beto.id)]


async def test_asignar_alumno_inexistente(client, session_factory):
    async with session_factory() as s:
        tutor = await crear_tutor(s)
        await s.commit()

    resp = await client.post("/api/tutores/assign", json={"tutor_id": str(tutor.id), "alumno_ids": ["999"]})

    assert resp.status_code == 400


async def test_crear_tutor_sin_apellido(client):
    resp = await client.post("/api/tutores", json={"nombre": "Laura"})

    assert resp.status_code == 400


async def test_cursos_por_rol_limita_al_preceptor(client, session_factory):
    async with session_factory() as s:
        primero = await crear_curso(s, 1, "A")
        segundo = await crear_curso(s, 2, "A")
        await crear_alumno(s, primero, nombre="Ana")
        rol = await crear_rol(s, "PRECEPTOR")
        usuario = await crear_usuario(s, "pre", roles=[(rol, primero)])
        await s.commit()

    propios = await client.get("/api/cursos-por-rol", params={"usuario_id": usuario.id, "rol": "PRECEPTOR"})
    assert [c["nombre"] for c in propios.json()] == ["1° A"]
    assert propios.json()[0]["cantidad_alumnos"] == 1

    todos = await client.get("/api/cursos-por-rol", params={"usuario_id": usuario.id, "rol": "ADMIN"})
    assert [c["id"] for c in todos.json()] == [str(primero.id), str(segundo.id)]


async def test_curso_repetido_devuelve_400(client, session_factory):
    async with session_factory() as s:
        await crear_curso(s, 3, "B")
        await s.commit()

    resp = await client.post("/api/cursos", json={"anio": 3, "division": "b"})

    assert resp.status_code == 400


async def test_eliminar_curso_desvincula_alumnos(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s)
        alumno = await crear_alumno(s, curso)
        await crear_asignacion(s, await crear_docente(s), await crear_materia(s), curso)
        await s.commit()

    resp = await client.delete(f"/api/cursos/{curso.id}")

    assert resp.status_code == 200
    async with session_factory() as s:
        assert (await s.get(Alumno, alumno.id)).curso_id is None
        assert (await s.execute(select(Asignacion))).scalars().all() == []
