"""Bajas lógicas: el registro se conserva y el alta lo vuelve a mostrar."""
from app.models import Docente, Materia
from tests.factories import crear_alumno, crear_curso, crear_docente, crear_materia


async def test_baja_y_alta_de_docente(client, session_factory):
    async with session_factory() as s:
        docente = await crear_docente(s, "Marta", "Sosa")
        await s.commit()

    baja = await client.delete(f"/api/docentes/{docente.id}")
    assert baja.status_code == 200
    assert baja.json() == {"id": str(docente.id), "activo": False, "message": "Docente dado de baja"}

    listado = await client.get("/api/docentes")
    assert listado.json()["meta"]["total"] == 0
    con_inactivos = await client.get("/api/docentes", params={"includeInactivos": "true"})
    assert [d["id"] for d in con_inactivos.json()["data"]] == [str(docente.id)]
    async with session_factory() as s:
        assert await s.get(Docente, docente.id) is not None

    alta = await client.delete(f"/api/docentes/{docente.id}")
    assert alta.json()["activo"] is True
    listado = await client.get("/api/docentes")
    assert listado.json()["meta"]["total"] == 1


async def test_baja_y_alta_de_materia(client, session_factory):
    async with session_factory() as s:
        materia = await crear_materia(s, "Historia")
        await s.commit()

    assert (await client.delete(f"/api/materias/{materia.id}")).json()["activo"] is False
    assert (await client.get("/api/materias")).json()["data"] == []
    async with session_factory() as s:
        assert (await s.get(Materia, materia.id)).activo is False

    assert (await client.delete(f"/api/materias/{materia.id}")).json()["activo"] is True
    nombres = [m["nombre"] for m in (await client.get("/api/materias")).json()["data"]]
    assert nombres == ["Historia"]


async def test_materia_con_nombre_repetido_devuelve_400(client, session_factory):
    async with session_factory() as s:
        await crear_materia(s, "Historia")
        await s.commit()

    resp = await client.post("/api/materias", json={"nombre": "historia"})

    assert resp.status_code == 400


async def test_estado_baja_desactiva_al_estudiante(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s)
        alumno = await crear_alumno(s, curso, legajo="L-1")
        await s.commit()

    resp = await client.put(f"/api/estudiantes/{alumno.id}", json={"estado": "Baja por pase"})
    assert resp.status_code == 200
    assert resp.json()["activo"] is False

    assert (await client.get("/api/estudiantes")).json()["meta"]["total"] == 0
    con_bajas = await client.get("/api/estudiantes", params={"includeBajas": "true"})
    assert con_bajas.json()["data"][0]["estado"] == "Baja por pase"
    por_curso = await client.get("/api/alumnos-por-curso", params={"curso_id": curso.id})
    assert por_curso.json() == []

    resp = await client.put(f"/api/estudiantes/{alumno.id}", json={"estado": "Regular"})
    assert resp.json()["activo"] is True


async def test_estado_vacio_devuelve_400(client, session_factory):
    async with session_factory() as s:
        alumno = await crear_alumno(s)
        await s.commit()

    resp = await client.put(f"/api/estudiantes/{alumno.id}", json={"estado": "  "})

    assert resp.status_code == 400
