"""Listado, alta y edición de estudiantes."""
from datetime import date

from app.models import Asistencia
from tests.factories import crear_alumno, crear_curso, crear_tutor


async def test_listado_paginado_con_ids_como_texto(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s, 1, "A")
        for i in range(12):
            await crear_alumno(s, curso, nombre=f"Alumno{i}", apellido="García")
        await s.commit()

    resp = await client.get("/api/estudiantes", params={"page": 2, "pageSize": 5})

    assert resp.status_code == 200
    cuerpo = resp.json()
    assert cuerpo["meta"] == {"total": 12, "page": 2, "pageSize": 5, "totalPages": 3}
    assert len(cuerpo["data"]) == 5
    fila = cuerpo["data"][0]
    assert isinstance(fila["id"], str)
    assert fila["curso"] == "1° A"
    assert fila["curso_id"] == str(curso.id)


async def test_listado_incluye_inasistencias_del_anio(client, session_factory):
    async with session_factory() as s:
        alumno = await crear_alumno(s, await crear_curso(s))
        s.add(Asistencia(alumno_id=alumno.id, fecha=date.today(), tipo_evento="Retiro"))
        await s.commit()

    fila = (await client.get("/api/estudiantes")).json()["data"][0]

    assert fila["inasistencia"] == 0.5
    assert fila["curso"] == "3° B"


async def test_filtro_por_curso_y_busqueda(client, session_factory):
    async with session_factory() as s:
        tercero = await crear_curso(s, 3, "B")
        cuarto = await crear_curso(s, 4, "A")
        await crear_alumno(s, tercero, nombre="Lucía", apellido="Ramos", dni="40111222")
        await crear_alumno(s, cuarto, nombre="Pedro", apellido="Ramos")
        await s.commit()

    por_curso = await client.get("/api/estudiantes", params={"curso": "4° A"})
    assert [f["estudiante"] for f in por_curso.json()["data"]] == ["Pedro Ramos"]

    por_dni = await client.get("/api/estudiantes", params={"search": "40111"})
    assert [f["estudiante"] for f in por_dni.json()["data"]] == ["Lucía Ramos"]

    invalido = await client.get("/api/estudiantes", params={"curso": "tercero"})
    assert invalido.status_code == 400


async def test_sin_curso_se_muestra_sin_asignar(client, session_factory):
    async with session_factory() as s:
        await crear_alumno(s)
        await s.commit()

    fila = (await client.get("/api/estudiantes")).json()["data"][0]

    assert fila["curso"] == "Sin Asignar"
    assert fila["curso_id"] is None


async def test_crear_estudiante_con_tutores(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s)
        tutor = await crear_tutor(s, "Laura", "Gómez", movil="1155550000")
        await s.commit()

    resp = await client.post(
        "/api/estudiantes",
        json={
            "nombre": "Tomás",
            "apellido": "Díaz",
            "dni": "45000111",
            "legajo": "L-77",
            "curso_id": str(curso.id),
            "tutor_ids": [str(tutor.id)],
            "fecha_nacimiento": "2010-04-02",
        },
    )

    assert resp.status_code == 201
    cuerpo = resp.json()
    assert cuerpo["estado"] == "Regular"
    assert cuerpo["curso"] == "3° B"
    assert cuerpo["persona"]["fecha_nacimiento"] == "2010-04-02"
    assert cuerpo["tutores"] == [{"id": str(tutor.id), "nombre": "Laura Gómez", "telefono": "1155550000"}]


async def test_crear_estudiante_con_curso_inexistente(client):
    resp = await client.post(
        "/api/estudiantes", json={"nombre": "Tomás", "apellido": "Díaz", "curso_id": "999"}
    )

    assert resp.status_code == 400


async def test_editar_estudiante(client, session_factory):
    async with session_factory() as s:
        alumno = await crear_alumno(s, legajo="L-1")
        otro_curso = await crear_curso(s, 5, "C")
        await s.commit()

    resp = await client.patch(
        f"/api/estudiantes/{alumno.id}",
        json={"apellido": "Fernández", "curso_id": str(otro_curso.id)},
    )

    assert resp.status_code == 200
    cuerpo = resp.json()
    assert cuerpo["persona"]["apellido"] == "Fernández"
    assert cuerpo["persona"]["nombre"] == "Ana"
    assert cuerpo["curso"] == "5° C"


async def test_detalle_inexistente(client):
    resp = await client.get("/api/estudiantes/12345")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Estudiante no encontrado"}
