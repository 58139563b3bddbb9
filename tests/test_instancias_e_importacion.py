"""Instancias evaluativas e importación de estudiantes desde Excel."""
from io import BytesIO

import pandas as pd

from tests.factories import crear_alumno, crear_curso


async def test_ciclo_de_vida_de_instancia(client):
    creada = await client.post("/api/instancias-evaluativas", json={"nombre": "  1er Trimestre "})
    assert creada.status_code == 201
    instancia_id = creada.json()["id"]
    assert creada.json()["nombre"] == "1er Trimestre"

    renombrada = await client.patch(
        f"/api/instancias-evaluativas/{instancia_id}", json={"nombre": "Primer Trimestre"}
    )
    assert renombrada.json()["nombre"] == "Primer Trimestre"

    await client.put(f"/api/instancias-evaluativas/{instancia_id}", json={"activo": False})
    assert (await client.get("/api/instancias-evaluativas")).json() == []


async def test_instancia_sin_nombre(client):
    resp = await client.post("/api/instancias-evaluativas", json={"nombre": "  "})

    assert resp.status_code == 400


def _excel(filas: list[dict]) -> bytes:
    buf = BytesIO()
    pd.DataFrame(filas).to_excel(buf, index=False, engine="openpyxl")
    return buf.getvalue()


XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


async def test_importar_crea_actualiza_y_reporta_errores(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s, 3, "B")
        await crear_alumno(s, curso, nombre="Viejo", apellido="Nombre", legajo="L-1")
        await s.commit()

    contenido = _excel(
        [
            {"Legajo": "L-1", "Nombre": "Ana", "Apellido": "Pérez", "DNI": "40111222", "Curso": "3° B"},
            {"Legajo": "L-2", "Nombre": "Beto", "Apellido": "Ruiz", "DNI": "40333444", "Curso": "4° A"},
            {"Legajo": "L-3", "Nombre": None, "Apellido": "Sosa", "DNI": None, "Curso": None},
        ]
    )

    resp = await client.post(
        "/api/estudiantes/importar",
        files={"archivo": ("alumnos.xlsx", contenido, XLSX)},
    )

    assert resp.status_code == 201
    cuerpo = resp.json()
    assert cuerpo["total_filas"] == 3
    assert cuerpo["estudiantes_creados"] == 1
    assert cuerpo["estudiantes_actualizados"] == 1
    assert cuerpo["cursos_creados"] == 1
    assert cuerpo["total_errores"] == 1
    assert cuerpo["errores"][0]["fila"] == 4

    listado = (await client.get("/api/estudiantes", params={"search": "Pérez"})).json()
    assert listado["data"][0]["estudiante"] == "Ana Pérez"


async def test_importar_sin_columnas_obligatorias(client):
    contenido = _excel([{"Nombre": "Ana", "Apellido": "Pérez"}])

    resp = await client.post(
        "/api/estudiantes/importar",
        files={"archivo": ("alumnos.xlsx", contenido, XLSX)},
    )

    assert resp.status_code == 400
    assert "Legajo" in resp.json()["error"]


async def test_importar_rechaza_otra_extension(client):
    resp = await client.post(
        "/api/estudiantes/importar",
        files={"archivo": ("alumnos.csv", b"Legajo,Nombre\n", "text/csv")},
    )

    assert resp.status_code == 400
