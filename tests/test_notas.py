"""Notas por instancia: rango 1 a 10, upsert y borrado con null."""
import pytest

from tests.factories import crear_alumno, crear_curso, crear_docente, crear_instancia, crear_materia


@pytest.fixture
async def contexto(session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s)
        alumnos = [await crear_alumno(s, curso, nombre=n) for n in ("Ana", "Beto")]
        docente = await crear_docente(s)
        materia = await crear_materia(s)
        instancia = await crear_instancia(s)
        await s.commit()
    return {"curso": curso, "alumnos": alumnos, "docente": docente, "materia": materia, "instancia": instancia}


def _lote(ctx, notas):
    return {
        "instancia_id": str(ctx["instancia"].id),
        "materia_id": str(ctx["materia"].id),
        "docente_id": str(ctx["docente"].id),
        "curso_id": str(ctx["curso"].id),
        "notas": [{"alumno_id": str(a.id), "nota": n} for a, n in notas],
    }


@pytest.mark.parametrize("nota", [0, 11])
async def test_nota_fuera_de_rango_rechaza_el_lote(client, contexto, nota):
    ana, beto = contexto["alumnos"]

    resp = await client.post("/api/notas", json=_lote(contexto, [(ana, 8), (beto, nota)]))

    assert resp.status_code == 400
    listado = await client.get("/api/notas", params={"instancia_id": contexto["instancia"].id})
    assert listado.json() == []


async def test_guardar_actualizar_y_borrar(client, contexto):
    ana, beto = contexto["alumnos"]

    resp = await client.post("/api/notas", json=_lote(contexto, [(ana, 7), (beto, 10)]))
    assert resp.json() == {"success": True, "nuevas": 2, "actualizadas": 0, "eliminadas": 0}

    resp = await client.post("/api/notas", json=_lote(contexto, [(ana, 9), (beto, None)]))
    assert resp.json() == {"success": True, "nuevas": 0, "actualizadas": 1, "eliminadas": 1}

    listado = await client.get("/api/notas", params={"instancia_id": contexto["instancia"].id})
    assert [(n["alumno_id"], n["nota"]) for n in listado.json()] == [(str(ana.id), 9)]


async def test_nota_null_sin_registro_se_ignora(client, contexto):
    ana, _ = contexto["alumnos"]

    resp = await client.put(
        "/api/notas",
        json={
            "instancia_id": str(contexto["instancia"].id),
            "materia_id": str(contexto["materia"].id),
            "alumno_id": str(ana.id),
            "nota": None,
        },
    )

    assert resp.json() == {"success": True, "nuevas": 0, "actualizadas": 0, "eliminadas": 0}


async def test_listar_sin_instancia_devuelve_400(client):
    resp = await client.get("/api/notas")

    assert resp.status_code == 400


async def test_instancia_inexistente_devuelve_404(client, contexto):
    lote = _lote(contexto, [(contexto["alumnos"][0], 5)])
    lote["instancia_id"] = "999"

    resp = await client.post("/api/notas", json=lote)

    assert resp.status_code == 404


async def test_alumno_repetido_en_el_lote_vale_la_ultima_nota(client, contexto):
    ana, _ = contexto["alumnos"]
    await client.post("/api/notas", json=_lote(contexto, [(ana, 5)]))

    resp = await client.post("/api/notas", json=_lote(contexto, [(ana, None), (ana, 9)]))

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "nuevas": 0, "actualizadas": 1, "eliminadas": 0}
    listado = await client.get("/api/notas", params={"instancia_id": contexto["instancia"].id})
    assert [(n["alumno_id"], n["nota"]) for n in listado.json()] == [(str(ana.id), 9)]


async def test_alumno_repetido_con_null_final_no_guarda_nada(client, contexto):
    ana, _ = contexto["alumnos"]

    resp = await client.post("/api/notas", json=_lote(contexto, [(ana, 5), (ana, None)]))

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "nuevas": 0, "actualizadas": 0, "eliminadas": 0}
    listado = await client.get("/api/notas", params={"instancia_id": contexto["instancia"].id})
    assert listado.json() == []
