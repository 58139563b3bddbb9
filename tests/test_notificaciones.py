"""Notificaciones: destino, visibilidad según vencimiento y limpieza."""
from datetime import timedelta

from sqlalchemy import select, update

from app.models import Notificacion
from app.services.notificacion_service import (
    ahora_utc,
    calcular_expiracion,
    como_utc,
    limpiar_notificaciones,
    notificaciones_visibles,
)
from tests.factories import crear_rol, crear_usuario


async def _escenario(session_factory):
    """Un preceptor, un docente y un administrador remitente."""
    async with session_factory() as s:
        preceptor_rol = await crear_rol(s, "PRECEPTOR")
        docente_rol = await crear_rol(s, "DOCENTE")
        admin_rol = await crear_rol(s, "ADMIN")
        preceptor = await crear_usuario(s, "pre", roles=[preceptor_rol])
        docente = await crear_usuario(s, "doc", roles=[docente_rol])
        admin = await crear_usuario(s, "admin", roles=[admin_rol])
        await s.commit()
    return preceptor, docente, admin


def _nueva(destino, remitente_id=None, duracion=60):
    return {
        "titulo": "Reunión",
        "mensaje": "Reunión de preceptores a las 10",
        "duracion_minutos": duracion,
        "destino": destino,
        "usuario_id_remitente": str(remitente_id) if remitente_id else None,
        "importancia": "alta",
    }


async def test_crear_para_rol_por_alias(client, session_factory):
    preceptor, docente, admin = await _escenario(session_factory)

    resp = await client.post(
        "/api/notificaciones", json=_nueva({"tipo": "rol", "valor": "preceptores"}, admin.id)
    )

    assert resp.status_code == 201
    cuerpo = resp.json()
    assert cuerpo["rol_destino"] == "PRECEPTOR"
    assert cuerpo["destinatario_id"] is None
    assert cuerpo["importancia"] == "ALTA"
    assert cuerpo["remitente"] == "Admin Test"

    visibles = await client.get("/api/notificaciones", params={"usuario_id": preceptor.id})
    assert [n["id"] for n in visibles.json()] == [cuerpo["id"]]
    ajenas = await client.get("/api/notificaciones", params={"usuario_id": docente.id})
    assert ajenas.json() == []


async def test_rol_destino_invalido_devuelve_400(client, session_factory):
    await _escenario(session_factory)

    resp = await client.post("/api/notificaciones", json=_nueva({"tipo": "rol", "valor": "alumnos"}))

    assert resp.status_code == 400


async def test_duracion_debe_ser_positiva(client, session_factory):
    preceptor, _, _ = await _escenario(session_factory)

    resp = await client.post(
        "/api/notificaciones", json=_nueva({"tipo": "usuario", "valor": str(preceptor.id)}, duracion=0)
    )

    assert resp.status_code == 400


async def test_visible_hasta_el_vencimiento(session_factory):
    preceptor, _, _ = await _escenario(session_factory)
    creacion = ahora_utc()
    async with session_factory() as s:
        s.add(
            Notificacion(
                titulo="Aviso",
                mensaje="Vence en una hora",
                destinatario_id=preceptor.id,
                fecha_creacion=creacion,
                fecha_expiracion=calcular_expiracion(creacion, 60),
            )
        )
        await s.commit()

    async with session_factory() as s:
        antes = await notificaciones_visibles(s, preceptor.id, ahora=creacion + timedelta(minutes=59))
        despues = await notificaciones_visibles(s, preceptor.id, ahora=creacion + timedelta(minutes=61))

    assert len(antes) == 1
    assert despues == []


async def test_marcar_leida_solo_destinatario(client, session_factory):
    preceptor, docente, _ = await _escenario(session_factory)
    creada = await client.post(
        "/api/notificaciones", json=_nueva({"tipo": "usuario", "valor": str(preceptor.id)})
    )
    notificacion_id = creada.json()["id"]

    ajeno = await client.post(
        "/api/notificaciones/marcar-leida",
        json={"notificacion_id": notificacion_id, "usuario_id": str(docente.id)},
    )
    assert ajeno.status_code == 404

    sin_leer = await client.get("/api/notificaciones/no-leidas", params={"usuario_id": preceptor.id})
    assert sin_leer.json()["no_leidas"] == 1

    propio = await client.post(
        "/api/notificaciones/marcar-leida",
        json={"notificacion_id": notificacion_id, "usuario_id": str(preceptor.id)},
    )
    assert propio.status_code == 200
    sin_leer = await client.get("/api/notificaciones/no-leidas", params={"usuario_id": preceptor.id})
    assert sin_leer.json() == {"usuario_id": str(preceptor.id), "no_leidas": 0}


async def test_patch_solo_remitente(client, session_factory):
    preceptor, docente, admin = await _escenario(session_factory)
    creada = await client.post(
        "/api/notificaciones", json=_nueva({"tipo": "rol", "valor": "PRECEPTOR"}, admin.id)
    )
    notificacion_id = creada.json()["id"]

    prohibido = await client.patch(
        f"/api/notificaciones/{notificacion_id}",
        json={"usuario_id_remitente": str(docente.id), "titulo": "Otro"},
    )
    assert prohibido.status_code == 403

    resp = await client.patch(
        f"/api/notificaciones/{notificacion_id}",
        json={
            "usuario_id_remitente": str(admin.id),
            "titulo": "Reunión reprogramada",
            "destino": {"tipo": "rol", "valor": "docentes"},
        },
    )
    assert resp.status_code == 200
    assert resp.json()["titulo"] == "Reunión reprogramada"
    assert resp.json()["rol_destino"] == "DOCENTE"


async def test_count_por_rol(client, session_factory):
    await _escenario(session_factory)

    resp = await client.get("/api/notificaciones/count-por-rol")

    assert resp.json() == {"TUTOR": 0, "DOCENTE": 1, "PRECEPTOR": 1}
    por_alias = await client.get("/api/notificaciones/count-por-rol", params={"rol": "preceptores"})
    assert por_alias.json() == {"PRECEPTOR": 1}


async def test_limpieza(session_factory):
    preceptor, _, _ = await _escenario(session_factory)
    ahora = ahora_utc()
    hace_40_dias = ahora - timedelta(days=40)
    async with session_factory() as s:
        s.add_all(
            [
                # vencida
                Notificacion(
                    titulo="a", mensaje="a", destinatario_id=preceptor.id,
                    fecha_creacion=ahora - timedelta(hours=2),
                    fecha_expiracion=ahora - timedelta(hours=1),
                ),
                # inactiva y antigua
                Notificacion(
                    titulo="b", mensaje="b", destinatario_id=preceptor.id, activa=False,
                    fecha_creacion=hace_40_dias,
                    fecha_expiracion=ahora + timedelta(days=10),
                ),
                # activa y antigua, todavía vigente
                Notificacion(
                    titulo="c", mensaje="c", destinatario_id=preceptor.id,
                    fecha_creacion=hace_40_dias,
                    fecha_expiracion=ahora + timedelta(days=10),
                ),
                # reciente
                Notificacion(
                    titulo="d", mensaje="d", destinatario_id=preceptor.id,
                    fecha_creacion=ahora,
                    fecha_expiracion=ahora + timedelta(days=1),
                ),
            ]
        )
        await s.commit()

    async with session_factory() as s:
        resultado = await limpiar_notificaciones(s, ahora=ahora)
        await s.commit()

    assert resultado == {"eliminadas_expiradas": 1, "eliminadas_antiguas": 1, "desactivadas": 1}
    async with session_factory() as s:
        restantes = {n.titulo: n.activa for n in (await s.execute(select(Notificacion))).scalars()}
    assert restantes == {"c": False, "d": True}


async def test_endpoint_limpiar_expiradas(client, session_factory):
    await _escenario(session_factory)

    resp = await client.delete("/api/notificaciones/limpiar-expiradas")

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "eliminadas_expiradas": 0,
        "eliminadas_antiguas": 0,
        "desactivadas": 0,
    }


async def test_put_duracion_recalcula_desde_la_creacion(client, session_factory):
    preceptor, _, _ = await _escenario(session_factory)
    creada = await client.post(
        "/api/notificaciones", json=_nueva({"tipo": "usuario", "valor": str(preceptor.id)})
    )
    notificacion_id = int(creada.json()["id"])
    hace_dos_horas = ahora_utc() - timedelta(hours=2)
    async with session_factory() as s:
        await s.execute(
            update(Notificacion)
            .where(Notificacion.id == notificacion_id)
            .values(fecha_creacion=hace_dos_horas)
        )
        await s.commit()

    resp = await client.put(f"/api/notificaciones/{notificacion_id}", json={"duracion_minutos": 30})

    assert resp.status_code == 200
    async with session_factory() as s:
        notificacion = await s.get(Notificacion, notificacion_id)
        assert como_utc(notificacion.fecha_expiracion) == como_utc(
            notificacion.fecha_creacion
        ) + timedelta(minutes=30)
    visibles = await client.get("/api/notificaciones", params={"usuario_id": preceptor.id})
    assert visibles.json() == []


async def test_eliminar(client, session_factory):
    preceptor, _, _ = await _escenario(session_factory)
    creada = await client.post(
        "/api/notificaciones", json=_nueva({"tipo": "usuario", "valor": str(preceptor.id)})
    )
    notificacion_id = creada.json()["id"]

    resp = await client.delete(f"/api/notificaciones/{notificacion_id}")

    assert resp.status_code == 200
    detalle = await client.get(f"/api/notificaciones/{notificacion_id}")
    assert detalle.status_code == 404
    otra_vez = await client.delete(f"/api/notificaciones/{notificacion_id}")
    assert otra_vez.status_code == 404


async def test_listar_por_rol(client, session_factory):
    _, docente, admin = await _escenario(session_factory)
    para_rol = await client.post(
        "/api/notificaciones", json=_nueva({"tipo": "rol", "valor": "PRECEPTOR"}, admin.id)
    )
    await client.post(
        "/api/notificaciones", json=_nueva({"tipo": "usuario", "valor": str(docente.id)}, admin.id)
    )

    resp = await client.get("/api/notificaciones/por-rol", params={"rol": "preceptores"})

    assert resp.status_code == 200
    assert [n["id"] for n in resp.json()] == [para_rol.json()["id"]]
    invalido = await client.get("/api/notificaciones/por-rol", params={"rol": "alumnos"})
    assert invalido.status_code == 400


async def test_patch_sin_remitente_no_exige_autor(client, session_factory):
    preceptor, docente, _ = await _escenario(session_factory)
    creada = await client.post(
        "/api/notificaciones", json=_nueva({"tipo": "usuario", "valor": str(preceptor.id)})
    )
    assert creada.json()["remitente_id"] is None

    resp = await client.patch(
        f"/api/notificaciones/{creada.json()['id']}",
        json={"usuario_id_remitente": str(docente.id), "mensaje": "Se pasa a las 11"},
    )

    assert resp.status_code == 200
    assert resp.json()["mensaje"] == "Se pasa a las 11"
