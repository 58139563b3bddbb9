"""Endpoints de estado del servicio."""
from datetime import datetime, timedelta, timezone

from app.models import Notificacion


async def test_health(client, session_factory):
    creacion = datetime.now(timezone.utc)
    async with session_factory() as s:
        s.add(
            Notificacion(
                titulo="Bienvenida",
                mensaje="Hola",
                fecha_creacion=creacion,
                fecha_expiracion=creacion + timedelta(days=1),
            )
        )
        await s.commit()

    resp = await client.get("/api/health")

    assert resp.status_code == 200
    cuerpo = resp.json()
    assert cuerpo["status"] == "healthy"
    assert cuerpo["database"]["connected"] is True
    assert cuerpo["database"]["notificacionesActivas"] == 1
    assert cuerpo["system"]["ultimaNotificacion"]["titulo"] == "Bienvenida"


async def test_test_db(client):
    resp = await client.get("/api/test-db")

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert resp.json()["data"]["version"]


async def test_ruta_inexistente_usa_formato_de_error(client):
    resp = await client.get("/api/no-existe")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Not Found"}


async def test_health_sin_base_devuelve_503(client, engine):
    async with engine.begin() as conn:
        await conn.run_sync(Notificacion.__table__.drop)

    resp = await client.get("/api/health")

    assert resp.status_code == 503
    assert resp.json()["status"] == "unhealthy"
    assert resp.json()["database"] == {"connected": False}
