"""Endpoints de servicio: estado de la aplicación y prueba de conexión a la base."""
import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models import Notificacion, Usuario
from app.services.notificacion_service import como_utc

logger = logging.getLogger(__name__)

router = APIRouter(tags=["salud"])

_INICIO = time.monotonic()


def _ms_desde(inicio: float) -> str:
    return f"{round((time.perf_counter() - inicio) * 1000)}ms"


@router.get(
    "/health",
    summary="Estado del servicio",
    response_description="Conexión a la base y contadores básicos",
    responses={503: {"description": "La base de datos no responde"}},
)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Comprueba la conexión a la base y devuelve contadores de notificaciones y usuarios."""
    inicio = time.perf_counter()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        await db.execute(text("SELECT 1"))
        notificaciones_activas = (
            await db.execute(select(func.count(Notificacion.id)).where(Notificacion.activa.is_(True)))
        ).scalar_one()
        usuarios_activos = (
            await db.execute(select(func.count(Usuario.id)).where(Usuario.activo.is_(True)))
        ).scalar_one()
        ultima = (
            await db.execute(
                select(Notificacion.id, Notificacion.titulo, Notificacion.fecha_creacion)
                .order_by(Notificacion.fecha_creacion.desc(), Notificacion.id.desc())
                .limit(1)
            )
        ).first()
    except SQLAlchemyError as exc:
        logger.exception("Health check: la base de datos no responde")
        await db.rollback()
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "timestamp": timestamp,
                "responseTime": _ms_desde(inicio),
                "error": str(exc.__class__.__name__),
                "database": {"connected": False},
            },
        )
    return {
        "status": "healthy",
        "timestamp": timestamp,
        "responseTime": _ms_desde(inicio),
        "database": {
            "connected": True,
            "notificacionesActivas": notificaciones_activas,
            "usuariosActivos": usuarios_activos,
        },
        "system": {
            "ultimaNotificacion": {
                "id": str(ultima.id),
                "titulo": ultima.titulo,
                "fecha": como_utc(ultima.fecha_creacion).isoformat(),
            } if ultima else None,
            "uptime": round(time.monotonic() - _INICIO, 1),
        },
    }


@router.get(
    "/test-db",
    summary="Prueba de conexión a la base",
    description="Consulta SQL directa: hora del servidor de base de datos y versión.",
)
async def test_db(db: AsyncSession = Depends(get_db)):
    if db.get_bind().dialect.name == "sqlite":
        consulta = text("SELECT CURRENT_TIMESTAMP AS now, sqlite_version() AS version")
    else:
        consulta = text("SELECT NOW() AS now, version() AS version")
    fila = (await db.execute(consulta)).mappings().one()
    return {"success": True, "data": {"now": str(fila["now"]), "version": str(fila["version"])}}
