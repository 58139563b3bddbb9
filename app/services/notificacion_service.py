"""Servicio de notificaciones: destino por usuario o rol, vencimiento y limpieza."""
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.notificacion import Notificacion
from app.models.role import Rol, RolNombre, RolUsuario

logger = logging.getLogger(__name__)


def ahora_utc() -> datetime:
    return datetime.now(timezone.utc)


def como_utc(dt: datetime) -> datetime:
    """Normaliza a UTC; los valores sin zona (SQLite) se asumen UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def calcular_expiracion(fecha_creacion: datetime, duracion_minutos: int) -> datetime:
    return fecha_creacion + timedelta(minutes=duracion_minutos)


def esta_visible(notificacion: Notificacion, ahora: datetime | None = None) -> bool:
    """Activa y todavía no vencida."""
    ahora = ahora or ahora_utc()
    return notificacion.activa and como_utc(notificacion.fecha_expiracion) > como_utc(ahora)


async def resolver_rol(db: AsyncSession, valor: str | int | None) -> Rol | None:
    """Busca un rol por ID, nombre (PRECEPTOR) o alias de portal (preceptores)."""
    if valor is None:
        return None
    texto = str(valor).strip()
    if texto.isdigit():
        result = await db.execute(select(Rol).where(Rol.id == int(texto)))
        return result.scalar_one_or_none()
    nombre = RolNombre.normalizar(texto)
    if nombre is None:
        return None
    result = await db.execute(select(Rol).where(Rol.nombre == nombre))
    return result.scalar_one_or_none()


async def roles_de_usuario(db: AsyncSession, usuario_id: int) -> list[int]:
    result = await db.execute(
        select(RolUsuario.rol_id).where(RolUsuario.usuario_id == usuario_id).distinct()
    )
    return list(result.scalars().all())


async def notificaciones_visibles(
    db: AsyncSession,
    usuario_id: int,
    rol: str | int | None = None,
    ahora: datetime | None = None,
) -> list[Notificacion]:
    """Notificaciones activas y no vencidas dirigidas al usuario o a alguno de sus roles.

    Si se indica ``rol`` se usa solo ese rol; si no, todos los roles del usuario.
    """
    ahora = ahora or ahora_utc()
    if rol is not None:
        r = await resolver_rol(db, rol)
        rol_ids = [r.id] if r else []
    else:
        rol_ids = await roles_de_usuario(db, usuario_id)

    destino = Notificacion.destinatario_id == usuario_id
    if rol_ids:
        destino = or_(destino, Notificacion.rol_destino_id.in_(rol_ids))
    result = await db.execute(
        select(Notificacion)
        .where(
            Notificacion.activa.is_(True),
            Notificacion.fecha_expiracion > ahora,
            destino,
        )
        .order_by(Notificacion.fecha_creacion.desc(), Notificacion.id.desc())
    )
    return list(result.scalars().all())


async def limpiar_notificaciones(
    db: AsyncSession,
    ahora: datetime | None = None,
    dias: int | None = None,
) -> dict[str, int]:
    """Mantenimiento de notificaciones.

    1. Borra las vencidas.
    2. Borra las inactivas con más de ``dias`` de antigüedad.
    3. Desactiva las activas no vencidas con más de ``dias`` de antigüedad.

    ``dias`` toma por defecto ``settings.notificaciones_dias_retencion``.
    """
    ahora = ahora or ahora_utc()
    if dias is None:
        dias = settings.notificaciones_dias_retencion
    limite = ahora - timedelta(days=dias)

    r_exp = await db.execute(
        delete(Notificacion)
        .where(Notificacion.fecha_expiracion < ahora)
        .execution_options(synchronize_session=False)
    )
    r_ant = await db.execute(
        delete(Notificacion)
        .where(Notificacion.fecha_creacion < limite, Notificacion.activa.is_(False))
        .execution_options(synchronize_session=False)
    )
    r_des = await db.execute(
        update(Notificacion)
        .where(
            and_(
                Notificacion.fecha_creacion < limite,
                Notificacion.activa.is_(True),
                Notificacion.fecha_expiracion > ahora,
            )
        )
        .values(activa=False)
        .execution_options(synchronize_session=False)
    )
    resultado = {
        "eliminadas_expiradas": r_exp.rowcount or 0,
        "eliminadas_antiguas": r_ant.rowcount or 0,
        "desactivadas": r_des.rowcount or 0,
    }
    logger.info("Limpieza de notificaciones: %s", resultado)
    return resultado
