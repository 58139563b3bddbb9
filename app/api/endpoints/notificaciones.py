"""Endpoints de notificaciones (por usuario o por rol, con vencimiento)."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.database import get_db
from app.models import Notificacion, Rol, RolNombre, RolUsuario, Usuario
from app.schemas.comun import MensajeResponse
from app.schemas.notificacion import (
    Destino,
    LimpiezaResponse,
    MarcarLeidaRequest,
    NoLeidasResponse,
    NotificacionCreate,
    NotificacionOut,
    NotificacionPatch,
    NotificacionUpdate,
)
from app.services import notificacion_service
from app.services.notificacion_service import ahora_utc, calcular_expiracion, como_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notificaciones", tags=["notificaciones"])

ROLES_PORTAL = (RolNombre.TUTOR, RolNombre.DOCENTE, RolNombre.PRECEPTOR)


def _notificacion_out(n: Notificacion) -> NotificacionOut:
    remitente = None
    if n.remitente is not None:
        remitente = n.remitente.persona.nombre_completo if n.remitente.persona else n.remitente.username
    return NotificacionOut(
        id=n.id,
        titulo=n.titulo,
        mensaje=n.mensaje,
        importancia=n.importancia,
        tipo=n.tipo,
        remitente_id=n.remitente_id,
        remitente=remitente,
        destinatario_id=n.destinatario_id,
        rol_destino_id=n.rol_destino_id,
        rol_destino=n.rol_destino.nombre if n.rol_destino else None,
        fecha_creacion=como_utc(n.fecha_creacion),
        fecha_expiracion=como_utc(n.fecha_expiracion),
        activa=n.activa,
        leida=n.leida,
    )


def _con_relaciones(q):
    return q.options(
        selectinload(Notificacion.remitente).selectinload(Usuario.persona),
        selectinload(Notificacion.rol_destino),
    )


async def _cargar(db: AsyncSession, ids: list[int]) -> list[NotificacionOut]:
    """Recarga las notificaciones con remitente y rol para armar la respuesta, en el orden dado."""
    if not ids:
        return []
    result = await db.execute(
        _con_relaciones(select(Notificacion))
        .where(Notificacion.id.in_(ids))
        .execution_options(populate_existing=True)
    )
    por_id = {n.id: n for n in result.scalars().all()}
    return [_notificacion_out(por_id[i]) for i in ids if i in por_id]


async def _obtener(db: AsyncSession, notificacion_id: int) -> Notificacion:
    notificacion = await db.get(Notificacion, notificacion_id)
    if not notificacion:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notificación no encontrada",
        )
    return notificacion


async def _aplicar_destino(db: AsyncSession, notificacion: Notificacion, destino: Destino) -> None:
    """Dirige la notificación a un usuario o a un rol (nunca a ambos)."""
    if destino.tipo == "usuario":
        valor = str(destino.valor).strip()
        usuario = await db.get(Usuario, int(valor)) if valor.isdigit() else None
        if usuario is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Usuario destino inválido: '{destino.valor}'",
            )
        notificacion.destinatario_id = usuario.id
        notificacion.rol_destino_id = None
    else:
        rol = await notificacion_service.resolver_rol(db, destino.valor)
        if rol is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Rol destino inválido: '{destino.valor}'",
            )
        notificacion.rol_destino_id = rol.id
        notificacion.destinatario_id = None


def _aplicar_cambios(notificacion: Notificacion, cambios: NotificacionUpdate) -> None:
    datos = cambios.model_dump(
        exclude_unset=True, include={"titulo", "mensaje", "importancia", "activa"}
    )
    for campo, valor in datos.items():
        if valor is None:
            continue
        if campo in ("titulo", "mensaje") and not valor.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"El campo {campo} no puede quedar vacío",
            )
        setattr(notificacion, campo, valor)
    if cambios.duracion_minutos is not None:
        notificacion.fecha_expiracion = calcular_expiracion(
            como_utc(notificacion.fecha_creacion), cambios.duracion_minutos
        )


@router.post(
    "",
    response_model=NotificacionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Crear notificación",
    description=(
        "destino.tipo 'usuario' (valor = ID) o 'rol' (valor = nombre, alias como 'preceptores' o ID). "
        "Vence a los duracion_minutos desde la creación."
    ),
)
async def crear_notificacion(body: NotificacionCreate, db: AsyncSession = Depends(get_db)):
    if body.usuario_id_remitente is not None and await db.get(Usuario, body.usuario_id_remitente) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Usuario remitente inexistente",
        )
    creacion = ahora_utc()
    notificacion = Notificacion(
        titulo=body.titulo.strip(),
        mensaje=body.mensaje.strip(),
        importancia=body.importancia,
        tipo=body.tipo,
        remitente_id=body.usuario_id_remitente,
        fecha_creacion=creacion,
        fecha_expiracion=calcular_expiracion(creacion, body.duracion_minutos),
        activa=True,
        leida=False,
    )
    await _aplicar_destino(db, notificacion, body.destino)
    db.add(notificacion)
    await db.flush()
    logger.info(
        "Notificación %s creada (usuario=%s rol=%s, vence %s)",
        notificacion.id, notificacion.destinatario_id, notificacion.rol_destino_id,
        notificacion.fecha_expiracion.isoformat(),
    )
    return (await _cargar(db, [notificacion.id]))[0]


@router.get(
    "",
    response_model=list[NotificacionOut],
    summary="Notificaciones visibles para un usuario",
    description=(
        "Activas y no vencidas, dirigidas al usuario o a su rol. Si no se indica rol se "
        "consideran todos los roles del usuario."
    ),
)
async def listar_visibles(
    usuario_id: Annotated[int, Query(description="ID del usuario")],
    rol: Annotated[str | None, Query(description="Rol con el que consulta")] = None,
    db: AsyncSession = Depends(get_db),
):
    visibles = await notificacion_service.notificaciones_visibles(db, usuario_id, rol)
    return await _cargar(db, [n.id for n in visibles])


@router.get(
    "/por-rol",
    response_model=list[NotificacionOut],
    summary="Notificaciones dirigidas a un rol",
)
async def listar_por_rol(
    rol: Annotated[str, Query(description="Nombre, alias o ID del rol")],
    db: AsyncSession = Depends(get_db),
):
    rol_obj = await notificacion_service.resolver_rol(db, rol)
    if rol_obj is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Rol inválido: '{rol}'",
        )
    result = await db.execute(
        select(Notificacion.id)
        .where(
            Notificacion.rol_destino_id == rol_obj.id,
            Notificacion.activa.is_(True),
            Notificacion.fecha_expiracion > ahora_utc(),
        )
        .order_by(Notificacion.fecha_creacion.desc(), Notificacion.id.desc())
    )
    return await _cargar(db, list(result.scalars().all()))


@router.post(
    "/marcar-leida",
    response_model=MensajeResponse,
    summary="Marcar notificación como leída",
    description="Solo el usuario destinatario puede marcarla.",
)
async def marcar_leida(body: MarcarLeidaRequest, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Notificacion).where(
            Notificacion.id == body.notificacion_id,
            Notificacion.destinatario_id == body.usuario_id,
        )
    )
    notificacion = result.scalar_one_or_none()
    if not notificacion:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notificación no encontrada para este usuario",
        )
    notificacion.leida = True
    await db.flush()
    return MensajeResponse(message="Notificación marcada como leída")


@router.get("/no-leidas", response_model=NoLeidasResponse, summary="Cantidad de notificaciones sin leer")
async def contar_no_leidas(
    usuario_id: Annotated[int, Query(description="ID del usuario")],
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(func.count(Notificacion.id)).where(
            Notificacion.destinatario_id == usuario_id,
            Notificacion.leida.is_(False),
            Notificacion.activa.is_(True),
            Notificacion.fecha_expiracion > ahora_utc(),
        )
    )
    return NoLeidasResponse(usuario_id=usuario_id, no_leidas=result.scalar_one())


@router.get(
    "/count-por-rol",
    response_model=dict[str, int],
    summary="Usuarios activos por rol",
    description="Sin rol: cuenta TUTOR, DOCENTE y PRECEPTOR.",
)
async def contar_por_rol(
    rol: Annotated[str | None, Query(description="Nombre o alias del rol")] = None,
    db: AsyncSession = Depends(get_db),
):
    if rol is not None:
        nombre = RolNombre.normalizar(rol)
        if nombre is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Rol inválido: '{rol}'",
            )
        nombres = (nombre,)
    else:
        nombres = ROLES_PORTAL
    result = await db.execute(
        select(Rol.nombre, func.count(func.distinct(RolUsuario.usuario_id)))
        .join(RolUsuario, RolUsuario.rol_id == Rol.id)
        .join(Usuario, Usuario.id == RolUsuario.usuario_id)
        .where(Rol.nombre.in_(nombres), Usuario.activo.is_(True))
        .group_by(Rol.nombre)
    )
    conteo = dict.fromkeys(nombres, 0)
    conteo.update(dict(result.all()))
    return conteo


@router.delete(
    "/limpiar-expiradas",
    response_model=LimpiezaResponse,
    summary="Limpiar notificaciones vencidas",
    description=(
        "Borra las vencidas y las inactivas con más de 30 días; desactiva las activas "
        "con más de 30 días que todavía no vencieron."
    ),
)
async def limpiar_expiradas(db: AsyncSession = Depends(get_db)):
    resultado = await notificacion_service.limpiar_notificaciones(
        db, dias=settings.notificaciones_dias_retencion
    )
    return LimpiezaResponse(**resultado)


@router.get("/{notificacion_id}", response_model=NotificacionOut, summary="Detalle de notificación")
async def obtener_notificacion(notificacion_id: int, db: AsyncSession = Depends(get_db)):
    await _obtener(db, notificacion_id)
    return (await _cargar(db, [notificacion_id]))[0]


@router.put("/{notificacion_id}", response_model=NotificacionOut, summary="Editar notificación")
async def editar_notificacion(
    notificacion_id: int,
    body: NotificacionUpdate,
    db: AsyncSession = Depends(get_db),
):
    notificacion = await _obtener(db, notificacion_id)
    _aplicar_cambios(notificacion, body)
    await db.flush()
    return (await _cargar(db, [notificacion.id]))[0]


@router.patch(
    "/{notificacion_id}",
    response_model=NotificacionOut,
    summary="Editar notificación propia",
    description="Edición parcial (incluido el destino); si tiene remitente, solo él puede hacerla.",
    responses={403: {"description": "El usuario no es el remitente"}},
)
async def editar_notificacion_propia(
    notificacion_id: int,
    body: NotificacionPatch,
    db: AsyncSession = Depends(get_db),
):
    notificacion = await _obtener(db, notificacion_id)
    # sin remitente cualquiera puede editarla
    if (
        notificacion.remitente_id is not None
        and notificacion.remitente_id != body.usuario_id_remitente
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Solo el remitente puede editar esta notificación",
        )
    _aplicar_cambios(notificacion, body)
    if body.destino is not None:
        await _aplicar_destino(db, notificacion, body.destino)
    await db.flush()
    return (await _cargar(db, [notificacion.id]))[0]


@router.delete("/{notificacion_id}", response_model=MensajeResponse, summary="Eliminar notificación")
async def eliminar_notificacion(notificacion_id: int, db: AsyncSession = Depends(get_db)):
    notificacion = await _obtener(db, notificacion_id)
    await db.delete(notificacion)
    await db.flush()
    return MensajeResponse(message="Notificación eliminada")
