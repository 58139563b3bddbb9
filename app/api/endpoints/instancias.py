"""Endpoints de instancias evaluativas."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models import InstanciaEvaluativa
from app.schemas.evaluacion import InstanciaActivoIn, InstanciaIn, InstanciaOut

router = APIRouter(prefix="/instancias-evaluativas", tags=["evaluacion"])


async def _obtener_instancia(db: AsyncSession, instancia_id: int) -> InstanciaEvaluativa:
    instancia = await db.get(InstanciaEvaluativa, instancia_id)
    if not instancia:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Instancia evaluativa no encontrada",
        )
    return instancia


def _nombre_obligatorio(nombre: str | None) -> str:
    nombre = (nombre or "").strip()
    if not nombre:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El nombre de la instancia es obligatorio",
        )
    return nombre


@router.get("", response_model=list[InstanciaOut], summary="Listar instancias activas")
async def listar_instancias(
    db: AsyncSession = Depends(get_db),
    search: Annotated[str | None, Query(description="Buscar por nombre")] = None,
):
    q = select(InstanciaEvaluativa).where(InstanciaEvaluativa.activo.is_(True))
    if search:
        q = q.where(InstanciaEvaluativa.nombre.ilike(f"%{search.strip()}%"))
    result = await db.execute(q.order_by(InstanciaEvaluativa.id))
    return [InstanciaOut.model_validate(i) for i in result.scalars().all()]


@router.post("", response_model=InstanciaOut, status_code=status.HTTP_201_CREATED, summary="Crear instancia")
async def crear_instancia(body: InstanciaIn, db: AsyncSession = Depends(get_db)):
    instancia = InstanciaEvaluativa(nombre=_nombre_obligatorio(body.nombre), activo=True)
    db.add(instancia)
    await db.flush()
    return InstanciaOut.model_validate(instancia)


@router.get("/{instancia_id}", response_model=InstanciaOut, summary="Detalle de instancia")
async def obtener_instancia(instancia_id: int, db: AsyncSession = Depends(get_db)):
    return InstanciaOut.model_validate(await _obtener_instancia(db, instancia_id))


@router.patch("/{instancia_id}", response_model=InstanciaOut, summary="Renombrar instancia")
async def renombrar_instancia(instancia_id: int, body: InstanciaIn, db: AsyncSession = Depends(get_db)):
    instancia = await _obtener_instancia(db, instancia_id)
    instancia.nombre = _nombre_obligatorio(body.nombre)
    await db.flush()
    return InstanciaOut.model_validate(instancia)


@router.put(
    "/{instancia_id}",
    response_model=InstanciaOut,
    summary="Activar / desactivar instancia",
)
async def cambiar_activo_instancia(
    instancia_id: int,
    body: InstanciaActivoIn,
    db: AsyncSession = Depends(get_db),
):
    instancia = await _obtener_instancia(db, instancia_id)
    instancia.activo = body.activo
    await db.flush()
    return InstanciaOut.model_validate(instancia)
