"""Endpoints de materias (ABM con baja lógica)."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models import Materia
from app.schemas.comun import Pagina, PaginaMeta, Paginacion, parametros_paginacion
from app.schemas.curso import MateriaIn, MateriaOut
from app.schemas.docente import EstadoActivoResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/materias", tags=["materias"])


async def _obtener_materia(db: AsyncSession, materia_id: int) -> Materia:
    materia = await db.get(Materia, materia_id)
    if not materia:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Materia no encontrada",
        )
    return materia


async def _validar_nombre_unico(db: AsyncSession, nombre: str, excluir_id: int | None = None) -> None:
    q = select(Materia.id).where(func.lower(Materia.nombre) == nombre.lower())
    if excluir_id is not None:
        q = q.where(Materia.id != excluir_id)
    if (await db.execute(q)).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Ya existe una materia llamada '{nombre}'",
        )


@router.get(
    "",
    response_model=Pagina[MateriaOut],
    summary="Listar materias",
    description="Listado paginado por nombre. Las materias dadas de baja se omiten salvo includeInactivos=true.",
)
async def listar_materias(
    db: AsyncSession = Depends(get_db),
    paginacion: Paginacion = Depends(parametros_paginacion),
    search: Annotated[str | None, Query(description="Buscar por nombre")] = None,
    include_inactivos: Annotated[bool, Query(alias="includeInactivos")] = False,
):
    q = select(Materia)
    if search:
        q = q.where(Materia.nombre.ilike(f"%{search.strip()}%"))
    if not include_inactivos:
        q = q.where(Materia.activo.is_(True))
    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        q.order_by(Materia.nombre).offset(paginacion.offset).limit(paginacion.page_size)
    )
    return Pagina(
        data=[MateriaOut.model_validate(m) for m in result.scalars().all()],
        meta=PaginaMeta.construir(total, paginacion.page, paginacion.page_size),
    )


@router.post("", response_model=MateriaOut, status_code=status.HTTP_201_CREATED, summary="Crear materia")
async def crear_materia(body: MateriaIn, db: AsyncSession = Depends(get_db)):
    nombre = (body.nombre or "").strip()
    if not nombre:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El nombre de la materia es obligatorio",
        )
    await _validar_nombre_unico(db, nombre)
    materia = Materia(nombre=nombre, activo=True)
    db.add(materia)
    await db.flush()
    return MateriaOut.model_validate(materia)


@router.get("/{materia_id}", response_model=MateriaOut, summary="Detalle de materia")
async def obtener_materia(materia_id: int, db: AsyncSession = Depends(get_db)):
    return MateriaOut.model_validate(await _obtener_materia(db, materia_id))


@router.put("/{materia_id}", response_model=MateriaOut, summary="Editar materia")
async def editar_materia(materia_id: int, body: MateriaIn, db: AsyncSession = Depends(get_db)):
    materia = await _obtener_materia(db, materia_id)
    if body.nombre is not None:
        nombre = body.nombre.strip()
        if not nombre:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="El nombre de la materia es obligatorio",
            )
        await _validar_nombre_unico(db, nombre, excluir_id=materia.id)
        materia.nombre = nombre
    if body.activo is not None:
        materia.activo = body.activo
    await db.flush()
    return MateriaOut.model_validate(materia)


@router.delete(
    "/{materia_id}",
    response_model=EstadoActivoResponse,
    summary="Baja / alta lógica de materia",
    description="Alterna el estado activo. El registro no se elimina.",
)
async def alternar_materia(materia_id: int, db: AsyncSession = Depends(get_db)):
    materia = await _obtener_materia(db, materia_id)
    materia.activo = not materia.activo
    await db.flush()
    logger.info("Materia %s activo=%s", materia.id, materia.activo)
    return EstadoActivoResponse(
        id=materia.id,
        activo=materia.activo,
        message="Materia reactivada" if materia.activo else "Materia dada de baja",
    )
