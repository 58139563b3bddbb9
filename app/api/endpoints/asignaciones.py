"""Endpoints de asignaciones (docente x materia x curso)."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.models import Asignacion, Curso, Docente, Materia
from app.schemas.comun import MensajeResponse, Pagina, PaginaMeta, Paginacion, parametros_paginacion
from app.schemas.curso import AsignacionIn, AsignacionOut

router = APIRouter(prefix="/asignaciones", tags=["asignaciones"])


def _asignacion_out(a: Asignacion) -> AsignacionOut:
    return AsignacionOut(
        id=a.id,
        docente_id=a.docente_id,
        docente=a.docente.persona.nombre_completo,
        materia_id=a.materia_id,
        materia=a.materia.nombre,
        curso_id=a.curso_id,
        curso=a.curso.etiqueta,
    )


def _consulta():
    return select(Asignacion).options(
        selectinload(Asignacion.docente).selectinload(Docente.persona),
        selectinload(Asignacion.materia),
        selectinload(Asignacion.curso),
    )


async def _obtener_asignacion(db: AsyncSession, asignacion_id: int) -> Asignacion:
    result = await db.execute(
        _consulta().where(Asignacion.id == asignacion_id).execution_options(populate_existing=True)
    )
    asignacion = result.scalar_one_or_none()
    if not asignacion:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Asignación no encontrada",
        )
    return asignacion


async def _validar_referencias(db: AsyncSession, docente_id: int, materia_id: int, curso_id: int) -> None:
    for modelo, id_, nombre in (
        (Docente, docente_id, "docente"),
        (Materia, materia_id, "materia"),
        (Curso, curso_id, "curso"),
    ):
        if await db.get(modelo, id_) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"No existe {nombre} con id {id_}",
            )


@router.get(
    "",
    response_model=Pagina[AsignacionOut],
    summary="Listar asignaciones",
    description="Filtros opcionales por docente, materia y curso.",
)
async def listar_asignaciones(
    db: AsyncSession = Depends(get_db),
    paginacion: Paginacion = Depends(parametros_paginacion),
    docente_id: Annotated[int | None, Query()] = None,
    materia_id: Annotated[int | None, Query()] = None,
    curso_id: Annotated[int | None, Query()] = None,
):
    filtros = []
    if docente_id is not None:
        filtros.append(Asignacion.docente_id == docente_id)
    if materia_id is not None:
        filtros.append(Asignacion.materia_id == materia_id)
    if curso_id is not None:
        filtros.append(Asignacion.curso_id == curso_id)
    total = (
        await db.execute(select(func.count(Asignacion.id)).where(*filtros))
    ).scalar_one()
    result = await db.execute(
        _consulta()
        .where(*filtros)
        .order_by(Asignacion.id.desc())
        .offset(paginacion.offset)
        .limit(paginacion.page_size)
    )
    return Pagina(
        data=[_asignacion_out(a) for a in result.scalars().all()],
        meta=PaginaMeta.construir(total, paginacion.page, paginacion.page_size),
    )


@router.post("", response_model=AsignacionOut, status_code=status.HTTP_201_CREATED, summary="Crear asignación")
async def crear_asignacion(body: AsignacionIn, db: AsyncSession = Depends(get_db)):
    if body.docente_id is None or body.materia_id is None or body.curso_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="docente_id, materia_id y curso_id son obligatorios",
        )
    await _validar_referencias(db, body.docente_id, body.materia_id, body.curso_id)
    asignacion = Asignacion(
        docente_id=body.docente_id, materia_id=body.materia_id, curso_id=body.curso_id
    )
    db.add(asignacion)
    await db.flush()
    return _asignacion_out(await _obtener_asignacion(db, asignacion.id))


@router.get("/{asignacion_id}", response_model=AsignacionOut, summary="Detalle de asignación")
async def obtener_asignacion(asignacion_id: int, db: AsyncSession = Depends(get_db)):
    return _asignacion_out(await _obtener_asignacion(db, asignacion_id))


@router.put("/{asignacion_id}", response_model=AsignacionOut, summary="Editar asignación")
async def editar_asignacion(asignacion_id: int, body: AsignacionIn, db: AsyncSession = Depends(get_db)):
    asignacion = await _obtener_asignacion(db, asignacion_id)
    docente_id = body.docente_id if body.docente_id is not None else asignacion.docente_id
    materia_id = body.materia_id if body.materia_id is not None else asignacion.materia_id
    curso_id = body.curso_id if body.curso_id is not None else asignacion.curso_id
    await _validar_referencias(db, docente_id, materia_id, curso_id)
    asignacion.docente_id = docente_id
    asignacion.materia_id = materia_id
    asignacion.curso_id = curso_id
    await db.flush()
    return _asignacion_out(await _obtener_asignacion(db, asignacion.id))


@router.delete("/{asignacion_id}", response_model=MensajeResponse, summary="Eliminar asignación")
async def eliminar_asignacion(asignacion_id: int, db: AsyncSession = Depends(get_db)):
    asignacion = await _obtener_asignacion(db, asignacion_id)
    await db.delete(asignacion)
    await db.flush()
    return MensajeResponse(message="Asignación eliminada")
