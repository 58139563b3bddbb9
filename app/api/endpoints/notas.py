"""Endpoints de notas por instancia evaluativa."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models import DetalleInstanciaEvaluativa, InstanciaEvaluativa, Materia
from app.schemas.evaluacion import NotaOut, NotasLoteRequest, NotasLoteResponse, NotaUnicaRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notas", tags=["evaluacion"])


def _nota_out(d: DetalleInstanciaEvaluativa) -> NotaOut:
    return NotaOut(
        id=d.id,
        instancia_id=d.instancia_id,
        alumno_id=d.alumno_id,
        materia_id=d.materia_id,
        docente_id=d.docente_id,
        curso_id=d.curso_id,
        nota=d.nota,
    )


async def _validar_instancia_y_materia(db: AsyncSession, instancia_id: int, materia_id: int) -> None:
    if await db.get(InstanciaEvaluativa, instancia_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Instancia evaluativa no encontrada",
        )
    if await db.get(Materia, materia_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Materia no encontrada",
        )


async def _guardar_notas(
    db: AsyncSession,
    instancia_id: int,
    materia_id: int,
    docente_id: int | None,
    curso_id: int | None,
    notas: list[tuple[int, int | None]],
) -> NotasLoteResponse:
    """Upsert por (instancia, alumno, materia). Una nota None borra la existente.

    Si un alumno aparece más de una vez en el lote vale su última nota.
    """
    notas = list(dict(notas).items())
    result = await db.execute(
        select(DetalleInstanciaEvaluativa).where(
            DetalleInstanciaEvaluativa.instancia_id == instancia_id,
            DetalleInstanciaEvaluativa.materia_id == materia_id,
            DetalleInstanciaEvaluativa.alumno_id.in_([a for a, _ in notas]),
        )
    )
    existentes = {d.alumno_id: d for d in result.scalars().all()}
    respuesta = NotasLoteResponse()
    for alumno_id, nota in notas:
        detalle = existentes.get(alumno_id)
        if nota is None:
            if detalle is not None:
                await db.delete(detalle)
                del existentes[alumno_id]
                respuesta.eliminadas += 1
            continue
        if detalle is None:
            detalle = DetalleInstanciaEvaluativa(
                instancia_id=instancia_id,
                alumno_id=alumno_id,
                materia_id=materia_id,
                docente_id=docente_id,
                curso_id=curso_id,
                nota=nota,
                activo=True,
            )
            db.add(detalle)
            existentes[alumno_id] = detalle
            respuesta.nuevas += 1
        else:
            detalle.nota = nota
            detalle.activo = True
            if docente_id is not None:
                detalle.docente_id = docente_id
            if curso_id is not None:
                detalle.curso_id = curso_id
            respuesta.actualizadas += 1
    await db.flush()
    logger.info(
        "Notas instancia=%s materia=%s: %d nuevas, %d actualizadas, %d eliminadas",
        instancia_id, materia_id, respuesta.nuevas, respuesta.actualizadas, respuesta.eliminadas,
    )
    return respuesta


@router.get(
    "",
    response_model=list[NotaOut],
    summary="Notas de una instancia",
    description="instancia_id es obligatorio; materia, curso y docente filtran opcionalmente.",
)
async def listar_notas(
    db: AsyncSession = Depends(get_db),
    instancia_id: Annotated[int | None, Query()] = None,
    materia_id: Annotated[int | None, Query()] = None,
    curso_id: Annotated[int | None, Query()] = None,
    docente_id: Annotated[int | None, Query()] = None,
):
    if instancia_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="instancia_id es obligatorio",
        )
    q = select(DetalleInstanciaEvaluativa).where(
        DetalleInstanciaEvaluativa.instancia_id == instancia_id,
        DetalleInstanciaEvaluativa.activo.is_(True),
    )
    if materia_id is not None:
        q = q.where(DetalleInstanciaEvaluativa.materia_id == materia_id)
    if curso_id is not None:
        q = q.where(DetalleInstanciaEvaluativa.curso_id == curso_id)
    if docente_id is not None:
        q = q.where(DetalleInstanciaEvaluativa.docente_id == docente_id)
    result = await db.execute(q.order_by(DetalleInstanciaEvaluativa.id))
    return [_nota_out(d) for d in result.scalars().all()]


@router.post(
    "",
    response_model=NotasLoteResponse,
    summary="Guardar notas en lote",
    description=(
        "Notas enteras de 1 a 10; una nota fuera de rango rechaza el lote completo (400). "
        "nota=null borra la nota existente del alumno o se ignora si no había."
    ),
)
async def guardar_notas(body: NotasLoteRequest, db: AsyncSession = Depends(get_db)):
    await _validar_instancia_y_materia(db, body.instancia_id, body.materia_id)
    return await _guardar_notas(
        db,
        body.instancia_id,
        body.materia_id,
        body.docente_id,
        body.curso_id,
        [(n.alumno_id, n.nota) for n in body.notas],
    )


@router.put("", response_model=NotasLoteResponse, summary="Guardar una nota")
async def guardar_nota(body: NotaUnicaRequest, db: AsyncSession = Depends(get_db)):
    await _validar_instancia_y_materia(db, body.instancia_id, body.materia_id)
    return await _guardar_notas(
        db,
        body.instancia_id,
        body.materia_id,
        body.docente_id,
        body.curso_id,
        [(body.alumno_id, body.nota)],
    )
