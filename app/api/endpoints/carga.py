"""Endpoint de carga de notas por docente (ver-carga)."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.models import Asignacion, Docente
from app.schemas.evaluacion import (
    CargaAlumnoItem,
    CargaAsignacionItem,
    CargaDetalleResponse,
    CargaDocenteDetalle,
    CargaDocenteItem,
    InstanciaOut,
)
from app.services import carga_service

router = APIRouter(tags=["evaluacion"])


@router.get(
    "/ver-carga",
    response_model=list[CargaDocenteItem] | CargaDocenteDetalle | CargaDetalleResponse,
    summary="Carga de notas",
    description=(
        "Sin parámetros: docentes activos con porcentaje de carga "
        "(notas cargadas / (alumnos de sus cursos x instancias activas)). "
        "Con docente_id: detalle por asignación. "
        "Con docente_id, curso_id y materia_id: alumnos con sus notas por instancia."
    ),
)
async def ver_carga(
    db: AsyncSession = Depends(get_db),
    docente_id: Annotated[int | None, Query()] = None,
    curso_id: Annotated[int | None, Query()] = None,
    materia_id: Annotated[int | None, Query()] = None,
):
    if docente_id is not None and curso_id is not None and materia_id is not None:
        instancias, alumnos = await carga_service.notas_de_curso(db, docente_id, curso_id, materia_id)
        return CargaDetalleResponse(
            instancias=[InstanciaOut.model_validate(i) for i in instancias],
            alumnos=[CargaAlumnoItem(**a) for a in alumnos],
        )

    if docente_id is not None:
        result = await db.execute(
            select(Docente)
            .options(
                selectinload(Docente.persona),
                selectinload(Docente.asignaciones).selectinload(Asignacion.curso),
                selectinload(Docente.asignaciones).selectinload(Asignacion.materia),
            )
            .where(Docente.id == docente_id)
        )
        docente = result.scalar_one_or_none()
        if not docente:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Docente no encontrado",
            )
        filas = await carga_service.carga_docente(db, docente)
        instancias = await carga_service.instancias_activas(db)
        return CargaDocenteDetalle(
            docente_id=docente.id,
            nombre=docente.persona.nombre,
            apellido=docente.persona.apellido,
            asignaciones=[CargaAsignacionItem(**f) for f in filas],
            instancias=[InstanciaOut.model_validate(i) for i in instancias],
        )

    return [CargaDocenteItem(**f) for f in await carga_service.carga_general(db)]
