"""Endpoints de tutores y asignación de alumnos a cargo."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.models import Alumno, AlumnoTutor, DataPersonal, Tutor
from app.models.curso import etiqueta_curso
from app.schemas.comun import Pagina, PaginaMeta, Paginacion, PersonaIn, PersonaOut, parametros_paginacion
from app.schemas.docente import AlumnoACargo, TutorAsignarRequest, TutorCreate, TutorOut
from app.services import persona_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tutores", tags=["tutores"])


def _consulta():
    return select(Tutor).options(
        selectinload(Tutor.persona),
        selectinload(Tutor.alumnos).selectinload(Alumno.persona),
        selectinload(Tutor.alumnos).selectinload(Alumno.curso),
    )


def _tutor_out(tutor: Tutor) -> TutorOut:
    return TutorOut(
        id=tutor.id,
        activo=tutor.activo,
        persona=PersonaOut.desde(tutor.persona),
        alumnos=[
            AlumnoACargo(id=a.id, nombre=a.persona.nombre_completo, curso=etiqueta_curso(a.curso))
            for a in tutor.alumnos
        ],
    )


async def _obtener_tutor(db: AsyncSession, tutor_id: int) -> Tutor:
    result = await db.execute(
        _consulta().where(Tutor.id == tutor_id).execution_options(populate_existing=True)
    )
    tutor = result.scalar_one_or_none()
    if not tutor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tutor no encontrado",
        )
    return tutor


@router.get("", response_model=Pagina[TutorOut], summary="Listar tutores")
async def listar_tutores(
    db: AsyncSession = Depends(get_db),
    paginacion: Paginacion = Depends(parametros_paginacion),
    search: Annotated[str | None, Query(description="Nombre, apellido o DNI")] = None,
):
    filtros = [persona_service.filtro_busqueda(search)] if search else []
    total = (
        await db.execute(
            select(func.count(Tutor.id))
            .join(DataPersonal, DataPersonal.id == Tutor.persona_id)
            .where(*filtros)
        )
    ).scalar_one()
    result = await db.execute(
        _consulta()
        .join(DataPersonal, DataPersonal.id == Tutor.persona_id)
        .where(*filtros)
        .order_by(DataPersonal.apellido, DataPersonal.nombre)
        .offset(paginacion.offset)
        .limit(paginacion.page_size)
    )
    return Pagina(
        data=[_tutor_out(t) for t in result.scalars().all()],
        meta=PaginaMeta.construir(total, paginacion.page, paginacion.page_size),
    )


@router.post("", response_model=TutorOut, status_code=status.HTTP_201_CREATED, summary="Crear tutor")
async def crear_tutor(body: TutorCreate, db: AsyncSession = Depends(get_db)):
    persona = persona_service.nueva_persona(body.model_dump())
    db.add(persona)
    await db.flush()
    tutor = Tutor(persona_id=persona.id, activo=True)
    db.add(tutor)
    await db.flush()
    logger.info("Tutor %s creado", tutor.id)
    return _tutor_out(await _obtener_tutor(db, tutor.id))


@router.post(
    "/assign",
    response_model=TutorOut,
    summary="Asignar alumnos a un tutor",
    description="Reemplaza la lista de alumnos a cargo del tutor en una sola transacción.",
)
async def asignar_alumnos(body: TutorAsignarRequest, db: AsyncSession = Depends(get_db)):
    tutor = await _obtener_tutor(db, body.tutor_id)
    ids = list(dict.fromkeys(body.alumno_ids))
    if ids:
        result = await db.execute(select(Alumno.id).where(Alumno.id.in_(ids)))
        faltantes = set(ids) - set(result.scalars().all())
        if faltantes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Alumnos inexistentes: {', '.join(str(i) for i in sorted(faltantes))}",
            )
    await db.execute(delete(AlumnoTutor).where(AlumnoTutor.tutor_id == tutor.id))
    for alumno_id in ids:
        db.add(AlumnoTutor(alumno_id=alumno_id, tutor_id=tutor.id))
    await db.flush()
    logger.info("Tutor %s: %d alumnos a cargo", tutor.id, len(ids))
    return _tutor_out(await _obtener_tutor(db, tutor.id))


@router.get("/{tutor_id}", response_model=TutorOut, summary="Detalle de tutor")
async def obtener_tutor(tutor_id: int, db: AsyncSession = Depends(get_db)):
    return _tutor_out(await _obtener_tutor(db, tutor_id))


@router.put("/{tutor_id}", response_model=TutorOut, summary="Editar tutor")
async def editar_tutor(tutor_id: int, body: PersonaIn, db: AsyncSession = Depends(get_db)):
    tutor = await _obtener_tutor(db, tutor_id)
    persona_service.aplicar_datos(tutor.persona, body.model_dump(exclude_unset=True))
    await db.flush()
    return _tutor_out(await _obtener_tutor(db, tutor.id))
