"""Endpoints de docentes (ABM con baja lógica)."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.models import DataPersonal, Docente
from app.schemas.comun import Pagina, PaginaMeta, Paginacion, PersonaOut, parametros_paginacion
from app.schemas.docente import DocenteCreate, DocenteOut, DocenteUpdate, EstadoActivoResponse
from app.services import persona_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/docentes", tags=["docentes"])


def _docente_out(docente: Docente) -> DocenteOut:
    return DocenteOut(
        id=docente.id,
        activo=docente.activo,
        persona=PersonaOut.desde(docente.persona),
        cantidad_asignaciones=len(docente.asignaciones),
    )


async def _obtener_docente(db: AsyncSession, docente_id: int) -> Docente:
    result = await db.execute(
        select(Docente)
        .options(selectinload(Docente.persona), selectinload(Docente.asignaciones))
        .where(Docente.id == docente_id)
        .execution_options(populate_existing=True)
    )
    docente = result.scalar_one_or_none()
    if not docente:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Docente no encontrado",
        )
    return docente


@router.get(
    "",
    response_model=Pagina[DocenteOut],
    summary="Listar docentes",
    description="Listado paginado ordenado por apellido. Los docentes dados de baja se omiten salvo includeInactivos=true.",
)
async def listar_docentes(
    db: AsyncSession = Depends(get_db),
    paginacion: Paginacion = Depends(parametros_paginacion),
    search: Annotated[str | None, Query(description="Nombre, apellido o DNI")] = None,
    include_inactivos: Annotated[bool, Query(alias="includeInactivos")] = False,
):
    q = select(Docente).join(DataPersonal, DataPersonal.id == Docente.persona_id)
    if search:
        q = q.where(persona_service.filtro_busqueda(search))
    if not include_inactivos:
        q = q.where(Docente.activo.is_(True))
    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        q.options(selectinload(Docente.persona), selectinload(Docente.asignaciones))
        .order_by(DataPersonal.apellido, DataPersonal.nombre)
        .offset(paginacion.offset)
        .limit(paginacion.page_size)
    )
    return Pagina(
        data=[_docente_out(d) for d in result.scalars().all()],
        meta=PaginaMeta.construir(total, paginacion.page, paginacion.page_size),
    )


@router.post(
    "",
    response_model=DocenteOut,
    status_code=status.HTTP_201_CREATED,
    summary="Crear docente",
)
async def crear_docente(body: DocenteCreate, db: AsyncSession = Depends(get_db)):
    persona = persona_service.nueva_persona(body.model_dump())
    db.add(persona)
    await db.flush()
    docente = Docente(persona_id=persona.id, activo=True)
    db.add(docente)
    await db.flush()
    logger.info("Docente %s creado", docente.id)
    return _docente_out(await _obtener_docente(db, docente.id))


@router.get("/{docente_id}", response_model=DocenteOut, summary="Detalle de docente")
async def obtener_docente(docente_id: int, db: AsyncSession = Depends(get_db)):
    return _docente_out(await _obtener_docente(db, docente_id))


@router.put(
    "/{docente_id}",
    response_model=DocenteOut,
    summary="Editar docente",
    description="Edita datos personales y opcionalmente el estado activo.",
)
async def editar_docente(
    docente_id: int,
    body: DocenteUpdate,
    db: AsyncSession = Depends(get_db),
):
    docente = await _obtener_docente(db, docente_id)
    datos = body.model_dump(exclude_unset=True)
    persona_service.aplicar_datos(docente.persona, datos)
    if datos.get("activo") is not None:
        docente.activo = datos["activo"]
        docente.persona.activo = datos["activo"]
    await db.flush()
    return _docente_out(await _obtener_docente(db, docente.id))


@router.delete(
    "/{docente_id}",
    response_model=EstadoActivoResponse,
    summary="Baja / alta lógica de docente",
    description="Alterna el estado activo. El registro no se elimina.",
)
async def alternar_docente(docente_id: int, db: AsyncSession = Depends(get_db)):
    docente = await _obtener_docente(db, docente_id)
    docente.activo = not docente.activo
    docente.persona.activo = docente.activo
    await db.flush()
    logger.info("Docente %s activo=%s", docente.id, docente.activo)
    return EstadoActivoResponse(
        id=docente.id,
        activo=docente.activo,
        message="Docente reactivado" if docente.activo else "Docente dado de baja",
    )
