"""Endpoints de cursos y cursos visibles según el rol."""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import cast, func, or_, select, String
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.models import Alumno, Curso, Rol, RolNombre, RolUsuario
from app.schemas.comun import MensajeResponse, Pagina, PaginaMeta, Paginacion, parametros_paginacion
from app.schemas.curso import AlumnoDeCurso, CursoConAlumnos, CursoIn, CursoOut

router = APIRouter(prefix="/cursos", tags=["cursos"])
router_por_rol = APIRouter(tags=["cursos"])


def _curso_out(curso: Curso, cantidad_alumnos: int | None = None) -> CursoOut:
    return CursoOut(
        id=curso.id,
        anio=curso.anio,
        division=curso.division,
        nombre=curso.etiqueta,
        cantidad_alumnos=cantidad_alumnos,
    )


async def _obtener_curso(db: AsyncSession, curso_id: int, con_relaciones: bool = False) -> Curso:
    q = select(Curso).where(Curso.id == curso_id)
    if con_relaciones:
        q = q.options(selectinload(Curso.alumnos), selectinload(Curso.asignaciones))
    curso = (await db.execute(q)).scalar_one_or_none()
    if not curso:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Curso no encontrado",
        )
    return curso


async def _validar_curso(db: AsyncSession, body: CursoIn, excluir_id: int | None = None) -> tuple[int, str]:
    division = (body.division or "").strip().upper()
    if body.anio is None or not division:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Año y división son obligatorios",
        )
    q = select(Curso.id).where(Curso.anio == body.anio, Curso.division == division)
    if excluir_id is not None:
        q = q.where(Curso.id != excluir_id)
    if (await db.execute(q)).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"El curso {body.anio}° {division} ya existe",
        )
    return body.anio, division


async def _alumnos_activos(db: AsyncSession, curso_ids: list[int]) -> dict[int, int]:
    if not curso_ids:
        return {}
    result = await db.execute(
        select(Alumno.curso_id, func.count(Alumno.id))
        .where(Alumno.curso_id.in_(curso_ids), Alumno.activo.is_(True))
        .group_by(Alumno.curso_id)
    )
    return dict(result.all())


@router.get(
    "",
    response_model=Pagina[CursoOut],
    summary="Listar cursos",
    description="Listado paginado por año y división, con cantidad de alumnos activos.",
)
async def listar_cursos(
    db: AsyncSession = Depends(get_db),
    paginacion: Paginacion = Depends(parametros_paginacion),
    search: Annotated[str | None, Query(description="Buscar por año o división")] = None,
):
    q = select(Curso)
    if search:
        texto = search.strip().replace("°", "")
        q = q.where(
            or_(
                cast(Curso.anio, String).ilike(f"%{texto}%"),
                Curso.division.ilike(f"%{texto}%"),
            )
        )
    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        q.order_by(Curso.anio, Curso.division).offset(paginacion.offset).limit(paginacion.page_size)
    )
    cursos = result.scalars().all()
    conteo = await _alumnos_activos(db, [c.id for c in cursos])
    return Pagina(
        data=[_curso_out(c, conteo.get(c.id, 0)) for c in cursos],
        meta=PaginaMeta.construir(total, paginacion.page, paginacion.page_size),
    )


@router.post("", response_model=CursoOut, status_code=status.HTTP_201_CREATED, summary="Crear curso")
async def crear_curso(body: CursoIn, db: AsyncSession = Depends(get_db)):
    anio, division = await _validar_curso(db, body)
    curso = Curso(anio=anio, division=division)
    db.add(curso)
    await db.flush()
    return _curso_out(curso, 0)


@router.get("/{curso_id}", response_model=CursoOut, summary="Detalle de curso")
async def obtener_curso(curso_id: int, db: AsyncSession = Depends(get_db)):
    curso = await _obtener_curso(db, curso_id)
    conteo = await _alumnos_activos(db, [curso.id])
    return _curso_out(curso, conteo.get(curso.id, 0))


@router.put("/{curso_id}", response_model=CursoOut, summary="Editar curso")
async def editar_curso(curso_id: int, body: CursoIn, db: AsyncSession = Depends(get_db)):
    curso = await _obtener_curso(db, curso_id)
    curso.anio, curso.division = await _validar_curso(db, body, excluir_id=curso.id)
    await db.flush()
    conteo = await _alumnos_activos(db, [curso.id])
    return _curso_out(curso, conteo.get(curso.id, 0))


@router.delete(
    "/{curso_id}",
    response_model=MensajeResponse,
    summary="Eliminar curso",
    description="Borrado físico: elimina sus asignaciones y deja a sus alumnos sin curso.",
)
async def eliminar_curso(curso_id: int, db: AsyncSession = Depends(get_db)):
    curso = await _obtener_curso(db, curso_id, con_relaciones=True)
    await db.delete(curso)
    await db.flush()
    return MensajeResponse(message="Curso eliminado")


@router_por_rol.get(
    "/cursos-por-rol",
    response_model=list[CursoConAlumnos],
    summary="Cursos visibles para un usuario según su rol",
    description="Un PRECEPTOR solo ve los cursos que tiene asignados; el resto de los roles ve todos.",
)
async def cursos_por_rol(
    usuario_id: Annotated[int, Query(description="ID del usuario")],
    rol: Annotated[str | None, Query(description="Rol con el que opera (ej. PRECEPTOR)")] = None,
    db: AsyncSession = Depends(get_db),
):
    q = select(Curso).options(selectinload(Curso.alumnos).selectinload(Alumno.persona))
    if RolNombre.normalizar(rol or "") == RolNombre.PRECEPTOR:
        q = q.where(
            Curso.id.in_(
                select(RolUsuario.curso_id)
                .join(Rol, Rol.id == RolUsuario.rol_id)
                .where(
                    RolUsuario.usuario_id == usuario_id,
                    Rol.nombre == RolNombre.PRECEPTOR,
                    RolUsuario.curso_id.isnot(None),
                )
            )
        )
    result = await db.execute(q.order_by(Curso.anio, Curso.division))
    respuesta = []
    for curso in result.scalars().all():
        alumnos = sorted(
            (a for a in curso.alumnos if a.activo),
            key=lambda a: (a.persona.apellido, a.persona.nombre),
        )
        respuesta.append(
            CursoConAlumnos(
                id=curso.id,
                anio=curso.anio,
                division=curso.division,
                nombre=curso.etiqueta,
                cantidad_alumnos=len(alumnos),
                alumnos=[
                    AlumnoDeCurso(id=a.id, nombre=a.persona.nombre, apellido=a.persona.apellido)
                    for a in alumnos
                ],
            )
        )
    return respuesta
