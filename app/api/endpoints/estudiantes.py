"""Endpoints de estudiantes (listado con inasistencias, alta, edición, baja e importación)."""
import logging
from io import BytesIO
from typing import Annotated

import pandas as pd
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.models import Alumno, AlumnoTutor, Curso, DataPersonal, EstadoAlumno, Tutor
from app.models.curso import etiqueta_curso, parsear_etiqueta
from app.schemas.alumno import (
    AlumnoCursoItem,
    AsistenciaRegistro,
    ConteoEventos,
    EstudianteCreate,
    EstudianteDetalle,
    EstudianteEstadoUpdate,
    EstudianteListItem,
    EstudianteUpdate,
    ImportacionErrorItem,
    ImportacionEstudiantesResponse,
    TutorResumen,
)
from app.schemas.comun import Pagina, PaginaMeta, Paginacion, PersonaOut, parametros_paginacion
from app.services import asistencia_service, persona_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/estudiantes", tags=["estudiantes"])
router_por_curso = APIRouter(tags=["estudiantes"])


def _tutores_resumen(alumno: Alumno) -> list[TutorResumen]:
    return [
        TutorResumen(
            id=t.id,
            nombre=t.persona.nombre_completo,
            telefono=t.persona.movil or "No registrado",
        )
        for t in alumno.tutores
    ]


def _consulta_alumno():
    return select(Alumno).options(
        selectinload(Alumno.persona),
        selectinload(Alumno.curso),
        selectinload(Alumno.tutores).selectinload(Tutor.persona),
    )


async def _obtener_alumno(db: AsyncSession, alumno_id: int) -> Alumno:
    result = await db.execute(
        _consulta_alumno()
        .where(Alumno.id == alumno_id)
        .execution_options(populate_existing=True)
    )
    alumno = result.scalar_one_or_none()
    if not alumno:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Estudiante no encontrado",
        )
    return alumno


async def _detalle(db: AsyncSession, alumno_id: int) -> EstudianteDetalle:
    alumno = await _obtener_alumno(db, alumno_id)
    registros = await asistencia_service.asistencias_del_anio(db, alumno.id)
    resumen = asistencia_service.calcular_resumen(
        (r.tipo_evento, r.justificacion) for r in registros
    )
    return EstudianteDetalle(
        id=alumno.id,
        legajo=alumno.legajo,
        estado=alumno.estado,
        activo=alumno.activo,
        persona=PersonaOut.desde(alumno.persona),
        curso_id=alumno.curso_id,
        curso=etiqueta_curso(alumno.curso),
        tutores=_tutores_resumen(alumno),
        asistencias=[
            AsistenciaRegistro(
                id=r.id,
                fecha=r.fecha.isoformat(),
                tipo_evento=r.tipo_evento,
                hora_registro=r.hora_registro.strftime("%H:%M") if r.hora_registro else None,
                observaciones=r.observaciones,
                justificacion=r.justificacion,
                motivo_justificacion=r.motivo_justificacion,
            )
            for r in registros
        ],
        conteo=ConteoEventos(**resumen.conteo),
    )


async def _validar_curso(db: AsyncSession, curso_id: int | None) -> None:
    if curso_id is None:
        return
    if await db.get(Curso, curso_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"El curso {curso_id} no existe",
        )


async def _vincular_tutores(db: AsyncSession, alumno_id: int, tutor_ids: list[int]) -> None:
    """Reemplaza los tutores del alumno por ``tutor_ids``."""
    ids = list(dict.fromkeys(tutor_ids))
    if ids:
        result = await db.execute(select(Tutor.id).where(Tutor.id.in_(ids)))
        faltantes = set(ids) - set(result.scalars().all())
        if faltantes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Tutores inexistentes: {', '.join(str(i) for i in sorted(faltantes))}",
            )
    await db.execute(delete(AlumnoTutor).where(AlumnoTutor.alumno_id == alumno_id))
    for tutor_id in ids:
        db.add(AlumnoTutor(alumno_id=alumno_id, tutor_id=tutor_id))
    await db.flush()


@router.get(
    "",
    response_model=Pagina[EstudianteListItem],
    summary="Listar estudiantes",
    description=(
        "Listado paginado, más recientes primero. Cada fila incluye curso, tutores y el resumen "
        "de inasistencias del año (ponderado: Retiro 0.5, Inasistencia 1, Tardanza 0.33)."
    ),
)
async def listar_estudiantes(
    db: AsyncSession = Depends(get_db),
    paginacion: Paginacion = Depends(parametros_paginacion),
    search: Annotated[str | None, Query(description="Nombre, apellido o DNI")] = None,
    estado: Annotated[str | None, Query(description="Filtrar por estado exacto")] = None,
    curso: Annotated[str | None, Query(description="Curso, ej. '3° B'")] = None,
    include_bajas: Annotated[
        bool, Query(alias="includeBajas", description="Incluir alumnos dados de baja")
    ] = False,
):
    """Por defecto se excluyen los alumnos inactivos, salvo que se filtre por estado."""
    q = select(Alumno).join(DataPersonal, DataPersonal.id == Alumno.persona_id)
    if search:
        q = q.where(persona_service.filtro_busqueda(search))
    if estado and estado != "Estado":
        q = q.where(Alumno.estado == estado)
    elif not include_bajas:
        q = q.where(Alumno.activo.is_(True))
    if curso and curso != "Todos":
        partes = parsear_etiqueta(curso)
        if partes is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Curso inválido: '{curso}' (formato esperado '3° B')",
            )
        q = q.join(Curso, Curso.id == Alumno.curso_id).where(
            Curso.anio == partes[0], Curso.division == partes[1]
        )

    total = (await db.execute(select(func.count()).select_from(q.subquery()))).scalar_one()
    result = await db.execute(
        q.options(
            selectinload(Alumno.persona),
            selectinload(Alumno.curso),
            selectinload(Alumno.tutores).selectinload(Tutor.persona),
        )
        .order_by(Alumno.id.desc())
        .offset(paginacion.offset)
        .limit(paginacion.page_size)
    )
    alumnos = result.scalars().all()
    resumenes = await asistencia_service.resumen_por_alumno(db, [a.id for a in alumnos])

    data = []
    for alumno in alumnos:
        resumen = resumenes[alumno.id]
        data.append(
            EstudianteListItem(
                id=alumno.id,
                estudiante=alumno.persona.nombre_completo,
                dni=alumno.persona.dni or "",
                legajo=alumno.legajo,
                curso_id=alumno.curso_id,
                curso=etiqueta_curso(alumno.curso),
                estado=alumno.estado or "",
                activo=alumno.activo,
                tutores=_tutores_resumen(alumno),
                inasistencia=resumen.acumulado,
                justificadas=resumen.justificadas,
                inasistencias_justificadas=resumen.inasistencias_justificadas,
            )
        )
    return Pagina(
        data=data,
        meta=PaginaMeta.construir(total, paginacion.page, paginacion.page_size),
    )


@router.post(
    "",
    response_model=EstudianteDetalle,
    status_code=status.HTTP_201_CREATED,
    summary="Crear estudiante",
    description="Crea persona, alumno (estado Regular) y vínculos con tutores en una sola transacción.",
)
async def crear_estudiante(body: EstudianteCreate, db: AsyncSession = Depends(get_db)):
    await _validar_curso(db, body.curso_id)
    persona = persona_service.nueva_persona(body.model_dump(include=set(persona_service.CAMPOS_PERSONA)))
    db.add(persona)
    await db.flush()
    alumno = Alumno(
        persona_id=persona.id,
        legajo=body.legajo,
        estado=EstadoAlumno.REGULAR,
        activo=True,
        curso_id=body.curso_id,
    )
    db.add(alumno)
    await db.flush()
    if body.tutor_ids:
        await _vincular_tutores(db, alumno.id, body.tutor_ids)
    logger.info("Alumno %s creado (legajo=%s)", alumno.id, alumno.legajo)
    return await _detalle(db, alumno.id)


@router.get(
    "/{alumno_id}",
    response_model=EstudianteDetalle,
    summary="Detalle de estudiante",
    description="Datos personales, curso, tutores y asistencias del año con conteo por tipo.",
)
async def obtener_estudiante(alumno_id: int, db: AsyncSession = Depends(get_db)):
    return await _detalle(db, alumno_id)


@router.put(
    "/{alumno_id}",
    response_model=EstudianteDetalle,
    summary="Cambiar estado del estudiante",
    description="Un estado que empieza con 'Baja' deja al alumno inactivo; cualquier otro lo reactiva.",
)
async def cambiar_estado(
    alumno_id: int,
    body: EstudianteEstadoUpdate,
    db: AsyncSession = Depends(get_db),
):
    if not body.estado or not body.estado.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El estado es obligatorio",
        )
    alumno = await _obtener_alumno(db, alumno_id)
    alumno.estado = body.estado.strip()
    alumno.activo = not EstadoAlumno.es_baja(alumno.estado)
    await db.flush()
    logger.info("Alumno %s: estado=%s activo=%s", alumno.id, alumno.estado, alumno.activo)
    return await _detalle(db, alumno.id)


@router.patch(
    "/{alumno_id}",
    response_model=EstudianteDetalle,
    summary="Editar estudiante",
    description="Edición parcial de datos personales, legajo y curso. tutor_ids reemplaza los tutores.",
)
async def editar_estudiante(
    alumno_id: int,
    body: EstudianteUpdate,
    db: AsyncSession = Depends(get_db),
):
    alumno = await _obtener_alumno(db, alumno_id)
    datos = body.model_dump(exclude_unset=True)
    persona_service.aplicar_datos(alumno.persona, datos)
    if "legajo" in datos:
        alumno.legajo = datos["legajo"]
    if "curso_id" in datos:
        await _validar_curso(db, datos["curso_id"])
        alumno.curso_id = datos["curso_id"]
    await db.flush()
    if body.tutor_ids is not None:
        await _vincular_tutores(db, alumno.id, body.tutor_ids)
    return await _detalle(db, alumno.id)


# ── Importación masiva ──────────────────────────────────────────────

_COLUMNAS_OBLIGATORIAS = {"Legajo", "Nombre", "Apellido"}


def _val(row, col):
    """Devuelve el valor de la celda como string limpio, o None si está vacío/NaN."""
    v = row.get(col)
    if v is None or (isinstance(v, float) and pd.isna(v)):
        return None
    # DNI y legajos numéricos llegan como float desde Excel
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    s = str(v).strip()
    return s if s else None


@router.post(
    "/importar",
    response_model=ImportacionEstudiantesResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Importar estudiantes desde Excel",
    description=(
        "Sube un archivo .xlsx con columnas Legajo, Nombre, Apellido y opcionales DNI, Curso "
        "('3° B') y FechaNacimiento. Crea o actualiza alumnos por legajo y crea los cursos faltantes."
    ),
)
async def importar_estudiantes(
    archivo: UploadFile = File(..., description="Archivo Excel (.xlsx)"),
    db: AsyncSession = Depends(get_db),
):
    nombre_archivo = archivo.filename or "sin_nombre"
    if not nombre_archivo.lower().endswith(".xlsx"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El archivo debe tener extensión .xlsx",
        )

    contenido = await archivo.read()
    try:
        df = pd.read_excel(BytesIO(contenido), engine="openpyxl")
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No se pudo leer el archivo. Verifique que sea un Excel válido (.xlsx).",
        )
    if df.empty:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El archivo Excel está vacío.",
        )
    faltantes = _COLUMNAS_OBLIGATORIAS - set(df.columns)
    if faltantes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Faltan columnas obligatorias: {', '.join(sorted(faltantes))}",
        )

    respuesta = ImportacionEstudiantesResponse(nombre_archivo=nombre_archivo, total_filas=len(df))

    res = await db.execute(select(Curso))
    cursos_cache: dict[tuple[int, str], Curso] = {(c.anio, c.division): c for c in res.scalars().all()}
    res = await db.execute(
        select(Alumno).options(selectinload(Alumno.persona)).where(Alumno.legajo.isnot(None))
    )
    alumnos_cache: dict[str, Alumno] = {a.legajo: a for a in res.scalars().all()}

    for idx, row in df.iterrows():
        fila_num = int(idx) + 2  # +2: encabezado + 0-indexed
        legajo = _val(row, "Legajo")
        datos = {
            "nombre": _val(row, "Nombre"),
            "apellido": _val(row, "Apellido"),
        }
        if "DNI" in df.columns:
            datos["dni"] = _val(row, "DNI")

        campos_faltantes = [c for c, v in (("Legajo", legajo), ("Nombre", datos["nombre"]),
                                           ("Apellido", datos["apellido"])) if not v]
        if campos_faltantes:
            respuesta.errores.append(ImportacionErrorItem(
                fila=fila_num,
                legajo=legajo,
                mensaje=f"Faltan campos obligatorios: {', '.join(campos_faltantes)}",
            ))
            continue

        fecha_txt = _val(row, "FechaNacimiento") if "FechaNacimiento" in df.columns else None
        if fecha_txt:
            try:
                datos["fecha_nacimiento"] = pd.to_datetime(fecha_txt).date().isoformat()
            except (ValueError, TypeError):
                respuesta.errores.append(ImportacionErrorItem(
                    fila=fila_num, legajo=legajo,
                    mensaje=f"Fecha de nacimiento inválida: '{fecha_txt}'",
                ))
                continue

        curso_obj = None
        curso_txt = _val(row, "Curso") if "Curso" in df.columns else None
        if curso_txt:
            partes = parsear_etiqueta(curso_txt)
            if partes is None:
                respuesta.errores.append(ImportacionErrorItem(
                    fila=fila_num, legajo=legajo,
                    mensaje=f"Curso inválido: '{curso_txt}' (formato esperado '3° B')",
                ))
                continue
            curso_obj = cursos_cache.get(partes)
            if curso_obj is None:
                curso_obj = Curso(anio=partes[0], division=partes[1])
                db.add(curso_obj)
                await db.flush()
                cursos_cache[partes] = curso_obj
                respuesta.cursos_creados += 1

        alumno = alumnos_cache.get(legajo)
        if alumno is not None:
            persona_service.aplicar_datos(alumno.persona, {k: v for k, v in datos.items() if v})
            if curso_obj is not None:
                alumno.curso_id = curso_obj.id
            respuesta.estudiantes_actualizados += 1
        else:
            persona = persona_service.nueva_persona(datos)
            db.add(persona)
            await db.flush()
            alumno = Alumno(
                persona_id=persona.id,
                legajo=legajo,
                estado=EstadoAlumno.REGULAR,
                activo=True,
                curso_id=curso_obj.id if curso_obj else None,
            )
            alumno.persona = persona
            db.add(alumno)
            await db.flush()
            alumnos_cache[legajo] = alumno
            respuesta.estudiantes_creados += 1

    respuesta.total_errores = len(respuesta.errores)
    logger.info(
        "Importación %s: %d creados, %d actualizados, %d errores",
        nombre_archivo, respuesta.estudiantes_creados,
        respuesta.estudiantes_actualizados, respuesta.total_errores,
    )
    return respuesta


@router_por_curso.get(
    "/alumnos-por-curso",
    response_model=list[AlumnoCursoItem],
    summary="Alumnos activos de un curso",
    description="Ordenados por apellido y nombre.",
)
async def alumnos_por_curso(
    curso_id: Annotated[int, Query(description="ID del curso")],
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Alumno)
        .join(DataPersonal, DataPersonal.id == Alumno.persona_id)
        .options(selectinload(Alumno.persona))
        .where(Alumno.curso_id == curso_id, Alumno.activo.is_(True))
        .order_by(DataPersonal.apellido, DataPersonal.nombre)
    )
    return [
        AlumnoCursoItem(
            id=a.id,
            nombre=a.persona.nombre,
            apellido=a.persona.apellido,
            dni=a.persona.dni,
            legajo=a.legajo,
        )
        for a in result.scalars().all()
    ]
