"""Endpoints de asistencias: toma del día, edición, justificación, acumulado y reporte."""
from datetime import date
from io import BytesIO
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.models import Alumno, Asistencia, Curso, DataPersonal, Rol, RolNombre, RolUsuario
from app.models.curso import etiqueta_curso
from app.schemas.asistencia import (
    AcumuladoResponse,
    AsistenciaCursoItem,
    AsistenciaCursoResponse,
    AsistenciaOut,
    EdicionAsistenciaRequest,
    GuardadoAsistenciaResponse,
    HistorialItem,
    JustificarRequest,
    TomaAsistenciaRequest,
)
from app.services import asistencia_service
from app.services.reporte_pdf_service import generar_inasistencias_alumno

router = APIRouter(prefix="/asistencias", tags=["asistencias"])


def _asistencia_out(a: Asistencia) -> AsistenciaOut:
    return AsistenciaOut(
        id=a.id,
        alumno_id=a.alumno_id,
        fecha=a.fecha,
        tipo_evento=a.tipo_evento,
        hora_registro=a.hora_registro.strftime("%H:%M") if a.hora_registro else None,
        observaciones=a.observaciones,
        justificacion=a.justificacion,
        motivo_justificacion=a.motivo_justificacion,
    )


async def _obtener_alumno(db: AsyncSession, alumno_id: int) -> Alumno:
    result = await db.execute(
        select(Alumno)
        .options(selectinload(Alumno.persona), selectinload(Alumno.curso))
        .where(Alumno.id == alumno_id)
    )
    alumno = result.scalar_one_or_none()
    if not alumno:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Estudiante no encontrado",
        )
    return alumno


@router.post(
    "",
    response_model=GuardadoAsistenciaResponse,
    summary="Tomar asistencia de un curso",
    description=(
        "Registra la asistencia del día para los alumnos del curso. Si el curso ya tiene "
        "asistencia tomada en la fecha, solo se pueden actualizar los alumnos ya registrados; "
        "incluir un alumno nuevo rechaza el lote completo con 409."
    ),
    responses={
        400: {"description": "Algún alumno no pertenece al curso"},
        409: {"description": "La asistencia del curso para la fecha ya fue tomada"},
    },
)
async def tomar_asistencia(body: TomaAsistenciaRequest, db: AsyncSession = Depends(get_db)):
    try:
        creadas, actualizadas = await asistencia_service.tomar_asistencia(
            db,
            body.curso_id,
            body.fecha,
            [item.model_dump() for item in body.asistencias],
        )
    except asistencia_service.AlumnosFueraDeCursoError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Alumnos que no pertenecen al curso: {', '.join(str(i) for i in exc.alumno_ids)}",
        )
    except asistencia_service.AsistenciaYaTomadaError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="La asistencia de este curso para la fecha indicada ya fue tomada. Use la edición.",
        )
    return GuardadoAsistenciaResponse(creadas=creadas, actualizadas=actualizadas)


@router.patch(
    "/editar",
    response_model=GuardadoAsistenciaResponse,
    summary="Editar asistencias",
    description="Actualiza o crea registros por (alumno, fecha) sin controlar si la asistencia ya fue tomada.",
)
async def editar_asistencias(body: EdicionAsistenciaRequest, db: AsyncSession = Depends(get_db)):
    ids = {item.alumno_id for item in body.asistencias}
    result = await db.execute(select(Alumno.id).where(Alumno.id.in_(ids)))
    faltantes = ids - set(result.scalars().all())
    if faltantes:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Alumnos inexistentes: {', '.join(str(i) for i in sorted(faltantes))}",
        )
    creadas, actualizadas = await asistencia_service.editar_asistencias(
        db,
        body.fecha,
        [item.model_dump(exclude_unset=True) for item in body.asistencias],
    )
    return GuardadoAsistenciaResponse(creadas=creadas, actualizadas=actualizadas)


@router.put(
    "/justificar",
    response_model=AsistenciaOut,
    summary="Justificar inasistencia",
    description="Fija o quita la justificación. Si no hay registro en la fecha se crea una Inasistencia.",
)
async def justificar(body: JustificarRequest, db: AsyncSession = Depends(get_db)):
    await _obtener_alumno(db, body.alumno_id)
    registro = await asistencia_service.justificar(
        db, body.alumno_id, body.fecha, body.justificacion, body.motivo_justificacion
    )
    return _asistencia_out(registro)


@router.get(
    "",
    response_model=AsistenciaCursoResponse,
    summary="Asistencia del día de un curso",
    description="Alumnos activos del curso con el registro de la fecha (null si no hay).",
)
async def asistencia_del_dia(
    curso_id: Annotated[int, Query(description="ID del curso")],
    fecha: Annotated[date, Query(description="Fecha (YYYY-MM-DD)")],
    db: AsyncSession = Depends(get_db),
):
    if await db.get(Curso, curso_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Curso no encontrado",
        )
    result = await db.execute(
        select(Alumno)
        .join(DataPersonal, DataPersonal.id == Alumno.persona_id)
        .options(selectinload(Alumno.persona))
        .where(Alumno.curso_id == curso_id, Alumno.activo.is_(True))
        .order_by(DataPersonal.apellido, DataPersonal.nombre)
    )
    alumnos = result.scalars().all()
    result = await db.execute(
        select(Asistencia).where(
            Asistencia.alumno_id.in_([a.id for a in alumnos]),
            Asistencia.fecha == fecha,
        )
    )
    registros = {r.alumno_id: r for r in result.scalars().all()}
    return AsistenciaCursoResponse(
        curso_id=curso_id,
        fecha=fecha,
        tomada=bool(await asistencia_service.alumnos_con_asistencia(db, curso_id, fecha)),
        alumnos=[
            AsistenciaCursoItem(
                alumno_id=a.id,
                nombre=a.persona.nombre,
                apellido=a.persona.apellido,
                asistencia=_asistencia_out(registros[a.id]) if a.id in registros else None,
            )
            for a in alumnos
        ],
    )


@router.get(
    "/historial",
    response_model=list[HistorialItem],
    summary="Historial de asistencias tomadas",
    description="Pares (fecha, curso) con asistencia registrada, más recientes primero. Un PRECEPTOR solo ve sus cursos.",
)
async def historial(
    db: AsyncSession = Depends(get_db),
    usuario_id: Annotated[int | None, Query()] = None,
    rol: Annotated[str | None, Query()] = None,
):
    q = (
        select(Asistencia.fecha, Curso)
        .join(Alumno, Alumno.id == Asistencia.alumno_id)
        .join(Curso, Curso.id == Alumno.curso_id)
        .distinct()
        .order_by(Asistencia.fecha.desc(), Curso.anio, Curso.division)
    )
    if usuario_id is not None and RolNombre.normalizar(rol or "") == RolNombre.PRECEPTOR:
        q = q.where(
            Curso.id.in_(
                select(RolUsuario.curso_id)
                .join(Rol, Rol.id == RolUsuario.rol_id)
                .where(RolUsuario.usuario_id == usuario_id, Rol.nombre == RolNombre.PRECEPTOR)
            )
        )
    result = await db.execute(q)
    return [
        HistorialItem(fecha=fecha, curso_id=curso.id, curso=curso.etiqueta)
        for fecha, curso in result.all()
    ]


@router.get(
    "/alumno/{alumno_id}",
    response_model=list[AsistenciaOut],
    summary="Asistencias del alumno en el año",
)
async def asistencias_alumno(alumno_id: int, db: AsyncSession = Depends(get_db)):
    await _obtener_alumno(db, alumno_id)
    registros = await asistencia_service.asistencias_del_anio(db, alumno_id)
    return [_asistencia_out(r) for r in registros]


@router.get(
    "/alumno/{alumno_id}/acumulado",
    response_model=AcumuladoResponse,
    summary="Acumulado de inasistencias del año",
    description="Pesos: Retiro 0.5, Inasistencia 1, Tardanza 0.33, Asistencia 0. Desde el 1 de enero hasta hoy.",
)
async def acumulado(alumno_id: int, db: AsyncSession = Depends(get_db)):
    await _obtener_alumno(db, alumno_id)
    desde, hasta = asistencia_service.ventana_anio_actual()
    resumen = (await asistencia_service.resumen_por_alumno(db, [alumno_id]))[alumno_id]
    return AcumuladoResponse(
        alumno_id=alumno_id,
        desde=desde,
        hasta=hasta,
        acumulado=resumen.acumulado,
        justificadas=resumen.justificadas,
        totalRegistros=resumen.total_registros,
        inasistencias_total=resumen.conteo["Inasistencia"],
        tardanzas_total=resumen.conteo["Tardanza"],
        retiros_total=resumen.conteo["Retiro"],
    )


@router.get(
    "/alumno/{alumno_id}/reporte",
    summary="Reporte PDF de inasistencias",
    response_class=StreamingResponse,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def reporte_alumno(alumno_id: int, db: AsyncSession = Depends(get_db)):
    alumno = await _obtener_alumno(db, alumno_id)
    registros = await asistencia_service.asistencias_del_anio(db, alumno_id)
    resumen = asistencia_service.calcular_resumen((r.tipo_evento, r.justificacion) for r in registros)
    pdf = generar_inasistencias_alumno(
        alumno={
            "nombre": alumno.persona.nombre_completo,
            "dni": alumno.persona.dni,
            "legajo": alumno.legajo,
            "curso": etiqueta_curso(alumno.curso),
        },
        resumen={
            "acumulado": resumen.acumulado,
            "justificadas": resumen.justificadas,
            "conteo": resumen.conteo,
        },
        registros=[
            {
                "fecha": r.fecha.strftime("%d/%m/%Y"),
                "tipo_evento": r.tipo_evento,
                "hora_registro": r.hora_registro.strftime("%H:%M") if r.hora_registro else None,
                "justificacion": r.justificacion,
                "observaciones": r.observaciones,
            }
            for r in registros
        ],
    )
    nombre = f"inasistencias_{alumno.legajo or alumno.id}.pdf"
    return StreamingResponse(
        BytesIO(pdf),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{nombre}"'},
    )
