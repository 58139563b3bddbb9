"""Carga de notas por docente: notas cargadas frente a notas esperadas."""
import math

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.alumno import Alumno
from app.models.asignacion import Asignacion
from app.models.docente import Docente
from app.models.evaluacion import DetalleInstanciaEvaluativa, InstanciaEvaluativa
from app.models.persona import DataPersonal


def porcentaje_carga(cargadas: int, esperadas: int) -> int:
    """Porcentaje entero, redondeado hacia arriba desde .5; 0 si no se espera ninguna nota."""
    if esperadas <= 0:
        return 0
    return math.floor(cargadas / esperadas * 100 + 0.5)


async def instancias_activas(db: AsyncSession) -> list[InstanciaEvaluativa]:
    result = await db.execute(
        select(InstanciaEvaluativa)
        .where(InstanciaEvaluativa.activo.is_(True))
        .order_by(InstanciaEvaluativa.id)
    )
    return list(result.scalars().all())


async def alumnos_activos_por_curso(db: AsyncSession, curso_ids: set[int]) -> dict[int, int]:
    if not curso_ids:
        return {}
    result = await db.execute(
        select(Alumno.curso_id, func.count(Alumno.id))
        .where(Alumno.curso_id.in_(curso_ids), Alumno.activo.is_(True))
        .group_by(Alumno.curso_id)
    )
    conteo = {cid: 0 for cid in curso_ids}
    conteo.update(dict(result.all()))
    return conteo


async def carga_general(db: AsyncSession) -> list[dict]:
    """Docentes activos con asignaciones, cursos, notas cargadas y porcentaje de carga."""
    cantidad_instancias = len(await instancias_activas(db))
    result = await db.execute(
        select(Docente)
        .join(DataPersonal, DataPersonal.id == Docente.persona_id)
        .options(
            selectinload(Docente.persona),
            selectinload(Docente.asignaciones).selectinload(Asignacion.curso),
        )
        .where(Docente.activo.is_(True))
        .order_by(DataPersonal.apellido)
    )
    docentes = result.scalars().all()

    curso_ids = {a.curso_id for d in docentes for a in d.asignaciones}
    alumnos_por_curso = await alumnos_activos_por_curso(db, curso_ids)

    result = await db.execute(
        select(DetalleInstanciaEvaluativa.docente_id, func.count(DetalleInstanciaEvaluativa.id))
        .where(DetalleInstanciaEvaluativa.activo.is_(True))
        .group_by(DetalleInstanciaEvaluativa.docente_id)
    )
    notas_por_docente = dict(result.all())

    filas = []
    for docente in docentes:
        total_alumnos = sum(alumnos_por_curso.get(a.curso_id, 0) for a in docente.asignaciones)
        esperadas = total_alumnos * cantidad_instancias
        cargadas = notas_por_docente.get(docente.id, 0)
        cursos: list[str] = []
        for a in docente.asignaciones:
            if a.curso.etiqueta not in cursos:
                cursos.append(a.curso.etiqueta)
        filas.append(
            {
                "docente_id": docente.id,
                "docente": docente.persona.nombre_completo,
                "cantidad_asignaciones": len(docente.asignaciones),
                "cursos": cursos,
                "notas_cargadas": cargadas,
                "notas_esperadas": esperadas,
                "porcentajeCarga": porcentaje_carga(cargadas, esperadas),
            }
        )
    return filas


async def carga_docente(db: AsyncSession, docente: Docente) -> list[dict]:
    """Por asignación del docente: alumnos del curso y notas cargadas.

    Requiere ``docente.asignaciones`` con ``curso`` y ``materia`` cargados.
    """
    cantidad_instancias = len(await instancias_activas(db))
    alumnos_por_curso = await alumnos_activos_por_curso(
        db, {a.curso_id for a in docente.asignaciones}
    )
    filas = []
    for asig in docente.asignaciones:
        result = await db.execute(
            select(func.count(DetalleInstanciaEvaluativa.id)).where(
                DetalleInstanciaEvaluativa.docente_id == docente.id,
                DetalleInstanciaEvaluativa.materia_id == asig.materia_id,
                DetalleInstanciaEvaluativa.curso_id == asig.curso_id,
                DetalleInstanciaEvaluativa.activo.is_(True),
            )
        )
        cargadas = result.scalar_one()
        total_alumnos = alumnos_por_curso.get(asig.curso_id, 0)
        filas.append(
            {
                "asignacion_id": asig.id,
                "materia_id": asig.materia_id,
                "materia": asig.materia.nombre,
                "curso_id": asig.curso_id,
                "curso": asig.curso.etiqueta,
                "total_alumnos": total_alumnos,
                "notas_cargadas": cargadas,
                "porcentajeCarga": porcentaje_carga(cargadas, total_alumnos * cantidad_instancias),
            }
        )
    return filas


async def notas_de_curso(
    db: AsyncSession, docente_id: int, curso_id: int, materia_id: int
) -> tuple[list[InstanciaEvaluativa], list[dict]]:
    """Alumnos activos del curso con sus notas de la materia indexadas por instancia."""
    instancias = await instancias_activas(db)
    result = await db.execute(
        select(Alumno)
        .join(DataPersonal, DataPersonal.id == Alumno.persona_id)
        .options(selectinload(Alumno.persona))
        .where(Alumno.curso_id == curso_id, Alumno.activo.is_(True))
        .order_by(DataPersonal.apellido, DataPersonal.nombre)
    )
    alumnos = result.scalars().all()

    result = await db.execute(
        select(
            DetalleInstanciaEvaluativa.alumno_id,
            DetalleInstanciaEvaluativa.instancia_id,
            DetalleInstanciaEvaluativa.nota,
        ).where(
            DetalleInstanciaEvaluativa.materia_id == materia_id,
            DetalleInstanciaEvaluativa.docente_id == docente_id,
            DetalleInstanciaEvaluativa.activo.is_(True),
            DetalleInstanciaEvaluativa.alumno_id.in_([a.id for a in alumnos]),
        )
    )
    notas: dict[int, dict[str, int]] = {}
    for alumno_id, instancia_id, nota in result.all():
        notas.setdefault(alumno_id, {})[str(instancia_id)] = nota

    filas = [
        {
            "alumno_id": a.id,
            "nombre": a.persona.nombre,
            "apellido": a.persona.apellido,
            "notas": {str(i.id): notas.get(a.id, {}).get(str(i.id)) for i in instancias},
        }
        for a in alumnos
    ]
    return instancias, filas
