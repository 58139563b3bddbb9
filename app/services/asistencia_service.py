"""Servicio de asistencias: toma del día con control de doble carga y acumulado de inasistencias."""
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.alumno import Alumno
from app.models.asistencia import Asistencia, Justificacion, TipoEvento

logger = logging.getLogger(__name__)

# Peso de cada tipo de evento en el total de inasistencias
PESOS_INASISTENCIA = {
    TipoEvento.RETIRO: 0.5,
    TipoEvento.INASISTENCIA: 1.0,
    TipoEvento.TARDANZA: 0.33,
    TipoEvento.ASISTENCIA: 0.0,
}

_CAMPOS_EDITABLES = (
    "tipo_evento",
    "hora_registro",
    "observaciones",
    "justificacion",
    "motivo_justificacion",
)


class AsistenciaYaTomadaError(Exception):
    """La asistencia del curso en la fecha ya fue tomada y el lote agrega alumnos nuevos."""

    def __init__(self, curso_id: int, fecha: date, alumnos_nuevos: list[int]):
        self.curso_id = curso_id
        self.fecha = fecha
        self.alumnos_nuevos = alumnos_nuevos
        super().__init__(
            f"La asistencia del curso {curso_id} para {fecha.isoformat()} ya fue tomada"
        )


class AlumnosFueraDeCursoError(Exception):
    """Algún alumno del lote no pertenece al curso (o no está activo)."""

    def __init__(self, alumno_ids: list[int]):
        self.alumno_ids = alumno_ids
        super().__init__(f"Alumnos que no pertenecen al curso: {alumno_ids}")


@dataclass
class ResumenInasistencias:
    """Totales ponderados y conteos por tipo de evento."""

    acumulado: float = 0.0
    justificadas: float = 0.0
    total_registros: int = 0
    inasistencias_justificadas: int = 0
    conteo: dict[str, int] = field(default_factory=lambda: {t: 0 for t in TipoEvento.TODOS})


def ventana_anio_actual(hoy: date | None = None) -> tuple[date, date]:
    """Del 1 de enero del año en curso hasta hoy."""
    hoy = hoy or date.today()
    return date(hoy.year, 1, 1), hoy


def calcular_resumen(eventos: Iterable[tuple[str, str | None]]) -> ResumenInasistencias:
    """Reduce pares (tipo_evento, justificacion) al resumen ponderado.

    Los eventos justificados suman con el mismo peso en ``justificadas``.
    Los tipos desconocidos pesan 0 y no se cuentan.
    """
    resumen = ResumenInasistencias()
    for tipo, justificacion in eventos:
        resumen.total_registros += 1
        if tipo in resumen.conteo:
            resumen.conteo[tipo] += 1
        peso = PESOS_INASISTENCIA.get(tipo, 0.0)
        resumen.acumulado += peso
        if justificacion == Justificacion.JUSTIFICADO:
            resumen.justificadas += peso
            if tipo == TipoEvento.INASISTENCIA:
                resumen.inasistencias_justificadas += 1
    resumen.acumulado = round(resumen.acumulado, 2)
    resumen.justificadas = round(resumen.justificadas, 2)
    return resumen


async def resumen_por_alumno(
    db: AsyncSession, alumno_ids: list[int], hoy: date | None = None
) -> dict[int, ResumenInasistencias]:
    """Resumen del año en curso para cada alumno (alumnos sin eventos quedan en cero)."""
    if not alumno_ids:
        return {}
    desde, hasta = ventana_anio_actual(hoy)
    result = await db.execute(
        select(Asistencia.alumno_id, Asistencia.tipo_evento, Asistencia.justificacion).where(
            Asistencia.alumno_id.in_(alumno_ids),
            Asistencia.fecha >= desde,
            Asistencia.fecha <= hasta,
        )
    )
    eventos: dict[int, list[tuple[str, str | None]]] = {aid: [] for aid in alumno_ids}
    for alumno_id, tipo, justificacion in result.all():
        eventos[alumno_id].append((tipo, justificacion))
    return {aid: calcular_resumen(evs) for aid, evs in eventos.items()}


async def asistencias_del_anio(
    db: AsyncSession, alumno_id: int, hoy: date | None = None
) -> list[Asistencia]:
    """Registros del alumno en el año en curso, más recientes primero."""
    desde, hasta = ventana_anio_actual(hoy)
    result = await db.execute(
        select(Asistencia)
        .where(
            Asistencia.alumno_id == alumno_id,
            Asistencia.fecha >= desde,
            Asistencia.fecha <= hasta,
        )
        .order_by(Asistencia.fecha.desc())
    )
    return list(result.scalars().all())


async def _registros_por_alumno(
    db: AsyncSession, alumno_ids: Iterable[int], fecha: date
) -> dict[int, Asistencia]:
    result = await db.execute(
        select(Asistencia).where(
            Asistencia.alumno_id.in_(list(alumno_ids)),
            Asistencia.fecha == fecha,
        )
    )
    return {a.alumno_id: a for a in result.scalars().all()}


def _upsert(
    db: AsyncSession,
    existentes: dict[int, Asistencia],
    alumno_id: int,
    fecha: date,
    campos: dict,
) -> bool:
    """Actualiza el registro (alumno, fecha) o lo crea. Devuelve True si se creó."""
    registro = existentes.get(alumno_id)
    if registro is None:
        campos.setdefault("tipo_evento", TipoEvento.ASISTENCIA)
        registro = Asistencia(alumno_id=alumno_id, fecha=fecha, **campos)
        db.add(registro)
        existentes[alumno_id] = registro
        return True
    for campo, valor in campos.items():
        setattr(registro, campo, valor)
    return False


async def alumnos_con_asistencia(db: AsyncSession, curso_id: int, fecha: date) -> set[int]:
    """IDs de alumnos del curso que ya tienen registro en la fecha."""
    result = await db.execute(
        select(Asistencia.alumno_id)
        .join(Alumno, Alumno.id == Asistencia.alumno_id)
        .where(Alumno.curso_id == curso_id, Asistencia.fecha == fecha)
    )
    return set(result.scalars().all())


async def tomar_asistencia(
    db: AsyncSession,
    curso_id: int,
    fecha: date,
    items: list[dict],
) -> tuple[int, int]:
    """Toma de asistencia de un curso para una fecha.

    Si el curso todavía no tiene registros en la fecha se crea uno por alumno.
    Si ya los tiene, solo se pueden actualizar los alumnos ya registrados: un
    alumno nuevo rechaza el lote completo (AsistenciaYaTomadaError) sin escribir nada.
    Cada item es un dict con ``alumno_id`` y los campos del evento.
    Devuelve (creadas, actualizadas).
    """
    ids = [item["alumno_id"] for item in items]
    result = await db.execute(
        select(Alumno.id).where(
            Alumno.id.in_(ids), Alumno.curso_id == curso_id, Alumno.activo.is_(True)
        )
    )
    del_curso = set(result.scalars().all())
    fuera = sorted(set(ids) - del_curso)
    if fuera:
        raise AlumnosFueraDeCursoError(fuera)

    ya_registrados = await alumnos_con_asistencia(db, curso_id, fecha)
    if ya_registrados:
        nuevos = sorted(set(ids) - ya_registrados)
        if nuevos:
            raise AsistenciaYaTomadaError(curso_id, fecha, nuevos)

    existentes = await _registros_por_alumno(db, ids, fecha)
    creadas = actualizadas = 0
    for item in items:
        campos = {c: item.get(c) for c in _CAMPOS_EDITABLES}
        if _upsert(db, existentes, item["alumno_id"], fecha, campos):
            creadas += 1
        else:
            actualizadas += 1
    await db.flush()
    logger.info(
        "Asistencia curso=%s fecha=%s: %d creadas, %d actualizadas",
        curso_id, fecha.isoformat(), creadas, actualizadas,
    )
    return creadas, actualizadas


async def editar_asistencias(db: AsyncSession, fecha: date, items: list[dict]) -> tuple[int, int]:
    """Edición parcial por (alumno, fecha), sin control de doble carga.

    Solo se escriben las claves presentes en cada item; los registros nuevos
    quedan como 'Asistencia' salvo que se indique otro tipo.
    """
    ids = [item["alumno_id"] for item in items]
    existentes = await _registros_por_alumno(db, ids, fecha)
    creadas = actualizadas = 0
    for item in items:
        campos = {c: item[c] for c in _CAMPOS_EDITABLES if c in item}
        if campos.get("tipo_evento") is None:
            campos.pop("tipo_evento", None)
        if _upsert(db, existentes, item["alumno_id"], fecha, campos):
            creadas += 1
        else:
            actualizadas += 1
    await db.flush()
    logger.info("Asistencia editada fecha=%s: %d creadas, %d actualizadas", fecha, creadas, actualizadas)
    return creadas, actualizadas


async def justificar(
    db: AsyncSession,
    alumno_id: int,
    fecha: date,
    justificacion: str | None,
    motivo: str | None = None,
) -> Asistencia:
    """Fija o quita la justificación; si no hay registro se crea como Inasistencia."""
    existentes = await _registros_por_alumno(db, [alumno_id], fecha)
    campos = {"justificacion": justificacion, "motivo_justificacion": motivo}
    if alumno_id not in existentes:
        campos["tipo_evento"] = TipoEvento.INASISTENCIA
    _upsert(db, existentes, alumno_id, fecha, campos)
    await db.flush()
    return existentes[alumno_id]
