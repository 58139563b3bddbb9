"""Esquemas para asistencias (toma del día, edición, justificación, acumulado)."""
from datetime import date, time

from pydantic import BaseModel, Field, field_validator

from app.models.asistencia import Justificacion, TipoEvento
from app.schemas.comun import IdStr


def _validar_justificacion(v: str | None) -> str | None:
    if v is not None and v not in Justificacion.TODOS:
        raise ValueError(f"justificacion debe ser uno de: {', '.join(Justificacion.TODOS)}")
    return v


class AsistenciaItem(BaseModel):
    """Evento de asistencia de un alumno para la fecha del lote."""

    alumno_id: IdStr = Field(description="ID del alumno")
    tipo_evento: str = Field(description="Asistencia, Tardanza, Retiro o Inasistencia")
    hora_registro: time | None = Field(default=None, description="Hora (HH:MM) para tardanzas y retiros")
    observaciones: str | None = None
    justificacion: str | None = Field(default=None, description="Justificado o Injustificado")
    motivo_justificacion: str | None = None

    @field_validator("tipo_evento")
    @classmethod
    def validar_tipo(cls, v: str) -> str:
        if v not in TipoEvento.TODOS:
            raise ValueError(f"tipo_evento debe ser uno de: {', '.join(TipoEvento.TODOS)}")
        return v

    @field_validator("justificacion")
    @classmethod
    def validar_justificacion(cls, v: str | None) -> str | None:
        return _validar_justificacion(v)


class TomaAsistenciaRequest(BaseModel):
    """Toma de asistencia de un curso para una fecha."""

    curso_id: IdStr
    fecha: date
    asistencias: list[AsistenciaItem] = Field(min_length=1)


class AsistenciaEdicionItem(BaseModel):
    """Edición parcial: solo se modifican los campos enviados."""

    alumno_id: IdStr
    tipo_evento: str | None = None
    hora_registro: time | None = None
    observaciones: str | None = None
    justificacion: str | None = None
    motivo_justificacion: str | None = None

    @field_validator("tipo_evento")
    @classmethod
    def validar_tipo(cls, v: str | None) -> str | None:
        if v is not None and v not in TipoEvento.TODOS:
            raise ValueError(f"tipo_evento debe ser uno de: {', '.join(TipoEvento.TODOS)}")
        return v

    @field_validator("justificacion")
    @classmethod
    def validar_justificacion(cls, v: str | None) -> str | None:
        return _validar_justificacion(v)


class EdicionAsistenciaRequest(BaseModel):
    fecha: date
    asistencias: list[AsistenciaEdicionItem] = Field(min_length=1)


class JustificarRequest(BaseModel):
    alumno_id: IdStr
    fecha: date
    justificacion: str | None = Field(
        default=None, description="Justificado, Injustificado o null para quitarla"
    )
    motivo_justificacion: str | None = None

    @field_validator("justificacion")
    @classmethod
    def validar_justificacion(cls, v: str | None) -> str | None:
        return _validar_justificacion(v)


class GuardadoAsistenciaResponse(BaseModel):
    success: bool = True
    creadas: int = 0
    actualizadas: int = 0


class AsistenciaOut(BaseModel):
    id: IdStr
    alumno_id: IdStr
    fecha: date
    tipo_evento: str
    hora_registro: str | None = None
    observaciones: str | None = None
    justificacion: str | None = None
    motivo_justificacion: str | None = None


class AsistenciaCursoItem(BaseModel):
    """Alumno del curso con su registro del día (null si no hay)."""

    alumno_id: IdStr
    nombre: str
    apellido: str
    asistencia: AsistenciaOut | None = None


class AsistenciaCursoResponse(BaseModel):
    curso_id: IdStr
    fecha: date
    tomada: bool = Field(description="True si ya hay registros para el curso en la fecha")
    alumnos: list[AsistenciaCursoItem]


class AcumuladoResponse(BaseModel):
    """Resumen ponderado del año en curso."""

    alumno_id: IdStr
    desde: date
    hasta: date
    acumulado: float = Field(description="Total ponderado (Retiro 0.5, Inasistencia 1, Tardanza 0.33)")
    justificadas: float = Field(description="Total ponderado de eventos justificados")
    totalRegistros: int
    inasistencias_total: int
    tardanzas_total: int
    retiros_total: int


class HistorialItem(BaseModel):
    fecha: date
    curso_id: IdStr
    curso: str
