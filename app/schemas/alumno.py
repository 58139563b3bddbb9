"""Esquemas para estudiantes (listado con inasistencias, alta, edición, baja, importación)."""
from pydantic import BaseModel, Field

from app.schemas.comun import IdStr, PersonaOut


class TutorResumen(BaseModel):
    id: IdStr
    nombre: str = Field(description="Nombre y apellido del tutor")
    telefono: str = Field(description="Móvil del tutor o 'No registrado'")


class EstudianteListItem(BaseModel):
    """Fila del listado de estudiantes con el resumen de inasistencias del año."""

    id: IdStr = Field(description="ID del alumno")
    estudiante: str = Field(description="Nombre y apellido")
    dni: str = ""
    legajo: str | None = None
    curso_id: IdStr | None = None
    curso: str = Field(description="Curso (ej. '3° B') o 'Sin Asignar'")
    estado: str
    activo: bool
    tutores: list[TutorResumen] = Field(default_factory=list)
    inasistencia: float = Field(description="Total ponderado de inasistencias del año")
    justificadas: float = Field(description="Total ponderado de inasistencias justificadas")
    inasistencias_justificadas: int = Field(description="Cantidad de Inasistencias justificadas")


class EstudianteCreate(BaseModel):
    nombre: str = Field(min_length=1, description="Nombre")
    apellido: str = Field(min_length=1, description="Apellido")
    dni: str | None = None
    fecha_nacimiento: str | None = Field(default=None, description="YYYY-MM-DD")
    legajo: str | None = None
    curso_id: IdStr | None = None
    tutor_ids: list[IdStr] = Field(default_factory=list, description="Tutores a vincular")


class EstudianteUpdate(BaseModel):
    """Edición parcial: datos personales, legajo, curso y tutores (reemplaza los vínculos)."""

    nombre: str | None = None
    apellido: str | None = None
    dni: str | None = None
    direccion: str | None = None
    movil: str | None = None
    fecha_nacimiento: str | None = None
    legajo: str | None = None
    curso_id: IdStr | None = None
    tutor_ids: list[IdStr] | None = Field(
        default=None, description="Si se envía, reemplaza los tutores vinculados"
    )


class EstudianteEstadoUpdate(BaseModel):
    estado: str | None = Field(
        default=None, description="Nuevo estado; si empieza con 'Baja' el alumno queda inactivo"
    )


class AsistenciaRegistro(BaseModel):
    model_config = {"from_attributes": True}

    id: IdStr
    fecha: str
    tipo_evento: str
    hora_registro: str | None = None
    observaciones: str | None = None
    justificacion: str | None = None
    motivo_justificacion: str | None = None


class ConteoEventos(BaseModel):
    Inasistencia: int = 0
    Tardanza: int = 0
    Retiro: int = 0
    Asistencia: int = 0


class EstudianteDetalle(BaseModel):
    id: IdStr
    legajo: str | None = None
    estado: str
    activo: bool
    persona: PersonaOut
    curso_id: IdStr | None = None
    curso: str
    tutores: list[TutorResumen] = Field(default_factory=list)
    asistencias: list[AsistenciaRegistro] = Field(default_factory=list)
    conteo: ConteoEventos = Field(default_factory=ConteoEventos)


class AlumnoCursoItem(BaseModel):
    id: IdStr
    nombre: str
    apellido: str
    dni: str | None = None
    legajo: str | None = None


# ── Importación masiva ──────────────────────────────────────────────


class ImportacionErrorItem(BaseModel):
    """Error individual durante la importación de una fila."""

    fila: int = Field(description="Número de fila en el Excel (1-indexed, sin contar encabezado)")
    legajo: str | None = Field(default=None, description="Legajo del alumno (si se pudo leer)")
    mensaje: str = Field(description="Descripción del error")


class ImportacionEstudiantesResponse(BaseModel):
    """Respuesta del endpoint de importación masiva de estudiantes."""

    nombre_archivo: str = Field(description="Nombre del archivo subido")
    total_filas: int = Field(description="Total de filas procesadas")
    estudiantes_creados: int = 0
    estudiantes_actualizados: int = 0
    cursos_creados: int = 0
    total_errores: int = 0
    errores: list[ImportacionErrorItem] = Field(default_factory=list)
