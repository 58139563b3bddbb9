"""Esquemas para instancias evaluativas, notas y carga docente."""
from pydantic import BaseModel, Field

from app.models.evaluacion import NOTA_MAXIMA, NOTA_MINIMA
from app.schemas.comun import IdStr


class InstanciaOut(BaseModel):
    model_config = {"from_attributes": True}

    id: IdStr
    nombre: str
    activo: bool


class InstanciaIn(BaseModel):
    nombre: str | None = None


class InstanciaActivoIn(BaseModel):
    activo: bool


class NotaOut(BaseModel):
    id: IdStr
    instancia_id: IdStr
    alumno_id: IdStr
    materia_id: IdStr
    docente_id: IdStr | None = None
    curso_id: IdStr | None = None
    nota: int


class NotaItem(BaseModel):
    """Nota de un alumno. null borra la nota existente (o se omite si no había)."""

    alumno_id: IdStr
    nota: int | None = Field(default=None, ge=NOTA_MINIMA, le=NOTA_MAXIMA)


class NotasLoteRequest(BaseModel):
    instancia_id: IdStr
    materia_id: IdStr
    docente_id: IdStr | None = None
    curso_id: IdStr | None = None
    notas: list[NotaItem] = Field(min_length=1)


class NotaUnicaRequest(NotaItem):
    instancia_id: IdStr
    materia_id: IdStr
    docente_id: IdStr | None = None
    curso_id: IdStr | None = None


class NotasLoteResponse(BaseModel):
    success: bool = True
    nuevas: int = 0
    actualizadas: int = 0
    eliminadas: int = 0


# ── Carga de notas (ver-carga) ──────────────────────────────────────


class CargaDocenteItem(BaseModel):
    docente_id: IdStr
    docente: str
    cantidad_asignaciones: int
    cursos: list[str]
    notas_cargadas: int
    notas_esperadas: int
    porcentajeCarga: int


class CargaAsignacionItem(BaseModel):
    asignacion_id: IdStr
    materia_id: IdStr
    materia: str
    curso_id: IdStr
    curso: str
    total_alumnos: int
    notas_cargadas: int
    porcentajeCarga: int


class CargaAlumnoItem(BaseModel):
    alumno_id: IdStr
    nombre: str
    apellido: str
    notas: dict[str, int | None] = Field(description="Nota por ID de instancia")


class CargaDetalleResponse(BaseModel):
    instancias: list[InstanciaOut]
    alumnos: list[CargaAlumnoItem]


class CargaDocenteDetalle(BaseModel):
    docente_id: IdStr
    nombre: str
    apellido: str
    asignaciones: list[CargaAsignacionItem]
    instancias: list[InstanciaOut]
