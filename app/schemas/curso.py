"""Esquemas para cursos, materias y asignaciones."""
from pydantic import BaseModel, Field

from app.schemas.comun import IdStr


class CursoOut(BaseModel):
    id: IdStr
    anio: int
    division: str
    nombre: str = Field(description="Etiqueta: '3° B'")
    cantidad_alumnos: int | None = None


class CursoIn(BaseModel):
    anio: int | None = Field(default=None, ge=1, le=12)
    division: str | None = None


class AlumnoDeCurso(BaseModel):
    id: IdStr
    nombre: str
    apellido: str


class CursoConAlumnos(CursoOut):
    alumnos: list[AlumnoDeCurso] = Field(default_factory=list)


class MateriaOut(BaseModel):
    model_config = {"from_attributes": True}

    id: IdStr
    nombre: str
    activo: bool


class MateriaIn(BaseModel):
    nombre: str | None = None
    activo: bool | None = None


class AsignacionOut(BaseModel):
    id: IdStr
    docente_id: IdStr
    docente: str
    materia_id: IdStr
    materia: str
    curso_id: IdStr
    curso: str


class AsignacionIn(BaseModel):
    docente_id: IdStr | None = None
    materia_id: IdStr | None = None
    curso_id: IdStr | None = None
