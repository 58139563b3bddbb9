"""Esquemas para docentes y tutores."""
from pydantic import BaseModel, Field

from app.schemas.comun import IdStr, PersonaIn, PersonaOut


class DocenteOut(BaseModel):
    id: IdStr
    activo: bool
    persona: PersonaOut
    cantidad_asignaciones: int = 0


class DocenteCreate(PersonaIn):
    pass


class DocenteUpdate(PersonaIn):
    activo: bool | None = Field(default=None, description="Alta/baja lógica")


class EstadoActivoResponse(BaseModel):
    """Resultado de alternar el estado activo (baja lógica)."""

    id: IdStr
    activo: bool
    message: str


class TutorOut(BaseModel):
    id: IdStr
    activo: bool
    persona: PersonaOut
    alumnos: list["AlumnoACargo"] = Field(default_factory=list)


class AlumnoACargo(BaseModel):
    id: IdStr
    nombre: str
    curso: str


class TutorCreate(PersonaIn):
    pass


class TutorAsignarRequest(BaseModel):
    """Reemplaza los alumnos a cargo del tutor."""

    tutor_id: IdStr
    alumno_ids: list[IdStr] = Field(default_factory=list)


TutorOut.model_rebuild()
