"""Tipos y esquemas compartidos: identificadores como texto y paginación."""
import math
from dataclasses import dataclass
from typing import Annotated, Generic, TypeVar

from fastapi import Query
from pydantic import BaseModel, Field, PlainSerializer

# Los IDs son enteros de 64 bits: en JSON viajan como string para no perder precisión
IdStr = Annotated[int, PlainSerializer(lambda v: str(v), return_type=str, when_used="json")]

T = TypeVar("T")


class PaginaMeta(BaseModel):
    """Metadatos de paginación."""

    total: int = Field(description="Total de registros que cumplen el filtro")
    page: int = Field(description="Página actual (desde 1)")
    pageSize: int = Field(description="Tamaño de página")
    totalPages: int = Field(description="Cantidad de páginas")

    @classmethod
    def construir(cls, total: int, page: int, page_size: int) -> "PaginaMeta":
        return cls(
            total=total,
            page=page,
            pageSize=page_size,
            totalPages=math.ceil(total / page_size) if page_size else 0,
        )


class Pagina(BaseModel, Generic[T]):
    """Respuesta paginada: {data, meta}."""

    data: list[T]
    meta: PaginaMeta


@dataclass
class Paginacion:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def parametros_paginacion(
    page: Annotated[int, Query(ge=1, description="Número de página")] = 1,
    page_size: Annotated[
        int, Query(alias="pageSize", ge=1, le=500, description="Registros por página")
    ] = 10,
) -> Paginacion:
    """Dependencia: lee page/pageSize del query string."""
    return Paginacion(page=page, page_size=page_size)


class MensajeResponse(BaseModel):
    success: bool = True
    message: str


class PersonaOut(BaseModel):
    """Datos personales expuestos en las respuestas."""

    id: IdStr
    nombre: str
    apellido: str
    dni: str | None = None
    direccion: str | None = None
    movil: str | None = None
    fecha_nacimiento: str | None = None
    activo: bool = True

    @classmethod
    def desde(cls, persona) -> "PersonaOut":
        return cls(
            id=persona.id,
            nombre=persona.nombre,
            apellido=persona.apellido,
            dni=persona.dni,
            direccion=persona.direccion,
            movil=persona.movil,
            fecha_nacimiento=persona.fecha_nacimiento.isoformat() if persona.fecha_nacimiento else None,
            activo=persona.activo,
        )


class PersonaIn(BaseModel):
    """Datos personales para alta/edición (todos opcionales en edición)."""

    nombre: str | None = Field(default=None, description="Nombre")
    apellido: str | None = Field(default=None, description="Apellido")
    dni: str | None = Field(default=None, description="DNI")
    direccion: str | None = None
    movil: str | None = Field(default=None, description="Teléfono móvil")
    fecha_nacimiento: str | None = Field(default=None, description="Fecha de nacimiento (YYYY-MM-DD)")
