"""Modelo Curso (año + división, ej. 3° B)."""
from typing import TYPE_CHECKING

from sqlalchemy import Identity, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.alumno import Alumno
    from app.models.asignacion import Asignacion


class Curso(Base):
    """Curso: año y división."""

    __tablename__ = "cursos"
    __table_args__ = (UniqueConstraint("anio", "division", name="uq_cursos_anio_division"),)

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    anio: Mapped[int] = mapped_column(Integer, nullable=False)
    division: Mapped[str] = mapped_column(Text, nullable=False)

    alumnos: Mapped[list["Alumno"]] = relationship("Alumno", back_populates="curso")
    asignaciones: Mapped[list["Asignacion"]] = relationship(
        "Asignacion", back_populates="curso", cascade="all, delete-orphan"
    )

    @property
    def etiqueta(self) -> str:
        """Nombre legible: '3° B'."""
        return f"{self.anio}° {self.division}"


def etiqueta_curso(curso: "Curso | None", sin_curso: str = "Sin Asignar") -> str:
    return curso.etiqueta if curso else sin_curso


def parsear_etiqueta(texto: str) -> tuple[int, str] | None:
    """'3° B' -> (3, 'B'). Acepta también '3 B' y '3°B'; None si no se puede interpretar."""
    limpio = (texto or "").replace("°", " ").replace("º", " ").split()
    if len(limpio) == 1 and limpio[0][:-1].isdigit():
        limpio = [limpio[0][:-1], limpio[0][-1]]
    if len(limpio) != 2 or not limpio[0].isdigit():
        return None
    return int(limpio[0]), limpio[1].upper()
