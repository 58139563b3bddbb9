"""Modelo Materia."""
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.asignacion import Asignacion


class Materia(Base):
    """Materia: ej. Matemática, Lengua. Se da de baja con activo=false."""

    __tablename__ = "materias"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    activo: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    asignaciones: Mapped[list["Asignacion"]] = relationship(
        "Asignacion", back_populates="materia"
    )
