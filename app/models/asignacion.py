"""Modelo Asignacion (docente x materia x curso)."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.curso import Curso
    from app.models.docente import Docente
    from app.models.materia import Materia


class Asignacion(Base):
    """Un docente dicta una materia en un curso."""

    __tablename__ = "asignaciones"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    docente_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("docentes.id"), nullable=False
    )
    materia_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("materias.id"), nullable=False
    )
    curso_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("cursos.id", ondelete="CASCADE"), nullable=False
    )

    docente: Mapped["Docente"] = relationship("Docente", back_populates="asignaciones")
    materia: Mapped["Materia"] = relationship("Materia", back_populates="asignaciones")
    curso: Mapped["Curso"] = relationship("Curso", back_populates="asignaciones")
