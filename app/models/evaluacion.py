"""Modelos de instancias evaluativas y notas."""
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Identity,
    Integer,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.alumno import Alumno
    from app.models.materia import Materia

NOTA_MINIMA = 1
NOTA_MAXIMA = 10


class InstanciaEvaluativa(Base):
    """Instancia evaluativa: ej. '1er Trimestre', 'Examen final'."""

    __tablename__ = "instancias_evaluativas"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    activo: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    detalles: Mapped[list["DetalleInstanciaEvaluativa"]] = relationship(
        "DetalleInstanciaEvaluativa", back_populates="instancia", cascade="all, delete-orphan"
    )


class DetalleInstanciaEvaluativa(Base):
    """Nota de un alumno en una materia para una instancia evaluativa."""

    __tablename__ = "detalles_instancia_evaluativa"
    __table_args__ = (
        UniqueConstraint(
            "instancia_id", "alumno_id", "materia_id", name="uq_nota_instancia_alumno_materia"
        ),
        CheckConstraint(
            f"nota BETWEEN {NOTA_MINIMA} AND {NOTA_MAXIMA}", name="ck_nota_rango"
        ),
    )

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    instancia_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("instancias_evaluativas.id", ondelete="CASCADE"), nullable=False
    )
    alumno_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("alumnos.id", ondelete="CASCADE"), nullable=False
    )
    materia_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("materias.id"), nullable=False
    )
    docente_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("docentes.id"), nullable=True
    )
    curso_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("cursos.id", ondelete="SET NULL"), nullable=True
    )
    nota: Mapped[int] = mapped_column(Integer, nullable=False)
    activo: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    instancia: Mapped["InstanciaEvaluativa"] = relationship(
        "InstanciaEvaluativa", back_populates="detalles"
    )
    alumno: Mapped["Alumno"] = relationship("Alumno", back_populates="notas")
    materia: Mapped["Materia"] = relationship("Materia")
