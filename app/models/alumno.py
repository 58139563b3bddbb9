"""Modelos Alumno y asociación alumno-tutor."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, ForeignKey, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.asistencia import Asistencia
    from app.models.curso import Curso
    from app.models.evaluacion import DetalleInstanciaEvaluativa
    from app.models.persona import DataPersonal
    from app.models.tutor import Tutor


class EstadoAlumno:
    """Valores habituales del estado del alumno. Todo estado que empieza con 'Baja' lo desactiva."""
    REGULAR = "Regular"
    LIBRE = "Libre"
    BAJA_PASE = "Baja por pase"
    BAJA_ABANDONO = "Baja por abandono"

    @staticmethod
    def es_baja(estado: str) -> bool:
        return estado.startswith("Baja")


class Alumno(Base):
    """Alumno con legajo, pertenece a un curso y está vinculado a una persona."""

    __tablename__ = "alumnos"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    persona_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("data_personal.id"), nullable=False
    )
    legajo: Mapped[str | None] = mapped_column(Text, nullable=True)
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstadoAlumno.REGULAR, server_default=text("'Regular'")
    )
    activo: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    curso_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("cursos.id", ondelete="SET NULL"), nullable=True
    )

    persona: Mapped["DataPersonal"] = relationship("DataPersonal")
    curso: Mapped["Curso | None"] = relationship("Curso", back_populates="alumnos")
    tutores: Mapped[list["Tutor"]] = relationship(
        "Tutor", secondary="alumno_tutor", back_populates="alumnos"
    )
    asistencias: Mapped[list["Asistencia"]] = relationship(
        "Asistencia", back_populates="alumno", cascade="all, delete-orphan"
    )
    notas: Mapped[list["DetalleInstanciaEvaluativa"]] = relationship(
        "DetalleInstanciaEvaluativa", back_populates="alumno"
    )


class AlumnoTutor(Base):
    """Tabla asociación alumno-tutor (muchos a muchos)."""

    __tablename__ = "alumno_tutor"

    alumno_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("alumnos.id", ondelete="CASCADE"), primary_key=True
    )
    tutor_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tutores.id", ondelete="CASCADE"), primary_key=True
    )
