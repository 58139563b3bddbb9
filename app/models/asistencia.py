"""Modelo Asistencia (un evento diario por alumno)."""
from datetime import date, time
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Date, ForeignKey, Identity, Text, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.alumno import Alumno


class TipoEvento:
    """Valores permitidos para el tipo de evento de asistencia."""
    ASISTENCIA = "Asistencia"
    TARDANZA = "Tardanza"
    RETIRO = "Retiro"
    INASISTENCIA = "Inasistencia"

    TODOS = (ASISTENCIA, TARDANZA, RETIRO, INASISTENCIA)


class Justificacion:
    JUSTIFICADO = "Justificado"
    INJUSTIFICADO = "Injustificado"

    TODOS = (JUSTIFICADO, INJUSTIFICADO)


class Asistencia(Base):
    """Asistencia: tipo de evento por fecha y alumno. Única por (alumno, fecha)."""

    __tablename__ = "asistencias"
    __table_args__ = (
        UniqueConstraint("alumno_id", "fecha", name="uq_asistencias_alumno_fecha"),
    )

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    alumno_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("alumnos.id", ondelete="CASCADE"), nullable=False
    )
    fecha: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    tipo_evento: Mapped[str] = mapped_column(Text, nullable=False, default=TipoEvento.ASISTENCIA)
    hora_registro: Mapped[time | None] = mapped_column(Time, nullable=True)
    observaciones: Mapped[str | None] = mapped_column(Text, nullable=True)
    justificacion: Mapped[str | None] = mapped_column(Text, nullable=True)
    motivo_justificacion: Mapped[str | None] = mapped_column(Text, nullable=True)

    alumno: Mapped["Alumno"] = relationship("Alumno", back_populates="asistencias")
