"""Modelo Docente."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, ForeignKey, Identity, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.asignacion import Asignacion
    from app.models.persona import DataPersonal


class Docente(Base):
    """Docente: persona con asignaciones (materia x curso). Baja lógica con activo=false."""

    __tablename__ = "docentes"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    persona_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("data_personal.id"), nullable=False
    )
    activo: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    persona: Mapped["DataPersonal"] = relationship("DataPersonal")
    asignaciones: Mapped[list["Asignacion"]] = relationship(
        "Asignacion", back_populates="docente"
    )
