"""Modelo DataPersonal (datos de identidad compartidos por alumnos, tutores, docentes y usuarios)."""
from datetime import date

from sqlalchemy import Boolean, Date, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BigIntId


class DataPersonal(Base):
    """Persona: nombre, apellido, DNI y datos de contacto."""

    __tablename__ = "data_personal"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    apellido: Mapped[str] = mapped_column(Text, nullable=False)
    dni: Mapped[str | None] = mapped_column(Text, nullable=True, index=True)
    direccion: Mapped[str | None] = mapped_column(Text, nullable=True)
    movil: Mapped[str | None] = mapped_column(Text, nullable=True)
    fecha_nacimiento: Mapped[date | None] = mapped_column(Date, nullable=True)
    activo: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre or ''} {self.apellido or ''}".strip()
