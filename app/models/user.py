"""Modelo Usuario (credenciales de acceso)."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, ForeignKey, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.persona import DataPersonal
    from app.models.role import RolUsuario


class Usuario(Base):
    """Usuario del sistema (administración, preceptores, docentes, tutores)."""

    __tablename__ = "usuarios"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    persona_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("data_personal.id"), nullable=True
    )
    activo: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    persona: Mapped["DataPersonal | None"] = relationship("DataPersonal")
    roles: Mapped[list["RolUsuario"]] = relationship(
        "RolUsuario", back_populates="usuario", cascade="all, delete-orphan"
    )

    @property
    def nombres_rol(self) -> list[str]:
        """Nombres de rol distintos (requiere roles y rol cargados)."""
        return sorted({ru.rol.nombre for ru in self.roles})
