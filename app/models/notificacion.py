"""Modelo Notificacion (dirigida a un usuario o a un rol, con vencimiento)."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Identity, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.role import Rol
    from app.models.user import Usuario


class Importancia:
    BAJA = "BAJA"
    MEDIA = "MEDIA"
    ALTA = "ALTA"

    TODOS = (BAJA, MEDIA, ALTA)


class Notificacion(Base):
    """Notificación con fecha de expiración; visible mientras activa y no vencida."""

    __tablename__ = "notificaciones"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    titulo: Mapped[str] = mapped_column(Text, nullable=False)
    mensaje: Mapped[str] = mapped_column(Text, nullable=False)
    importancia: Mapped[str] = mapped_column(
        Text, nullable=False, default=Importancia.BAJA, server_default=text("'BAJA'")
    )
    tipo: Mapped[str] = mapped_column(
        Text, nullable=False, default="GENERAL", server_default=text("'GENERAL'")
    )
    remitente_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True
    )
    destinatario_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=True
    )
    rol_destino_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("roles.id"), nullable=True
    )
    fecha_creacion: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    fecha_expiracion: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    activa: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    leida: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    remitente: Mapped["Usuario | None"] = relationship("Usuario", foreign_keys=[remitente_id])
    destinatario: Mapped["Usuario | None"] = relationship(
        "Usuario", foreign_keys=[destinatario_id]
    )
    rol_destino: Mapped["Rol | None"] = relationship("Rol")
