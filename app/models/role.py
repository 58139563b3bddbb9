"""Modelos Rol y RolUsuario (RBAC, con alcance opcional a un curso)."""
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Identity, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntId

if TYPE_CHECKING:
    from app.models.curso import Curso
    from app.models.user import Usuario


class RolNombre:
    """Nombres de rol. El nombre es el identificador canónico del rol."""
    ADMIN = "ADMIN"
    SECRETARIO = "SECRETARIO"
    PRECEPTOR = "PRECEPTOR"
    DOCENTE = "DOCENTE"
    TUTOR = "TUTOR"

    TODOS = (ADMIN, SECRETARIO, PRECEPTOR, DOCENTE, TUTOR)
    # Alias usados por los portales (destino de notificaciones, conteos)
    ALIAS = {
        "tutores": TUTOR,
        "docentes": DOCENTE,
        "preceptores": PRECEPTOR,
        "administradores": ADMIN,
        "secretarios": SECRETARIO,
    }

    @classmethod
    def normalizar(cls, valor: str) -> str | None:
        """Devuelve el nombre canónico para un nombre o alias; None si no se reconoce."""
        v = (valor or "").strip()
        if v.lower() in cls.ALIAS:
            return cls.ALIAS[v.lower()]
        if v.upper() in cls.TODOS:
            return v.upper()
        return None


class Rol(Base):
    """Rol del usuario: ADMIN, PRECEPTOR, DOCENTE, etc."""

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    asignaciones: Mapped[list["RolUsuario"]] = relationship("RolUsuario", back_populates="rol")


class RolUsuario(Base):
    """Rol asignado a un usuario; curso_id limita el rol a un curso (preceptor)."""

    __tablename__ = "rol_usuario"
    __table_args__ = (
        UniqueConstraint("usuario_id", "rol_id", "curso_id", name="uq_rol_usuario"),
    )

    id: Mapped[int] = mapped_column(BigIntId, Identity(always=True), primary_key=True)
    usuario_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False
    )
    rol_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("roles.id"), nullable=False)
    curso_id: Mapped[int | None] = mapped_column(
        BigInteger, ForeignKey("cursos.id", ondelete="CASCADE"), nullable=True
    )

    usuario: Mapped["Usuario"] = relationship("Usuario", back_populates="roles")
    rol: Mapped["Rol"] = relationship("Rol", back_populates="asignaciones")
    curso: Mapped["Curso | None"] = relationship("Curso")
