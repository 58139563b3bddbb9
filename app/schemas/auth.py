"""Esquemas para autenticación."""
from pydantic import BaseModel, Field

from app.schemas.comun import IdStr, PersonaOut


class LoginRequest(BaseModel):
    """Usuario y contraseña, o solo DNI (acceso de tutores)."""

    username: str | None = Field(default=None, description="Nombre de usuario")
    password: str | None = Field(default=None, description="Contraseña")
    dni: str | None = Field(default=None, description="DNI (alternativa para tutores)")


class DniLoginRequest(BaseModel):
    dni: str | None = Field(default=None, description="DNI (se ignoran puntos, guiones y espacios)")


class TokenResponse(BaseModel):
    """Respuesta del login: datos del usuario y JWT."""

    success: bool = True
    access_token: str = Field(description="JWT para el header Authorization: Bearer <token>")
    token_type: str = "bearer"
    usuario_id: IdStr
    username: str
    nombre: str = ""
    roles: list[str] = Field(default_factory=list)


class AlumnoPortal(BaseModel):
    id: IdStr
    nombre: str
    curso: str


class PortalLoginResponse(BaseModel):
    """Login por DNI de los portales (tutor, docente, preceptor)."""

    success: bool = True
    access_token: str | None = None
    persona: PersonaOut
    tutor_id: IdStr | None = None
    docente_id: IdStr | None = None
    usuario_id: IdStr | None = None
    alumnos: list[AlumnoPortal] = Field(default_factory=list)
    cursos: list[str] = Field(default_factory=list)


class RolUsuarioOut(BaseModel):
    rol: str
    curso_id: IdStr | None = None


class MeResponse(BaseModel):
    id: IdStr
    username: str
    activo: bool
    persona: PersonaOut | None = None
    roles: list[RolUsuarioOut]
