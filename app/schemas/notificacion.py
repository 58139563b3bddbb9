"""Esquemas para notificaciones."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.models.notificacion import Importancia
from app.schemas.comun import IdStr


def _validar_importancia(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.upper()
    if v not in Importancia.TODOS:
        raise ValueError(f"importancia debe ser uno de: {', '.join(Importancia.TODOS)}")
    return v


class Destino(BaseModel):
    """Destino: un usuario (valor = ID) o un rol (valor = nombre, alias o ID)."""

    tipo: Literal["usuario", "rol"]
    valor: str | int


class NotificacionCreate(BaseModel):
    titulo: str = Field(min_length=1)
    mensaje: str = Field(min_length=1)
    duracion_minutos: int = Field(gt=0, description="Minutos de vigencia desde la creación")
    destino: Destino
    usuario_id_remitente: IdStr | None = None
    importancia: str = Importancia.BAJA
    tipo: str = "GENERAL"

    @field_validator("importancia")
    @classmethod
    def validar_importancia(cls, v: str) -> str:
        return _validar_importancia(v)


class NotificacionUpdate(BaseModel):
    titulo: str | None = None
    mensaje: str | None = None
    importancia: str | None = None
    duracion_minutos: int | None = Field(default=None, gt=0)
    activa: bool | None = None

    @field_validator("importancia")
    @classmethod
    def validar_importancia(cls, v: str | None) -> str | None:
        return _validar_importancia(v)


class NotificacionPatch(NotificacionUpdate):
    """Edición parcial por el remitente (puede cambiar el destino)."""

    usuario_id_remitente: IdStr
    destino: Destino | None = None


class NotificacionOut(BaseModel):
    id: IdStr
    titulo: str
    mensaje: str
    importancia: str
    tipo: str
    remitente_id: IdStr | None = None
    remitente: str | None = None
    destinatario_id: IdStr | None = None
    rol_destino_id: IdStr | None = None
    rol_destino: str | None = None
    fecha_creacion: datetime
    fecha_expiracion: datetime
    activa: bool
    leida: bool


class MarcarLeidaRequest(BaseModel):
    notificacion_id: IdStr
    usuario_id: IdStr


class NoLeidasResponse(BaseModel):
    usuario_id: IdStr
    no_leidas: int


class LimpiezaResponse(BaseModel):
    success: bool = True
    eliminadas_expiradas: int
    eliminadas_antiguas: int
    desactivadas: int
