"""Alta y edición de datos personales compartidos por alumnos, tutores y docentes."""
import re
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy import or_

from app.models.persona import DataPersonal

CAMPOS_PERSONA = ("nombre", "apellido", "dni", "direccion", "movil", "fecha_nacimiento")

_SEPARADORES_DNI = re.compile(r"[.\-\s]")


def limpiar_dni(dni: str | None) -> str:
    """Quita puntos, guiones y espacios del DNI."""
    return _SEPARADORES_DNI.sub("", dni or "")


def parsear_fecha(valor: str | None) -> date | None:
    if not valor:
        return None
    try:
        return date.fromisoformat(valor[:10])
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Fecha inválida: '{valor}' (formato esperado YYYY-MM-DD)",
        )


def aplicar_datos(persona: DataPersonal, datos: dict) -> DataPersonal:
    """Copia a la persona los campos personales presentes en ``datos``."""
    for campo in CAMPOS_PERSONA:
        if campo not in datos:
            continue
        valor = datos[campo]
        if campo == "fecha_nacimiento":
            valor = parsear_fecha(valor)
        elif isinstance(valor, str):
            valor = valor.strip() or None
        if campo in ("nombre", "apellido") and not valor:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"El campo {campo} no puede quedar vacío",
            )
        setattr(persona, campo, valor)
    return persona


def nueva_persona(datos: dict) -> DataPersonal:
    """Crea (sin agregar a la sesión) una persona; nombre y apellido son obligatorios."""
    faltantes = [c for c in ("nombre", "apellido") if not (datos.get(c) or "").strip()]
    if faltantes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Faltan campos obligatorios: {', '.join(faltantes)}",
        )
    return aplicar_datos(DataPersonal(activo=True), datos)


def filtro_busqueda(search: str):
    """Condición para buscar por nombre, apellido o DNI sin distinguir mayúsculas."""
    patron = f"%{search.strip()}%"
    return or_(
        DataPersonal.nombre.ilike(patron),
        DataPersonal.apellido.ilike(patron),
        DataPersonal.dni.ilike(patron),
    )
