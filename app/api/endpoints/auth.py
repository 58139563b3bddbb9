"""Endpoints de autenticación: login por usuario/contraseña, login por DNI de los portales
y dependencia para proteger rutas."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_db
from app.core.security import create_access_token, decode_access_token, verify_password
from app.models import Alumno, Asignacion, DataPersonal, Docente, RolNombre, RolUsuario, Tutor, Usuario
from app.models.curso import etiqueta_curso
from app.schemas.auth import (
    AlumnoPortal,
    DniLoginRequest,
    LoginRequest,
    PortalLoginResponse,
    TokenResponse,
)
from app.schemas.comun import PersonaOut
from app.services.persona_service import limpiar_dni

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


def _dni_normalizado():
    """Expresión SQL del DNI sin puntos, guiones ni espacios."""
    return func.replace(
        func.replace(func.replace(DataPersonal.dni, ".", ""), "-", ""), " ", ""
    )


def _dni_obligatorio(dni: str | None) -> str:
    limpio = limpiar_dni(dni)
    if not limpio:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El DNI es obligatorio",
        )
    return limpio


def _consulta_usuario():
    return select(Usuario).options(
        selectinload(Usuario.persona),
        selectinload(Usuario.roles).selectinload(RolUsuario.rol),
        selectinload(Usuario.roles).selectinload(RolUsuario.curso),
    )


async def _usuario_por_dni(db: AsyncSession, dni: str) -> Usuario | None:
    result = await db.execute(
        _consulta_usuario()
        .join(DataPersonal, DataPersonal.id == Usuario.persona_id)
        .where(_dni_normalizado() == dni, Usuario.activo.is_(True))
    )
    return result.scalars().first()


def _token_para(usuario: Usuario) -> str:
    return create_access_token(
        subject=usuario.id,
        extra={"username": usuario.username, "roles": usuario.nombres_rol},
    )


def _token_response(usuario: Usuario) -> TokenResponse:
    return TokenResponse(
        access_token=_token_para(usuario),
        usuario_id=usuario.id,
        username=usuario.username,
        nombre=usuario.persona.nombre_completo if usuario.persona else "",
        roles=usuario.nombres_rol,
    )


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Iniciar sesión",
    response_description="Datos del usuario y token JWT para el header Authorization",
    responses={
        400: {"description": "Faltan usuario/contraseña o DNI"},
        401: {"description": "Credenciales incorrectas"},
    },
)
async def login(data: LoginRequest, db: AsyncSession = Depends(get_db)):
    """
    Autenticación con **usuario** y **contraseña**, o con **dni** para usuarios tutores.
    Usa el token en el header `Authorization: Bearer <access_token>` para acceder a rutas
    protegidas (ej. GET /api/me).
    """
    if data.dni and not data.username:
        usuario = await _usuario_por_dni(db, _dni_obligatorio(data.dni))
        if not usuario or RolNombre.TUTOR not in usuario.nombres_rol:
            logger.warning("Login por DNI rechazado")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="DNI no registrado como tutor",
            )
        return _token_response(usuario)

    if not data.username or not data.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Usuario y contraseña son obligatorios",
        )
    result = await db.execute(_consulta_usuario().where(Usuario.username == data.username.strip()))
    usuario = result.scalar_one_or_none()
    if not usuario or not usuario.activo or not verify_password(data.password, usuario.password_hash or ""):
        logger.warning("Login rechazado para '%s'", data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario o contraseña incorrectos",
        )
    return _token_response(usuario)


@router.post(
    "/tutor-login",
    response_model=PortalLoginResponse,
    summary="Ingreso al portal de tutores por DNI",
)
async def tutor_login(data: DniLoginRequest, db: AsyncSession = Depends(get_db)):
    dni = _dni_obligatorio(data.dni)
    result = await db.execute(
        select(Tutor)
        .join(DataPersonal, DataPersonal.id == Tutor.persona_id)
        .options(
            selectinload(Tutor.persona),
            selectinload(Tutor.alumnos).selectinload(Alumno.persona),
            selectinload(Tutor.alumnos).selectinload(Alumno.curso),
        )
        .where(_dni_normalizado() == dni, Tutor.activo.is_(True))
    )
    tutor = result.scalars().first()
    if not tutor:
        logger.warning("Ingreso de tutor rechazado")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="DNI no registrado como tutor",
        )
    usuario = await _usuario_por_dni(db, dni)
    return PortalLoginResponse(
        access_token=_token_para(usuario) if usuario else None,
        persona=PersonaOut.desde(tutor.persona),
        tutor_id=tutor.id,
        usuario_id=usuario.id if usuario else None,
        alumnos=[
            AlumnoPortal(id=a.id, nombre=a.persona.nombre_completo, curso=etiqueta_curso(a.curso))
            for a in tutor.alumnos
            if a.activo
        ],
    )


@router.post(
    "/docente-login",
    response_model=PortalLoginResponse,
    summary="Ingreso al portal docente por DNI",
    description="El DNI se compara sin puntos, guiones ni espacios.",
)
async def docente_login(data: DniLoginRequest, db: AsyncSession = Depends(get_db)):
    dni = _dni_obligatorio(data.dni)
    result = await db.execute(
        select(Docente)
        .join(DataPersonal, DataPersonal.id == Docente.persona_id)
        .options(
            selectinload(Docente.persona),
            selectinload(Docente.asignaciones).selectinload(Asignacion.curso),
        )
        .where(_dni_normalizado() == dni, Docente.activo.is_(True))
    )
    docente = result.scalars().first()
    if not docente:
        logger.warning("Ingreso de docente rechazado")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="DNI no registrado como docente activo",
        )
    usuario = await _usuario_por_dni(db, dni)
    cursos: list[str] = []
    for asig in docente.asignaciones:
        if asig.curso.etiqueta not in cursos:
            cursos.append(asig.curso.etiqueta)
    return PortalLoginResponse(
        access_token=_token_para(usuario) if usuario else None,
        persona=PersonaOut.desde(docente.persona),
        docente_id=docente.id,
        usuario_id=usuario.id if usuario else None,
        cursos=cursos,
    )


@router.post(
    "/preceptor-dni-login",
    response_model=PortalLoginResponse,
    summary="Ingreso al portal de preceptores por DNI",
    responses={403: {"description": "El usuario no tiene rol PRECEPTOR"}},
)
async def preceptor_login(data: DniLoginRequest, db: AsyncSession = Depends(get_db)):
    usuario = await _usuario_por_dni(db, _dni_obligatorio(data.dni))
    if not usuario:
        logger.warning("Ingreso de preceptor rechazado")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="DNI no registrado",
        )
    roles_preceptor = [ru for ru in usuario.roles if ru.rol.nombre == RolNombre.PRECEPTOR]
    if not roles_preceptor:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="El usuario no tiene rol de preceptor",
        )
    return PortalLoginResponse(
        access_token=_token_para(usuario),
        persona=PersonaOut.desde(usuario.persona),
        usuario_id=usuario.id,
        cursos=sorted({ru.curso.etiqueta for ru in roles_preceptor if ru.curso}),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Usuario:
    """Dependencia: exige un JWT válido y devuelve el usuario actual con persona y roles."""
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de autenticación no proporcionado o inválido",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or not str(payload.get("sub", "")).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido o expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )
    result = await db.execute(_consulta_usuario().where(Usuario.id == int(payload["sub"])))
    usuario = result.scalar_one_or_none()
    if not usuario:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario no encontrado",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not usuario.activo:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Usuario inactivo. Contacte al administrador.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return usuario
