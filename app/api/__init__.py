"""Routers de la API."""
from fastapi import APIRouter, Depends

from app.api.endpoints import (
    asignaciones,
    asistencias,
    auth,
    carga,
    cursos,
    docentes,
    estudiantes,
    instancias,
    materias,
    notas,
    notificaciones,
    sistema,
    tutores,
)
from app.api.endpoints.auth import get_current_user
from app.models import Usuario
from app.schemas.auth import MeResponse, RolUsuarioOut
from app.schemas.comun import PersonaOut

router = APIRouter()
router.include_router(auth.router)
router.include_router(estudiantes.router)
router.include_router(estudiantes.router_por_curso)
router.include_router(docentes.router)
router.include_router(tutores.router)
router.include_router(materias.router)
router.include_router(cursos.router)
router.include_router(cursos.router_por_rol)
router.include_router(asignaciones.router)
router.include_router(instancias.router)
router.include_router(notas.router)
router.include_router(carga.router)
router.include_router(asistencias.router)
router.include_router(notificaciones.router)
router.include_router(sistema.router)


@router.get(
    "/me",
    response_model=MeResponse,
    tags=["api"],
    summary="Usuario actual (protegido)",
    response_description="Datos del usuario autenticado",
    responses={
        200: {"description": "Usuario obtenido correctamente"},
        401: {"description": "Token no enviado, inválido o expirado"},
    },
)
async def get_me(current_user: Usuario = Depends(get_current_user)):
    """
    Devuelve el usuario actual a partir del JWT, con datos personales y roles
    (el curso acompaña a los roles de preceptor).
    **Requiere:** header `Authorization: Bearer <access_token>`.
    """
    return MeResponse(
        id=current_user.id,
        username=current_user.username,
        activo=current_user.activo,
        persona=PersonaOut.desde(current_user.persona) if current_user.persona else None,
        roles=[RolUsuarioOut(rol=ru.rol.nombre, curso_id=ru.curso_id) for ru in current_user.roles],
    )
