"""Punto de entrada de la aplicación FastAPI."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import app.models  # noqa: F401 - Registra modelos en Base.metadata antes de init_db
from app.api import router as api_router
from app.core.config import Settings, settings as default_settings
from app.core.database import build_engine, build_sessionmaker, init_db
from app.core.errors import registrar_manejadores

logger = logging.getLogger(__name__)

# Documentación Swagger: disponible en /docs (OpenAPI 3.0)
OPENAPI_TAGS = [
    {"name": "auth", "description": "Login por usuario y contraseña, y por DNI para los portales."},
    {"name": "api", "description": "Rutas generales. /me requiere JWT."},
    {"name": "estudiantes", "description": "Alumnos: listado con inasistencias, alta, edición, baja e importación Excel."},
    {"name": "docentes", "description": "Docentes: ABM con baja lógica."},
    {"name": "tutores", "description": "Tutores y alumnos a cargo."},
    {"name": "materias", "description": "Materias: ABM con baja lógica."},
    {"name": "cursos", "description": "Cursos (año y división) y cursos visibles por rol."},
    {"name": "asignaciones", "description": "Asignaciones docente x materia x curso."},
    {"name": "evaluacion", "description": "Instancias evaluativas, notas y carga de notas por docente."},
    {"name": "asistencias", "description": "Toma de asistencia, edición, justificación, acumulado y reporte PDF."},
    {"name": "notificaciones", "description": "Notificaciones por usuario o rol, con vencimiento y limpieza."},
    {"name": "salud", "description": "Comprobación del estado del servicio y de la base."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Construye el engine y la fábrica de sesiones al iniciar y los libera al cerrar."""
    config: Settings = app.state.settings
    if getattr(app.state, "sessionmaker", None) is None:
        engine = build_engine(config.database_url_async, echo=config.debug)
        app.state.engine = engine
        app.state.sessionmaker = build_sessionmaker(engine)
        await init_db(engine)
        logger.info("Base de datos inicializada")
        try:
            yield
        finally:
            await engine.dispose()
            app.state.sessionmaker = None
    else:
        # Sesiones provistas desde afuera (tests, scripts)
        yield


def create_app(config: Settings | None = None) -> FastAPI:
    """Crea la aplicación. La conexión a la base se inyecta vía app.state, no es global."""
    config = config or default_settings
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=config.app_name,
        description="""
API REST de **Gestión Escolar**: alumnos, docentes, tutores, cursos, materias,
asistencias, notas y notificaciones.

- **Swagger UI:** [GET /docs](/docs)
- **ReDoc:** [GET /redoc](/redoc)

Los identificadores se envían como texto en las respuestas JSON. Los errores tienen
la forma `{"success": false, "error": "<mensaje>"}`.
""",
        version="1.0.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        swagger_ui_parameters={"persistAuthorization": True},
    )
    app.state.settings = config
    app.state.sessionmaker = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    registrar_manejadores(app)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
