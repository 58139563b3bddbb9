"""Manejadores globales de errores: todas las respuestas de error llevan {success: false, error}."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

MENSAJE_ERROR_INTERNO = "Error interno del servidor"


def error_response(status_code: int, mensaje: str, **extra) -> JSONResponse:
    """Cuerpo de error uniforme."""
    contenido = {"success": False, "error": mensaje}
    contenido.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(contenido))


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    # Los datos de entrada inválidos se informan como 400 (no 422)
    return error_response(
        status.HTTP_400_BAD_REQUEST,
        "Datos inválidos",
        detalles=exc.errors(),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Error no controlado en %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, MENSAJE_ERROR_INTERNO)


def registrar_manejadores(app: FastAPI) -> None:
    """Registra los manejadores de excepciones en la aplicación."""
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
