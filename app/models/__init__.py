"""Modelos SQLAlchemy (tablas de la base de datos)."""
from app.models.persona import DataPersonal
from app.models.curso import Curso
from app.models.materia import Materia
from app.models.alumno import Alumno, AlumnoTutor, EstadoAlumno
from app.models.tutor import Tutor
from app.models.docente import Docente
from app.models.asignacion import Asignacion
from app.models.asistencia import Asistencia, Justificacion, TipoEvento
from app.models.evaluacion import DetalleInstanciaEvaluativa, InstanciaEvaluativa
from app.models.role import Rol, RolNombre, RolUsuario
from app.models.user import Usuario
from app.models.notificacion import Importancia, Notificacion

__all__ = [
    "DataPersonal",
    "Curso",
    "Materia",
    "Alumno",
    "AlumnoTutor",
    "EstadoAlumno",
    "Tutor",
    "Docente",
    "Asignacion",
    "Asistencia",
    "Justificacion",
    "TipoEvento",
    "InstanciaEvaluativa",
    "DetalleInstanciaEvaluativa",
    "Rol",
    "RolNombre",
    "RolUsuario",
    "Usuario",
    "Importancia",
    "Notificacion",
]
