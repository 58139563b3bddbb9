"""Helpers para poblar la base de los tests."""
from app.core.security import hash_password
from app.models import (
    Alumno,
    AlumnoTutor,
    Asignacion,
    Curso,
    DataPersonal,
    Docente,
    InstanciaEvaluativa,
    Materia,
    Rol,
    RolUsuario,
    Tutor,
    Usuario,
)


async def crear_persona(s, nombre="Ana", apellido="Pérez", dni=None, movil=None):
    persona = DataPersonal(nombre=nombre, apellido=apellido, dni=dni, movil=movil, activo=True)
    s.add(persona)
    await s.flush()
    return persona


async def crear_curso(s, anio=3, division="B"):
    curso = Curso(anio=anio, division=division)
    s.add(curso)
    await s.flush()
    return curso


async def crear_alumno(s, curso=None, nombre="Ana", apellido="Pérez", dni=None, legajo=None, activo=True):
    persona = await crear_persona(s, nombre, apellido, dni)
    alumno = Alumno(
        persona_id=persona.id,
        legajo=legajo,
        estado="Regular" if activo else "Baja por pase",
        activo=activo,
        curso_id=curso.id if curso else None,
    )
    s.add(alumno)
    await s.flush()
    return alumno


async def crear_tutor(s, nombre="Laura", apellido="Gómez", dni=None, movil=None, alumnos=()):
    persona = await crear_persona(s, nombre, apellido, dni, movil)
    tutor = Tutor(persona_id=persona.id, activo=True)
    s.add(tutor)
    await s.flush()
    for alumno in alumnos:
        s.add(AlumnoTutor(alumno_id=alumno.id, tutor_id=tutor.id))
    await s.flush()
    return tutor


async def crear_docente(s, nombre="Jorge", apellido="Luna", dni=None, activo=True):
    persona = await crear_persona(s, nombre, apellido, dni)
    docente = Docente(persona_id=persona.id, activo=activo)
    s.add(docente)
    await s.flush()
    return docente


async def crear_materia(s, nombre="Matemática", activo=True):
    materia = Materia(nombre=nombre, activo=activo)
    s.add(materia)
    await s.flush()
    return materia


async def crear_asignacion(s, docente, materia, curso):
    asignacion = Asignacion(docente_id=docente.id, materia_id=materia.id, curso_id=curso.id)
    s.add(asignacion)
    await s.flush()
    return asignacion


async def crear_instancia(s, nombre="1er Trimestre", activo=True):
    instancia = InstanciaEvaluativa(nombre=nombre, activo=activo)
    s.add(instancia)
    await s.flush()
    return instancia


async def crear_rol(s, nombre):
    rol = Rol(nombre=nombre)
    s.add(rol)
    await s.flush()
    return rol


async def crear_usuario(s, username, password="secreta", roles=(), dni=None, activo=True):
    """``roles``: lista de Rol o de tuplas (Rol, Curso) para roles con curso."""
    persona = await crear_persona(s, nombre=username.capitalize(), apellido="Test", dni=dni)
    usuario = Usuario(
        username=username,
        password_hash=hash_password(password),
        persona_id=persona.id,
        activo=activo,
    )
    s.add(usuario)
    await s.flush()
    for item in roles:
        rol, curso = item if isinstance(item, tuple) else (item, None)
        s.add(RolUsuario(usuario_id=usuario.id, rol_id=rol.id, curso_id=curso.id if curso else None))
    await s.flush()
    return usuario
