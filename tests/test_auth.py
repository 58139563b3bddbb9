"""Login por contraseña, ingreso por DNI de los portales y /me."""
from tests.factories import (
    crear_alumno,
    crear_asignacion,
    crear_curso,
    crear_docente,
    crear_materia,
    crear_rol,
    crear_tutor,
    crear_usuario,
)


async def test_login_y_me(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s)
        preceptor = await crear_rol(s, "PRECEPTOR")
        usuario = await crear_usuario(s, "marta", password="clave123", roles=[(preceptor, curso)])
        await s.commit()

    resp = await client.post("/api/auth/login", json={"username": "marta", "password": "clave123"})

    assert resp.status_code == 200
    cuerpo = resp.json()
    assert cuerpo["usuario_id"] == str(usuario.id)
    assert cuerpo["roles"] == ["PRECEPTOR"]

    me = await client.get("/api/me", headers={"Authorization": f"Bearer {cuerpo['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "marta"
    assert me.json()["roles"] == [{"rol": "PRECEPTOR", "curso_id": str(curso.id)}]


async def test_login_con_contrasena_incorrecta(client, session_factory):
    async with session_factory() as s:
        await crear_usuario(s, "marta", password="clave123")
        await s.commit()

    resp = await client.post("/api/auth/login", json={"username": "marta", "password": "otra"})

    assert resp.status_code == 401
    assert resp.json()["success"] is False


async def test_login_sin_datos_devuelve_400(client):
    resp = await client.post("/api/auth/login", json={})

    assert resp.status_code == 400


async def test_me_sin_token(client):
    resp = await client.get("/api/me")

    assert resp.status_code == 401


async def test_me_con_token_invalido(client):
    resp = await client.get("/api/me", headers={"Authorization": "Bearer no-es-un-jwt"})

    assert resp.status_code == 401


async def test_login_de_tutor_por_dni(client, session_factory):
    async with session_factory() as s:
        tutor_rol = await crear_rol(s, "TUTOR")
        await crear_usuario(s, "tutor1", roles=[tutor_rol], dni="28.555.666")
        await s.commit()

    resp = await client.post("/api/auth/login", json={"dni": "28555666"})

    assert resp.status_code == 200
    assert resp.json()["roles"] == ["TUTOR"]


async def test_docente_login_ignora_separadores_del_dni(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s, 2, "A")
        docente = await crear_docente(s, "Jorge", "Luna", dni="30.123.456")
        await crear_asignacion(s, docente, await crear_materia(s), curso)
        await s.commit()

    resp = await client.post("/api/auth/docente-login", json={"dni": "30-123 456"})

    assert resp.status_code == 200
    cuerpo = resp.json()
    assert cuerpo["docente_id"] == str(docente.id)
    assert cuerpo["cursos"] == ["2° A"]
    assert cuerpo["access_token"] is None


async def test_docente_inactivo_no_ingresa(client, session_factory):
    async with session_factory() as s:
        await crear_docente(s, dni="30123456", activo=False)
        await s.commit()

    resp = await client.post("/api/auth/docente-login", json={"dni": "30123456"})

    assert resp.status_code == 401


async def test_tutor_login_lista_alumnos_a_cargo(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s)
        hijo = await crear_alumno(s, curso, nombre="Tomás", apellido="Gómez")
        await crear_tutor(s, dni="27000111", alumnos=[hijo])
        await s.commit()

    resp = await client.post("/api/auth/tutor-login", json={"dni": "27.000.111"})

    assert resp.status_code == 200
    assert resp.json()["alumnos"] == [{"id": str(hijo.id), "nombre": "Tomás Gómez", "curso": "3° B"}]


async def test_preceptor_dni_login_exige_rol(client, session_factory):
    async with session_factory() as s:
        curso = await crear_curso(s, 1, "C")
        preceptor = await crear_rol(s, "PRECEPTOR")
        docente_rol = await crear_rol(s, "DOCENTE")
        await crear_usuario(s, "pre", roles=[(preceptor, curso)], dni="20111222")
        await crear_usuario(s, "doc", roles=[docente_rol], dni="20333444")
        await s.commit()

    ok = await client.post("/api/auth/preceptor-dni-login", json={"dni": "20111222"})
    assert ok.status_code == 200
    assert ok.json()["cursos"] == ["1° C"]

    prohibido = await client.post("/api/auth/preceptor-dni-login", json={"dni": "20333444"})
    assert prohibido.status_code == 403

    desconocido = await client.post("/api/auth/preceptor-dni-login", json={"dni": "1"})
    assert desconocido.status_code == 401
