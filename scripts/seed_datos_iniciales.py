"""Seed: roles del sistema y usuario administrador inicial.

Es idempotente: no duplica roles ni usuarios existentes.
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

import app.models  # noqa: F401
from app.core.config import settings
from app.core.database import build_engine, build_sessionmaker, init_db
from app.core.security import hash_password
from app.models import DataPersonal, Rol, RolNombre, RolUsuario, Usuario

ADMIN_USERNAME = "admin"
# Contraseña inicial (se guarda hasheada con bcrypt); cambiarla después del primer ingreso
ADMIN_PASSWORD_PLAIN = "admin1234"


async def seed_datos_iniciales():
    engine = build_engine(settings.database_url_async)
    await init_db(engine)
    sessionmaker = build_sessionmaker(engine)
    async with sessionmaker() as session:
        result = await session.execute(select(Rol))
        roles = {r.nombre: r for r in result.scalars().all()}
        for nombre in RolNombre.TODOS:
            if nombre not in roles:
                rol = Rol(nombre=nombre)
                session.add(rol)
                await session.flush()
                roles[nombre] = rol
                print(f"  + Rol creado: {nombre} (id={rol.id})")
            else:
                print(f"  = Rol existente: {nombre} (id={roles[nombre].id})")

        result = await session.execute(select(Usuario).where(Usuario.username == ADMIN_USERNAME))
        usuario = result.scalar_one_or_none()
        if not usuario:
            persona = DataPersonal(nombre="Administrador", apellido="Sistema", activo=True)
            session.add(persona)
            await session.flush()
            usuario = Usuario(
                username=ADMIN_USERNAME,
                password_hash=hash_password(ADMIN_PASSWORD_PLAIN),
                persona_id=persona.id,
                activo=True,
            )
            session.add(usuario)
            await session.flush()
            session.add(RolUsuario(usuario_id=usuario.id, rol_id=roles[RolNombre.ADMIN].id))
            print(f"  + Usuario creado: id={usuario.id}, username={usuario.username}")
        else:
            print(f"  = Usuario existente: {usuario.username}")
        await session.commit()
    await engine.dispose()
    print("Listo.")
    print(f"  Login: {ADMIN_USERNAME} / {ADMIN_PASSWORD_PLAIN}")


if __name__ == "__main__":
    asyncio.run(seed_datos_iniciales())
