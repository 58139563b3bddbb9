"""Mantenimiento de notificaciones desde la línea de comandos.

Borra las vencidas y las inactivas antiguas, y desactiva las activas antiguas.
Pensado para ejecutarse desde cron:  python scripts/limpiar_notificaciones.py
"""
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import app.models  # noqa: F401
from app.core.config import settings
from app.core.database import build_engine, build_sessionmaker
from app.services.notificacion_service import limpiar_notificaciones


async def main() -> int:
    engine = build_engine(settings.database_url_async)
    sessionmaker = build_sessionmaker(engine)
    try:
        async with sessionmaker() as session:
            resultado = await limpiar_notificaciones(
                session, dias=settings.notificaciones_dias_retencion
            )
            await session.commit()
    finally:
        await engine.dispose()
    print(
        f"Eliminadas (vencidas): {resultado['eliminadas_expiradas']}\n"
        f"Eliminadas (inactivas > {settings.notificaciones_dias_retencion} días): {resultado['eliminadas_antiguas']}\n"
        f"Desactivadas: {resultado['desactivadas']}"
    )
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")
    sys.exit(asyncio.run(main()))
