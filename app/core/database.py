"""Conexión asíncrona a la base de datos con SQLAlchemy 2.0.

El engine y la fábrica de sesiones se construyen en el arranque de la aplicación
y se guardan en ``app.state``; los endpoints reciben la sesión vía ``Depends(get_db)``.
"""
from fastapi import Request
from sqlalchemy import BigInteger, Integer
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

# Claves de 64 bits; en SQLite debe ser INTEGER para que funcione el autoincremento (tests)
BigIntId = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """Base para todos los modelos SQLAlchemy."""

    pass


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Crea el engine asíncrono. El tamaño de pool solo aplica a servidores (PostgreSQL)."""
    kwargs: dict = {"echo": echo}
    if not url.startswith("sqlite"):
        kwargs.update(pool_pre_ping=True, pool_size=5, max_overflow=10)
    return create_async_engine(url, **kwargs)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Fábrica de sesiones ligada al engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def get_db(request: Request):
    """Dependencia para obtener una sesión de base de datos por request."""
    sessionmaker = request.app.state.sessionmaker
    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(engine: AsyncEngine):
    """Inicializa la base de datos (crear tablas si no existen)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
