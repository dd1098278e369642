"""
Configuração de sessão do banco de dados com SQLAlchemy async.

Este módulo fornece o engine async, session factory e dependency
para injeção de sessão nos endpoints.
"""

from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from circulation.core.config import get_settings

settings = get_settings()

engine_options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
if not settings.is_sqlite:
    # Pool de conexões só faz sentido para o driver de servidor
    engine_options.update(pool_size=5, max_overflow=10)

engine = create_async_engine(settings.DATABASE_URL, **engine_options)

# Factory de sessões async
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Classe base para todos os modelos SQLAlchemy."""
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency que fornece uma sessão de banco de dados.

    Uso nos endpoints:
        @router.post("/loans")
        async def checkout(db: DbSession):
            ...

    A sessão é automaticamente fechada após o request.
    """
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Cria todas as tabelas registradas em Base.metadata."""
    # Registra os models no metadata antes do create_all
    import circulation.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_database_connection() -> tuple[bool, str | None]:
    """
    Verifica se a conexão com o banco de dados está funcionando.

    Returns:
        Tupla (sucesso, mensagem_erro)
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True, None
    except Exception as e:
        return False, str(e)
