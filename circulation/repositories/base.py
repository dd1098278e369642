"""
Repository base com operações genéricas.

Repositórios nunca fazem commit: quem fecha a unidade de trabalho é o
service que orquestra a operação.
"""

from typing import Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.db.session import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Repository base.

    Fornece métodos genéricos para:
    - get_by_id: Buscar por ID
    - get_for_update: Buscar por ID travando a linha (SELECT ... FOR UPDATE)
    - add: Incluir registro novo na sessão
    - count: Contar registros
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    async def get_by_id(self, id: UUID) -> ModelType | None:
        """Busca registro por ID."""
        result = await self.db.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def get_for_update(self, id: UUID) -> ModelType | None:
        """
        Busca registro por ID com lock de linha (no-op no SQLite).

        populate_existing recarrega a instância já presente na sessão, então
        quem segura o lock sempre enxerga a linha como está no banco.
        Alterações pendentes precisam de flush antes.
        """
        result = await self.db.execute(
            select(self.model)
            .where(self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add(self, instance: ModelType) -> ModelType:
        """Inclui registro na sessão e faz flush para gerar constraints."""
        self.db.add(instance)
        await self.db.flush()
        return instance

    async def count(self) -> int:
        """Conta total de registros."""
        result = await self.db.execute(
            select(func.count(self.model.id))
        )
        return result.scalar_one()
