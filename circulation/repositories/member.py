"""
Repositories do cadastro de sócios e funcionários.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.member import Member, MemberType, Staff
from circulation.repositories.base import BaseRepository


class MemberTypeRepository(BaseRepository[MemberType]):
    """Repository de políticas de empréstimo."""

    def __init__(self, db: AsyncSession):
        super().__init__(MemberType, db)

    async def get_by_name(self, type_name: str) -> MemberType | None:
        result = await self.db.execute(
            select(MemberType).where(MemberType.type_name == type_name)
        )
        return result.scalar_one_or_none()


class MemberRepository(BaseRepository[Member]):
    """Repository de sócios."""

    def __init__(self, db: AsyncSession):
        super().__init__(Member, db)

    async def get_with_policy(self, member_id: UUID) -> tuple[Member, MemberType] | None:
        """Busca sócio junto com a política do seu tipo."""
        result = await self.db.execute(
            select(Member, MemberType)
            .join(MemberType, MemberType.id == Member.member_type_id)
            .where(Member.id == member_id)
        )
        row = result.one_or_none()
        if row is None:
            return None
        return row[0], row[1]


class StaffRepository(BaseRepository[Staff]):
    """Repository de funcionários."""

    def __init__(self, db: AsyncSession):
        super().__init__(Staff, db)
