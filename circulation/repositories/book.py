"""
Repositories do catálogo: Book e BookCopy.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.book import Book, BookCopy
from circulation.repositories.base import BaseRepository


class BookRepository(BaseRepository[Book]):
    """Repository de títulos."""

    def __init__(self, db: AsyncSession):
        super().__init__(Book, db)


class BookCopyRepository(BaseRepository[BookCopy]):
    """Repository de cópias físicas."""

    def __init__(self, db: AsyncSession):
        super().__init__(BookCopy, db)

    async def list_by_book(self, book_id: UUID, for_update: bool = False) -> list[BookCopy]:
        """Lista as cópias de um título, opcionalmente travando as linhas."""
        query = (
            select(BookCopy)
            .where(BookCopy.book_id == book_id)
            .order_by(BookCopy.barcode)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return list(result.scalars().all())
