"""
Repository para pagamentos de multa.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.payment import FinePayment
from circulation.repositories.base import BaseRepository


class FinePaymentRepository(BaseRepository[FinePayment]):
    """Repository somente-inserção de pagamentos."""

    def __init__(self, db: AsyncSession):
        super().__init__(FinePayment, db)

    async def list_by_transaction(self, transaction_id: UUID) -> list[FinePayment]:
        result = await self.db.execute(
            select(FinePayment)
            .where(FinePayment.transaction_id == transaction_id)
            .order_by(FinePayment.payment_date, FinePayment.created_at, FinePayment.id)
        )
        return list(result.scalars().all())

    async def total_by_transaction(self, transaction_id: UUID) -> Decimal:
        """Soma dos pagamentos de um empréstimo."""
        result = await self.db.execute(
            select(func.coalesce(func.sum(FinePayment.payment_amount), 0))
            .where(FinePayment.transaction_id == transaction_id)
        )
        return Decimal(str(result.scalar_one()))

    async def receipt_exists(self, receipt_number: str) -> bool:
        result = await self.db.execute(
            select(func.count(FinePayment.id))
            .where(FinePayment.receipt_number == receipt_number)
        )
        return result.scalar_one() > 0
