"""
Repository para operações de LoanTransaction no banco de dados.
"""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.book import BookCopy
from circulation.models.enums import LoanStatus
from circulation.models.loan import LoanTransaction
from circulation.models.member import Member, MemberType
from circulation.repositories.base import BaseRepository


class LoanRepository(BaseRepository[LoanTransaction]):
    """Repository de empréstimos."""

    def __init__(self, db: AsyncSession):
        super().__init__(LoanTransaction, db)

    async def count_open_by_member(self, member_id: UUID) -> int:
        """Conta empréstimos abertos (ACTIVE ou OVERDUE) de um sócio."""
        result = await self.db.execute(
            select(func.count(LoanTransaction.id))
            .where(
                LoanTransaction.member_id == member_id,
                LoanTransaction.status.in_(LoanStatus.open_statuses()),
            )
        )
        return result.scalar_one()

    async def get_open_by_copy(self, copy_id: UUID) -> LoanTransaction | None:
        """Busca o empréstimo aberto de uma cópia, se houver."""
        result = await self.db.execute(
            select(LoanTransaction)
            .where(
                LoanTransaction.copy_id == copy_id,
                LoanTransaction.status.in_(LoanStatus.open_statuses()),
            )
        )
        return result.scalar_one_or_none()

    async def count_open_by_book(self, book_id: UUID) -> int:
        """Conta empréstimos abertos de qualquer cópia de um título."""
        result = await self.db.execute(
            select(func.count(LoanTransaction.id))
            .join(BookCopy, BookCopy.id == LoanTransaction.copy_id)
            .where(
                BookCopy.book_id == book_id,
                LoanTransaction.status.in_(LoanStatus.open_statuses()),
            )
        )
        return result.scalar_one()

    async def search(
        self,
        member_id: UUID | None = None,
        status: LoanStatus | None = None,
    ) -> list[LoanTransaction]:
        """
        Lista empréstimos com filtros opcionais.

        Args:
            member_id: Filtro por sócio
            status: Filtro por status exato

        Returns:
            Empréstimos ordenados por loan_date decrescente
        """
        query = select(LoanTransaction)
        if member_id:
            query = query.where(LoanTransaction.member_id == member_id)
        if status:
            query = query.where(LoanTransaction.status == status)

        result = await self.db.execute(
            query.order_by(LoanTransaction.loan_date.desc(), LoanTransaction.id)
        )
        return list(result.scalars().all())

    async def list_past_due_with_rate(
        self,
        now: date,
    ) -> list[tuple[LoanTransaction, Optional[Decimal]]]:
        """
        Lista empréstimos abertos com due_date < now e a multa diária do sócio.

        Usa outer join: se o sócio ou a política sumiram, a taxa vem None
        e a linha é tratada como malformada pela varredura.
        """
        result = await self.db.execute(
            select(LoanTransaction, MemberType.fine_per_day)
            .outerjoin(Member, Member.id == LoanTransaction.member_id)
            .outerjoin(MemberType, MemberType.id == Member.member_type_id)
            .where(
                LoanTransaction.status.in_(LoanStatus.open_statuses()),
                LoanTransaction.due_date < now,
            )
            .order_by(LoanTransaction.due_date, LoanTransaction.id)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def mark_overdue_if_open(
        self,
        loan_id: UUID,
        fine_amount: Decimal,
    ) -> bool:
        """
        UPDATE guardado usado pela varredura de atrasos.

        Só altera a linha se ela continua aberta e se a multa nova não
        fica abaixo do que já foi pago. Retorna False quando outra
        operação mudou o estado no meio do caminho.
        """
        result = await self.db.execute(
            update(LoanTransaction)
            .where(
                LoanTransaction.id == loan_id,
                LoanTransaction.status.in_(LoanStatus.open_statuses()),
                LoanTransaction.return_date.is_(None),
                LoanTransaction.fine_paid <= fine_amount,
            )
            .values(status=LoanStatus.OVERDUE, fine_amount=fine_amount)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1
