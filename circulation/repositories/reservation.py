"""
Repository para operações de Reservation no banco de dados.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.models.enums import ReservationStatus
from circulation.models.reservation import Reservation
from circulation.repositories.base import BaseRepository


class ReservationRepository(BaseRepository[Reservation]):
    """Repository de reservas."""

    def __init__(self, db: AsyncSession):
        super().__init__(Reservation, db)

    async def get_active_by_member_and_book(
        self,
        member_id: UUID,
        book_id: UUID,
    ) -> Reservation | None:
        """
        Busca reserva ACTIVE de um sócio para um título.

        Usado para verificar duplicatas antes de criar nova reserva.
        """
        result = await self.db.execute(
            select(Reservation)
            .where(
                Reservation.member_id == member_id,
                Reservation.book_id == book_id,
                Reservation.status == ReservationStatus.ACTIVE,
            )
        )
        return result.scalar_one_or_none()

    async def list_queue(self, book_id: UUID) -> list[Reservation]:
        """
        Fila de reservas ACTIVE de um título, na ordem em que serão atendidas.

        Ordem: priority_number, reservation_date, created_at (e id para
        desempate total).
        """
        result = await self.db.execute(
            select(Reservation)
            .where(
                Reservation.book_id == book_id,
                Reservation.status == ReservationStatus.ACTIVE,
            )
            .order_by(
                Reservation.priority_number.asc(),
                Reservation.reservation_date.asc(),
                Reservation.created_at.asc(),
                Reservation.id.asc(),
            )
        )
        return list(result.scalars().all())

    async def has_active_for_book(self, book_id: UUID, now: date) -> bool:
        """
        True se existe reserva pendente para o título em now.

        Reserva ACTIVE com validade vencida não conta, mesmo que a
        varredura ainda não a tenha marcado como EXPIRED.
        """
        result = await self.db.execute(
            select(func.count(Reservation.id))
            .where(
                Reservation.book_id == book_id,
                Reservation.status == ReservationStatus.ACTIVE,
                Reservation.expiry_date >= now,
            )
        )
        return result.scalar_one() > 0

    async def max_active_priority(self, book_id: UUID) -> int:
        """Maior priority_number entre as reservas ACTIVE (0 se fila vazia)."""
        result = await self.db.execute(
            select(func.max(Reservation.priority_number))
            .where(
                Reservation.book_id == book_id,
                Reservation.status == ReservationStatus.ACTIVE,
            )
        )
        return result.scalar_one_or_none() or 0

    async def list_active_expired(self, now: date) -> list[Reservation]:
        """Reservas ACTIVE cuja validade terminou antes de now."""
        result = await self.db.execute(
            select(Reservation)
            .where(
                Reservation.status == ReservationStatus.ACTIVE,
                Reservation.expiry_date < now,
            )
            .order_by(Reservation.expiry_date, Reservation.id)
        )
        return list(result.scalars().all())

    async def transition_if_active(
        self,
        reservation_id: UUID,
        status: ReservationStatus,
    ) -> bool:
        """
        UPDATE guardado: só altera a reserva se ela ainda estiver ACTIVE.

        Retorna False se outra operação já mudou o status.
        """
        result = await self.db.execute(
            update(Reservation)
            .where(
                Reservation.id == reservation_id,
                Reservation.status == ReservationStatus.ACTIVE,
            )
            .values(status=status)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1
