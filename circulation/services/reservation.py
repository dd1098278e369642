"""
Fila de reservas por título (ReservationQueue).

Regras de negócio:
    - Reserva é por título; no máximo uma ACTIVE por (sócio, título)
    - Ordem de atendimento: priority_number, depois reservation_date
    - Reserva com expiry_date < now não é mais oferecida e vira EXPIRED
    - A fila não mexe em BookCopy: ela só propõe o empréstimo, quem
      executa é o LoanLedger via callback de checkout
    - Sócio inelegível (PolicyViolation) é pulado e continua na fila
"""

from datetime import date
from typing import Awaitable, Callable, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.exceptions import (
    DuplicateReservation,
    EntityNotFound,
    InvalidReservation,
    InvalidState,
    PolicyViolation,
)
from circulation.core.locks import book_locks
from circulation.core.logging import get_logger
from circulation.models.book import BookCopy
from circulation.models.enums import ReservationStatus
from circulation.models.loan import LoanTransaction
from circulation.models.reservation import Reservation
from circulation.repositories.book import BookRepository
from circulation.repositories.member import MemberRepository
from circulation.repositories.reservation import ReservationRepository
from circulation.schemas.sweep import SkippedRow, SweepReport

logger = get_logger(__name__)

# checkout(member_id, copy) -> empréstimo aberto para o sócio da fila
CheckoutCallback = Callable[[UUID, BookCopy], Awaitable[LoanTransaction]]


class ReservationQueue:
    """Service para operações da fila de reservas."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.reservation_repo = ReservationRepository(db)
        self.member_repo = MemberRepository(db)
        self.book_repo = BookRepository(db)

    # ==========================================
    # Enqueue / Cancel
    # ==========================================

    async def enqueue(
        self,
        member_id: UUID,
        book_id: UUID,
        expiry_date: date,
        now: date,
        priority_number: Optional[int] = None,
    ) -> Reservation:
        """
        Coloca um sócio na fila de um título.

        Args:
            member_id: Sócio que reserva
            book_id: Título reservado
            expiry_date: Última data em que a reserva pode ser atendida
            now: Data da reserva
            priority_number: Prioridade explícita (padrão: fim da fila)

        Raises:
            EntityNotFound: Sócio ou título inexistente
            InvalidState: Título retirado do acervo
            InvalidReservation: Validade anterior a now ou prioridade <= 0
            DuplicateReservation: Sócio já tem reserva ACTIVE do título
        """
        if expiry_date < now:
            raise InvalidReservation(
                f"Validade {expiry_date.isoformat()} anterior à data da reserva {now.isoformat()}"
            )
        if priority_number is not None and priority_number <= 0:
            raise InvalidReservation("priority_number deve ser positivo")

        async with book_locks.acquire(book_id):
            if await self.member_repo.get_by_id(member_id) is None:
                raise EntityNotFound("Sócio", member_id)

            book = await self.book_repo.get_by_id(book_id)
            if book is None:
                raise EntityNotFound("Livro", book_id)
            if book.is_retired:
                raise InvalidState(f"Livro {book.title!r} foi retirado do acervo")

            existing = await self.reservation_repo.get_active_by_member_and_book(
                member_id,
                book_id,
            )
            if existing:
                logger.warning(
                    f"Reserva duplicada recusada: sócio {member_id} já está na fila de {book_id}"
                )
                raise DuplicateReservation("Sócio já possui uma reserva ativa para este título")

            if priority_number is None:
                priority_number = await self.reservation_repo.max_active_priority(book_id) + 1

            reservation = Reservation(
                member_id=member_id,
                book_id=book_id,
                reservation_date=now,
                expiry_date=expiry_date,
                priority_number=priority_number,
                status=ReservationStatus.ACTIVE,
            )
            try:
                await self.reservation_repo.add(reservation)
            except IntegrityError:
                # Outra instância inseriu a mesma reserva entre a checagem e o flush
                await self.db.rollback()
                raise DuplicateReservation("Sócio já possui uma reserva ativa para este título")
            await self.db.commit()

        logger.info(
            f"Reserva {reservation.id} criada: sócio {member_id}, livro {book_id}, "
            f"prioridade {priority_number}"
        )
        return reservation

    async def cancel(self, reservation_id: UUID) -> Reservation:
        """
        Cancela (retira) uma reserva ACTIVE.

        Raises:
            EntityNotFound: Reserva inexistente
            InvalidState: Reserva já atendida, cancelada ou expirada
        """
        reservation = await self.get(reservation_id)

        async with book_locks.acquire(reservation.book_id):
            if not await self.reservation_repo.transition_if_active(
                reservation.id,
                ReservationStatus.CANCELLED,
            ):
                raise InvalidState(
                    f"Reserva com status {reservation.status.value} não pode ser cancelada"
                )
            await self.db.commit()

        logger.info(f"Reserva {reservation.id} cancelada")
        return reservation

    # ==========================================
    # Offer
    # ==========================================

    async def offer(
        self,
        book_id: UUID,
        available_copy: BookCopy,
        now: date,
        checkout: CheckoutCallback,
    ) -> Reservation | None:
        """
        Oferece uma cópia disponível ao primeiro sócio elegível da fila.

        Não faz commit: roda dentro da unidade de trabalho de quem chamou
        (devolução ou oferta explícita do LoanLedger).

        Fluxo:
            1. Percorre as reservas ACTIVE na ordem da fila
            2. Reserva vencida vira EXPIRED e é ignorada
            3. checkout(member_id, copy); PolicyViolation = pula o sócio
            4. Primeiro sucesso vira FULFILLED com o empréstimo criado

        Returns:
            Reserva atendida, ou None se ninguém pôde receber a cópia
        """
        async with book_locks.acquire(book_id):
            for reservation in await self.reservation_repo.list_queue(book_id):
                if reservation.is_expired(now):
                    if await self.reservation_repo.transition_if_active(
                        reservation.id,
                        ReservationStatus.EXPIRED,
                    ):
                        logger.info(f"Reserva {reservation.id} expirada durante a oferta")
                    continue

                try:
                    loan = await checkout(reservation.member_id, available_copy)
                except PolicyViolation as e:
                    logger.warning(
                        f"Reserva {reservation.id} pulada: sócio {reservation.member_id} "
                        f"inelegível ({e.message})"
                    )
                    continue

                reservation.status = ReservationStatus.FULFILLED
                reservation.fulfilled_loan_id = loan.id
                await self.db.flush()

                logger.info(
                    f"Reserva {reservation.id} atendida com a cópia {available_copy.id} "
                    f"(empréstimo {loan.id})"
                )
                return reservation

        return None

    # ==========================================
    # Sweep
    # ==========================================

    async def expire_sweep(self, now: date) -> SweepReport:
        """
        Expira reservas ACTIVE com expiry_date < now.

        Idempotente: uma segunda execução com o mesmo now não encontra
        candidatas. Reserva atendida ou cancelada no meio do caminho é
        reportada como ignorada, sem abortar a varredura.
        """
        report = SweepReport(as_of=now)
        candidates = await self.reservation_repo.list_active_expired(now)
        report.examined = len(candidates)

        for reservation in candidates:
            if await self.reservation_repo.transition_if_active(
                reservation.id,
                ReservationStatus.EXPIRED,
            ):
                report.updated.append(reservation.id)
            else:
                report.skipped.append(
                    SkippedRow(id=reservation.id, reason="status alterado concorrentemente")
                )
                logger.warning(f"Varredura de reservas ignorou {reservation.id}")

        await self.db.commit()
        logger.info(
            f"Varredura de reservas em {now.isoformat()}: {report.updated_count} expirada(s), "
            f"{len(report.skipped)} ignorada(s)"
        )
        return report

    # ==========================================
    # Queries
    # ==========================================

    async def get(self, reservation_id: UUID) -> Reservation:
        """
        Busca reserva por ID.

        Raises:
            EntityNotFound: Reserva inexistente
        """
        reservation = await self.reservation_repo.get_by_id(reservation_id)
        if reservation is None:
            raise EntityNotFound("Reserva", reservation_id)
        return reservation

    async def queue(self, book_id: UUID) -> list[Reservation]:
        """Reservas ACTIVE do título na ordem de atendimento."""
        return await self.reservation_repo.list_queue(book_id)

    async def has_pending(self, book_id: UUID, now: date) -> bool:
        return await self.reservation_repo.has_active_for_book(book_id, now)
