"""
Operações explícitas de catálogo.

Título não é apagado em cascata (livro -> cópias -> reservas): a
operação retire_book tira tudo de circulação sem apagar nada, e cada
efeito colateral fica visível aqui.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.exceptions import EntityNotFound, InvalidState
from circulation.core.locks import book_locks
from circulation.core.logging import get_logger
from circulation.models.enums import ReservationStatus
from circulation.repositories.book import BookCopyRepository, BookRepository
from circulation.repositories.loan import LoanRepository
from circulation.repositories.reservation import ReservationRepository
from circulation.schemas.book import BookRead, RetireResult

logger = get_logger(__name__)


class CatalogService:
    """Service para operações de catálogo que afetam a circulação."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.book_repo = BookRepository(db)
        self.copy_repo = BookCopyRepository(db)
        self.loan_repo = LoanRepository(db)
        self.reservation_repo = ReservationRepository(db)

    async def retire_book(self, book_id: UUID) -> RetireResult:
        """
        Retira um título do acervo.

        Fluxo:
            1. Recusa se alguma cópia estiver emprestada
            2. Cancela as reservas ACTIVE do título
            3. Tira todas as cópias de circulação (is_available = False)
            4. Marca o título como retirado

        Raises:
            EntityNotFound: Título inexistente
            InvalidState: Título já retirado ou com empréstimo aberto
        """
        async with book_locks.acquire(book_id):
            book = await self.book_repo.get_for_update(book_id)
            if book is None:
                raise EntityNotFound("Livro", book_id)
            if book.is_retired:
                raise InvalidState(f"Livro {book.title!r} já foi retirado do acervo")

            open_loans = await self.loan_repo.count_open_by_book(book_id)
            if open_loans:
                raise InvalidState(
                    f"Livro {book.title!r} possui {open_loans} empréstimo(s) em aberto"
                )

            cancelled = 0
            for reservation in await self.reservation_repo.list_queue(book_id):
                if await self.reservation_repo.transition_if_active(
                    reservation.id,
                    ReservationStatus.CANCELLED,
                ):
                    cancelled += 1

            copies = await self.copy_repo.list_by_book(book_id, for_update=True)
            for copy in copies:
                copy.is_available = False

            book.is_retired = True
            await self.db.commit()

        logger.info(
            f"Livro {book.id} retirado: {len(copies)} cópia(s) fora de circulação, "
            f"{cancelled} reserva(s) cancelada(s)"
        )
        return RetireResult(
            book=BookRead.model_validate(book),
            withdrawn_copies=len(copies),
            cancelled_reservations=cancelled,
            message=f"Livro {book.title!r} retirado do acervo",
        )
