"""
Livro-razão de empréstimos (LoanLedger): a máquina de estados central.

Estados:
    ACTIVE -> RETURNED
    ACTIVE -> OVERDUE -> RETURNED   (OVERDUE é só classificação)
    ACTIVE/OVERDUE -> LOST | DAMAGED

Regras de negócio:
    - Sócio inativo, vencido ou no limite da política não empresta
    - No máximo um empréstimo aberto por cópia
    - Renovação perde para reserva ativa do título
    - Devolução calcula a multa e oferece a cópia à fila de reservas
    - Toda operação recebe `now` explicitamente; nada lê o relógio aqui

Cada operação valida tudo antes de alterar qualquer linha e faz um único
commit no final, então um erro nunca deixa mutação parcial.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.config import Settings, get_settings
from circulation.core.exceptions import (
    CopyUnavailable,
    EntityNotFound,
    InvalidState,
    NotRenewable,
    PolicyViolation,
)
from circulation.core.locks import copy_locks
from circulation.core.logging import get_logger
from circulation.models.book import BookCopy
from circulation.models.enums import CopyCondition, LoanStatus
from circulation.models.loan import LoanTransaction
from circulation.models.member import Member, MemberType
from circulation.models.reservation import Reservation
from circulation.repositories.book import BookCopyRepository
from circulation.repositories.loan import LoanRepository
from circulation.repositories.member import MemberRepository, StaffRepository
from circulation.repositories.reservation import ReservationRepository
from circulation.schemas.sweep import SkippedRow, SweepReport
from circulation.services.fine import FineCalculator
from circulation.services.reservation import ReservationQueue

logger = get_logger(__name__)


@dataclass
class ReturnOutcome:
    """
    Resultado de uma devolução (ou oferta explícita de cópia).

    Attributes:
        transaction: Empréstimo devolvido (None na oferta explícita)
        fine_applied: Multa final do empréstimo devolvido
        reservation: Reserva atendida com a cópia, se houve
        hold_loan: Empréstimo aberto para o sócio da reserva, se houve
    """
    transaction: Optional[LoanTransaction]
    fine_applied: Decimal = Decimal("0.00")
    reservation: Optional[Reservation] = None
    hold_loan: Optional[LoanTransaction] = None


class LoanLedger:
    """Service para o ciclo de vida dos empréstimos."""

    def __init__(
        self,
        db: AsyncSession,
        fine_calculator: Optional[FineCalculator] = None,
        settings: Optional[Settings] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.fines = fine_calculator or FineCalculator(self.settings.MAX_FINE_AMOUNT)
        self.loan_repo = LoanRepository(db)
        self.member_repo = MemberRepository(db)
        self.staff_repo = StaffRepository(db)
        self.copy_repo = BookCopyRepository(db)
        self.reservation_repo = ReservationRepository(db)
        self.queue = ReservationQueue(db)

    # ==========================================
    # Checkout
    # ==========================================

    async def checkout(
        self,
        member_id: UUID,
        copy_id: UUID,
        staff_id: UUID,
        now: date,
    ) -> LoanTransaction:
        """
        Abre um empréstimo.

        Fluxo:
            1. Verifica funcionário, sócio e política
            2. Verifica elegibilidade (ativo, não vencido, abaixo do limite)
            3. Verifica cópia (disponível e sem empréstimo aberto)
            4. Marca cópia indisponível e cria o empréstimo ACTIVE
               com due_date = now + loan_duration_days

        Raises:
            EntityNotFound: Sócio, cópia ou funcionário inexistente
            PolicyViolation: Sócio inelegível
            CopyUnavailable: Cópia indisponível
        """
        async with copy_locks.acquire(copy_id):
            loan = await self._open_loan(member_id, copy_id, staff_id, now)
            await self.db.commit()
        return loan

    async def _open_loan(
        self,
        member_id: UUID,
        copy_id: UUID,
        staff_id: UUID,
        now: date,
    ) -> LoanTransaction:
        """Checkout sem commit; exige o lock da cópia já adquirido."""
        await self._require_staff(staff_id)
        member, policy = await self._get_member_with_policy(member_id)
        await self._check_eligibility(member, policy, now)

        copy = await self.copy_repo.get_for_update(copy_id)
        if copy is None:
            raise EntityNotFound("Cópia", copy_id)
        if not copy.is_available:
            logger.warning(f"Checkout recusado: cópia {copy_id} indisponível")
            raise CopyUnavailable("Cópia indisponível para empréstimo")
        if await self.loan_repo.get_open_by_copy(copy_id) is not None:
            logger.warning(f"Checkout recusado: cópia {copy_id} já tem empréstimo aberto")
            raise CopyUnavailable("Cópia já possui empréstimo em aberto")

        loan = LoanTransaction(
            member_id=member_id,
            copy_id=copy_id,
            staff_id=staff_id,
            loan_date=now,
            due_date=now + timedelta(days=policy.loan_duration_days),
            renewal_count=0,
            fine_amount=Decimal("0.00"),
            carried_fine=Decimal("0.00"),
            fine_paid=Decimal("0.00"),
            status=LoanStatus.ACTIVE,
        )
        copy.is_available = False
        await self.loan_repo.add(loan)

        logger.info(
            f"Empréstimo {loan.id} aberto: sócio {member_id}, cópia {copy_id}, "
            f"vence em {loan.due_date.isoformat()}"
        )
        return loan

    async def _check_eligibility(self, member: Member, policy: MemberType, now: date) -> None:
        if not member.is_active:
            logger.warning(f"Sócio {member.id} inativo")
            raise PolicyViolation("Sócio inativo não pode realizar empréstimos")

        if member.is_expired(now):
            logger.warning(f"Sócio {member.id} com associação vencida")
            raise PolicyViolation(
                f"Associação vencida em {member.expiry_date.isoformat()}"
            )

        open_count = await self.loan_repo.count_open_by_member(member.id)
        if open_count >= policy.max_books_allowed:
            logger.warning(
                f"Sócio {member.id} no limite de empréstimos ({open_count}/{policy.max_books_allowed})"
            )
            raise PolicyViolation(
                f"Sócio já possui {open_count} empréstimo(s) aberto(s); "
                f"limite da categoria {policy.type_name}: {policy.max_books_allowed}"
            )

    # ==========================================
    # Renew
    # ==========================================

    async def renew(self, transaction_id: UUID, now: date) -> LoanTransaction:
        """
        Renova um empréstimo aberto.

        Regras:
            1. Status deve ser ACTIVE ou OVERDUE
            2. Nenhuma reserva ACTIVE para o título (reserva tem prioridade)
            3. Limite de renovações (MAX_RENEWALS), se configurado
            4. Multa em aberto <= RENEWAL_FINE_THRESHOLD

        Ação:
            - due_date += loan_duration_days
            - carried_fine recebe a multa acumulada até o novo prazo (ou até
              now, se ele ainda não chegou); o atraso depois do novo prazo
              continua sendo contado uma única vez pelo FineCalculator
            - fine_amount recebe a multa acumulada até now
            - renewal_count += 1
            - status volta a ACTIVE se o novo prazo não passou

        Raises:
            EntityNotFound: Empréstimo inexistente
            NotRenewable: Qualquer regra acima violada
        """
        loan = await self.get(transaction_id)

        async with copy_locks.acquire(loan.copy_id):
            loan = await self._get_for_update(transaction_id)
            if not loan.is_open:
                raise NotRenewable(f"Empréstimo com status {loan.status.value} não pode ser renovado")

            copy = await self._get_copy(loan.copy_id)
            if await self.reservation_repo.has_active_for_book(copy.book_id, now):
                logger.warning(f"Renovação de {loan.id} recusada: título com reserva pendente")
                raise NotRenewable("Há reservas pendentes para este título")

            max_renewals = self.settings.MAX_RENEWALS
            if max_renewals is not None and loan.renewal_count >= max_renewals:
                raise NotRenewable(f"Limite de renovações atingido (máximo: {max_renewals})")

            _, policy = await self._get_member_with_policy(loan.member_id)
            accrued = self._accrued_fine(loan, now, policy)
            outstanding = accrued - loan.fine_paid
            if outstanding > self.settings.RENEWAL_FINE_THRESHOLD:
                logger.warning(f"Renovação de {loan.id} recusada: multa em aberto {outstanding}")
                raise NotRenewable(f"Multa em aberto de {outstanding:.2f} impede a renovação")

            previous_due_date = loan.due_date
            new_due_date = previous_due_date + timedelta(days=policy.loan_duration_days)
            loan.carried_fine = self._accrued_fine(loan, min(now, new_due_date), policy)
            loan.fine_amount = accrued
            loan.due_date = new_due_date
            loan.renewal_count += 1
            loan.status = LoanStatus.ACTIVE if loan.due_date >= now else LoanStatus.OVERDUE
            await self.db.commit()

        logger.info(
            f"Empréstimo {loan.id} renovado: {previous_due_date.isoformat()} -> "
            f"{loan.due_date.isoformat()} (renovação {loan.renewal_count})"
        )
        return loan

    # ==========================================
    # Return / Lost / Damaged
    # ==========================================

    async def return_copy(
        self,
        transaction_id: UUID,
        staff_id: UUID,
        now: date,
    ) -> ReturnOutcome:
        """
        Processa a devolução de um empréstimo.

        Fluxo:
            1. Valida status (ACTIVE/OVERDUE), funcionário e data
            2. return_date = now, multa calculada, status RETURNED
            3. Libera a cópia
            4. Oferece a cópia à fila do título; se um sócio elegível
               estiver esperando, a cópia já sai emprestada para ele

        Raises:
            EntityNotFound: Empréstimo ou funcionário inexistente
            InvalidState: Empréstimo não está aberto, ou now < loan_date
        """
        loan = await self.get(transaction_id)

        async with copy_locks.acquire(loan.copy_id):
            loan = await self._get_for_update(transaction_id)
            self._require_open(loan, "devolvido")
            self._require_not_before_loan(loan, now)
            await self._require_staff(staff_id)
            _, policy = await self._get_member_with_policy(loan.member_id)
            copy = await self._get_copy(loan.copy_id)

            loan.return_date = now
            loan.fine_amount = max(self._accrued_fine(loan, now, policy), loan.fine_paid)
            loan.status = LoanStatus.RETURNED
            loan.closed_by_staff_id = staff_id
            copy.is_available = True
            await self.db.flush()

            outcome = ReturnOutcome(transaction=loan, fine_applied=loan.fine_amount)
            logger.info(f"Empréstimo {loan.id} devolvido com multa {loan.fine_amount}")

            await self._offer(copy, staff_id, now, outcome)
            await self.db.commit()

        return outcome

    async def mark_lost(self, transaction_id: UUID, staff_id: UUID, now: date) -> LoanTransaction:
        """Encerra o empréstimo como LOST; a cópia continua indisponível."""
        return await self._close_as(transaction_id, staff_id, now, LoanStatus.LOST)

    async def mark_damaged(self, transaction_id: UUID, staff_id: UUID, now: date) -> LoanTransaction:
        """Encerra o empréstimo como DAMAGED e marca a cópia como danificada."""
        return await self._close_as(transaction_id, staff_id, now, LoanStatus.DAMAGED)

    async def _close_as(
        self,
        transaction_id: UUID,
        staff_id: UUID,
        now: date,
        status: LoanStatus,
    ) -> LoanTransaction:
        loan = await self.get(transaction_id)

        async with copy_locks.acquire(loan.copy_id):
            loan = await self._get_for_update(transaction_id)
            self._require_open(loan, f"marcado como {status.value}")
            self._require_not_before_loan(loan, now)
            await self._require_staff(staff_id)
            _, policy = await self._get_member_with_policy(loan.member_id)
            copy = await self._get_copy(loan.copy_id)

            # Multa por atraso acumulada até aqui fica congelada
            loan.fine_amount = max(self._accrued_fine(loan, now, policy), loan.fine_paid)
            loan.status = status
            loan.closed_by_staff_id = staff_id
            # Reposição da cópia é decisão da equipe; ela segue fora de circulação
            copy.is_available = False
            if status == LoanStatus.DAMAGED:
                copy.condition_status = CopyCondition.DAMAGED
            await self.db.commit()

        logger.info(f"Empréstimo {loan.id} encerrado como {status.value}")
        return loan

    # ==========================================
    # Offer
    # ==========================================

    async def offer_copy(self, copy_id: UUID, staff_id: UUID, now: date) -> ReturnOutcome:
        """
        Oferece explicitamente uma cópia disponível à fila do título.

        Útil quando a reserva foi criada com cópia parada na estante.

        Raises:
            EntityNotFound: Cópia ou funcionário inexistente
            CopyUnavailable: Cópia indisponível ou com empréstimo aberto
        """
        async with copy_locks.acquire(copy_id):
            await self._require_staff(staff_id)
            copy = await self.copy_repo.get_for_update(copy_id)
            if copy is None:
                raise EntityNotFound("Cópia", copy_id)
            if not copy.is_available or await self.loan_repo.get_open_by_copy(copy_id):
                raise CopyUnavailable("Cópia indisponível para oferta")

            outcome = ReturnOutcome(transaction=None)
            await self._offer(copy, staff_id, now, outcome)
            await self.db.commit()

        return outcome

    async def _offer(
        self,
        copy: BookCopy,
        staff_id: UUID,
        now: date,
        outcome: ReturnOutcome,
    ) -> None:
        async def checkout_for(member_id: UUID, offered_copy: BookCopy) -> LoanTransaction:
            return await self._open_loan(member_id, offered_copy.id, staff_id, now)

        reservation = await self.queue.offer(copy.book_id, copy, now, checkout_for)
        if reservation is None:
            return

        outcome.reservation = reservation
        outcome.hold_loan = await self.loan_repo.get_by_id(reservation.fulfilled_loan_id)

    # ==========================================
    # Sweep
    # ==========================================

    async def sweep_overdue(self, now: date) -> SweepReport:
        """
        Reclassifica empréstimos vencidos como OVERDUE e recalcula multas.

        Considera empréstimos abertos com due_date < now. return_date não
        é tocado. Idempotente: repetir com o mesmo now não muda nada.
        Linha sem política de multa, ou cuja multa ficaria abaixo do que
        já foi pago, é ignorada e reportada; as demais seguem.
        """
        report = SweepReport(as_of=now)
        rows = await self.loan_repo.list_past_due_with_rate(now)
        report.examined = len(rows)

        for loan, fine_per_day in rows:
            if fine_per_day is None:
                self._skip(report, loan.id, "política de multa do sócio não encontrada")
                continue

            fine = self.fines.compute(loan, now, fine_per_day)
            if fine < loan.fine_paid:
                self._skip(report, loan.id, f"multa {fine} menor que o valor pago {loan.fine_paid}")
                continue

            if loan.status == LoanStatus.OVERDUE and loan.fine_amount == fine:
                continue

            if await self.loan_repo.mark_overdue_if_open(loan.id, fine):
                report.updated.append(loan.id)
            else:
                self._skip(report, loan.id, "status alterado concorrentemente")

        await self.db.commit()
        logger.info(
            f"Varredura de atrasos em {now.isoformat()}: {report.examined} candidato(s), "
            f"{report.updated_count} atualizado(s), {len(report.skipped)} ignorado(s)"
        )
        return report

    @staticmethod
    def _skip(report: SweepReport, loan_id: UUID, reason: str) -> None:
        logger.warning(f"Varredura ignorou empréstimo {loan_id}: {reason}")
        report.skipped.append(SkippedRow(id=loan_id, reason=reason))

    # ==========================================
    # Queries
    # ==========================================

    async def get(self, transaction_id: UUID) -> LoanTransaction:
        """
        Busca empréstimo por ID.

        Raises:
            EntityNotFound: Empréstimo inexistente
        """
        loan = await self.loan_repo.get_by_id(transaction_id)
        if loan is None:
            raise EntityNotFound("Empréstimo", transaction_id)
        return loan

    async def list_loans(
        self,
        member_id: UUID | None = None,
        status: LoanStatus | None = None,
    ) -> list[LoanTransaction]:
        """Lista empréstimos por sócio e/ou status."""
        return await self.loan_repo.search(member_id=member_id, status=status)

    # ==========================================
    # Utility / Validation
    # ==========================================

    def _accrued_fine(self, loan: LoanTransaction, now: date, policy: MemberType) -> Decimal:
        """Multa na data de referência, já somada à congelada na renovação."""
        return self.fines.compute(loan, now, policy.fine_per_day)

    async def _get_for_update(self, transaction_id: UUID) -> LoanTransaction:
        loan = await self.loan_repo.get_for_update(transaction_id)
        if loan is None:
            raise EntityNotFound("Empréstimo", transaction_id)
        return loan

    async def _get_copy(self, copy_id: UUID) -> BookCopy:
        copy = await self.copy_repo.get_for_update(copy_id)
        if copy is None:
            raise EntityNotFound("Cópia", copy_id)
        return copy

    async def _get_member_with_policy(self, member_id: UUID) -> tuple[Member, MemberType]:
        found = await self.member_repo.get_with_policy(member_id)
        if found is None:
            raise EntityNotFound("Sócio", member_id)
        return found

    async def _require_staff(self, staff_id: UUID) -> None:
        if await self.staff_repo.get_by_id(staff_id) is None:
            raise EntityNotFound("Funcionário", staff_id)

    @staticmethod
    def _require_open(loan: LoanTransaction, action: str) -> None:
        if not loan.is_open:
            raise InvalidState(
                f"Empréstimo com status {loan.status.value} não pode ser {action}"
            )

    @staticmethod
    def _require_not_before_loan(loan: LoanTransaction, now: date) -> None:
        if now < loan.loan_date:
            raise InvalidState(
                f"Data {now.isoformat()} anterior ao empréstimo ({loan.loan_date.isoformat()})"
            )
