"""
Registro de pagamentos de multa (PaymentRecorder).

Pagamentos são somente-inserção e nunca levam fine_paid acima de
fine_amount. Serializa com as demais escritas do empréstimo pelo lock
da cópia.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from circulation.core.exceptions import (
    EntityNotFound,
    InvalidPaymentAmount,
    InvalidState,
    OverPayment,
)
from circulation.core.locks import copy_locks
from circulation.core.logging import get_logger
from circulation.models.enums import PaymentMethod
from circulation.models.payment import FinePayment
from circulation.repositories.loan import LoanRepository
from circulation.repositories.member import StaffRepository
from circulation.repositories.payment import FinePaymentRepository
from circulation.services.fine import CENTS

logger = get_logger(__name__)


class PaymentRecorder:
    """Service para pagamentos de multa."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.loan_repo = LoanRepository(db)
        self.staff_repo = StaffRepository(db)
        self.payment_repo = FinePaymentRepository(db)

    async def apply_payment(
        self,
        transaction_id: UUID,
        amount: Decimal,
        staff_id: UUID,
        now: date,
        method: PaymentMethod = PaymentMethod.CASH,
        receipt_number: Optional[str] = None,
    ) -> FinePayment:
        """
        Registra um pagamento contra a multa de um empréstimo.

        Args:
            transaction_id: Empréstimo cuja multa está sendo paga
            amount: Valor pago (positivo, no máximo 2 casas decimais)
            staff_id: Funcionário que recebeu
            now: Data do pagamento
            method: Forma de pagamento
            receipt_number: Número do recibo (único, opcional)

        Raises:
            InvalidPaymentAmount: Valor não positivo ou com frações de centavo
            EntityNotFound: Empréstimo ou funcionário inexistente
            InvalidState: Recibo já registrado
            OverPayment: fine_paid + amount > fine_amount
        """
        amount = self._validate_amount(amount)
        loan = await self.loan_repo.get_by_id(transaction_id)
        if loan is None:
            raise EntityNotFound("Empréstimo", transaction_id)

        async with copy_locks.acquire(loan.copy_id):
            loan = await self.loan_repo.get_for_update(transaction_id)
            if await self.staff_repo.get_by_id(staff_id) is None:
                raise EntityNotFound("Funcionário", staff_id)
            if receipt_number and await self.payment_repo.receipt_exists(receipt_number):
                raise InvalidState(f"Recibo {receipt_number} já registrado")

            if loan.fine_paid + amount > loan.fine_amount:
                logger.warning(
                    f"Pagamento de {amount} recusado para {loan.id}: "
                    f"pago {loan.fine_paid} de {loan.fine_amount}"
                )
                raise OverPayment(
                    f"Pagamento de {amount:.2f} excede a multa em aberto de {loan.outstanding_fine:.2f}"
                )

            payment = FinePayment(
                transaction_id=loan.id,
                payment_amount=amount,
                payment_date=now,
                payment_method=method,
                staff_id=staff_id,
                receipt_number=receipt_number,
            )
            loan.fine_paid = loan.fine_paid + amount
            await self.payment_repo.add(payment)
            await self.db.commit()

        logger.info(
            f"Pagamento {payment.id} de {amount} registrado para {loan.id} "
            f"(pago {loan.fine_paid} de {loan.fine_amount})"
        )
        return payment

    async def list_payments(self, transaction_id: UUID) -> list[FinePayment]:
        """
        Lista os pagamentos de um empréstimo em ordem cronológica.

        Raises:
            EntityNotFound: Empréstimo inexistente
        """
        if await self.loan_repo.get_by_id(transaction_id) is None:
            raise EntityNotFound("Empréstimo", transaction_id)
        return await self.payment_repo.list_by_transaction(transaction_id)

    @staticmethod
    def _validate_amount(amount: Decimal) -> Decimal:
        try:
            amount = Decimal(amount)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidPaymentAmount(f"Valor de pagamento inválido: {amount!r}")
        if not amount.is_finite() or amount <= 0:
            raise InvalidPaymentAmount("Valor de pagamento deve ser positivo")
        if amount != amount.quantize(CENTS):
            raise InvalidPaymentAmount("Valor de pagamento com frações de centavo")
        return amount
