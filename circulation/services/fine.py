"""
Cálculo de multa por atraso.

Função pura: depende apenas dos campos do empréstimo (due_date,
return_date, carried_fine), da data informada e da multa diária da
política. Nada de relógio interno.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from circulation.models.loan import LoanTransaction

CENTS = Decimal("0.01")


class FineCalculator:
    """
    Calculadora de multa.

    Regra:
        days_late = max(0, (return_date ou now) - due_date, em dias inteiros)
        fine = carried_fine + days_late * fine_per_day, limitada a max_fine

    carried_fine é a multa congelada na última renovação; sem renovação
    com atraso ela é zero.

    Args:
        max_fine: Teto da multa por empréstimo. None = sem teto.
    """

    def __init__(self, max_fine: Optional[Decimal] = None):
        self.max_fine = max_fine

    @staticmethod
    def days_late(transaction: LoanTransaction, now: date) -> int:
        """Dias inteiros de atraso na data de referência."""
        reference = transaction.return_date or now
        return max(0, (reference - transaction.due_date).days)

    def compute(
        self,
        transaction: LoanTransaction,
        now: date,
        fine_per_day: Decimal,
    ) -> Decimal:
        """
        Calcula a multa do empréstimo.

        Args:
            transaction: Empréstimo (usa due_date, return_date e carried_fine)
            now: Data de referência quando ainda não houve devolução
            fine_per_day: Multa diária da política do sócio

        Returns:
            Valor com 2 casas decimais
        """
        carried = Decimal(transaction.carried_fine or 0)
        fine = carried + Decimal(self.days_late(transaction, now)) * Decimal(fine_per_day)
        if self.max_fine is not None:
            fine = min(fine, Decimal(self.max_fine))
        return fine.quantize(CENTS, rounding=ROUND_HALF_UP)
