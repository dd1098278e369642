"""
Testes unitários da calculadora de multa (função pura, sem banco).
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from circulation.models.loan import LoanTransaction
from circulation.services.fine import FineCalculator

DUE = date(2024, 3, 15)


def make_loan(return_date: date | None = None, carried_fine: str = "0.00") -> LoanTransaction:
    return LoanTransaction(
        loan_date=DUE - timedelta(days=14),
        due_date=DUE,
        return_date=return_date,
        fine_amount=Decimal(carried_fine),
        carried_fine=Decimal(carried_fine),
        fine_paid=Decimal("0.00"),
    )


class TestFineCalculator:
    """Testes para FineCalculator.compute."""

    def test_no_fine_before_due_date(self):
        calculator = FineCalculator()
        assert calculator.compute(make_loan(), DUE - timedelta(days=3), Decimal("0.50")) == Decimal("0.00")

    def test_no_fine_on_due_date(self):
        calculator = FineCalculator()
        assert calculator.compute(make_loan(), DUE, Decimal("0.50")) == Decimal("0.00")

    def test_fine_counts_whole_days_late(self):
        calculator = FineCalculator()
        fine = calculator.compute(make_loan(), DUE + timedelta(days=4), Decimal("0.25"))
        assert fine == Decimal("1.00")

    def test_return_date_takes_precedence_over_now(self):
        """Depois da devolução, a data de referência é return_date."""
        calculator = FineCalculator()
        loan = make_loan(return_date=DUE + timedelta(days=2))
        fine = calculator.compute(loan, DUE + timedelta(days=30), Decimal("1.00"))
        assert fine == Decimal("2.00")

    def test_cap_limits_fine(self):
        calculator = FineCalculator(max_fine=Decimal("5.00"))
        fine = calculator.compute(make_loan(), DUE + timedelta(days=100), Decimal("1.00"))
        assert fine == Decimal("5.00")

    def test_no_cap_by_default(self):
        calculator = FineCalculator()
        fine = calculator.compute(make_loan(), DUE + timedelta(days=100), Decimal("1.00"))
        assert fine == Decimal("100.00")

    def test_zero_rate_policy(self):
        calculator = FineCalculator()
        assert calculator.compute(make_loan(), DUE + timedelta(days=9), Decimal("0.00")) == Decimal("0.00")

    @pytest.mark.parametrize("days_late", [0, 1, 7, 31, 365])
    def test_deterministic(self, days_late):
        """Mesma entrada, mesma multa; nenhum estado escondido."""
        calculator = FineCalculator(max_fine=Decimal("50.00"))
        loan = make_loan()
        now = DUE + timedelta(days=days_late)

        first = calculator.compute(loan, now, Decimal("0.50"))
        second = calculator.compute(loan, now, Decimal("0.50"))

        assert first == second
        assert loan.fine_amount == Decimal("0.00")

    def test_days_late(self):
        assert FineCalculator.days_late(make_loan(), DUE + timedelta(days=6)) == 6
        assert FineCalculator.days_late(make_loan(), DUE - timedelta(days=6)) == 0

    def test_carried_fine_is_added_to_new_lateness(self):
        """Multa congelada na renovação soma com o atraso do novo prazo."""
        calculator = FineCalculator()
        loan = make_loan(carried_fine="1.50")

        assert calculator.compute(loan, DUE, Decimal("0.50")) == Decimal("1.50")
        assert calculator.compute(loan, DUE + timedelta(days=2), Decimal("0.50")) == Decimal("2.50")

    def test_cap_applies_to_carried_fine(self):
        calculator = FineCalculator(max_fine=Decimal("2.00"))
        loan = make_loan(carried_fine="1.50")
        assert calculator.compute(loan, DUE + timedelta(days=5), Decimal("0.50")) == Decimal("2.00")

    def test_missing_carried_fine_counts_as_zero(self):
        calculator = FineCalculator()
        loan = LoanTransaction(loan_date=DUE, due_date=DUE)
        assert calculator.compute(loan, DUE + timedelta(days=1), Decimal("0.50")) == Decimal("0.50")
