"""
Testes das colunas monetárias compartilhadas pelos models.
"""

from decimal import Decimal

import pytest
from sqlalchemy import Numeric

from circulation.models.loan import LoanTransaction
from circulation.models.member import MemberType
from circulation.models.payment import FinePayment


@pytest.mark.parametrize(
    "column, precision",
    [
        (LoanTransaction.__table__.c.carried_fine, 10),
        (LoanTransaction.__table__.c.fine_amount, 10),
        (LoanTransaction.__table__.c.fine_paid, 10),
        (FinePayment.__table__.c.payment_amount, 10),
        (MemberType.__table__.c.fine_per_day, 5),
        (MemberType.__table__.c.membership_fee, 8),
    ],
)
def test_money_columns_use_two_decimal_places(column, precision):
    assert isinstance(column.type, Numeric)
    assert column.type.precision == precision
    assert column.type.scale == 2
    assert column.nullable is False


def test_payment_amount_has_no_default():
    assert FinePayment.__table__.c.payment_amount.default is None
    assert LoanTransaction.__table__.c.fine_paid.default.arg == Decimal("0.00")


@pytest.mark.anyio
async def test_member_type_money_defaults(test_db):
    member_type = MemberType(type_name="Visitante", max_books_allowed=1, loan_duration_days=7)
    test_db.add(member_type)
    await test_db.commit()

    assert member_type.fine_per_day == Decimal("0.50")
    assert member_type.membership_fee == Decimal("0.00")
