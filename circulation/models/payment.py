"""
Model de pagamento de multa.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, String, Text, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from circulation.db.session import Base
from circulation.models.base import TimestampMixin, UUIDMixin, money_column
from circulation.models.enums import PaymentMethod


class FinePayment(Base, UUIDMixin, TimestampMixin):
    """
    Pagamento (parcial ou total) da multa de um empréstimo.

    Somente inserção. A soma dos pagamentos de um empréstimo nunca
    ultrapassa o fine_amount dele; quem garante é o PaymentRecorder.
    """
    __tablename__ = "fine_payments"

    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("loan_transactions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    payment_amount: Mapped[Decimal] = money_column(default=None)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod, name="payment_method"),
        nullable=False,
        default=PaymentMethod.CASH,
    )
    staff_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("staff.id", ondelete="RESTRICT"),
        nullable=False,
    )
    receipt_number: Mapped[Optional[str]] = mapped_column(String(50), unique=True, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("payment_amount > 0", name="chk_payment_amount_positive"),
    )

    def __repr__(self) -> str:
        return f"<FinePayment {self.id} - {self.payment_amount}>"
