"""
Schemas Pydantic para FinePayment.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import Field

from circulation.models.enums import PaymentMethod
from circulation.schemas.base import BaseSchema


class PaymentCreate(BaseSchema):
    """Schema para registrar pagamento de multa."""

    amount: Decimal = Field(..., max_digits=10, decimal_places=2)
    staff_id: UUID
    payment_method: PaymentMethod = PaymentMethod.CASH
    receipt_number: str | None = Field(None, max_length=50)
    now: date | None = None


class FinePaymentRead(BaseSchema):
    """Schema de leitura de pagamento."""

    id: UUID
    transaction_id: UUID
    payment_amount: Decimal
    payment_date: date
    payment_method: PaymentMethod
    staff_id: UUID
    receipt_number: str | None = None
