"""
Schemas Pydantic da aplicação.
"""

from circulation.schemas.base import BaseSchema, ErrorResponse, MessageResponse
from circulation.schemas.health import HealthResponse
from circulation.schemas.book import BookRead, RetireResult
from circulation.schemas.reservation import (
    OfferRequest,
    ReservationCreate,
    ReservationRead,
)
from circulation.schemas.loan import (
    CheckoutRequest,
    CloseRequest,
    LoanRead,
    LoanReturn,
    OfferResult,
    RenewRequest,
)
from circulation.schemas.payment import FinePaymentRead, PaymentCreate
from circulation.schemas.sweep import SkippedRow, SweepReport

__all__ = [
    "BaseSchema",
    "ErrorResponse",
    "MessageResponse",
    "HealthResponse",
    "BookRead",
    "RetireResult",
    "ReservationCreate",
    "ReservationRead",
    "OfferRequest",
    "CheckoutRequest",
    "RenewRequest",
    "CloseRequest",
    "LoanRead",
    "LoanReturn",
    "OfferResult",
    "FinePaymentRead",
    "PaymentCreate",
    "SkippedRow",
    "SweepReport",
]
