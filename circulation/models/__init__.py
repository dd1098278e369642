"""
Models SQLAlchemy da aplicação.

Importar todos os models aqui para que Base.metadata conheça todas as tabelas.
"""

from circulation.models.enums import (
    CopyCondition,
    LoanStatus,
    PaymentMethod,
    ReservationStatus,
)
from circulation.models.member import Member, MemberType, Staff
from circulation.models.book import Book, BookCopy
from circulation.models.loan import LoanTransaction
from circulation.models.reservation import Reservation
from circulation.models.payment import FinePayment

__all__ = [
    "CopyCondition",
    "LoanStatus",
    "PaymentMethod",
    "ReservationStatus",
    "MemberType",
    "Member",
    "Staff",
    "Book",
    "BookCopy",
    "LoanTransaction",
    "Reservation",
    "FinePayment",
]
