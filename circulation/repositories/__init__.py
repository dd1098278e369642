"""
Módulo de repositórios - acesso a dados.
"""

from circulation.repositories.base import BaseRepository
from circulation.repositories.member import (
    MemberRepository,
    MemberTypeRepository,
    StaffRepository,
)
from circulation.repositories.book import BookCopyRepository, BookRepository
from circulation.repositories.loan import LoanRepository
from circulation.repositories.reservation import ReservationRepository
from circulation.repositories.payment import FinePaymentRepository

__all__ = [
    "BaseRepository",
    "MemberTypeRepository",
    "MemberRepository",
    "StaffRepository",
    "BookRepository",
    "BookCopyRepository",
    "LoanRepository",
    "ReservationRepository",
    "FinePaymentRepository",
]
