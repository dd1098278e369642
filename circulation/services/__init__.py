"""
Módulo de serviços - lógica de negócio da circulação.
"""

from circulation.services.fine import FineCalculator
from circulation.services.reservation import ReservationQueue
from circulation.services.loan import LoanLedger, ReturnOutcome
from circulation.services.payment import PaymentRecorder
from circulation.services.catalog import CatalogService

__all__ = [
    "FineCalculator",
    "ReservationQueue",
    "LoanLedger",
    "ReturnOutcome",
    "PaymentRecorder",
    "CatalogService",
]
