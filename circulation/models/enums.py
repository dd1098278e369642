"""
Enums utilizados nos models da aplicação.

Conjuntos fechados: valores fora da lista são rejeitados na construção
do model e pela coluna Enum no banco.
"""

import enum


class LoanStatus(str, enum.Enum):
    """
    Status de um empréstimo (LoanTransaction).

    Fluxo:
        ACTIVE -> RETURNED
        ACTIVE -> OVERDUE -> RETURNED (OVERDUE é classificação, não caminho próprio)
        ACTIVE/OVERDUE -> LOST | DAMAGED (terminais)
    """
    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"
    OVERDUE = "OVERDUE"
    LOST = "LOST"
    DAMAGED = "DAMAGED"

    @classmethod
    def open_statuses(cls) -> tuple["LoanStatus", ...]:
        """Status em que o empréstimo ainda prende a cópia."""
        return (cls.ACTIVE, cls.OVERDUE)

    @property
    def is_open(self) -> bool:
        return self in LoanStatus.open_statuses()


class ReservationStatus(str, enum.Enum):
    """
    Status de uma reserva de título.

    Fluxo típico:
        ACTIVE -> FULFILLED (cópia oferecida e emprestada)
        ACTIVE -> EXPIRED (expiry_date passou na fila)
        ACTIVE -> CANCELLED (retirada explícita)
    """
    ACTIVE = "ACTIVE"
    FULFILLED = "FULFILLED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class CopyCondition(str, enum.Enum):
    """Estado de conservação de uma cópia física."""
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"
    DAMAGED = "DAMAGED"


class PaymentMethod(str, enum.Enum):
    """Forma de pagamento de multa."""
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    CHECK = "CHECK"
    ONLINE = "ONLINE"
