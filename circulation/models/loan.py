"""
Model de empréstimo (LoanTransaction).
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Text,
    Uuid,
    text,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from circulation.db.session import Base
from circulation.models.base import TimestampMixin, UUIDMixin, money_column
from circulation.models.enums import LoanStatus

# Predicado do índice parcial "um empréstimo aberto por cópia"
OPEN_LOAN_PREDICATE = text("status IN ('ACTIVE', 'OVERDUE')")


class LoanTransaction(Base, UUIDMixin, TimestampMixin):
    """
    Empréstimo de uma cópia para um sócio.

    Registro de auditoria: criado no checkout, alterado em renovação,
    devolução, perda/dano, recálculo de multa e pagamento. Nunca é apagado.

    Invariantes (também como CHECK no banco):
        - due_date >= loan_date
        - return_date, se presente, >= loan_date
        - renewal_count >= 0
        - 0 <= fine_paid <= fine_amount
        - no máximo um empréstimo ACTIVE/OVERDUE por cópia (índice parcial)

    Attributes:
        member_id: FK para o sócio
        copy_id: FK para a cópia emprestada
        staff_id: Funcionário que registrou o empréstimo
        loan_date: Data do empréstimo
        due_date: Data prevista de devolução
        return_date: Data da devolução (None enquanto aberto)
        closed_by_staff_id: Funcionário que encerrou (devolução, perda, dano)
        renewal_count: Número de renovações
        carried_fine: Multa acumulada até a última renovação
        fine_amount: Multa acumulada
        fine_paid: Total já pago da multa
        status: Ver LoanStatus
    """
    __tablename__ = "loan_transactions"

    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("members.id", ondelete="RESTRICT"),
        nullable=False,
    )
    copy_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("book_copies.id", ondelete="RESTRICT"),
        nullable=False,
    )
    staff_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("staff.id", ondelete="RESTRICT"),
        nullable=False,
    )
    loan_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    return_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    closed_by_staff_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("staff.id", ondelete="RESTRICT"),
        nullable=True,
    )
    renewal_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    carried_fine: Mapped[Decimal] = money_column()
    fine_amount: Mapped[Decimal] = money_column()
    fine_paid: Mapped[Decimal] = money_column()
    status: Mapped[LoanStatus] = mapped_column(
        SQLEnum(LoanStatus, name="loan_status"),
        nullable=False,
        default=LoanStatus.ACTIVE,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("due_date >= loan_date", name="chk_due_after_loan"),
        CheckConstraint(
            "return_date IS NULL OR return_date >= loan_date",
            name="chk_return_after_loan",
        ),
        CheckConstraint("renewal_count >= 0", name="chk_renewal_count"),
        CheckConstraint("carried_fine >= 0", name="chk_carried_fine"),
        CheckConstraint(
            "fine_amount >= 0 AND fine_paid >= 0 AND fine_paid <= fine_amount",
            name="chk_fine_amounts",
        ),
        Index("ix_loan_transactions_member_status", "member_id", "status"),
        Index("ix_loan_transactions_status_due", "status", "due_date"),
        Index(
            "ux_loan_transactions_open_copy",
            "copy_id",
            unique=True,
            postgresql_where=OPEN_LOAN_PREDICATE,
            sqlite_where=OPEN_LOAN_PREDICATE,
        ),
    )

    def __repr__(self) -> str:
        return f"<LoanTransaction {self.id} - {self.status.value}>"

    @property
    def is_open(self) -> bool:
        """True enquanto o empréstimo prende a cópia (ACTIVE ou OVERDUE)."""
        return self.status.is_open

    @property
    def outstanding_fine(self) -> Decimal:
        """Multa ainda não paga."""
        return (self.fine_amount or Decimal("0.00")) - (self.fine_paid or Decimal("0.00"))
