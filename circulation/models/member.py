"""
Models do cadastro de sócios: MemberType (política), Member e Staff.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from circulation.db.session import Base
from circulation.models.base import TimestampMixin, UUIDMixin, money_column


class MemberType(Base, UUIDMixin, TimestampMixin):
    """
    Categoria de sócio e sua política de empréstimo.

    Imutável do ponto de vista da circulação: é apenas consultada.

    Attributes:
        type_name: Nome da categoria (Student, Faculty, ...)
        max_books_allowed: Máximo de empréstimos abertos simultâneos
        loan_duration_days: Prazo de cada empréstimo/renovação
        fine_per_day: Multa por dia de atraso
        membership_fee: Anuidade
    """
    __tablename__ = "member_types"

    type_name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    max_books_allowed: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    loan_duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=14)
    fine_per_day: Mapped[Decimal] = money_column(precision=5, default=Decimal("0.50"))
    membership_fee: Mapped[Decimal] = money_column(precision=8)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("max_books_allowed > 0", name="chk_max_books_positive"),
        CheckConstraint("loan_duration_days > 0", name="chk_loan_duration_positive"),
        CheckConstraint("fine_per_day >= 0", name="chk_fine_positive"),
        CheckConstraint("membership_fee >= 0", name="chk_membership_fee_positive"),
    )

    def __repr__(self) -> str:
        return f"<MemberType {self.type_name}>"


class Member(Base, UUIDMixin, TimestampMixin):
    """
    Sócio da biblioteca.

    Attributes:
        member_number: Matrícula única
        member_type_id: FK para a política (MemberType)
        registration_date: Data de cadastro
        expiry_date: Vencimento da associação (None = sem vencimento)
        is_active: Sócio bloqueado não pode emprestar
    """
    __tablename__ = "members"

    member_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    member_type_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("member_types.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    registration_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint(
            "expiry_date IS NULL OR expiry_date >= registration_date",
            name="chk_expiry_after_registration",
        ),
    )

    def __repr__(self) -> str:
        return f"<Member {self.member_number}>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def is_expired(self, now: date) -> bool:
        """Associação vencida na data informada."""
        return self.expiry_date is not None and self.expiry_date < now


class Staff(Base, UUIDMixin, TimestampMixin):
    """Funcionário que registra empréstimos, devoluções e pagamentos."""
    __tablename__ = "staff"

    employee_id: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    position: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Staff {self.employee_id}>"
