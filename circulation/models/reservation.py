"""
Model de reserva de títulos.
"""

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Uuid, text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from circulation.db.session import Base
from circulation.models.base import UUIDMixin, TimestampMixin
from circulation.models.enums import ReservationStatus

ACTIVE_RESERVATION_PREDICATE = text("status = 'ACTIVE'")


class Reservation(Base, UUIDMixin, TimestampMixin):
    """
    Reserva de um título por um sócio.

    Regras de negócio:
        - Reserva é por título (book_id), não por cópia
        - Fila ordenada por priority_number, depois reservation_date
        - No máximo uma reserva ACTIVE por (member_id, book_id)
        - Reserva ACTIVE impede renovação de empréstimos do título

    Attributes:
        member_id: FK para o sócio
        book_id: FK para o título reservado
        reservation_date: Data em que entrou na fila
        expiry_date: Data limite; depois dela a reserva expira
        priority_number: Posição de prioridade (menor = primeiro)
        status: Ver ReservationStatus
        fulfilled_loan_id: Empréstimo criado quando a reserva foi atendida
    """
    __tablename__ = "reservations"

    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("members.id", ondelete="RESTRICT"),
        nullable=False,
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="RESTRICT"),
        nullable=False,
    )
    reservation_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    priority_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ReservationStatus] = mapped_column(
        SQLEnum(ReservationStatus, name="reservation_status"),
        nullable=False,
        default=ReservationStatus.ACTIVE,
    )
    fulfilled_loan_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("loan_transactions.id", ondelete="RESTRICT"),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint("expiry_date >= reservation_date", name="chk_expiry_after_reservation"),
        CheckConstraint("priority_number > 0", name="chk_priority_positive"),
        # Fila de um título: ACTIVE ordenadas por prioridade e data
        Index(
            "ix_reservations_book_queue",
            "book_id",
            "status",
            "priority_number",
            "reservation_date",
        ),
        Index("ix_reservations_status_expiry", "status", "expiry_date"),
        # Evitar reserva ACTIVE duplicada do mesmo sócio para o mesmo título
        Index(
            "ux_reservations_member_book_active",
            "member_id",
            "book_id",
            unique=True,
            postgresql_where=ACTIVE_RESERVATION_PREDICATE,
            sqlite_where=ACTIVE_RESERVATION_PREDICATE,
        ),
    )

    def __repr__(self) -> str:
        return f"<Reservation {self.id} - {self.status.value}>"

    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.ACTIVE

    def is_expired(self, now: date) -> bool:
        """True se a validade passou (expira no dia seguinte a expiry_date)."""
        return self.expiry_date < now
