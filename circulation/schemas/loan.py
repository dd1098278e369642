"""
Schemas Pydantic para LoanTransaction (empréstimo).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import Field, computed_field

from circulation.models.enums import LoanStatus
from circulation.schemas.base import BaseSchema
from circulation.schemas.reservation import ReservationRead


class CheckoutRequest(BaseSchema):
    """Schema para abrir empréstimo."""

    member_id: UUID = Field(..., description="ID do sócio")
    copy_id: UUID = Field(..., description="ID da cópia física")
    staff_id: UUID = Field(..., description="Funcionário que registra o empréstimo")
    now: date | None = Field(None, description="Data da operação (padrão: hoje)")


class RenewRequest(BaseSchema):
    """Schema para renovar empréstimo."""

    now: date | None = None


class CloseRequest(BaseSchema):
    """Schema para devolução, perda ou dano."""

    staff_id: UUID
    now: date | None = None


class LoanRead(BaseSchema):
    """Schema de leitura de empréstimo."""

    id: UUID
    member_id: UUID
    copy_id: UUID
    staff_id: UUID
    loan_date: date
    due_date: date
    return_date: date | None = None
    closed_by_staff_id: UUID | None = None
    renewal_count: int
    fine_amount: Decimal
    carried_fine: Decimal
    fine_paid: Decimal
    status: LoanStatus

    @computed_field
    @property
    def outstanding_fine(self) -> Decimal:
        """Multa ainda não paga."""
        return self.fine_amount - self.fine_paid


class LoanReturn(BaseSchema):
    """
    Resposta da devolução.

    Se a cópia foi repassada a um sócio da fila, hold_loan traz o
    empréstimo novo e reservation a reserva atendida.
    """

    loan: LoanRead
    fine_applied: Decimal = Field(..., description="Multa da devolução (pode ser 0)")
    reservation: ReservationRead | None = None
    hold_loan: LoanRead | None = None
    message: str


class OfferResult(BaseSchema):
    """Resultado da oferta explícita de uma cópia à fila de reservas."""

    reservation: ReservationRead | None = None
    hold_loan: LoanRead | None = None
    message: str
