"""
Schemas Pydantic para Reservation.
"""

from datetime import date
from uuid import UUID

from pydantic import Field

from circulation.models.enums import ReservationStatus
from circulation.schemas.base import BaseSchema


class ReservationCreate(BaseSchema):
    """Schema para criação de reserva."""

    member_id: UUID
    book_id: UUID
    expiry_date: date | None = Field(
        None,
        description="Validade da reserva (padrão: now + DEFAULT_RESERVATION_DAYS)",
    )
    priority_number: int | None = Field(None, gt=0, description="Menor = atendida antes")
    now: date | None = None


class ReservationRead(BaseSchema):
    """Schema para leitura de reserva."""

    id: UUID
    member_id: UUID
    book_id: UUID
    reservation_date: date
    expiry_date: date
    priority_number: int
    status: ReservationStatus
    fulfilled_loan_id: UUID | None = None


class OfferRequest(BaseSchema):
    """Schema para oferecer uma cópia disponível à fila."""

    staff_id: UUID
    now: date | None = None
