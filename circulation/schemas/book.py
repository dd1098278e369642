"""
Schemas Pydantic para o catálogo.
"""

from uuid import UUID

from circulation.schemas.base import BaseSchema


class BookRead(BaseSchema):
    """Schema de leitura de título."""

    id: UUID
    isbn: str
    title: str
    is_retired: bool


class RetireResult(BaseSchema):
    """Resultado da retirada de um título do acervo."""

    book: BookRead
    withdrawn_copies: int
    cancelled_reservations: int
    message: str
