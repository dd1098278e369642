"""
Models do catálogo: Book (título) e BookCopy (cópia física).
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from circulation.db.session import Base
from circulation.models.base import UUIDMixin, TimestampMixin
from circulation.models.enums import CopyCondition


class Book(Base, UUIDMixin, TimestampMixin):
    """
    Título de um livro (obra).

    Um título pode ter múltiplas cópias físicas (BookCopy). Reservas são
    feitas por título, nunca por cópia.

    Attributes:
        isbn: ISBN único
        title: Título do livro
        is_retired: Título retirado do acervo via retire_book
    """
    __tablename__ = "books"

    isbn: Mapped[str] = mapped_column(String(17), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    is_retired: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Book {self.title}>"


class BookCopy(Base, UUIDMixin, TimestampMixin):
    """
    Cópia física de um livro.

    is_available só é escrito pelo LoanLedger enquanto há empréstimo
    aberto, e pelo CatalogService ao retirar o título.

    Attributes:
        book_id: FK para o título
        barcode: Código de barras único
        copy_number: Número da cópia dentro do título
        condition_status: Estado de conservação
        is_available: Disponível para empréstimo
    """
    __tablename__ = "book_copies"

    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("books.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    barcode: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    copy_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    condition_status: Mapped[CopyCondition] = mapped_column(
        SQLEnum(CopyCondition, name="copy_condition"),
        nullable=False,
        default=CopyCondition.GOOD,
    )
    is_available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
    )

    def __repr__(self) -> str:
        state = "available" if self.is_available else "unavailable"
        return f"<BookCopy {self.barcode} - {state}>"
