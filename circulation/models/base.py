"""
Mixins e tipos de coluna compartilhados pelos models da circulação.

Chaves usam o tipo genérico Uuid (UUID nativo no Postgres, CHAR(32) no
SQLite). Valores monetários são sempre Numeric com 2 casas decimais.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import DateTime, Numeric, Uuid, func
from sqlalchemy.orm import Mapped, MappedColumn, mapped_column

ZERO = Decimal("0.00")


def money_column(precision: int = 10, default: Optional[Decimal] = ZERO, **kwargs: Any) -> MappedColumn[Decimal]:
    """
    Coluna monetária NOT NULL com 2 casas.

    Args:
        precision: Total de dígitos (multas usam 10, políticas menos)
        default: Valor inicial quando o model não informa (None = obrigatório)
    """
    kwargs.setdefault("nullable", False)
    return mapped_column(Numeric(precision, 2), default=default, **kwargs)


class UUIDMixin:
    """Chave primária UUID gerada na aplicação, não no banco."""
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """
    Carimbos de criação e atualização preenchidos pelo servidor.

    created_at desempata a fila de reservas e a ordem dos pagamentos.
    Nenhum service lê estes campos depois de um commit: o valor vem do
    banco e forçaria um lazy load fora do contexto async.
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
