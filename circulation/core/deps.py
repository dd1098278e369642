"""
Dependencies FastAPI compartilhadas pelos endpoints.

O relógio é lido aqui, na borda HTTP, e nunca nos services: cada
operação do motor recebe a data explicitamente.
"""

from datetime import date
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from circulation.db.session import get_db


def get_today() -> date:
    """Data corrente usada quando o cliente não informa `now`."""
    return date.today()


def resolve_now(now: date | None, today: date) -> date:
    """Data informada no corpo/query, ou hoje."""
    return now or today


# Type aliases para uso nos endpoints
DbSession = Annotated[AsyncSession, Depends(get_db)]
Today = Annotated[date, Depends(get_today)]
