"""
Schemas dos relatórios de varredura (atrasos e expiração de reservas).
"""

from datetime import date
from uuid import UUID

from pydantic import Field

from circulation.schemas.base import BaseSchema


class SkippedRow(BaseSchema):
    """Linha ignorada pela varredura e o motivo."""

    id: UUID
    reason: str


class SweepReport(BaseSchema):
    """
    Resultado de uma varredura em lote.

    Attributes:
        as_of: Data usada como "hoje"
        examined: Linhas candidatas encontradas
        updated: IDs efetivamente alterados
        skipped: Linhas malformadas ou alteradas concorrentemente
    """

    as_of: date
    examined: int = 0
    updated: list[UUID] = Field(default_factory=list)
    skipped: list[SkippedRow] = Field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return len(self.updated)
