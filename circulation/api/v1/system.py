"""
Endpoints de Sistema (varreduras periódicas).

Contratos:
    - POST /system/sweep-overdue: Reclassifica atrasos e recalcula multas
    - POST /system/expire-reservations: Expira reservas vencidas

Ambas são idempotentes para o mesmo `as_of` e podem rodar junto com
empréstimos e devoluções.
"""

from datetime import date

from fastapi import APIRouter, Query

from circulation.core.deps import DbSession, Today, resolve_now
from circulation.schemas.sweep import SweepReport
from circulation.services.loan import LoanLedger
from circulation.services.reservation import ReservationQueue

router = APIRouter(prefix="/system", tags=["System"])


@router.post(
    "/sweep-overdue",
    response_model=SweepReport,
    summary="Varredura de atrasos",
    description="Marca empréstimos vencidos como OVERDUE e recalcula a multa acumulada.",
)
async def sweep_overdue(
    db: DbSession,
    today: Today,
    as_of: date | None = Query(None, description="Data de referência (padrão: hoje)"),
) -> SweepReport:
    ledger = LoanLedger(db)
    return await ledger.sweep_overdue(resolve_now(as_of, today))


@router.post(
    "/expire-reservations",
    response_model=SweepReport,
    summary="Expirar reservas vencidas",
    description="Reservas ACTIVE com expiry_date anterior à data de referência viram EXPIRED.",
)
async def expire_reservations(
    db: DbSession,
    today: Today,
    as_of: date | None = Query(None, description="Data de referência (padrão: hoje)"),
) -> SweepReport:
    queue = ReservationQueue(db)
    return await queue.expire_sweep(resolve_now(as_of, today))
