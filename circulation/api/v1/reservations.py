"""
Endpoints de Reservas.

Contratos:
    - POST /reservations: Entra na fila de um título
    - GET /reservations/queue/{book_id}: Fila ACTIVE na ordem de atendimento
    - PATCH /reservations/{id}/cancel: Cancela reserva ACTIVE
    - POST /reservations/offer/{copy_id}: Oferece cópia disponível à fila

Status codes:
    - 200: Sucesso
    - 201: Criado com sucesso
    - 404: Sócio, título, reserva ou cópia não encontrado
    - 409: Reserva duplicada, título retirado ou status inválido
    - 422: Validade ou prioridade inválida
"""

from datetime import timedelta
from uuid import UUID

from fastapi import APIRouter, status

from circulation.core.config import get_settings
from circulation.core.deps import DbSession, Today, resolve_now
from circulation.schemas.loan import LoanRead, OfferResult
from circulation.schemas.reservation import OfferRequest, ReservationCreate, ReservationRead
from circulation.services.loan import LoanLedger
from circulation.services.reservation import ReservationQueue

router = APIRouter(prefix="/reservations", tags=["Reservations"])


@router.post(
    "",
    response_model=ReservationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Criar reserva",
)
async def create_reservation(
    data: ReservationCreate,
    db: DbSession,
    today: Today,
) -> ReservationRead:
    """
    Coloca o sócio na fila do título.

    Sem expiry_date, a reserva vale DEFAULT_RESERVATION_DAYS dias.
    """
    now = resolve_now(data.now, today)
    expiry_date = data.expiry_date or now + timedelta(days=get_settings().DEFAULT_RESERVATION_DAYS)

    queue = ReservationQueue(db)
    reservation = await queue.enqueue(
        member_id=data.member_id,
        book_id=data.book_id,
        expiry_date=expiry_date,
        now=now,
        priority_number=data.priority_number,
    )
    return ReservationRead.model_validate(reservation)


@router.get(
    "/queue/{book_id}",
    response_model=list[ReservationRead],
    summary="Fila de reservas do título",
)
async def get_queue(book_id: UUID, db: DbSession) -> list[ReservationRead]:
    queue = ReservationQueue(db)
    return [ReservationRead.model_validate(r) for r in await queue.queue(book_id)]


@router.patch(
    "/{reservation_id}/cancel",
    response_model=ReservationRead,
    summary="Cancelar reserva",
)
async def cancel_reservation(reservation_id: UUID, db: DbSession) -> ReservationRead:
    queue = ReservationQueue(db)
    return ReservationRead.model_validate(await queue.cancel(reservation_id))


@router.post(
    "/offer/{copy_id}",
    response_model=OfferResult,
    summary="Oferecer cópia à fila",
    description="Repassa uma cópia disponível ao primeiro sócio elegível da fila do título.",
)
async def offer_copy(
    copy_id: UUID,
    data: OfferRequest,
    db: DbSession,
    today: Today,
) -> OfferResult:
    ledger = LoanLedger(db)
    outcome = await ledger.offer_copy(copy_id, data.staff_id, resolve_now(data.now, today))

    if outcome.hold_loan is None:
        message = "Nenhum sócio elegível na fila; cópia segue disponível"
    else:
        message = f"Cópia emprestada ao sócio {outcome.hold_loan.member_id}"

    return OfferResult(
        reservation=ReservationRead.model_validate(outcome.reservation) if outcome.reservation else None,
        hold_loan=LoanRead.model_validate(outcome.hold_loan) if outcome.hold_loan else None,
        message=message,
    )
