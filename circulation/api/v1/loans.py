"""
Endpoints de Empréstimos (LoanTransaction) e pagamentos de multa.

Contratos:
    - POST /loans: Abre empréstimo (checkout)
    - GET /loans: Lista empréstimos com filtros
    - GET /loans/{id}: Detalhes do empréstimo
    - PATCH /loans/{id}/renew: Renova
    - PATCH /loans/{id}/return: Devolve (e repassa à fila de reservas)
    - PATCH /loans/{id}/lost: Encerra como perdido
    - PATCH /loans/{id}/damaged: Encerra como danificado
    - POST /loans/{id}/payments: Registra pagamento de multa
    - GET /loans/{id}/payments: Lista pagamentos

Status codes:
    - 200: Sucesso
    - 201: Criado com sucesso
    - 404: Empréstimo, sócio, cópia ou funcionário não encontrado
    - 409: Regra de circulação violada
    - 422: Dados inválidos
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, status

from circulation.core.deps import DbSession, Today, resolve_now
from circulation.models.enums import LoanStatus
from circulation.schemas.loan import CheckoutRequest, CloseRequest, LoanRead, LoanReturn
from circulation.schemas.payment import FinePaymentRead, PaymentCreate
from circulation.schemas.reservation import ReservationRead
from circulation.services.loan import LoanLedger
from circulation.services.payment import PaymentRecorder

router = APIRouter(prefix="/loans", tags=["Loans"])


@router.post(
    "",
    response_model=LoanRead,
    status_code=status.HTTP_201_CREATED,
    summary="Abrir empréstimo",
    description="Empresta uma cópia a um sócio, respeitando a política do tipo de sócio.",
)
async def checkout(data: CheckoutRequest, db: DbSession, today: Today) -> LoanRead:
    """
    Abre um empréstimo.

    Raises:
        404: Sócio, cópia ou funcionário não encontrado
        409: Sócio inelegível (policy_violation) ou cópia indisponível
    """
    ledger = LoanLedger(db)
    loan = await ledger.checkout(
        member_id=data.member_id,
        copy_id=data.copy_id,
        staff_id=data.staff_id,
        now=resolve_now(data.now, today),
    )
    return LoanRead.model_validate(loan)


@router.get(
    "",
    response_model=list[LoanRead],
    summary="Listar empréstimos",
)
async def list_loans(
    db: DbSession,
    member_id: UUID | None = Query(None, description="Filtrar por sócio"),
    status_filter: LoanStatus | None = Query(None, alias="status", description="Filtrar por status"),
) -> list[LoanRead]:
    ledger = LoanLedger(db)
    loans = await ledger.list_loans(member_id=member_id, status=status_filter)
    return [LoanRead.model_validate(loan) for loan in loans]


@router.get(
    "/{loan_id}",
    response_model=LoanRead,
    summary="Detalhes do empréstimo",
)
async def get_loan(loan_id: UUID, db: DbSession) -> LoanRead:
    ledger = LoanLedger(db)
    return LoanRead.model_validate(await ledger.get(loan_id))


@router.patch(
    "/{loan_id}/renew",
    response_model=LoanRead,
    summary="Renovar empréstimo",
    description="Estende o prazo pela duração da política. Reservas pendentes impedem a renovação.",
)
async def renew_loan(
    loan_id: UUID,
    db: DbSession,
    today: Today,
    now: date | None = Query(None, description="Data da operação (padrão: hoje)"),
) -> LoanRead:
    """
    Raises:
        404: Empréstimo não encontrado
        409: Empréstimo encerrado, reserva pendente ou multa em aberto
    """
    ledger = LoanLedger(db)
    loan = await ledger.renew(loan_id, resolve_now(now, today))
    return LoanRead.model_validate(loan)


@router.patch(
    "/{loan_id}/return",
    response_model=LoanReturn,
    summary="Devolver livro",
)
async def return_loan(
    loan_id: UUID,
    data: CloseRequest,
    db: DbSession,
    today: Today,
) -> LoanReturn:
    """
    Processa a devolução.

    Fluxo:
        1. Calcula multa por atraso e encerra o empréstimo
        2. Libera a cópia
        3. Oferece a cópia ao primeiro sócio elegível da fila

    Raises:
        404: Empréstimo ou funcionário não encontrado
        409: Empréstimo não está aberto
    """
    ledger = LoanLedger(db)
    outcome = await ledger.return_copy(loan_id, data.staff_id, resolve_now(data.now, today))

    if outcome.fine_applied > 0:
        message = f"Livro devolvido com multa de {outcome.fine_applied:.2f}"
    else:
        message = "Livro devolvido com sucesso. Sem multa."
    if outcome.hold_loan is not None:
        message += f" Cópia repassada ao sócio {outcome.hold_loan.member_id} da fila de reservas."

    return LoanReturn(
        loan=LoanRead.model_validate(outcome.transaction),
        fine_applied=outcome.fine_applied,
        reservation=ReservationRead.model_validate(outcome.reservation) if outcome.reservation else None,
        hold_loan=LoanRead.model_validate(outcome.hold_loan) if outcome.hold_loan else None,
        message=message,
    )


@router.patch(
    "/{loan_id}/lost",
    response_model=LoanRead,
    summary="Marcar como perdido",
)
async def mark_lost(loan_id: UUID, data: CloseRequest, db: DbSession, today: Today) -> LoanRead:
    ledger = LoanLedger(db)
    loan = await ledger.mark_lost(loan_id, data.staff_id, resolve_now(data.now, today))
    return LoanRead.model_validate(loan)


@router.patch(
    "/{loan_id}/damaged",
    response_model=LoanRead,
    summary="Marcar como danificado",
)
async def mark_damaged(loan_id: UUID, data: CloseRequest, db: DbSession, today: Today) -> LoanRead:
    ledger = LoanLedger(db)
    loan = await ledger.mark_damaged(loan_id, data.staff_id, resolve_now(data.now, today))
    return LoanRead.model_validate(loan)


# ==========================================
# Pagamentos de multa
# ==========================================

@router.post(
    "/{loan_id}/payments",
    response_model=FinePaymentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar pagamento de multa",
)
async def apply_payment(
    loan_id: UUID,
    data: PaymentCreate,
    db: DbSession,
    today: Today,
) -> FinePaymentRead:
    """
    Raises:
        404: Empréstimo ou funcionário não encontrado
        409: Pagamento excede a multa em aberto (over_payment)
        422: Valor não positivo
    """
    recorder = PaymentRecorder(db)
    payment = await recorder.apply_payment(
        transaction_id=loan_id,
        amount=data.amount,
        staff_id=data.staff_id,
        now=resolve_now(data.now, today),
        method=data.payment_method,
        receipt_number=data.receipt_number,
    )
    return FinePaymentRead.model_validate(payment)


@router.get(
    "/{loan_id}/payments",
    response_model=list[FinePaymentRead],
    summary="Listar pagamentos de multa",
)
async def list_payments(loan_id: UUID, db: DbSession) -> list[FinePaymentRead]:
    recorder = PaymentRecorder(db)
    payments = await recorder.list_payments(loan_id)
    return [FinePaymentRead.model_validate(payment) for payment in payments]
