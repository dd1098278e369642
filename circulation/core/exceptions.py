"""
Taxonomia de erros do motor de circulação.

Todos os erros são recuperáveis pelo chamador: a operação que os levanta
não deixa mutação parcial. A camada HTTP traduz cada classe para o
status_code declarado nela (ver circulation.main).
"""

from uuid import UUID


class CirculationError(Exception):
    """Erro base de regra de negócio."""

    status_code: int = 400
    error: str = "circulation_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EntityNotFound(CirculationError):
    """Registro referenciado não existe."""

    status_code = 404
    error = "not_found"

    def __init__(self, entity: str, entity_id: UUID):
        super().__init__(f"{entity} não encontrado: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class PolicyViolation(CirculationError):
    """Sócio inelegível: inativo, vencido ou no limite de empréstimos."""

    status_code = 409
    error = "policy_violation"


class CopyUnavailable(CirculationError):
    """Cópia indisponível ou já referenciada por empréstimo aberto."""

    status_code = 409
    error = "copy_unavailable"


class NotRenewable(CirculationError):
    """Empréstimo não pode ser renovado."""

    status_code = 409
    error = "not_renewable"


class InvalidState(CirculationError):
    """Transição pedida não é válida para o status atual."""

    status_code = 409
    error = "invalid_state"


class DuplicateReservation(CirculationError):
    """Sócio já possui reserva ACTIVE para o título."""

    status_code = 409
    error = "duplicate_reservation"


class InvalidReservation(CirculationError):
    """Dados de reserva inconsistentes (validade ou prioridade)."""

    status_code = 422
    error = "invalid_reservation"


class OverPayment(CirculationError):
    """Pagamento faria fine_paid ultrapassar fine_amount."""

    status_code = 409
    error = "over_payment"


class InvalidPaymentAmount(CirculationError):
    """Valor de pagamento deve ser positivo."""

    status_code = 422
    error = "invalid_payment_amount"
