"""
Schemas base reutilizáveis em toda a aplicação.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Schema base com configurações padrão."""
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )


class ErrorResponse(BaseModel):
    """
    Resposta de erro padrão.

    Produzida pelo handler de CirculationError em circulation.main:
        {"error": "not_renewable", "message": "Há reservas pendentes ..."}
    """
    error: str
    message: str


class MessageResponse(BaseModel):
    """Resposta simples com mensagem."""
    message: str
