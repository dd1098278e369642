"""
Schema do endpoint /health.
"""

from typing import Literal

from circulation.schemas.base import BaseSchema


class HealthResponse(BaseSchema):
    """
    Estado da API e do banco.

    A aplicação responde mesmo com o banco fora do ar: nesse caso status
    vem "degraded" e database traz a mensagem do driver, para que o
    orquestrador decida se reinicia ou só tira a instância do balanceador.
    """

    status: Literal["healthy", "degraded"]
    app_name: str
    version: str
    environment: str
    database: str
