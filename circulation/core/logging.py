"""
Configuração de logging da aplicação.

Nível configurável via LOG_LEVEL. Cada linha traz timestamp, nível,
nome do logger e mensagem; os serviços de circulação registram toda
transição de estado em INFO e toda operação recusada em WARNING.
"""

import logging
import sys
from typing import Optional

from circulation.core.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configura o root logger com um único handler em stdout.

    Args:
        level: Nível de logging. Se não fornecido, usa LOG_LEVEL do .env
    """
    settings = get_settings()
    log_level = (level or settings.LOG_LEVEL).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove handlers existentes para evitar duplicação
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Drivers de banco são verbosos demais em DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configurado com nível: {log_level}")


def get_logger(name: str) -> logging.Logger:
    """
    Retorna o logger do módulo especificado.

    Args:
        name: Nome do módulo (geralmente __name__)
    """
    return logging.getLogger(name)
