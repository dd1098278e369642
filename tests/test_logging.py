"""
Testes para a configuração de logging.
"""

import logging

from circulation.core.logging import get_logger, setup_logging


def test_setup_logging_sets_level_and_single_handler():
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, list(root.handlers)
    try:
        setup_logging("debug")
        setup_logging("debug")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)


def test_get_logger_uses_module_name():
    assert get_logger("circulation.services.loan").name == "circulation.services.loan"
