import logging
from types import SimpleNamespace

from rich.logging import RichHandler

from commons.utilities.logger import NOISY_LOGGERS, get_logger_config, setup_rich_logger


def test_get_logger_config_dev():
    config = get_logger_config(env="dev", logging_level="DEBUG")

    assert isinstance(config.handlers[0], RichHandler)
    assert config.level == "DEBUG"
    assert config.quiet_loggers == NOISY_LOGGERS


def test_get_logger_config_prod():
    config = get_logger_config(env="prod")

    handler = config.handlers[0]
    assert type(handler) is logging.StreamHandler
    assert handler.formatter._fmt == config.format


def test_get_logger_config_debug_keeps_all_loggers():
    assert get_logger_config(env="prod", debug=True).quiet_loggers == ()


def test_setup_rich_logger_quiets_noisy_loggers():
    settings = SimpleNamespace(ENV="prod", LOGGING_LEVEL="INFO", DEBUG=False)

    setup_rich_logger(settings)

    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
