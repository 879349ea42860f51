import logging
import sys
from functools import lru_cache

from pydantic import BaseModel

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
LOGGER_FORMAT = "%(name)s | %(levelname)s | %(asctime)s | %(filename)s | %(funcName)s:%(lineno)d | %(message)s"
# chatty below WARNING, kept quiet unless DEBUG is on
NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")


class LoggerConfig(BaseModel):
    handlers: list
    format: str = LOGGER_FORMAT
    date_format: str | None = DATE_FORMAT
    level: str | int = logging.INFO
    quiet_loggers: tuple[str, ...] = NOISY_LOGGERS


@lru_cache
def get_logger_config(env: str = "dev", logging_level: str | int = logging.INFO, debug: bool = False) -> LoggerConfig:
    """
    Rich console output (with tracebacks) outside production, plain formatted stdout in production.
    """
    quiet_loggers = () if debug else NOISY_LOGGERS
    if env != "prod":
        from rich.logging import RichHandler

        rich_handler = RichHandler(rich_tracebacks=True, tracebacks_show_locals=True, show_time=False)
        return LoggerConfig(handlers=[rich_handler], level=logging_level, quiet_loggers=quiet_loggers)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(LOGGER_FORMAT, datefmt=DATE_FORMAT))
    return LoggerConfig(handlers=[stdout_handler], level=logging_level, quiet_loggers=quiet_loggers)


def setup_rich_logger(settings) -> None:
    """
    Send every already registered logger (uvicorn's included) to the root handlers
    built by `get_logger_config()`, replacing any earlier configuration.
    """
    for logger in logging.root.manager.loggerDict.values():
        if isinstance(logger, logging.Logger):
            logger.handlers = []
            logger.propagate = True

    config = get_logger_config(env=settings.ENV, logging_level=settings.LOGGING_LEVEL, debug=settings.DEBUG)
    logging.basicConfig(
        level=config.level,
        format=config.format,
        datefmt=config.date_format,
        handlers=config.handlers,
        force=True,
    )
    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
