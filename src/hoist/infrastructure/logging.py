"""Logging infrastructure built on loguru.

Configuration happens once, either explicitly through ``setup_logging`` /
``configure_logger`` or implicitly on the first ``get_logger`` call.
"""

import sys
import typing as t

from loguru import logger as _logger

from ..config.settings import Environment, LogLevel, Settings

if t.TYPE_CHECKING:
    import loguru

_DEVELOPMENT_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)
_PLAIN_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]} - {message}"

_configured = False


def configure_logger(
    level: LogLevel = LogLevel.INFO,
    environment: Environment = Environment.DEVELOPMENT,
) -> None:
    """Replace loguru's sinks with one configured for the environment.

    Development logs a coloured human format, production serialises each
    record as JSON, testing logs plain text without colours.
    """
    global _configured

    _logger.remove()
    _logger.configure(extra={"name": "hoist"})
    match environment:
        case Environment.PRODUCTION:
            _logger.add(sys.stderr, level=str(level), serialize=True)
        case Environment.TESTING:
            _logger.add(sys.stderr, level=str(level), format=_PLAIN_FORMAT, colorize=False)
        case _:
            _logger.add(
                sys.stderr,
                level=str(level),
                format=_DEVELOPMENT_FORMAT,
                colorize=True,
                backtrace=False,
            )
    _configured = True


def setup_logging(settings: Settings) -> None:
    """Configure logging from application settings."""
    configure_logger(level=settings.log_level, environment=settings.environment)


def is_configured() -> bool:
    """True once a sink has been configured."""
    return _configured


def get_logger(name: str) -> "loguru.Logger":
    """Return a logger bound to ``name``, configuring defaults if needed."""
    if not _configured:
        configure_logger()
    return _logger.bind(name=name)


def reset_logging() -> None:
    """Drop all sinks so the next ``get_logger`` call reconfigures."""
    global _configured

    _logger.remove()
    _configured = False
