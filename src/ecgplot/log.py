import sys
from typing import Any, TextIO

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | <level>{message}</level>"
)


def configure_logging(log_level: str = "INFO", sink: TextIO = sys.stderr) -> int:
    """
    Configure loguru logging with specified level.

    Call once at startup; components receive loggers from `get_logger`.

    Parameters
    ----------
    log_level : str, default="INFO"
        Logging level: TRACE, DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL.
    sink : TextIO, default=sys.stderr
        Stream the handler writes to.

    Returns
    -------
    int
        Identifier of the added handler, usable with ``logger.remove``.
    """
    logger.remove()
    logger.configure(extra={"component": "ecgplot"})
    return logger.add(
        sink,
        level=log_level.upper(),
        format=LOG_FORMAT,
        colorize=sink is sys.stderr,
    )


def get_logger(component: str) -> Any:
    """Return the shared loguru logger bound to a component name."""
    return logger.bind(component=component)
