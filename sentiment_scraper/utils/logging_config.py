"""Logging configuration for the sentiment scraper."""

import logging
import sys
from typing import Optional

from ..config import get_settings


LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
FILE_LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ('aiohttp', 'asyncio', 'chardet', 'urllib3', 'httpx')


class ColoredFormatter(logging.Formatter):
    """Formatter with ANSI colours on the level name."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        original = record.levelname
        log_color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{log_color}{record.levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    use_colors: bool = True
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name; defaults to the LOG_LEVEL setting
        log_file: Optional file to log to as well as stdout
        use_colors: Colour the console output when it is a terminal
    """
    log_level = level or get_settings().log_level

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    if use_colors and sys.stdout.isatty():
        console_handler.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class LoggingAdapter(logging.LoggerAdapter):
    """Adapter that stamps a component name onto every record."""

    def process(self, msg, kwargs):
        extra = kwargs.get('extra', {})
        extra.update(self.extra)
        kwargs['extra'] = extra
        return msg, kwargs


def get_logger(name: str, component: str = 'SCRAPER') -> LoggingAdapter:
    """
    Get a logger that carries a component tag.

    Args:
        name: Logger name (typically __name__)
        component: Component identifier, available to formatters as %(component)s
    """
    return LoggingAdapter(logging.getLogger(name), {'component': component})


def log_operation(
    logger,
    operation: str,
    status: str,
    **context
):
    """
    Log an operation line as ``operation | status | k=v | ...``.

    ``started`` and ``completed`` go to INFO, ``failed`` to ERROR and any
    other status to DEBUG.
    """
    context_str = " | ".join(f"{k}={v}" for k, v in context.items())
    message = f"{operation} | {status}"
    if context_str:
        message = f"{message} | {context_str}"

    if status in ('started', 'completed'):
        logger.info(message)
    elif status == 'failed':
        logger.error(message)
    else:
        logger.debug(message)
