"""Loguru logging configuration.

Centralized logger setup. All modules log through the loguru ``logger``
with ``{}`` style formatting; this module only wires the sinks.

Features:
    - Dual sinks: Console (human-readable) + File (rotating text or JSON)
    - Context binding per ticker via ``get_ticker_logger`` (rendered as ``[AAPL]``)

Rules Applied:
    - #15 Logging Standards: Loguru, dual sinks
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger

# Remove default handler to prevent duplicate logs
logger.remove()

CONSOLE_FORMAT_WITH_CONTEXT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<dim>[{extra[ticker]}]</dim> "
    "<level>{message}</level>"
)

# ticker 미바인딩 레코드용 기본값
DEFAULT_EXTRA = {"ticker": "-"}

DEFAULT_ROTATION = "50 MB"
DEFAULT_RETENTION = "14 days"
DEFAULT_COMPRESSION = "gz"


def setup_logger(
    log_dir: Path | str = Path("logs"),
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    *,
    json_logs: bool = False,
) -> None:
    """Initialize the logger.

    Args:
        log_dir: Directory for log files (default: "logs")
        console_level: Console output level (default: "INFO")
        file_level: File output level (default: "DEBUG")
        json_logs: Serialize file records as JSON lines

    Example:
        >>> from option_quoter.core.logger import setup_logger, logger
        >>> setup_logger(log_dir="logs", console_level="DEBUG")
        >>> logger.info("Ingestion started")
    """
    logger.remove()
    logger.configure(extra=DEFAULT_EXTRA)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT_WITH_CONTEXT,
        level=console_level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    suffix = "json" if json_logs else "log"
    logger.add(
        log_path / f"quoter_{{time:YYYY-MM-DD}}.{suffix}",
        format="{message}" if json_logs else CONSOLE_FORMAT_WITH_CONTEXT,
        level=file_level,
        rotation=DEFAULT_ROTATION,
        retention=DEFAULT_RETENTION,
        compression=DEFAULT_COMPRESSION,
        serialize=json_logs,
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )

    logger.debug(
        "Logger initialized: dir={}, console={}, file={}",
        log_path,
        console_level,
        file_level,
    )


def get_ticker_logger(ticker: str, **extra: str) -> Logger:
    """티커 컨텍스트가 바인딩된 logger 반환.

    Example:
        >>> log = get_ticker_logger("AAPL", operation="fetch")
        >>> log.info("Fetching chain")
    """
    return logger.bind(ticker=ticker.upper(), **extra)


__all__ = [
    "get_ticker_logger",
    "logger",
    "setup_logger",
]
