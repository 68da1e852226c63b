"""
Logging configuration and utilities.

Every module logs through a standard library logger obtained from
``get_logger``. ``setup_logging`` routes those records through structlog's
``ProcessorFormatter`` so console and file output share one rendering chain.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import structlog


LOG_FORMAT_CHAIN = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.ExtraAdder(),
    structlog.processors.TimeStamper(fmt="iso"),
]


def _build_formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    if json_output:
        renderer = structlog.processors.JSONRenderer()
        final_processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ]
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
        final_processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=LOG_FORMAT_CHAIN,
        processors=final_processors,
    )


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    json_output: bool = False,
    retention_days: int = 7
) -> None:
    """
    Set up logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path, rotated at midnight
        json_output: Render records as JSON lines instead of console text
        retention_days: Number of rotated log files to keep
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *LOG_FORMAT_CHAIN,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Clear existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(_build_formatter(json_output))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.TimedRotatingFileHandler(
            log_path,
            when='midnight',
            interval=1,
            backupCount=retention_days,
            encoding='utf-8'
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setFormatter(_build_formatter(True))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Standard logger, rendered by structlog once setup_logging ran
    """
    return logging.getLogger(name)
