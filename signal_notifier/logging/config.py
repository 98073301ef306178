"""
Centralized logging configuration for the signal notifier.

This module configures structlog on top of the standard library logger so
that every component emits key/value events with a consistent layout.
Per-subscription failures and run summaries have dedicated helpers so the
scheduler's audit trail always carries the same fields.
"""
import logging
import sys
from typing import TYPE_CHECKING, Any, Optional

import structlog
from structlog.types import FilteringBoundLogger

if TYPE_CHECKING:
    from ..models.notifications import RunSummary


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_run_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for scheduler runs.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structlog logger carrying the scheduler subsystem binding
    """
    return get_logger(name).bind(
        subsystem="scheduler",
        audit_trail=True
    )


def log_unit_failure(
    logger: FilteringBoundLogger,
    subscription_id: int,
    stage: str,
    error: BaseException,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a per-subscription failure with the standard (id, stage, error) triple.

    Args:
        logger: Structlog logger instance
        subscription_id: ID of the subscription whose unit failed
        stage: Pipeline stage that failed (fetch, indicators, score, notify, record)
        error: The exception raised by that stage
        context: Additional context data
    """
    bound_logger = logger.bind(
        subscription_id=subscription_id,
        stage=stage,
        error=str(error),
        error_type=type(error).__name__
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.warning("Subscription unit failed")


def log_run_summary(
    logger: FilteringBoundLogger,
    summary: "RunSummary"
) -> None:
    """
    Log the outcome counts of a finished (or aborted) run.

    Args:
        logger: Structlog logger instance
        summary: Finalized run summary
    """
    bound_logger = logger.bind(
        run_id=summary.run_id,
        processed=summary.processed,
        sent=summary.sent,
        skipped=summary.skipped,
        failed=summary.failed,
        aborted=summary.aborted,
        duration_seconds=summary.duration_seconds
    )

    if summary.aborted:
        bound_logger.error("Signal run aborted")
    else:
        bound_logger.info("Signal run finished")
