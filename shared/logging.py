"""
Logging utilities for the fairness audit.
Provides structured logging with context for debugging and auditing.
"""

import logging
import sys
from typing import Any, Dict, List, Optional
from datetime import datetime
from pathlib import Path


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Create a configured logger instance.

    Args:
        name: Logger name (typically __name__)
        level: Logging level
        log_file: Optional file path for logging

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get or create a logger with standard configuration."""
    return setup_logger(name)


def log_metric(
    logger: logging.Logger,
    metric_name: str,
    value: float,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log a metric with structured context.

    Args:
        logger: Logger instance
        metric_name: Name of the metric
        value: Metric value
        context: Additional context (e.g., attribute, target)
    """
    context_str = ""
    if context:
        context_items = [f"{k}={v}" for k, v in context.items()]
        context_str = f" [{', '.join(context_items)}]"

    logger.debug(f"METRIC: {metric_name}={value:.4f}{context_str}")


def log_pipeline_stage(
    logger: logging.Logger,
    stage: str,
    status: str = "started",
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log analysis stage execution.

    Args:
        logger: Logger instance
        stage: Stage name (e.g., 'profiling', 'metrics')
        status: Status ('started', 'completed', 'failed')
        details: Additional details
    """
    detail_str = ""
    if details:
        detail_items = [f"{k}={v}" for k, v in details.items()]
        detail_str = f" - {', '.join(detail_items)}"

    level = logging.INFO if status != "failed" else logging.ERROR
    logger.log(level, f"STAGE [{status.upper()}]: {stage}{detail_str}")


def log_bias_detection(
    logger: logging.Logger,
    bias_type: str,
    detected: bool,
    severity: str,
    affected: List[str],
) -> None:
    """
    Log a bias flag or a clean check.

    Args:
        logger: Logger instance
        bias_type: Type of bias checked
        detected: Whether bias was detected
        severity: Severity level
        affected: Affected attributes or groups
    """
    if detected:
        logger.warning(
            f"BIAS DETECTED [{severity}]: {bias_type} "
            f"affects {', '.join(affected)}"
        )
    else:
        logger.info(f"BIAS CHECK: {bias_type} - no significant bias detected")


def log_config_validation(
    logger: logging.Logger,
    config_name: str,
    errors: list,
) -> None:
    """Log configuration validation results."""
    if errors:
        logger.error(f"CONFIG VALIDATION FAILED: {config_name}")
        for err in errors:
            logger.error(f"  └─ {err}")
    else:
        logger.info(f"CONFIG VALIDATION PASSED: {config_name}")


class PipelineLogger:
    """
    Context manager for analysis stage logging.

    The start line carries the stage's input details (such as the record
    count). Counts produced inside the stage are added with record() and
    appear on the completion line next to the duration. Exceptions are
    logged and re-raised.

    Example:
        >>> with PipelineLogger(logger, "group aggregation", {"records": 100}) as stage:
        ...     groups = aggregate(...)
        ...     stage.record(groups=len(groups))
    """

    def __init__(
        self,
        logger: logging.Logger,
        stage: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.logger = logger
        self.stage = stage
        self.details: Dict[str, Any] = dict(details or {})
        self.start_time = None

    def record(self, **details: Any) -> None:
        """Add details to the completion line."""
        self.details.update(details)

    def __enter__(self):
        self.start_time = datetime.now()
        log_pipeline_stage(self.logger, self.stage, "started", self.details)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = (datetime.now() - self.start_time).total_seconds()
        details = dict(self.details, duration_seconds=f"{duration:.2f}")

        if exc_type is None:
            log_pipeline_stage(self.logger, self.stage, "completed", details)
        else:
            details["error"] = f"{exc_type.__name__}: {exc_val}"
            log_pipeline_stage(self.logger, self.stage, "failed", details)

        # Don't suppress exceptions
        return False
