"""
Structured logging configuration for dep-licenses.

Provides consistent, machine-readable logging for license detection so that
compliance runs can be audited after the fact.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_RESERVED_ATTRIBUTES = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "getMessage",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component", record.name),
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRIBUTES:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class DetectionLogger:
    """Structured logger for license detection events."""

    def __init__(self, name: str = "dep_licenses"):
        self.logger = logging.getLogger(f"dep_licenses.{name}")
        self._setup_logger()
        self.dependency_context: Dict[str, Any] = {}

    def _setup_logger(self) -> None:
        """Setup logger with structured formatting."""
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.propagate = False
            self.logger.setLevel(logging.WARNING)

    def set_dependency_context(
        self,
        dependency_name: Optional[str] = None,
        dependency_version: Optional[str] = None,
    ) -> None:
        """Set dependency context for logging."""
        self.dependency_context = {}
        if dependency_name:
            self.dependency_context["dependency_name"] = dependency_name
        if dependency_version:
            self.dependency_context["dependency_version"] = dependency_version

    def clear_dependency_context(self) -> None:
        self.dependency_context.clear()

    def _log(self, level: str, event_type: str, **kwargs) -> None:
        log_data = {"event_type": event_type, **self.dependency_context, **kwargs}
        getattr(self.logger, level)(event_type, extra=log_data)

    def info(self, event_type: str, **kwargs) -> None:
        self._log("info", event_type, **kwargs)

    def warning(self, event_type: str, **kwargs) -> None:
        self._log("warning", event_type, **kwargs)

    def error(self, event_type: str, **kwargs) -> None:
        self._log("error", event_type, **kwargs)

    def debug(self, event_type: str, **kwargs) -> None:
        self._log("debug", event_type, **kwargs)


# Global logger instances
_detection_logger = DetectionLogger("detection")
_evidence_logger = DetectionLogger("evidence")
_resolution_logger = DetectionLogger("resolution")
_oracle_logger = DetectionLogger("oracle")

_ALL_LOGGERS = [_detection_logger, _evidence_logger, _resolution_logger, _oracle_logger]


def get_evidence_logger() -> DetectionLogger:
    """Get evidence collection logger."""
    return _evidence_logger


def get_resolution_logger() -> DetectionLogger:
    """Get resolution policy logger."""
    return _resolution_logger


def get_oracle_logger() -> DetectionLogger:
    """Get license oracle logger."""
    return _oracle_logger


def log_license_resolved(dependency_name: str, license_key: str, sources: int) -> None:
    """Log the outcome of a license key resolution."""
    _resolution_logger.info(
        "license_resolved",
        dependency_name=dependency_name,
        license_key=license_key,
        evidence_count=sources,
    )


def log_license_conflict(dependency_name: str, candidates: Dict[str, str]) -> None:
    """Log disagreeing evidence that resolved to ``other``."""
    _resolution_logger.warning(
        "license_conflict",
        dependency_name=dependency_name,
        candidates=candidates,
    )


def log_detection_skipped(dependency_name: str, errors: list) -> None:
    """Log that detection was short-circuited by prior errors."""
    _detection_logger.info(
        "detection_skipped",
        dependency_name=dependency_name,
        errors=list(errors),
    )


def set_dependency_context(
    dependency_name: Optional[str] = None,
    dependency_version: Optional[str] = None,
) -> None:
    """Set global dependency context for all loggers."""
    for logger in _ALL_LOGGERS:
        logger.set_dependency_context(dependency_name, dependency_version)


def clear_dependency_context() -> None:
    """Clear global dependency context."""
    for logger in _ALL_LOGGERS:
        logger.clear_dependency_context()


def configure_logging(log_level: str = "WARNING", enable_json: bool = True) -> None:
    """Configure logging for the library."""
    level = getattr(logging, log_level.upper(), logging.WARNING)

    for logger in _ALL_LOGGERS:
        logger.logger.setLevel(level)
        for handler in logger.logger.handlers:
            if enable_json:
                handler.setFormatter(StructuredFormatter())
            else:
                handler.setFormatter(
                    logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
                )
