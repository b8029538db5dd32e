"""
Error handling for dep-licenses.

Detection never fails because one evidence file is bad. Unreadable or
oversized files, malformed manifests and ignored metadata are recorded here
as issues, logged and passed to registered callbacks, and detection carries on
without that piece of evidence. Only a relative dependency path is raised to
the caller.
"""

import logging
import sys
import traceback
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional


class InvalidDependencyPathError(ValueError):
    """Raised when a dependency is constructed with a relative path."""


class ErrorLevel(Enum):
    """Severity of a detection issue."""

    WARNING = "WARNING"
    ERROR = "ERROR"

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.value)


class ErrorCategory(Enum):
    """What kind of evidence an issue affected."""

    PARSING = "PARSING"  # manifest could not be parsed
    FILESYSTEM = "FILESYSTEM"  # evidence file missing, unreadable or too large
    VALIDATION = "VALIDATION"  # caller input partly ignored


@dataclass
class ErrorContext:
    """One recorded detection issue."""

    level: ErrorLevel
    category: ErrorCategory
    message: str
    module: str
    function: str
    details: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None
    traceback_info: Optional[str] = None

    @property
    def location(self) -> str:
        return f"{self.module}.{self.function}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert the issue to a dictionary for logging."""
        data = {
            "level": self.level.value,
            "category": self.category.value,
            "message": self.message,
            "location": self.location,
            "details": self.details,
        }
        if self.exception is not None:
            data["exception_type"] = type(self.exception).__name__
            data["exception_message"] = str(self.exception)
            data["traceback"] = self.traceback_info
        return data


ErrorCallback = Callable[[ErrorContext], None]


class ErrorHandler:
    """
    Collects detection issues for one process.

    Each issue is logged on the ``dep_licenses`` logger, counted per
    ``CATEGORY_LEVEL`` and handed to the callbacks registered for its
    category and to the global callbacks.
    """

    def __init__(
        self,
        logger_name: str = "dep_licenses",
        log_level: int = logging.WARNING,
        enable_callbacks: bool = True,
    ):
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(log_level)
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))
            self.logger.addHandler(handler)

        self.enable_callbacks = enable_callbacks
        self._callbacks: Dict[Optional[ErrorCategory], List[ErrorCallback]] = {}
        self._stats: Counter = Counter()

    def register_callback(
        self, callback: ErrorCallback, category: Optional[ErrorCategory] = None
    ) -> None:
        """
        Register a callback for issues of ``category``, or for every issue
        when no category is given.
        """
        if self.enable_callbacks:
            self._callbacks.setdefault(category, []).append(callback)

    def handle_error(
        self,
        level: ErrorLevel,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        exception: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> ErrorContext:
        """Record, log and dispatch one issue."""
        context = ErrorContext(
            level=level,
            category=category,
            message=message,
            module=module,
            function=function,
            details=details or {},
            exception=exception,
            traceback_info=traceback.format_exc() if exception else None,
        )
        self._stats[f"{category.value}_{level.value}"] += 1

        self.logger.log(
            level.logging_level,
            "%s [%s at %s] %s",
            message,
            category.value,
            context.location,
            context.details,
        )
        self._dispatch(context)
        return context

    def _dispatch(self, context: ErrorContext) -> None:
        if not self.enable_callbacks:
            return
        callbacks = self._callbacks.get(context.category, []) + self._callbacks.get(None, [])
        for callback in callbacks:
            try:
                callback(context)
            except Exception as cb_error:
                # A broken callback must not abort detection
                self.logger.error("Error in issue callback: %s", cb_error)

    def warning(
        self, category: ErrorCategory, message: str, module: str, function: str, **kwargs
    ) -> ErrorContext:
        return self.handle_error(ErrorLevel.WARNING, category, message, module, function, **kwargs)

    def error(
        self, category: ErrorCategory, message: str, module: str, function: str, **kwargs
    ) -> ErrorContext:
        return self.handle_error(ErrorLevel.ERROR, category, message, module, function, **kwargs)

    def get_error_stats(self) -> Dict[str, int]:
        """Issue counts keyed by ``CATEGORY_LEVEL``."""
        return dict(self._stats)


# Global error handler instance
_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the process-wide error handler."""
    global _global_error_handler
    if _global_error_handler is None:
        _global_error_handler = ErrorHandler()
    return _global_error_handler


def setup_error_handling(
    log_level: int = logging.WARNING,
    enable_callbacks: bool = True,
    logger_name: str = "dep_licenses",
) -> ErrorHandler:
    """Replace the process-wide error handler with a fresh one."""
    global _global_error_handler
    _global_error_handler = ErrorHandler(logger_name, log_level, enable_callbacks)
    return _global_error_handler


def _file_details(file_path: Optional[str], name_only: bool) -> Dict[str, Any]:
    if file_path is None:
        return {}
    return {"file_path": Path(file_path).name if name_only else str(file_path)}


def log_parsing_error(
    message: str,
    module: str,
    function: str,
    file_path: Optional[str] = None,
    exception: Optional[Exception] = None,
) -> ErrorContext:
    """Report a manifest that could not be parsed; its declaration is skipped."""
    return get_error_handler().warning(
        ErrorCategory.PARSING,
        message,
        module,
        function,
        details=_file_details(file_path, name_only=True),
        exception=exception,
    )


def log_filesystem_error(
    message: str,
    module: str,
    function: str,
    file_path: Optional[str] = None,
    exception: Optional[Exception] = None,
) -> ErrorContext:
    """Report an evidence file that was missing, unreadable or too large."""
    return get_error_handler().warning(
        ErrorCategory.FILESYSTEM,
        message,
        module,
        function,
        details=_file_details(file_path, name_only=False),
        exception=exception,
    )
