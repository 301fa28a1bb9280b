"""
Error handling and logging utilities for Battle Backgrounds.

This module defines the exception taxonomy used across the package and a
standardized approach for logging, collecting and reporting errors. Load-time
errors abort construction of the ROM catalog; decode-time errors are raised
once to the caller, who decides whether to skip, substitute or abort.
"""

import logging
import sys
import os
import traceback
import json
import datetime
from typing import Dict, List, Any, Optional, Callable
from enum import Enum, auto
import threading
from functools import wraps

# Configure base logger
logger = logging.getLogger("BattleBackgrounds")

class ErrorLevel(Enum):
    """Error severity levels."""
    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()
    CRITICAL = auto()

class ErrorCategory(Enum):
    """Categories of errors."""
    LOAD = auto()
    DECODE = auto()
    CONFIGURATION = auto()
    INPUT = auto()
    RENDER = auto()
    UNKNOWN = auto()

class DecompressionErrorCode(Enum):
    """Malformation codes reported by the decompression codec."""
    UNEXPECTED_END = auto()
    UNKNOWN_COMMAND = auto()
    NEGATIVE_SOURCE = auto()
    OUTPUT_OVERFLOW = auto()
    SOURCE_OUT_OF_RANGE = auto()
    EMPTY_OUTPUT = auto()
    SIZE_MISMATCH = auto()
    INVALID_SIZE = auto()


class BattleBackgroundError(Exception):
    """Base class for all errors raised by the package."""
    category = ErrorCategory.UNKNOWN

class AddressOutOfRange(BattleBackgroundError, ValueError):
    """An SNES address or file offset lies outside the mappable ranges."""
    category = ErrorCategory.LOAD

class InvalidBitDepthError(BattleBackgroundError, ValueError):
    """A palette or graphics set was requested with an unsupported bit depth."""
    category = ErrorCategory.LOAD

class InconsistentBitDepthError(BattleBackgroundError):
    """Two background entries disagree on the bit depth of a shared asset."""
    category = ErrorCategory.LOAD

class InvalidSubpaletteCountError(BattleBackgroundError, ValueError):
    """A palette was read with a non-positive number of subpalettes."""
    category = ErrorCategory.LOAD

class ConfigurationError(BattleBackgroundError, ValueError):
    """Settings that pass individual validation but do not fit together."""
    category = ErrorCategory.CONFIGURATION

class DecompressionError(BattleBackgroundError):
    """
    A compressed stream is malformed.

    Attributes:
        code: DecompressionErrorCode describing the malformation
        position: Stream offset (or output offset) where it was detected
    """
    category = ErrorCategory.DECODE

    def __init__(self, code: DecompressionErrorCode, message: str, position: Optional[int] = None):
        super().__init__(f"{message} ({code.name})")
        self.code = code
        self.position = position


class ErrorHandler:
    """
    Centralized error handling and logging for Battle Backgrounds.

    Captures errors with their level and category, keeps a bounded history
    and can export it as a JSON report.
    """

    def __init__(self,
                log_file: Optional[str] = None,
                console_level: int = logging.INFO,
                file_level: int = logging.DEBUG,
                report_errors: bool = True,
                max_error_history: int = 100):
        """
        Initialize the error handler.

        Args:
            log_file: Path to log file (None for no file logging)
            console_level: Logging level for console output
            file_level: Logging level for file output
            report_errors: Whether to collect error reports
            max_error_history: Maximum number of errors to keep in history
        """
        self.log_file = log_file
        self.console_level = console_level
        self.file_level = file_level
        self.report_errors = report_errors
        self.max_error_history = max_error_history

        # Error history
        self.error_history = []
        self.error_history_lock = threading.Lock()

        # Error handlers by category
        self.error_handlers = {}

    def configure_logging(self) -> None:
        """Attach console (and optional file) handlers to the package logger."""
        logger.handlers = []
        logger.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.console_level)
        console_format = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_format)
        logger.addHandler(console_handler)

        if self.log_file:
            log_dir = os.path.dirname(self.log_file)
            if log_dir and not os.path.exists(log_dir):
                os.makedirs(log_dir)

            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(self.file_level)
            file_format = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
            file_handler.setFormatter(file_format)
            logger.addHandler(file_handler)

    def handle_error(self,
                  exception: Optional[Exception] = None,
                  message: Optional[str] = None,
                  level: ErrorLevel = ErrorLevel.ERROR,
                  category: Optional[ErrorCategory] = None,
                  context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Handle an error.

        Args:
            exception: Exception object
            message: Error message
            level: Error severity level
            category: Error category (taken from the exception when omitted)
            context: Additional context

        Returns:
            Error information dictionary
        """
        if category is None:
            category = getattr(exception, "category", ErrorCategory.UNKNOWN)

        if message is None:
            message = str(exception) if exception else "Unknown error"

        error_info = {
            "timestamp": datetime.datetime.now().isoformat(),
            "level": level.name,
            "category": category.name,
            "message": message,
            "exception_type": exception.__class__.__name__ if exception else None,
            "code": exception.code.name if isinstance(exception, DecompressionError) else None,
            "traceback": traceback.format_exc() if exception else None,
            "context": context or {}
        }

        log_level = getattr(logging, level.name)
        logger.log(log_level, f"{message} ({category.name})")

        if exception and log_level >= logging.ERROR:
            logger.debug(f"Traceback: {error_info['traceback']}")

        if self.report_errors:
            with self.error_history_lock:
                self.error_history.append(error_info)

                if len(self.error_history) > self.max_error_history:
                    self.error_history = self.error_history[-self.max_error_history:]

        handler = self.error_handlers.get(category)
        if handler:
            handler(error_info)

        return error_info

    def register_handler(self, category: ErrorCategory, handler: Callable[[Dict[str, Any]], None]) -> None:
        """
        Register a handler for a specific error category.

        Args:
            category: Error category
            handler: Handler function
        """
        self.error_handlers[category] = handler
        logger.debug(f"Registered handler for {category.name} errors")

    def clear_error_history(self) -> None:
        """Clear the error history."""
        with self.error_history_lock:
            self.error_history = []

    def get_error_history(self,
                         level: Optional[ErrorLevel] = None,
                         category: Optional[ErrorCategory] = None) -> List[Dict[str, Any]]:
        """
        Get error history, optionally filtered.

        Args:
            level: Filter by error level
            category: Filter by error category

        Returns:
            List of error dictionaries
        """
        with self.error_history_lock:
            errors = self.error_history.copy()

        if level:
            errors = [e for e in errors if e["level"] == level.name]

        if category:
            errors = [e for e in errors if e["category"] == category.name]

        return errors

    def get_error_summary(self) -> Dict[str, Any]:
        """
        Get a summary of errors by category, level and decompression code.

        Returns:
            Dictionary with error summary
        """
        with self.error_history_lock:
            errors = self.error_history.copy()

        categories = {}
        levels = {}
        codes = {}
        for e in errors:
            categories[e["category"]] = categories.get(e["category"], 0) + 1
            levels[e["level"]] = levels.get(e["level"], 0) + 1
            if e.get("code"):
                codes[e["code"]] = codes.get(e["code"], 0) + 1

        return {
            "total": len(errors),
            "by_category": categories,
            "by_level": levels,
            "by_code": codes,
            "latest": errors[-1] if errors else None
        }

    def export_error_report(self, filename: str) -> bool:
        """
        Export error history to a JSON file.

        Args:
            filename: Output filename

        Returns:
            True if successful, False otherwise
        """
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with self.error_history_lock:
            errors = self.error_history.copy()

        report = {
            "timestamp": datetime.datetime.now().isoformat(),
            "summary": self.get_error_summary(),
            "errors": errors
        }

        try:
            with open(filename, 'w') as f:
                json.dump(report, f, indent=2, default=str)
        except OSError as e:
            logger.error(f"Error exporting error report: {e}")
            return False

        logger.info(f"Exported error report to {filename}")
        return True

    def log_exception(self, exception: Exception,
                    message: Optional[str] = None,
                    category: Optional[ErrorCategory] = None,
                    context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Log an exception at ERROR level.

        Args:
            exception: Exception object
            message: Error message
            category: Error category
            context: Additional context

        Returns:
            Error information dictionary
        """
        return self.handle_error(
            exception=exception,
            message=message,
            level=ErrorLevel.ERROR,
            category=category,
            context=context
        )

    def log_warning(self, message: str,
                  category: ErrorCategory = ErrorCategory.UNKNOWN,
                  context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Log a warning message."""
        return self.handle_error(
            message=message,
            level=ErrorLevel.WARNING,
            category=category,
            context=context
        )


# Global error handler instance
error_handler = ErrorHandler()

def error_boundary(category: ErrorCategory = ErrorCategory.UNKNOWN):
    """
    Decorator for catching and reporting package errors.

    Errors are recorded through the global error handler. LOAD errors are
    re-raised since nothing can be rendered without a valid catalog; any other
    BattleBackgroundError makes the wrapped function return None.

    Args:
        category: Error category used when the exception carries none

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except BattleBackgroundError as e:
                effective = e.category if e.category != ErrorCategory.UNKNOWN else category
                error_handler.log_exception(
                    exception=e,
                    message=f"Error in {func.__name__}: {e}",
                    category=effective,
                    context={"function": func.__name__, "module": func.__module__}
                )

                if effective == ErrorCategory.LOAD:
                    raise

                return None

        return wrapper
    return decorator
