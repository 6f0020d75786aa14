"""
Centralized error handling and user feedback for the dashboard.

The dashboard has a single failure category, "data load failed". It is
raised by the data layer and surfaced verbatim in an inline banner. There
is no retry and no partial-data fallback.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """Raised when the marketing dataset cannot be fetched or parsed."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source = source

    def __str__(self) -> str:
        return self.message


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""
    DATA_LOAD = "data_load"
    SYSTEM_ERROR = "system_error"


@dataclass
class ErrorInfo:
    """Structured error information."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    user_message: str
    technical_details: Optional[str] = None
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()


class ErrorHandler:
    """
    Classifies errors, logs them and builds notifications for the UI.
    """

    max_history = 100

    def __init__(self):
        self.error_history = []

    def classify_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Classify an error and return appropriate ErrorInfo.

        Args:
            error: The exception to classify
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        if isinstance(error, DataLoadError):
            source = f" ({error.source})" if error.source else ""
            return ErrorInfo(
                category=ErrorCategory.DATA_LOAD,
                severity=ErrorSeverity.ERROR,
                message=f"Data load failed in {context}{source}: {error.message}",
                user_message=error.message,
                technical_details=repr(error.__cause__) if error.__cause__ else None,
            )

        return ErrorInfo(
            category=ErrorCategory.SYSTEM_ERROR,
            severity=ErrorSeverity.CRITICAL,
            message=f"Unexpected error in {context}: {str(error)}",
            user_message=str(error) or "Failed to load data",
            technical_details=repr(error),
        )

    def create_user_notification(self, error_info: ErrorInfo) -> Dict[str, Any]:
        """
        Create a notification dictionary for UI display.

        Args:
            error_info: Structured error information

        Returns:
            Dictionary with notification data
        """
        notification_type_map = {
            ErrorSeverity.INFO: "info",
            ErrorSeverity.WARNING: "warning",
            ErrorSeverity.ERROR: "error",
            ErrorSeverity.CRITICAL: "error"
        }

        notification = {
            'type': notification_type_map[error_info.severity],
            'title': self._get_error_title(error_info),
            'message': error_info.user_message,
            'timestamp': error_info.timestamp.isoformat(),
        }

        if error_info.technical_details and error_info.severity == ErrorSeverity.CRITICAL:
            notification['technical_details'] = error_info.technical_details

        return notification

    def _get_error_title(self, error_info: ErrorInfo) -> str:
        title_map = {
            ErrorCategory.DATA_LOAD: "Error loading data",
            ErrorCategory.SYSTEM_ERROR: "System Error",
        }
        return title_map.get(error_info.category, "Error")

    def log_error(self, error_info: ErrorInfo, context: str = ""):
        """
        Log error information and keep it in the recent history.

        Args:
            error_info: Structured error information
            context: Additional context
        """
        self.error_history.append(error_info)
        if len(self.error_history) > self.max_history:
            self.error_history = self.error_history[-self.max_history:]

        log_message = f"{context}: {error_info.message}"

        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message)
        elif error_info.severity == ErrorSeverity.ERROR:
            logger.error(log_message)
        elif error_info.severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        else:
            logger.info(log_message)

    def get_error_statistics(self) -> Dict[str, Any]:
        """Error counts for the last 24 hours, by category."""
        if not self.error_history:
            return {'total_errors': 0}

        recent_errors = [
            err for err in self.error_history
            if err.timestamp > datetime.now() - timedelta(hours=24)
        ]
        category_counts = {}
        for error in recent_errors:
            category_counts[error.category.value] = category_counts.get(error.category.value, 0) + 1

        return {
            'total_errors': len(self.error_history),
            'recent_errors_24h': len(recent_errors),
            'category_breakdown': category_counts,
        }


# Global error handler instance
error_handler = ErrorHandler()
