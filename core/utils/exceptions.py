# Structured exception hierarchy for the MT5 account monitor

from typing import Dict, Any, Optional
from datetime import datetime, timezone


class MonitorException(Exception):
    """Base exception for all account monitor specific errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 correlation_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.correlation_id = correlation_id
        self.timestamp = datetime.now(timezone.utc)


class TransientError(MonitorException):
    """Errors that may clear up on a later attempt (network, upstream hiccups)"""
    pass


class PermanentError(MonitorException):
    """Errors that will repeat until the input changes"""
    pass


# Upstream API Errors
class UpstreamError(TransientError):
    """Base class for MT5 web API errors"""

    def __init__(self, message: str, endpoint: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.endpoint = endpoint


class UpstreamConnectionError(UpstreamError):
    """Transport-level failures talking to the MT5 web API"""
    pass


class UpstreamTimeoutError(UpstreamError):
    """The MT5 web API did not answer within the configured timeout"""
    pass


class UpstreamResponseError(UpstreamError):
    """The MT5 web API answered with an unusable response"""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 endpoint: Optional[str] = None, **kwargs):
        super().__init__(message, endpoint=endpoint, **kwargs)
        self.status_code = status_code


# Validation Errors
class ValidationError(PermanentError):
    """Input validation errors attributable to a single field"""

    def __init__(self, message: str, field: str, value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


def is_retryable_error(error: Exception) -> bool:
    """
    Determine if an error is worth retrying

    Returns:
        True if error is transient, False otherwise
    """
    return isinstance(error, TransientError)


def create_error_context(error: Exception, operation: str,
                         additional_context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Create structured error context for logging

    Args:
        error: The exception that occurred
        operation: The operation that failed
        additional_context: Additional context information

    Returns:
        Structured error context dictionary
    """
    context = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "operation": operation,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "retryable": is_retryable_error(error)
    }

    if isinstance(error, MonitorException):
        if error.correlation_id:
            context["correlation_id"] = error.correlation_id
        if error.details:
            context["error_details"] = error.details

        if isinstance(error, UpstreamError) and error.endpoint:
            context["endpoint"] = error.endpoint

        if isinstance(error, UpstreamResponseError) and error.status_code is not None:
            context["status_code"] = error.status_code

        if isinstance(error, ValidationError):
            context["field"] = error.field

    if additional_context:
        context.update(additional_context)

    return context
