"""
Correlation IDs for tying log lines to one login attempt or one polling tick.
"""

import uuid
import contextvars
from typing import Optional, Dict, Any
from datetime import datetime, timezone

# Context variable to store correlation ID for the current operation
_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'correlation_id', default=None
)

# Context variable to store additional correlation context
_correlation_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    'correlation_context', default={}
)


class CorrelationIdManager:
    """Manager for correlation ID lifecycle and context propagation"""

    @staticmethod
    def generate_correlation_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def set_correlation_id(correlation_id: str) -> str:
        _correlation_id.set(correlation_id)
        return correlation_id

    @staticmethod
    def get_correlation_id() -> Optional[str]:
        return _correlation_id.get()

    @staticmethod
    def set_correlation_context(**kwargs) -> Dict[str, Any]:
        """Merge key-value pairs into the current correlation context."""
        current_context = _correlation_context.get().copy()
        current_context.update(kwargs)
        _correlation_context.set(current_context)
        return current_context

    @staticmethod
    def get_correlation_context() -> Dict[str, Any]:
        return _correlation_context.get().copy()


def create_correlation_context(service: str, operation: str, **additional_context) -> str:
    """
    Start a fresh correlation context for an operation.

    asyncio tasks copy the context at creation, so a context created inside a
    task never leaks into its siblings.

    Returns:
        Correlation ID for the created context
    """
    correlation_id = CorrelationIdManager.set_correlation_id(
        CorrelationIdManager.generate_correlation_id()
    )
    _correlation_context.set({})

    context = {
        "service": service,
        "operation": operation,
        "started_at": datetime.now(timezone.utc).isoformat()
    }
    context.update(additional_context)
    CorrelationIdManager.set_correlation_context(**context)

    return correlation_id
