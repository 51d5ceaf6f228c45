"""Context managers for structured logging."""

from typing import Dict, Optional

from authcore.logging.context import get_log_context, set_log_context


class LogContext:
    """
    Context manager for temporary log context.

    Usage:
        with LogContext(provider=manager.id(), operation="refresh"):
            # All logs in this block carry provider and operation
            await manager.refresh_credentials()
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        account_id: Optional[str] = None,
        operation: Optional[str] = None,
        trace_id: Optional[str] = None,
    ):
        self.new_context = {
            "provider": provider,
            "account_id": account_id,
            "operation": operation,
            "trace_id": trace_id,
        }
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "LogContext":
        self.old_context = get_log_context()
        set_log_context(**self.new_context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        set_log_context(**self.old_context)
        return False
