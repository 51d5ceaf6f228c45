"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_provider: ContextVar[str] = ContextVar("provider", default="")
_account_id: ContextVar[str] = ContextVar("account_id", default="")
_operation: ContextVar[str] = ContextVar("operation", default="")
_trace_id: ContextVar[str] = ContextVar("trace_id", default="")


def set_log_context(
    provider: Optional[str] = None,
    account_id: Optional[str] = None,
    operation: Optional[str] = None,
    trace_id: Optional[str] = None,
) -> None:
    if provider is not None:
        _provider.set(provider)
    if account_id is not None:
        _account_id.set(account_id)
    if operation is not None:
        _operation.set(operation)
    if trace_id is not None:
        _trace_id.set(trace_id)


def get_log_context() -> Dict[str, str]:
    return {
        "provider": _provider.get(),
        "account_id": _account_id.get(),
        "operation": _operation.get(),
        "trace_id": _trace_id.get(),
    }


def clear_log_context() -> None:
    _provider.set("")
    _account_id.set("")
    _operation.set("")
    _trace_id.set("")
