"""Request id management for log correlation."""

import threading
from contextvars import ContextVar, Token

# Context variable for request id - accessible across threadpool calls
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "logger-req-id"

_counter_lock = threading.Lock()
_last_request_id = 0


def next_request_id(incoming: str | None = None) -> str:
    """Return the request id for a new request.

    A numeric incoming id is reused and the process-wide counter continues
    from it. Without one, the counter advances. Any other incoming value is
    reused as-is and leaves the counter alone.
    """
    global _last_request_id
    with _counter_lock:
        if incoming:
            if incoming.isdecimal():
                _last_request_id = int(incoming)
            return incoming
        _last_request_id += 1
        return str(_last_request_id)


def get_request_id() -> str:
    """Get current request id from context."""
    return request_id_var.get()


def set_request_id(rid: str) -> Token[str]:
    """Set request id in context."""
    return request_id_var.set(rid)


def reset_request_id(token: Token[str]) -> None:
    """Reset request id to previous value."""
    request_id_var.reset(token)
