"""Summaries of RPC params and results for request logs.

Payloads are opaque and may be large (base64 consignments), so logs only
ever carry a truncated rendering of each value.
"""

import json
from typing import Any

_TEXT_LIMIT = 16


def truncate_text(value: str, limit: int = _TEXT_LIMIT) -> str:
    """Cut a string to `limit` characters, marking the cut with '...'."""
    if not value:
        return ""
    if len(value) <= limit:
        return value
    return value[:limit] + "..."


def summarize_value(value: Any) -> str:
    """Render one value for logging."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, str):
        return truncate_text(value)
    if isinstance(value, dict):
        return json.dumps(value, default=str)
    if isinstance(value, (list, tuple)):
        return f"list(len={len(value)})"
    return str(value)


def summarize_entries(entries: dict[str, Any]) -> str:
    """Render a mapping as '<k: v, ...>' with every value summarized."""
    joined = ", ".join(f"{k}: {summarize_value(v)}" for k, v in entries.items())
    return f"<{joined}>"


def summarize_response(envelope: dict[str, Any] | None) -> str:
    """Render a JSON-RPC response envelope as 'res <...>' or 'err <...>'."""
    if envelope is None:
        return "no content"
    if "error" in envelope:
        error = envelope["error"]
        return f"err <code: {error['code']}, message: {error['message']}>"
    result = envelope.get("result")
    if isinstance(result, dict):
        return "res " + summarize_entries(result)
    return f"res <{summarize_value(result)}>"
