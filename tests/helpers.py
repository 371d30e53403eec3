"""Shared test helper functions for rgbproxy tests.

These are NOT fixtures - they are regular functions importable from any
test module.
"""

from __future__ import annotations

import io
import json
from typing import Any

from rgbproxy.infra.content_store import StagedUpload, StagingArea


def stage_bytes(staging: StagingArea, content: bytes) -> StagedUpload:
    """Stage an in-memory payload as if it had been uploaded."""
    return staging.stage(io.BytesIO(content))


def rpc_request(method: str, params: Any = None, request_id: Any = 1) -> dict:
    """Build a JSON-RPC 2.0 request object."""
    request: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        request["params"] = params
    return request


def rpc_form(method: str, params: Any = None, request_id: Any = "1") -> dict[str, str]:
    """Build the multipart form fields of a JSON-RPC upload request."""
    form = {"jsonrpc": "2.0", "id": str(request_id), "method": method}
    if params is not None:
        form["params"] = json.dumps(params)
    return form
