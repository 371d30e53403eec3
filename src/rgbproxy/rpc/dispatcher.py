"""JSON-RPC 2.0 dispatcher.

Routes one request object to its handler and wraps the outcome in a
response envelope. Handlers never see the envelope and the transport never
sees handler exceptions.
"""

from __future__ import annotations

from typing import Any

from rgbproxy.errors import (
    InternalError,
    InvalidRequest,
    MethodNotFound,
    MissingFile,
    RpcError,
)
from rgbproxy.infra.content_store import StagedUpload
from rgbproxy.observability.logging import get_logger
from rgbproxy.rpc.methods import METHODS, Method
from rgbproxy.rpc.params import parse_params
from rgbproxy.service import RelayService

logger = get_logger(__name__)

JSONRPC_VERSION = "2.0"


def success_response(request_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: Any, error: RpcError, data: Any = None) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": error.to_dict(data)}


class Dispatcher:
    """Method table bound to one RelayService."""

    def __init__(self, service: RelayService, methods: dict[str, Method] | None = None):
        self.service = service
        self.methods = METHODS if methods is None else methods

    def dispatch(
        self,
        request: Any,
        upload: StagedUpload | None = None,
    ) -> dict[str, Any] | None:
        """Handle one JSON-RPC request.

        Args:
            request: Decoded request object.
            upload: The request's staged upload, if a file part was sent.

        Returns:
            Response envelope, or None for a notification (no "id").
        """
        if not isinstance(request, dict):
            return error_response(None, InvalidRequest())

        request_id = request.get("id")
        is_notification = "id" not in request
        params = request.get("params")

        if request.get("jsonrpc") != JSONRPC_VERSION or not isinstance(
            request.get("method"), str
        ):
            return error_response(request_id, InvalidRequest())

        try:
            result = self.call(request["method"], params, upload)
        except RpcError as exc:
            response = error_response(request_id, exc, params)
        except Exception:
            logger.exception(
                "Unhandled error in RPC handler",
                extra={"extra_fields": {"method": request["method"]}},
            )
            response = error_response(request_id, InternalError())
        else:
            response = success_response(request_id, result)

        return None if is_notification else response

    def call(self, name: str, params: Any, upload: StagedUpload | None = None) -> Any:
        """Validate params and run the handler for `name`.

        Raises:
            MethodNotFound: If `name` is not in the method table.
            RpcError: Validation, not-found and conflict errors.
        """
        method = self.methods.get(name)
        if method is None:
            raise MethodNotFound()

        missing_file = method.requires_upload and upload is None
        if missing_file and method.file_checked_first:
            raise MissingFile()

        typed = parse_params(method.params, params) if method.params is not None else None

        if missing_file:
            raise MissingFile()

        return method.handler(self.service, typed, upload)
