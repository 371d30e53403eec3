"""Error taxonomy surfaced to RPC callers.

Every failure a caller can provoke is an RpcError subclass with a stable
code and message. The dispatcher echoes the request params as error data.
"""

from __future__ import annotations

from typing import Any


class RpcError(Exception):
    """Base class for errors reported in a JSON-RPC error envelope."""

    code: int = -32603
    message: str = "Internal error"

    def __init__(self, data: Any = None):
        self.data = data
        super().__init__(self.message)

    def to_dict(self, data: Any = None) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        payload = self.data if self.data is not None else data
        if payload is not None:
            error["data"] = payload
        return error


# ── Protocol errors (JSON-RPC 2.0 reserved codes) ────────


class ParseError(RpcError):
    code = -32700
    message = "Parse error"


class InvalidRequest(RpcError):
    code = -32600
    message = "Invalid Request"


class MethodNotFound(RpcError):
    code = -32601
    message = "Method not found"


class InternalError(RpcError):
    code = -32603
    message = "Internal error"


# ── Validation errors ────────────────────────────────────


class MissingParam(RpcError):
    """A required param (or the uploaded file) is absent."""


class InvalidParam(RpcError):
    """A param is present but has the wrong shape."""


class MissingAck(MissingParam):
    code = -101
    message = "missing ack"


class MissingAttachmentID(MissingParam):
    code = -102
    message = "missing attachment_id"


class MissingFile(MissingParam):
    code = -103
    message = "missing file"


class MissingRecipientID(MissingParam):
    code = -104
    message = "missing recipient_id"


class MissingTxid(MissingParam):
    code = -105
    message = "missing txid"


class InvalidAck(InvalidParam):
    code = -201
    message = "invalid ack"


class InvalidAttachmentID(InvalidParam):
    code = -202
    message = "invalid attachment_id"


class InvalidRecipientID(InvalidParam):
    code = -203
    message = "invalid recipient_id"


class InvalidTxid(InvalidParam):
    code = -204
    message = "invalid txid"


class InvalidVout(InvalidParam):
    code = -205
    message = "invalid vout"


class InvalidSenderAmount(InvalidParam):
    code = -206
    message = "invalid sender_amount"


# ── Conflict errors ──────────────────────────────────────


class CannotChangeAck(RpcError):
    """The consignment already carries a different ack decision."""

    code = -300
    message = "cannot change ack"


class CannotChangeUploadedFile(RpcError):
    """The key is already bound to different content."""

    code = -301
    message = "cannot change uploaded file"


# ── Not-found errors ─────────────────────────────────────


class NotFoundConsignment(RpcError):
    code = -400
    message = "consignment not found"


class NotFoundMedia(RpcError):
    code = -401
    message = "media not found"
