"""JSON-RPC endpoint.

One request per call, either as an application/json body or as a form
(multipart/form-data or urlencoded) with the JSON-RPC members as fields.
params may be sent JSON-encoded as a string in any body type. Multipart
bodies may carry an optional "file" part with the upload.
"""

import json
from typing import Any, BinaryIO

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile

from rgbproxy.errors import InternalError, ParseError
from rgbproxy.observability.logging import get_logger
from rgbproxy.observability.redaction import summarize_entries, summarize_response
from rgbproxy.rpc.dispatcher import Dispatcher, error_response

router = APIRouter()

logger = get_logger(__name__)

_FORM_MEMBERS = ("jsonrpc", "id", "method", "params")

_FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


class _MalformedParams(ValueError):
    pass


def _decode_params(payload: Any) -> Any:
    """Decode params sent as a JSON-encoded string, whatever the body type."""
    if isinstance(payload, dict) and isinstance(payload.get("params"), str):
        try:
            payload["params"] = json.loads(payload["params"])
        except ValueError:
            raise _MalformedParams(payload["params"]) from None
    return payload


def _payload_from_form(form: FormData) -> dict[str, Any]:
    """Rebuild the JSON-RPC request object from form fields."""
    return _decode_params({k: form[k] for k in _FORM_MEMBERS if k in form})


def _dispatch(
    dispatcher: Dispatcher,
    payload: Any,
    source: BinaryIO | None,
) -> dict[str, Any] | None:
    """Run one request, staging the upload for exactly its duration."""
    if source is None:
        return dispatcher.dispatch(payload)

    request_id = payload.get("id") if isinstance(payload, dict) else None
    try:
        with dispatcher.service.staging.scoped(source) as staged:
            return dispatcher.dispatch(payload, staged)
    except OSError:
        logger.exception("Failed to stage upload")
        return error_response(request_id, InternalError())


def _log_call(payload: Any, envelope: dict[str, Any] | None) -> None:
    fields: dict[str, Any] = {"response": summarize_response(envelope)}
    if isinstance(payload, dict):
        fields["apiMethod"] = payload.get("method")
        fields["clientID"] = payload.get("id")
        if isinstance(payload.get("params"), dict):
            fields["reqParams"] = summarize_entries(payload["params"])
    logger.info("rpc call", extra={"extra_fields": fields})


@router.post("/json-rpc")
async def json_rpc(request: Request) -> Response:
    """Receive one JSON-RPC 2.0 request.

    Returns:
        200 with the response envelope.
        204 for notifications (request without "id").
    """
    dispatcher: Dispatcher = request.app.state.dispatcher
    content_type = request.headers.get("content-type", "")

    payload: Any = None
    envelope: dict[str, Any] | None

    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        try:
            payload = _payload_from_form(form)
            upload = form.get("file")
            source = upload.file if isinstance(upload, UploadFile) else None
            envelope = await run_in_threadpool(_dispatch, dispatcher, payload, source)
        except _MalformedParams:
            envelope = error_response(None, ParseError())
        finally:
            await form.close()
    else:
        try:
            payload = _decode_params(await request.json())
        except ValueError:
            envelope = error_response(None, ParseError())
        else:
            envelope = await run_in_threadpool(_dispatch, dispatcher, payload, None)

    _log_call(payload, envelope)

    if envelope is None:
        return Response(status_code=204)
    return JSONResponse(envelope)
