"""RPC method handlers and the method table.

Handlers receive the service, their validated params and the request's
staged upload (None unless the method takes a file). They return plain
JSON-able values or raise RpcError subclasses.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Callable

from rgbproxy import PROTOCOL_VERSION, __version__
from rgbproxy.domain.acks import get_ack, set_ack
from rgbproxy.domain.consignments import fetch_consignment, post_consignment
from rgbproxy.domain.media import fetch_media, post_media
from rgbproxy.infra.content_store import StagedUpload
from rgbproxy.rpc.params import (
    AckPostParams,
    AttachmentParams,
    ConsignmentPostParams,
    RecipientParams,
    RpcParams,
)
from rgbproxy.service import RelayService

Handler = Callable[[RelayService, Any, "StagedUpload | None"], Any]


@dataclass(frozen=True)
class Method:
    handler: Handler
    params: type[RpcParams] | None = None
    requires_upload: bool = False
    # report a missing file before any param error
    file_checked_first: bool = False


def server_info(service: RelayService, _params: None, _upload: StagedUpload | None) -> dict:
    return {
        "version": __version__,
        "protocol_version": PROTOCOL_VERSION,
        "uptime": service.uptime(),
    }


def consignment_get(
    service: RelayService, params: RecipientParams, _upload: StagedUpload | None
) -> dict:
    download = fetch_consignment(service, params.recipient_id)
    record = download.record
    result: dict[str, Any] = {
        "consignment": base64.b64encode(download.content).decode("ascii"),
        "txid": record.txid,
    }
    if record.vout is not None:
        result["vout"] = record.vout
    if record.sender_amount is not None:
        result["sender_amount"] = record.sender_amount
    return result


def consignment_post(
    service: RelayService, params: ConsignmentPostParams, upload: StagedUpload
) -> bool:
    return post_consignment(
        service,
        recipient_id=params.recipient_id,
        txid=params.txid,
        vout=params.vout,
        sender_amount=params.sender_amount,
        staged=upload,
    )


def media_get(service: RelayService, params: AttachmentParams, _upload: StagedUpload | None) -> str:
    return base64.b64encode(fetch_media(service, params.attachment_id)).decode("ascii")


def media_post(service: RelayService, params: AttachmentParams, upload: StagedUpload) -> bool:
    return post_media(service, attachment_id=params.attachment_id, staged=upload)


def ack_get(service: RelayService, params: RecipientParams, _upload: StagedUpload | None) -> bool | None:
    return get_ack(service, params.recipient_id)


def ack_post(service: RelayService, params: AckPostParams, _upload: StagedUpload | None) -> bool:
    return set_ack(service, params.recipient_id, params.ack)


METHODS: dict[str, Method] = {
    "server.info": Method(server_info),
    "consignment.get": Method(consignment_get, RecipientParams),
    "consignment.post": Method(
        consignment_post, ConsignmentPostParams, requires_upload=True, file_checked_first=True
    ),
    "media.get": Method(media_get, AttachmentParams),
    "media.post": Method(media_post, AttachmentParams, requires_upload=True),
    "ack.get": Method(ack_get, RecipientParams),
    "ack.post": Method(ack_post, AckPostParams),
}
