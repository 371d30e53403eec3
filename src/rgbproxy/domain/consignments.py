"""Consignment relay: upload once per recipient, download by recipient."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rgbproxy.domain.uploads import record_upload
from rgbproxy.errors import NotFoundConsignment
from rgbproxy.infra.content_store import StagedUpload
from rgbproxy.infra.db import txn
from rgbproxy.infra.repositories.consignments_repository import (
    ConsignmentRecord,
    get_consignment,
    insert_consignment,
)
from rgbproxy.service import RelayService


@dataclass(frozen=True)
class ConsignmentDownload:
    record: ConsignmentRecord
    content: bytes


def post_consignment(
    service: RelayService,
    *,
    recipient_id: str,
    txid: str,
    staged: StagedUpload,
    vout: int | None = None,
    sender_amount: dict[str, Any] | None = None,
) -> bool:
    """Bind an uploaded consignment to recipient_id.

    Returns:
        True if newly recorded, False if the same bytes were already
        recorded for recipient_id.

    Raises:
        CannotChangeUploadedFile: If recipient_id holds different content.
    """

    def _insert(conn, filename: str) -> bool:
        return insert_consignment(
            conn,
            recipient_id=recipient_id,
            filename=filename,
            txid=txid,
            vout=vout,
            sender_amount=sender_amount,
        )

    def _lookup(conn) -> str | None:
        existing = get_consignment(conn, recipient_id)
        return existing.filename if existing else None

    return record_upload(
        service.engine,
        service.consignments,
        staged,
        insert=_insert,
        lookup=_lookup,
    )


def find_consignment(service: RelayService, recipient_id: str) -> ConsignmentRecord:
    """Fetch a consignment record.

    Raises:
        NotFoundConsignment: If recipient_id has no consignment.
    """
    with txn(service.engine) as conn:
        record = get_consignment(conn, recipient_id)
    if record is None:
        raise NotFoundConsignment()
    return record


def fetch_consignment(service: RelayService, recipient_id: str) -> ConsignmentDownload:
    """Fetch a consignment record together with its stored bytes.

    Raises:
        NotFoundConsignment: If recipient_id has no consignment.
        ContentNotFound: If the record's file is missing from the store.
    """
    record = find_consignment(service, recipient_id)
    return ConsignmentDownload(record=record, content=service.consignments.read(record.filename))
