"""Media attachment relay: same binding rules as consignments, keyed by attachment_id."""

from __future__ import annotations

from rgbproxy.domain.uploads import record_upload
from rgbproxy.errors import NotFoundMedia
from rgbproxy.infra.content_store import StagedUpload
from rgbproxy.infra.db import txn
from rgbproxy.infra.repositories.media_repository import get_media, insert_media
from rgbproxy.service import RelayService


def post_media(service: RelayService, *, attachment_id: str, staged: StagedUpload) -> bool:
    """Bind an uploaded attachment to attachment_id.

    Raises:
        CannotChangeUploadedFile: If attachment_id holds different content.
    """

    def _lookup(conn) -> str | None:
        existing = get_media(conn, attachment_id)
        return existing.filename if existing else None

    return record_upload(
        service.engine,
        service.media,
        staged,
        insert=lambda conn, filename: insert_media(
            conn, attachment_id=attachment_id, filename=filename
        ),
        lookup=_lookup,
    )


def fetch_media(service: RelayService, attachment_id: str) -> bytes:
    """Return the stored bytes of an attachment.

    Raises:
        NotFoundMedia: If attachment_id has no media record.
    """
    with txn(service.engine) as conn:
        record = get_media(conn, attachment_id)
    if record is None:
        raise NotFoundMedia()
    return service.media.read(record.filename)
