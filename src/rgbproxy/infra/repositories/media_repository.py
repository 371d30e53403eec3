"""Media repository - persistence for media attachment records."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.engine import Connection

from rgbproxy.infra.db import fetchone


@dataclass(frozen=True)
class MediaRecord:
    attachment_id: str
    filename: str


def get_media(conn: Connection, attachment_id: str) -> MediaRecord | None:
    """Fetch the media record bound to attachment_id, or None."""
    row = fetchone(
        conn,
        "SELECT attachment_id, filename FROM media WHERE attachment_id = :attachment_id",
        {"attachment_id": attachment_id},
    )
    if row is None:
        return None
    return MediaRecord(attachment_id=row["attachment_id"], filename=row["filename"])


def insert_media(conn: Connection, *, attachment_id: str, filename: str) -> bool:
    """Insert a media record unless attachment_id is already taken.

    Returns:
        True if the row was inserted, False if attachment_id already existed.
    """
    result = conn.execute(
        text(
            """
            INSERT INTO media (attachment_id, filename)
            VALUES (:attachment_id, :filename)
            ON CONFLICT (attachment_id) DO NOTHING
            """
        ),
        {"attachment_id": attachment_id, "filename": filename},
    )
    return result.rowcount == 1
