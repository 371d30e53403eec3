"""Insert-once binding of a key to uploaded content.

Shared by consignments and media. A key is bound to the content hash of
its first accepted upload, forever:

- fresh key: the record is inserted and the upload committed to the store
- same key, same bytes: quiet duplicate, the new upload is discarded
- same key, other bytes: CannotChangeUploadedFile, original untouched
"""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy.engine import Connection, Engine

from rgbproxy.errors import CannotChangeUploadedFile
from rgbproxy.infra.content_store import ContentStore, StagedUpload
from rgbproxy.infra.db import txn


class RecordVanishedError(Exception):
    """Insert reported a conflict but the conflicting row is not readable."""

    pass


def record_upload(
    engine: Engine,
    store: ContentStore,
    staged: StagedUpload,
    *,
    insert: Callable[[Connection, str], bool],
    lookup: Callable[[Connection], str | None],
) -> bool:
    """Bind a staged upload to a key exactly once.

    The insert runs first, inside the transaction, and the unique constraint
    on the key decides the winner. The winner commits the staged file before
    the transaction commits, so a visible record always has its file. A
    failed file commit rolls the insert back.

    Args:
        engine: Database engine.
        store: Permanent content store for this record kind.
        staged: The request's staged upload.
        insert: Inserts the record with the given filename; returns True if
            a row was inserted.
        lookup: Returns the filename currently bound to the key, or None.

    Returns:
        True if the key was newly bound, False for an identical resubmission.

    Raises:
        CannotChangeUploadedFile: If the key is bound to different content.
    """
    content_hash = staged.content_hash

    with txn(engine) as conn:
        if insert(conn, content_hash):
            store.commit(staged)
            return True
        existing = lookup(conn)

    if existing is None:
        raise RecordVanishedError("record conflict reported but no row found")

    if existing != content_hash:
        raise CannotChangeUploadedFile()

    staged.discard()
    return False
