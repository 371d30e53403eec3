"""Content-addressed file store with a private staging area.

Uploads land in the staging directory first and only reach a permanent
directory through ContentStore.commit(), which renames the staged file to
its SHA-256 digest. The rename is atomic, so readers never see a partial
permanent file, and identical bytes always resolve to one stored file.

Structure:
    <app_data>/tmp/upload-XXXXXXXX      staged, private to one request
    <app_data>/consignments/<sha256>    permanent
    <app_data>/media/<sha256>           permanent
"""

from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from functools import cached_property
from pathlib import Path
from typing import BinaryIO

from rgbproxy.infra.hashing import hash_file, is_content_hash
from rgbproxy.observability.logging import get_logger

logger = get_logger(__name__)

_STAGED_PREFIX = "upload-"


class ContentNotFound(Exception):
    """Raised when no permanent file matches a content hash."""

    def __init__(self, content_hash: str):
        self.content_hash = content_hash
        super().__init__(f"Content not found: {content_hash}")


class StagedUpload:
    """An uploaded byte stream parked in the staging directory."""

    def __init__(self, path: Path, size: int):
        self.path = path
        self.size = size
        self.committed = False

    @cached_property
    def content_hash(self) -> str:
        return hash_file(self.path)

    def discard(self) -> bool:
        """Remove the staged file. Returns False if it was already gone."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True

    def __repr__(self) -> str:
        return f"StagedUpload(path={str(self.path)!r}, size={self.size})"


class StagingArea:
    """Temporary home for uploads until they are committed or discarded."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def stage(self, source: BinaryIO) -> StagedUpload:
        """Copy a binary stream into a new staged file.

        The copy is flushed and fsync'd before returning. A failed copy
        leaves nothing behind.
        """
        fd, name = tempfile.mkstemp(prefix=_STAGED_PREFIX, dir=self.directory)
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as fh:
                shutil.copyfileobj(source, fh)
                fh.flush()
                os.fsync(fh.fileno())
                size = fh.tell()
        except BaseException:
            path.unlink(missing_ok=True)
            raise
        return StagedUpload(path, size)

    @contextmanager
    def scoped(self, source: BinaryIO) -> Iterator[StagedUpload]:
        """Stage `source` for the duration of a request.

        Whatever happens inside the block, the staged file no longer exists
        once the block exits. Uploads that were neither committed nor
        discarded are removed with a warning.
        """
        staged = self.stage(source)
        try:
            yield staged
        finally:
            if not staged.committed and staged.discard():
                logger.warning(
                    "Deleting unhandled file",
                    extra={"extra_fields": {"file": staged.path.name}},
                )

    def pending(self) -> list[Path]:
        """List staged files currently on disk."""
        return sorted(self.directory.glob(f"{_STAGED_PREFIX}*"))


class ContentStore:
    """Permanent content-addressed directory for one record kind."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, content_hash: str) -> Path:
        """Get filesystem path for a content hash.

        Raises:
            ValueError: If content_hash is not a SHA-256 hex digest.
        """
        if not is_content_hash(content_hash):
            raise ValueError(f"Not a content hash: {content_hash!r}")
        return self.directory / content_hash

    def exists(self, content_hash: str) -> bool:
        return self.path_for(content_hash).exists()

    def commit(self, staged: StagedUpload) -> tuple[str, Path]:
        """Move a staged upload to its permanent, content-derived location.

        If a file with the same digest is already stored, the staged copy is
        dropped instead.

        Returns:
            Tuple of (content_hash, permanent path).
        """
        content_hash = staged.content_hash
        target = self.path_for(content_hash)

        if target.exists():
            staged.path.unlink(missing_ok=True)
        else:
            # Same filesystem as the staging area: rename is atomic
            os.replace(staged.path, target)

        staged.committed = True
        return content_hash, target

    def read(self, content_hash: str) -> bytes:
        """Return the stored bytes for a content hash.

        Raises:
            ContentNotFound: If no permanent file matches.
        """
        path = self.path_for(content_hash)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise ContentNotFound(content_hash) from None
