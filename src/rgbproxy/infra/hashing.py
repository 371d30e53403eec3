"""Content hashing for the content-addressed store.

- SHA-256 over the raw bytes, rendered as lowercase hex
- The digest is the stored file's name, so equal bytes share one file
"""

import hashlib
import re
from pathlib import Path
from typing import BinaryIO

_CHUNK_SIZE = 64 * 1024

_DIGEST_PATTERN = re.compile(r"^[0-9a-f]{64}$")


def hash_bytes(content: bytes) -> str:
    """Return the content address of an in-memory payload."""
    return hashlib.sha256(content).hexdigest()


def hash_stream(stream: BinaryIO) -> str:
    """Return the content address of a binary stream, read to EOF in chunks."""
    digest = hashlib.sha256()
    for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
        digest.update(chunk)
    return digest.hexdigest()


def hash_file(path: Path) -> str:
    """Return the content address of a file on disk.

    Raises:
        FileNotFoundError: If path does not exist.
    """
    with open(path, "rb") as fh:
        return hash_stream(fh)


def is_content_hash(value: str) -> bool:
    """True if value has the shape of a content address."""
    return bool(_DIGEST_PATTERN.match(value))
