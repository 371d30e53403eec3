"""Tests for the staging area and the content-addressed store."""

import io
from unittest.mock import patch

import pytest

from rgbproxy.infra.content_store import ContentNotFound, ContentStore, StagingArea
from rgbproxy.infra.hashing import hash_bytes

from .helpers import stage_bytes


@pytest.fixture
def staging(tmp_path):
    return StagingArea(tmp_path / "tmp")


@pytest.fixture
def store(tmp_path):
    return ContentStore(tmp_path / "consignments")


class TestStagingArea:
    def test_stage_writes_private_copy(self, staging):
        staged = stage_bytes(staging, b"payload")

        assert staged.path.parent == staging.directory
        assert staged.path.read_bytes() == b"payload"
        assert staged.size == len(b"payload")
        assert not staged.committed

    def test_each_upload_gets_its_own_file(self, staging):
        first = stage_bytes(staging, b"same")
        second = stage_bytes(staging, b"same")

        assert first.path != second.path
        assert len(staging.pending()) == 2

    def test_content_hash_of_staged_bytes(self, staging):
        staged = stage_bytes(staging, b"X")
        assert staged.content_hash == hash_bytes(b"X")

    def test_discard_is_idempotent(self, staging):
        staged = stage_bytes(staging, b"gone")

        assert staged.discard() is True
        assert staged.discard() is False
        assert staging.pending() == []

    def test_failed_copy_leaves_nothing(self, staging):
        class BrokenStream(io.RawIOBase):
            def readinto(self, _buffer):
                raise OSError("connection reset")

        with pytest.raises(OSError):
            staging.stage(BrokenStream())

        assert staging.pending() == []


class TestScopedStaging:
    def test_removes_uncommitted_upload_on_success(self, staging):
        with staging.scoped(io.BytesIO(b"abc")) as staged:
            assert staged.path.exists()

        assert not staged.path.exists()
        assert staging.pending() == []

    def test_removes_upload_on_exception(self, staging):
        with pytest.raises(RuntimeError):
            with staging.scoped(io.BytesIO(b"abc")):
                raise RuntimeError("handler failed")

        assert staging.pending() == []

    def test_committed_upload_leaves_no_staged_file(self, staging, store):
        with staging.scoped(io.BytesIO(b"abc")) as staged:
            content_hash, path = store.commit(staged)

        assert staging.pending() == []
        assert path.read_bytes() == b"abc"
        assert content_hash == hash_bytes(b"abc")

    def test_committed_upload_is_not_reported(self, staging, store):
        with patch("rgbproxy.infra.content_store.logger") as mock_logger:
            with staging.scoped(io.BytesIO(b"abc")) as staged:
                store.commit(staged)

        mock_logger.warning.assert_not_called()

    def test_deduplicated_commit_is_not_reported(self, staging, store):
        store.commit(stage_bytes(staging, b"abc"))

        with patch("rgbproxy.infra.content_store.logger") as mock_logger:
            with staging.scoped(io.BytesIO(b"abc")) as staged:
                store.commit(staged)

        mock_logger.warning.assert_not_called()
        assert staging.pending() == []

    def test_unhandled_upload_is_reported(self, staging):
        with patch("rgbproxy.infra.content_store.logger") as mock_logger:
            with staging.scoped(io.BytesIO(b"abc")):
                pass

        mock_logger.warning.assert_called_once()
        assert staging.pending() == []


class TestContentStore:
    def test_commit_names_file_by_hash(self, staging, store):
        staged = stage_bytes(staging, b"X")

        content_hash, path = store.commit(staged)

        assert content_hash == hash_bytes(b"X")
        assert path == store.directory / content_hash
        assert path.read_bytes() == b"X"
        assert staged.committed
        assert not staged.path.exists()

    def test_identical_bytes_stored_once(self, staging, store):
        first = stage_bytes(staging, b"dup")
        second = stage_bytes(staging, b"dup")

        hash_a, _ = store.commit(first)
        hash_b, _ = store.commit(second)

        assert hash_a == hash_b
        assert [p.name for p in store.directory.iterdir()] == [hash_a]
        assert staging.pending() == []

    def test_dedup_keeps_existing_file(self, staging, store):
        content_hash, path = store.commit(stage_bytes(staging, b"keep"))
        before = path.stat().st_ino

        store.commit(stage_bytes(staging, b"keep"))

        assert path.stat().st_ino == before

    def test_read_returns_stored_bytes(self, staging, store):
        content_hash, _ = store.commit(stage_bytes(staging, b"\x00\xffbinary"))
        assert store.read(content_hash) == b"\x00\xffbinary"

    def test_read_unknown_hash_raises(self, store):
        with pytest.raises(ContentNotFound):
            store.read(hash_bytes(b"never stored"))

    def test_rejects_non_hash_names(self, store):
        with pytest.raises(ValueError):
            store.read("../tmp/upload-abc")

    def test_exists(self, staging, store):
        content_hash, _ = store.commit(stage_bytes(staging, b"present"))

        assert store.exists(content_hash)
        assert not store.exists(hash_bytes(b"absent"))
