"""Tests for insert-once binding of uploads (consignments and media)."""

import threading
from unittest.mock import patch

import pytest

from rgbproxy.domain.consignments import fetch_consignment, find_consignment, post_consignment
from rgbproxy.domain.media import fetch_media, post_media
from rgbproxy.errors import CannotChangeUploadedFile, NotFoundConsignment, NotFoundMedia
from rgbproxy.infra.db import txn
from rgbproxy.infra.hashing import hash_bytes
from rgbproxy.infra.repositories.consignments_repository import get_consignment

from .helpers import stage_bytes


def _post(service, recipient_id, content, txid="t1", **kwargs):
    staged = stage_bytes(service.staging, content)
    return post_consignment(service, recipient_id=recipient_id, txid=txid, staged=staged, **kwargs)


class TestPostConsignment:
    def test_first_post_records_and_stores(self, service):
        assert _post(service, "blindTest", b"X") is True

        record = find_consignment(service, "blindTest")
        assert record.filename == hash_bytes(b"X")
        assert service.consignments.read(record.filename) == b"X"
        assert service.staging.pending() == []

    def test_identical_resubmission_returns_false(self, service):
        assert _post(service, "blindTest", b"X") is True
        assert _post(service, "blindTest", b"X") is False

        assert list(service.consignments.directory.iterdir()) == [
            service.consignments.directory / hash_bytes(b"X")
        ]
        assert service.staging.pending() == []

    def test_different_content_raises_and_keeps_original(self, service):
        _post(service, "blindTest", b"X", txid="t1", vout=1)

        staged = stage_bytes(service.staging, b"Y")
        with pytest.raises(CannotChangeUploadedFile):
            post_consignment(service, recipient_id="blindTest", txid="t2", staged=staged)

        download = fetch_consignment(service, "blindTest")
        assert download.content == b"X"
        assert download.record.txid == "t1"
        assert download.record.vout == 1
        assert not service.consignments.exists(hash_bytes(b"Y"))
        # The caller's staging scope removes the rejected upload
        assert staged.path.exists()

    def test_same_bytes_for_two_recipients_share_one_file(self, service):
        assert _post(service, "alice", b"shared") is True
        assert _post(service, "bob", b"shared") is True

        assert len(list(service.consignments.directory.iterdir())) == 1
        assert find_consignment(service, "alice").filename == find_consignment(service, "bob").filename

    def test_sender_amount_round_trip(self, service):
        _post(service, "rcpt", b"Z", sender_amount={"value": "42"})
        assert find_consignment(service, "rcpt").sender_amount == {"value": "42"}

    def test_failed_file_commit_rolls_back_record(self, service):
        staged = stage_bytes(service.staging, b"X")

        with patch.object(service.consignments, "commit", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                post_consignment(service, recipient_id="rcpt", txid="t1", staged=staged)

        with txn(service.engine) as conn:
            assert get_consignment(conn, "rcpt") is None

    def test_concurrent_posts_bind_exactly_once(self, service):
        results: list[bool] = []
        errors: list[Exception] = []
        barrier = threading.Barrier(4)

        def worker():
            staged = stage_bytes(service.staging, b"race")
            barrier.wait()
            try:
                results.append(
                    post_consignment(service, recipient_id="racer", txid="t", staged=staged)
                )
            except Exception as exc:  # surfaced through the assertion below
                errors.append(exc)
            finally:
                staged.discard()

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sorted(results) == [False, False, False, True]
        assert service.staging.pending() == []


class TestFetchConsignment:
    def test_unknown_recipient(self, service):
        with pytest.raises(NotFoundConsignment):
            fetch_consignment(service, "nobody")


class TestMedia:
    def test_post_then_fetch(self, service):
        staged = stage_bytes(service.staging, b"image-bytes")
        assert post_media(service, attachment_id="att", staged=staged) is True
        assert fetch_media(service, "att") == b"image-bytes"

    def test_identical_resubmission(self, service):
        post_media(service, attachment_id="att", staged=stage_bytes(service.staging, b"img"))
        again = post_media(service, attachment_id="att", staged=stage_bytes(service.staging, b"img"))

        assert again is False
        assert service.staging.pending() == []

    def test_conflicting_resubmission(self, service):
        post_media(service, attachment_id="att", staged=stage_bytes(service.staging, b"img"))

        with pytest.raises(CannotChangeUploadedFile):
            post_media(service, attachment_id="att", staged=stage_bytes(service.staging, b"other"))

        assert fetch_media(service, "att") == b"img"

    def test_media_and_consignments_use_separate_directories(self, service):
        post_media(service, attachment_id="att", staged=stage_bytes(service.staging, b"same"))
        _post(service, "rcpt", b"same")

        content_hash = hash_bytes(b"same")
        assert service.media.exists(content_hash)
        assert service.consignments.exists(content_hash)
        assert service.media.directory != service.consignments.directory

    def test_unknown_attachment(self, service):
        with pytest.raises(NotFoundMedia):
            fetch_media(service, "missing")
