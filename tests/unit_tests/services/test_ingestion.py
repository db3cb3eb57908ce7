"""Ordering and failure behaviour of the ingestion coordinator."""
from unittest.mock import MagicMock

import pytest
import requests

from uploads_api.adapters.storage import BlobStore
from uploads_api.errors import BadInputError, BlobStoreError, NotFoundError, RepositoryError
from uploads_api.services.ingestion import IngestionCoordinator, make_link_key, make_upload_key
from tests.consts import TEST_FILE_CONTENT, TEST_FILE_CONTENT_TYPE, TEST_FILE_NAME, TEST_REMOTE_URL
from tests.fixtures.link_fixtures import fake_session, make_broken_response, make_remote_response


def fixed_clock(seconds: float = 1700000000.5):
    return lambda: seconds


class TestKeyNaming:
    def test_upload_key_is_timestamp_dash_name(self):
        assert make_upload_key("report.pdf", 1700000000500) == "1700000000500-report.pdf"

    @pytest.mark.parametrize(
        "original_name, expected",
        [
            ("../../etc/passwd", "1-passwd"),
            ("C:\\Users\\me\\scan.png", "1-scan.png"),
            ("", "1-upload"),
            (None, "1-upload"),
            ("..", "1-upload"),
        ],
    )
    def test_upload_key_keeps_only_the_last_path_component(self, original_name, expected):
        assert make_upload_key(original_name, 1) == expected

    def test_link_key(self):
        assert make_link_key(42) == "uploadlink-42"


class TestUploadFile:
    def test_stores_blob_then_records_it(self, local_blob_store, file_service, data_service):
        coordinator = IngestionCoordinator(
            local_blob_store, file_service, data_service, clock=fixed_clock()
        )

        record = coordinator.upload_file(
            TEST_FILE_CONTENT, TEST_FILE_NAME, TEST_FILE_CONTENT_TYPE, "alpha report"
        )

        assert record.file_name == "1700000000500-report.pdf"
        assert record.file_type == TEST_FILE_CONTENT_TYPE
        assert record.file_size == len(TEST_FILE_CONTENT)
        assert record.file_description == "alpha report"
        assert record.file_url == local_blob_store.url_for(record.file_name)
        assert (local_blob_store.storage_dir / record.file_name).read_bytes() == TEST_FILE_CONTENT
        assert file_service.get_file(record.id) == record

    def test_missing_payload_is_bad_input_and_touches_nothing(self, file_service, data_service):
        blob_store = MagicMock(spec=BlobStore)
        coordinator = IngestionCoordinator(blob_store, file_service, data_service)

        with pytest.raises(BadInputError):
            coordinator.upload_file(None, None, None)

        blob_store.put.assert_not_called()
        assert file_service.count_files() == 0

    def test_empty_payload_is_still_a_payload(self, coordinator, file_service):
        record = coordinator.upload_file(b"", "empty.txt", "text/plain")
        assert record.file_size == 0
        assert file_service.count_files() == 1

    def test_blob_failure_creates_no_record(self, file_service, data_service):
        blob_store = MagicMock(spec=BlobStore)
        blob_store.put.side_effect = BlobStoreError("Failed to store blob")
        coordinator = IngestionCoordinator(blob_store, file_service, data_service)

        with pytest.raises(BlobStoreError):
            coordinator.upload_file(TEST_FILE_CONTENT, TEST_FILE_NAME, TEST_FILE_CONTENT_TYPE)

        assert file_service.count_files() == 0

    def test_record_failure_leaves_the_blob_in_place(self, local_blob_store, data_service):
        file_service = MagicMock()
        file_service.create_file.side_effect = RepositoryError("Metadata store failed")
        coordinator = IngestionCoordinator(
            local_blob_store, file_service, data_service, clock=fixed_clock()
        )

        with pytest.raises(RepositoryError):
            coordinator.upload_file(TEST_FILE_CONTENT, TEST_FILE_NAME, TEST_FILE_CONTENT_TYPE)

        assert (local_blob_store.storage_dir / "1700000000500-report.pdf").exists()

    def test_missing_content_type_defaults_to_octet_stream(self, coordinator):
        record = coordinator.upload_file(b"abc", "blob.bin", None)
        assert record.file_type == "application/octet-stream"


class TestUploadLink:
    def test_streams_remote_body_into_blob_store(self, local_blob_store, file_service, data_service):
        session = fake_session(make_remote_response(b"remote bytes", content_type="text/plain"))
        coordinator = IngestionCoordinator(
            local_blob_store,
            file_service,
            data_service,
            http_session=session,
            fetch_timeout_seconds=3.0,
            clock=fixed_clock(),
        )

        url = coordinator.upload_link(TEST_REMOTE_URL)

        assert url == local_blob_store.url_for("uploadlink-1700000000500")
        assert (local_blob_store.storage_dir / "uploadlink-1700000000500").read_bytes() == b"remote bytes"
        session.get.assert_called_once_with(TEST_REMOTE_URL, stream=True, timeout=3.0)
        # no metadata on this path
        assert file_service.count_files() == 0

    def test_preserves_remote_content_type(self, file_service, data_service):
        blob_store = MagicMock(spec=BlobStore)
        blob_store.put_stream.return_value = "https://blobs.example.com/uploadlink-1"
        session = fake_session(make_remote_response(b"%PDF", content_type="application/pdf"))
        coordinator = IngestionCoordinator(blob_store, file_service, data_service, http_session=session)

        assert coordinator.upload_link(TEST_REMOTE_URL) == "https://blobs.example.com/uploadlink-1"

        key, _stream, content_type = blob_store.put_stream.call_args.args
        assert key.startswith("uploadlink-")
        assert content_type == "application/pdf"

    @pytest.mark.parametrize("link", [None, "", "   "])
    def test_missing_link_is_bad_input(self, coordinator, http_session, link):
        with pytest.raises(BadInputError):
            coordinator.upload_link(link)
        http_session.get.assert_not_called()

    @pytest.mark.parametrize("status_code", [201, 301, 404, 500])
    def test_non_200_is_bad_input_and_stores_nothing(self, file_service, data_service, status_code):
        blob_store = MagicMock(spec=BlobStore)
        session = fake_session(make_remote_response(b"nope", status_code=status_code))
        coordinator = IngestionCoordinator(blob_store, file_service, data_service, http_session=session)

        with pytest.raises(BadInputError):
            coordinator.upload_link(TEST_REMOTE_URL)

        blob_store.put_stream.assert_not_called()

    @pytest.mark.parametrize(
        "error",
        [requests.ConnectionError("refused"), requests.Timeout("slow"), requests.exceptions.InvalidSchema("ftp")],
    )
    def test_network_failure_is_bad_input(self, file_service, data_service, error):
        blob_store = MagicMock(spec=BlobStore)
        coordinator = IngestionCoordinator(
            blob_store, file_service, data_service, http_session=fake_session(error=error)
        )

        with pytest.raises(BadInputError):
            coordinator.upload_link(TEST_REMOTE_URL)

        blob_store.put_stream.assert_not_called()


class TestDeleteFile:
    def test_deletes_blob_and_record(self, coordinator, local_blob_store, file_service):
        record = coordinator.upload_file(TEST_FILE_CONTENT, TEST_FILE_NAME, TEST_FILE_CONTENT_TYPE)

        deleted = coordinator.delete_file(record.id)

        assert deleted == record
        assert file_service.get_file(record.id) is None
        assert not (local_blob_store.storage_dir / record.file_name).exists()

    def test_unknown_id_is_not_found_without_side_effects(self, file_service, data_service):
        blob_store = MagicMock(spec=BlobStore)
        coordinator = IngestionCoordinator(blob_store, file_service, data_service)

        with pytest.raises(NotFoundError):
            coordinator.delete_file("does-not-exist")

        blob_store.delete.assert_not_called()

    def test_blob_delete_failure_keeps_the_record(self, file_service, data_service):
        blob_store = MagicMock(spec=BlobStore)
        blob_store.put.return_value = "https://blobs.example.com/k"
        blob_store.delete.side_effect = BlobStoreError("Failed to delete blob")
        coordinator = IngestionCoordinator(blob_store, file_service, data_service)
        record = coordinator.upload_file(TEST_FILE_CONTENT, TEST_FILE_NAME, TEST_FILE_CONTENT_TYPE)

        with pytest.raises(BlobStoreError):
            coordinator.delete_file(record.id)

        assert file_service.get_file(record.id) == record

    def test_blob_is_deleted_before_the_record(self, data_service):
        calls = []
        blob_store = MagicMock(spec=BlobStore)
        blob_store.delete.side_effect = lambda key: calls.append(("blob", key))
        file_service = MagicMock()
        file_service.get_file.return_value = MagicMock(file_name="1-a.txt")
        file_service.delete_file.side_effect = lambda file_id: calls.append(("record", file_id)) or True
        coordinator = IngestionCoordinator(blob_store, file_service, data_service)

        coordinator.delete_file("abc")

        assert calls == [("blob", "1-a.txt"), ("record", "abc")]


class TestDataItems:
    def test_add_and_delete(self, coordinator, data_service):
        record = coordinator.add_data("article", "body", "Alpha", link="https://example.com/a")
        assert record.link == "https://example.com/a"
        assert data_service.get_data(record.id) == record

        assert coordinator.delete_data(record.id) == record
        assert data_service.get_data(record.id) is None

    def test_delete_unknown_is_not_found(self, coordinator):
        with pytest.raises(NotFoundError):
            coordinator.delete_data("missing")

    def test_blank_category_is_bad_input(self, coordinator):
        with pytest.raises(BadInputError):
            coordinator.add_data("  ", "body", "name")


def test_link_body_failing_midway_leaves_nothing_behind(local_blob_store, file_service, data_service):
    session = fake_session(make_broken_response(b"%PDF"))
    coordinator = IngestionCoordinator(local_blob_store, file_service, data_service, http_session=session)

    with pytest.raises(BlobStoreError):
        coordinator.upload_link(TEST_REMOTE_URL)

    assert list(local_blob_store.storage_dir.iterdir()) == []
    assert file_service.count_files() == 0


def test_record_whose_blob_vanished_can_still_be_deleted(coordinator, local_blob_store, file_service):
    record = coordinator.upload_file(TEST_FILE_CONTENT, TEST_FILE_NAME, TEST_FILE_CONTENT_TYPE)
    (local_blob_store.storage_dir / record.file_name).unlink()

    assert coordinator.delete_file(record.id) == record
    assert file_service.get_file(record.id) is None


def test_each_fetch_gets_its_own_session_when_none_is_injected(monkeypatch, local_blob_store, file_service, data_service):
    sessions = [fake_session(make_remote_response(b"body")) for _ in range(2)]
    for session in sessions:
        session.__enter__.return_value = session
        session.__exit__.return_value = False
    opened = []

    def new_session():
        opened.append(sessions[len(opened)])
        return opened[-1]

    monkeypatch.setattr(requests, "Session", new_session)
    coordinator = IngestionCoordinator(local_blob_store, file_service, data_service)

    coordinator.upload_link(TEST_REMOTE_URL)
    coordinator.upload_link(TEST_REMOTE_URL)

    assert len(opened) == 2
    for session in opened:
        session.get.assert_called_once()
        session.__exit__.assert_called_once()
