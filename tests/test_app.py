"""Tests for the app factory and the small auxiliary routes."""

import logging
import os
import threading
from logging.handlers import RotatingFileHandler

from conftest import AZURITE_CONNECTION_STRING, InMemoryBlobStore, XLSX_BYTES
from esg_upload.app import create_app
from esg_upload.config import Settings
from esg_upload.observability import metrics
from esg_upload.observability.request_context import LOG_FILE_NAME, configure_logging


def test_message_route(client):
    for method in (client.get, client.post):
        response = method("/api/message")
        assert response.status_code == 200
        assert response.get_data(as_text=True) == "Hello, from the API!"


def test_metrics_count_outcomes(client, form_data):
    client.post("/api/storage", data=form_data(), content_type="multipart/form-data")
    client.post("/api/storage", data=form_data(filename="a.csv"), content_type="multipart/form-data")
    client.post("/api/storage", data=b"x")

    body = client.get("/api/metrics").get_json()

    assert body["container"] == "upload"
    assert body["storageConfigured"] is True
    assert body["counters"] == {
        "upload_requests": 3,
        "upload_rejected": 2,
        "upload_failures": 0,
        "upload_success": 1,
        "upload_bytes": len(XLSX_BYTES),
    }


def test_metrics_without_store(tmp_path):
    app = create_app(settings=Settings(connection_string=None, container_name="esg", log_dir=str(tmp_path)))

    body = app.test_client().get("/api/metrics").get_json()

    assert body["container"] == "esg"
    assert body["storageConfigured"] is False


def test_concurrent_increments_are_not_lost():
    metrics.reset()

    def bump():
        for _ in range(1000):
            metrics.inc("upload_requests")

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert metrics.snapshot()["upload_requests"] == 8000


def test_factory_injects_settings_and_store(app, settings, blob_store):
    assert app.config["SETTINGS"] is settings
    assert app.extensions["blob_store"] is blob_store


def test_factory_builds_azure_store_from_connection_string(tmp_path):
    settings = Settings(
        connection_string=AZURITE_CONNECTION_STRING,
        container_name="esg",
        log_dir=str(tmp_path),
    )

    app = create_app(settings=settings)

    store = app.extensions["blob_store"]
    assert store.container_name == "esg"


def test_factory_without_credential_has_no_store(tmp_path):
    app = create_app(settings=Settings(connection_string=None, log_dir=str(tmp_path)))

    assert app.extensions["blob_store"] is None



def _file_handlers():
    return [h for h in logging.getLogger("esg_upload").handlers if isinstance(h, RotatingFileHandler)]


def test_request_line_is_written_to_debug_log(tmp_path):
    log_dir = tmp_path / "logs"
    app = create_app(settings=Settings(connection_string=None, log_dir=str(log_dir)))

    app.test_client().get("/api/message")

    for h in _file_handlers():
        h.flush()
    content = (log_dir / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "[REQUEST]" in content
    assert "'path': '/api/message'" in content


def test_second_app_logs_to_its_own_dir(tmp_path):
    first, second = tmp_path / "a", tmp_path / "b"
    create_app(settings=Settings(connection_string=None, log_dir=str(first)), blob_store=InMemoryBlobStore())
    app = create_app(settings=Settings(connection_string=None, log_dir=str(second)), blob_store=InMemoryBlobStore())

    app.test_client().get("/api/message")

    handlers = _file_handlers()
    assert [h.baseFilename for h in handlers] == [os.path.abspath(second / LOG_FILE_NAME)]
    handlers[0].flush()
    assert "[REQUEST]" in (second / LOG_FILE_NAME).read_text(encoding="utf-8")


def test_configure_logging_twice_keeps_one_file_handler(tmp_path):
    configure_logging(str(tmp_path))
    configure_logging(str(tmp_path), "DEBUG")

    assert len(_file_handlers()) == 1
    assert logging.getLogger("esg_upload").level == logging.DEBUG
