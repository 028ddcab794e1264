"""Shared fixtures: an app wired to an in-memory blob store."""
from io import BytesIO

import pytest

from esg_upload.app import create_app
from esg_upload.config import Settings
from esg_upload.observability import metrics

VALID_METADATA = {
    "company": "Test Company Inc",
    "business_unit": "IT Department",
    "location": "New York",
    "time_period": "2024",
    "esg_topic": "Environment",
    "esg_metric": "Energy Consumption",
    "unit": "kWh",
}

XLSX_BYTES = b"PK\x03\x04\x14\x00\x00\x00\x08\x00test excel content for uploadPK\x05\x06"

AZURITE_CONNECTION_STRING = (
    "DefaultEndpointsProtocol=http;AccountName=devstoreaccount1;"
    "AccountKey=Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsuFq2UVErCz4I6tq/K1SZFPTOtr/KBHBeksoGMGw==;"
    "BlobEndpoint=http://127.0.0.1:10000/devstoreaccount1;"
)


class InMemoryBlobStore:
    """Records every call; url is a fake endpoint built from the key."""

    def __init__(self, fail_with=None):
        self.blobs = {}
        self.uploads = []
        self.ensure_calls = 0
        self.deleted = []
        self.fail_with = fail_with

    def ensure_container(self):
        self.ensure_calls += 1

    def store(self, key, data, content_type, metadata):
        if self.fail_with is not None:
            raise self.fail_with
        self.uploads.append(
            {"key": key, "data": data, "content_type": content_type, "metadata": dict(metadata)}
        )
        self.blobs[key] = data
        return f"https://example.blob.core.windows.net/upload/{key}"

    def delete(self, key):
        self.deleted.append(key)
        self.blobs.pop(key, None)

    def list_containers(self):
        return ["upload"]


@pytest.fixture
def settings(tmp_path):
    return Settings(connection_string=AZURITE_CONNECTION_STRING, log_dir=str(tmp_path / "logs"))


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def app(settings, blob_store):
    metrics.reset()
    app = create_app(settings=settings, blob_store=blob_store)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def form_data():
    """Build a fresh form dict: metadata fields plus an optional file part."""

    def _build(filename="report.xlsx", content=XLSX_BYTES, **overrides):
        data = dict(VALID_METADATA)
        data.update(overrides)
        data = {k: v for k, v in data.items() if v is not None}
        if filename is not None:
            data["file"] = (BytesIO(content), filename)
        return data

    return _build
