"""
Blob storage seam for the upload pipeline.

The pipeline only needs two capabilities from the store: make sure the
destination container exists, and write bytes under a key returning a URL.
AzureBlobStore implements them with azure-storage-blob; tests use an
in-memory fake with the same methods.
"""
import logging
from typing import Dict, List, Protocol
from urllib.parse import quote

from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContentSettings

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    def ensure_container(self) -> None:
        ...

    def store(self, key: str, data: bytes, content_type: str, metadata: Dict[str, str]) -> str:
        ...


def encode_metadata(metadata: Dict[str, str]) -> Dict[str, str]:
    return {key: quote(value, safe="") for key, value in metadata.items()}


class AzureBlobStore:
    """Writes uploads into a single Azure Blob Storage container.

    Metadata values travel as x-ms-meta-* headers, which only carry latin-1
    and lose surrounding whitespace, so every value is percent-encoded as
    UTF-8 on the way in (urllib.parse.unquote restores it).
    """

    def __init__(self, service_client: BlobServiceClient, container_name: str):
        self.service_client = service_client
        self.container_name = container_name
        self.container_client = service_client.get_container_client(container_name)

    @classmethod
    def from_connection_string(cls, connection_string: str, container_name: str, **client_kwargs) -> "AzureBlobStore":
        service_client = BlobServiceClient.from_connection_string(connection_string, **client_kwargs)
        return cls(service_client, container_name)

    def ensure_container(self) -> None:
        """Create the container with public blob read access if it is missing."""
        try:
            self.container_client.create_container(public_access="blob")
            logger.info("Created container %s", self.container_name)
        except ResourceExistsError:
            pass

    def store(self, key: str, data: bytes, content_type: str, metadata: Dict[str, str]) -> str:
        blob_client = self.container_client.get_blob_client(key)
        blob_client.upload_blob(
            data,
            overwrite=False,
            content_settings=ContentSettings(content_type=content_type),
            metadata=encode_metadata(metadata),
        )
        return blob_client.url

    def delete(self, key: str) -> None:
        self.container_client.delete_blob(key)

    def list_containers(self) -> List[str]:
        return [c.name for c in self.service_client.list_containers()]
