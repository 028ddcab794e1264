"""Exceptions raised by the upload pipeline.

Each carries the HTTP status and the JSON error fields the route renders.
"""
from typing import List, Optional


class MultipartParseError(ValueError):
    """Raised when a multipart body cannot be split into parts."""


class UploadError(Exception):
    """Base class for every failure that ends an upload request, client or server side."""

    status_code = 400

    def __init__(
        self,
        error: str,
        details: Optional[str] = None,
        missing_fields: Optional[List[str]] = None,
    ) -> None:
        super().__init__(error if details is None else f"{error}: {details}")
        self.error = error
        self.details = details
        self.missing_fields = missing_fields

    def to_dict(self) -> dict:
        body = {"success": False, "error": self.error}
        if self.details is not None:
            body["details"] = self.details
        if self.missing_fields is not None:
            body["missingFields"] = self.missing_fields
        return body


class MissingContentType(UploadError):
    def __init__(self) -> None:
        super().__init__("Missing content-type header")


class BoundaryNotFound(UploadError):
    def __init__(self) -> None:
        super().__init__("Malformed content-type header: boundary not found")


class MultipartInvalid(UploadError):
    def __init__(self, details: str) -> None:
        super().__init__("Failed to parse multipart data", details=details)


class NoFileUploaded(UploadError):
    def __init__(self) -> None:
        super().__init__("No file uploaded")


class InvalidFileType(UploadError):
    def __init__(self) -> None:
        super().__init__("Invalid file type. Only .xlsx and .xls files are allowed.")


class MissingRequiredFields(UploadError):
    def __init__(self, missing_fields: List[str]) -> None:
        super().__init__("Missing required fields", missing_fields=missing_fields)


class StorageNotConfigured(UploadError):
    """Operator fault: no connection credential for the blob store."""

    status_code = 500

    def __init__(self) -> None:
        super().__init__("Azure Storage configuration not found")


class UploadFailed(UploadError):
    """The blob store refused or failed the write."""

    status_code = 500

    def __init__(self, details: str) -> None:
        super().__init__("Failed to upload file", details=details)
