"""
Validate-then-upload pipeline for ESG spreadsheet submissions.

The steps run strictly in order and the first failure ends the request
with an UploadError subclass; nothing is written to the store before
every validation has passed.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from werkzeug.utils import secure_filename

from esg_upload.services.blob_store import BlobStore
from esg_upload.services.exceptions import (
    BoundaryNotFound,
    InvalidFileType,
    MissingContentType,
    MissingRequiredFields,
    MultipartInvalid,
    MultipartParseError,
    NoFileUploaded,
    StorageNotConfigured,
    UploadFailed,
)
from esg_upload.services.multipart import FormPart, get_boundary, parse_multipart

logger = logging.getLogger(__name__)

ALLOWED_EXT = {".xlsx", ".xls"}

REQUIRED_FIELDS = (
    "company",
    "business_unit",
    "location",
    "time_period",
    "esg_topic",
    "esg_metric",
    "unit",
)

CONTENT_TYPES = {
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xls": "application/vnd.ms-excel",
}


@dataclass
class UploadedFile:
    filename: str
    content_type: Optional[str]
    data: bytes


@dataclass
class UploadResult:
    file_name: str
    original_file_name: str
    url: str
    metadata: Dict[str, str]
    uploaded_at: str
    size: int = 0

    def to_dict(self) -> dict:
        return {
            "success": True,
            "message": "File uploaded successfully",
            "fileName": self.file_name,
            "originalFileName": self.original_file_name,
            "url": self.url,
            "metadata": self.metadata,
            "uploadedAt": self.uploaded_at,
        }


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def file_extension(filename: str) -> str:
    """Lowercased ".ext" after the last dot; a bare ".xlsx" counts as an extension."""
    if "." not in filename:
        return ""
    return "." + filename.rsplit(".", 1)[-1].lower()


def allowed_filename(filename: str) -> bool:
    return file_extension(filename) in ALLOWED_EXT


def select_file(parts: Sequence[FormPart]) -> UploadedFile:
    """First part carrying a non-empty filename wins; later file parts are ignored."""
    file_parts = [p for p in parts if p.filename]
    if not file_parts:
        raise NoFileUploaded()
    if len(file_parts) > 1:
        logger.warning(
            "Ignoring %d extra file part(s): %s",
            len(file_parts) - 1,
            [p.filename for p in file_parts[1:]],
        )
    first = file_parts[0]
    return UploadedFile(filename=first.filename, content_type=first.content_type, data=bytes(first.data))


def collect_metadata(parts: Sequence[FormPart]) -> Dict[str, str]:
    return {p.name: p.text() for p in parts if not p.filename and p.name}


def find_missing_fields(metadata: Dict[str, str]) -> List[str]:
    return [f for f in REQUIRED_FIELDS if not metadata.get(f, "").strip()]


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing Z."""
    stamp = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def build_blob_key(company: str, filename: str, moment: datetime, prefix: str = "") -> str:
    """
    Destination key: [<prefix>/]<company>_<timestamp>.<ext>

    company goes through secure_filename (falls back to "upload"), the
    timestamp is iso_timestamp() with ':' and '.' replaced by '-', and ext
    is the submitted extension without the dot.
    e.g. "Acme_Corp_2024-05-01T10-20-30-123Z.xlsx"
    """
    safe_company = secure_filename(company) or "upload"
    stamp = iso_timestamp(moment).replace(":", "-").replace(".", "-")
    ext = filename.rsplit(".", 1)[-1]
    key = f"{safe_company}_{stamp}.{ext}"
    return f"{prefix}/{key}" if prefix else key


def resolve_content_type(upload: UploadedFile) -> str:
    return CONTENT_TYPES.get(file_extension(upload.filename)) or upload.content_type or "application/octet-stream"


def handle_upload(
    content_type: Optional[str],
    read_body: Callable[[], bytes],
    store: Optional[BlobStore],
    key_prefix: str = "",
    parser: Callable[[bytes, str], List[FormPart]] = parse_multipart,
    clock: Optional[Callable[[], datetime]] = None,
) -> UploadResult:
    """Run one upload request end to end and return the result for the caller."""
    if not content_type:
        raise MissingContentType()

    boundary = get_boundary(content_type)
    if not boundary:
        raise BoundaryNotFound()

    body = read_body()
    logger.debug("Body buffer size: %d bytes", len(body))

    try:
        parts = parser(body, boundary)
    except MultipartParseError as e:
        raise MultipartInvalid(str(e)) from e

    upload = select_file(parts)
    logger.info("File found: %s (%d bytes)", upload.filename, len(upload.data))

    if not allowed_filename(upload.filename):
        logger.warning("Invalid file type: %s", upload.filename)
        raise InvalidFileType()

    metadata = collect_metadata(parts)
    missing = find_missing_fields(metadata)
    if missing:
        raise MissingRequiredFields(missing)

    if store is None:
        raise StorageNotConfigured()

    moment = clock() if clock else utc_now()
    uploaded_at = iso_timestamp(moment)
    key = build_blob_key(metadata["company"], upload.filename, moment, key_prefix)

    blob_metadata = {"originalFilename": upload.filename, "uploadedAt": uploaded_at}
    blob_metadata.update(metadata)

    try:
        store.ensure_container()
        url = store.store(key, upload.data, resolve_content_type(upload), blob_metadata)
    except Exception as e:
        logger.exception("Upload to blob store failed: %s", key)
        raise UploadFailed(str(e)) from e

    logger.info("File uploaded successfully: %s", key)
    return UploadResult(
        file_name=key,
        original_file_name=upload.filename,
        url=url,
        metadata=metadata,
        uploaded_at=uploaded_at,
        size=len(upload.data),
    )
