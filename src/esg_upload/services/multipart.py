from dataclasses import dataclass, field
from typing import List, Optional

from werkzeug.http import parse_options_header
from werkzeug.sansio.multipart import Data, Epilogue, Field, File, MultipartDecoder

from esg_upload.services.exceptions import MultipartParseError


@dataclass
class FormPart:
    name: Optional[str]
    filename: Optional[str] = None
    content_type: Optional[str] = None
    data: bytearray = field(default_factory=bytearray)

    def text(self) -> str:
        return bytes(self.data).decode("utf-8", errors="replace")


def get_boundary(content_type: str) -> Optional[str]:
    """Boundary parameter of a Content-Type value, or None if absent/empty."""
    _, options = parse_options_header(content_type)
    return options.get("boundary") or None


def parse_multipart(body: bytes, boundary: str) -> List[FormPart]:
    """
    Split a complete multipart body into its parts, in order.
    Raises MultipartParseError on corrupt or truncated framing.
    """
    parts: List[FormPart] = []
    current = None

    try:
        decoder = MultipartDecoder(boundary.encode("latin-1"))
        decoder.receive_data(body)
        decoder.receive_data(None)
        while True:
            event = decoder.next_event()
            if isinstance(event, (Field, File)):
                current = FormPart(
                    name=event.name,
                    filename=event.filename if isinstance(event, File) else None,
                    content_type=event.headers.get("Content-Type"),
                )
                parts.append(current)
            elif isinstance(event, Data):
                if current is not None:
                    current.data.extend(event.data)
            elif isinstance(event, Epilogue):
                break
    except ValueError as e:
        raise MultipartParseError(str(e)) from e

    return parts
