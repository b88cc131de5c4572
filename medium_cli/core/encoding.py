"""
Request payloads and the encoder that turns them into HTTP bodies.

A ClientRequest carries exactly one payload, and the payload's class decides
how it is encoded:

- JSONPayload: any JSON-serializable value, sent as application/json
- FormPayload: a pre-encoded form string or bytes, sent as
  application/x-www-form-urlencoded
- FilePayload: a file to upload, sent as a single multipart/form-data part
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, ClassVar, Protocol

from urllib3.fields import RequestField
from urllib3.filepost import encode_multipart_formdata

from medium_cli.core.errors import EncodingError
from medium_cli.core.types import UploadOptions

logger = logging.getLogger(__name__)

FORMAT_JSON = "json"
FORMAT_FORM = "form"
FORMAT_FILE = "file"

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"


# =============================================================================
# File Access
# =============================================================================


class FileOpener(Protocol):
    """Capability to open a file for reading by path."""

    def open(self, path: str) -> BinaryIO:
        """Open ``path`` for binary reading, raising OSError on failure."""
        ...


class OSFileOpener:
    """FileOpener backed by the local disk."""

    def open(self, path: str) -> BinaryIO:
        return open(path, "rb")


# =============================================================================
# Payloads
# =============================================================================


@dataclass(frozen=True)
class JSONPayload:
    """A value to serialize as JSON."""

    format: ClassVar[str] = FORMAT_JSON

    value: Any = None


@dataclass(frozen=True)
class FormPayload:
    """An already percent-encoded form body."""

    format: ClassVar[str] = FORMAT_FORM

    body: str | bytes


@dataclass(frozen=True)
class FilePayload:
    """A file to upload as one multipart section."""

    format: ClassVar[str] = FORMAT_FILE

    options: UploadOptions


Payload = JSONPayload | FormPayload | FilePayload


@dataclass
class ClientRequest:
    """A single API call before encoding."""

    method: str
    path: str
    payload: Payload = field(default_factory=JSONPayload)

    @property
    def format(self) -> str:
        return self.payload.format


# =============================================================================
# Encoder
# =============================================================================


def escape_quotes(value: str) -> str:
    """Escape backslashes and double quotes for a multipart header parameter."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


class PayloadEncoder:
    """
    Produce the body bytes and Content-Type header for a ClientRequest.

    File uploads read through the injected FileOpener, and the file is
    closed before encode() returns whether or not reading succeeded.
    """

    def __init__(self, file_opener: FileOpener):
        self.file_opener = file_opener
        self._generators: dict[str, Callable[[Any], tuple[bytes, str]]] = {
            FORMAT_JSON: self._encode_json,
            FORMAT_FORM: self._encode_form,
            FORMAT_FILE: self._encode_file,
        }

    def encode(self, request: ClientRequest) -> tuple[bytes, str]:
        """
        Encode a request payload.

        Args:
            request: The request to encode

        Returns:
            Tuple of (body, content type)

        Raises:
            EncodingError: If the payload cannot be encoded

        """
        fmt = getattr(request.payload, "format", None)
        generator = self._generators.get(fmt)
        if generator is None:
            raise EncodingError(f"Unknown format: {fmt}")
        return generator(request.payload)

    def _encode_json(self, payload: JSONPayload) -> tuple[bytes, str]:
        try:
            body = json.dumps(payload.value, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as e:
            raise EncodingError(f"Could not marshal JSON: {e}") from e
        return body.encode("utf-8"), CONTENT_TYPE_JSON

    def _encode_form(self, payload: FormPayload) -> tuple[bytes, str]:
        body = payload.body
        if isinstance(body, str):
            return body.encode("utf-8"), CONTENT_TYPE_FORM
        if isinstance(body, (bytes, bytearray)):
            return bytes(body), CONTENT_TYPE_FORM
        raise EncodingError("Invalid data passed for form request")

    def _encode_file(self, payload: FilePayload) -> tuple[bytes, str]:
        options = payload.options
        try:
            stream = self.file_opener.open(options.file_path)
        except OSError as e:
            raise EncodingError(f"Could not open file: {e}") from e

        try:
            contents = stream.read()
        except OSError as e:
            raise EncodingError(f"Could not copy data: {e}") from e
        finally:
            stream.close()

        filename = Path(options.file_path).name
        part = RequestField(
            name=options.field_name,
            data=contents,
            headers={
                "Content-Disposition": (
                    f'form-data; name="{escape_quotes(options.field_name)}"; filename="{escape_quotes(filename)}"'
                ),
                "Content-Type": options.content_type,
            },
        )
        body, content_type = encode_multipart_formdata([part])
        logger.debug("Encoded %d bytes from %s as multipart", len(contents), options.file_path)
        return body, content_type
