"""
Response normalization.

Every response body is an envelope ``{"data": ..., "errors": [...]}``. The
HTTP status decides which half is trusted: a 2xx response yields the
unwrapped ``data`` (or the whole body when there is no ``data``, as with the
token endpoint), anything else yields the first reported error.
"""

import json
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from medium_cli.core.errors import APIError, MalformedErrorResponse, ParseError
from medium_cli.core.types import Envelope

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_envelope(raw: bytes) -> tuple[Envelope, Any]:
    """
    Parse a raw response body.

    Returns:
        Tuple of (envelope, decoded document)

    Raises:
        ParseError: If the body is not a JSON object (or null)

    """
    try:
        document = json.loads(raw)
    except ValueError as e:
        raise ParseError(f"Could not parse response: {e}") from e

    # A null body decodes to an empty envelope
    if document is None:
        return Envelope(), {}
    if not isinstance(document, dict):
        raise ParseError(f"Could not parse response: expected a JSON object, got {type(document).__name__}")
    try:
        return Envelope.from_dict(document), document
    except (AttributeError, TypeError) as e:
        raise ParseError(f"Could not parse response: invalid errors list: {e}") from e


def decode_response(raw: bytes, status: int, parser: Callable[[Any], T]) -> T:
    """
    Decode a response into the caller's target type or raise its error.

    Args:
        raw: Full response body
        status: HTTP status code
        parser: Builds the target type from decoded JSON; its exceptions
            propagate unchanged

    Returns:
        The parsed result

    Raises:
        ParseError: If the body is not a valid envelope
        MalformedErrorResponse: If a non-2xx envelope reports no errors
        APIError: With the first error the API reported

    """
    envelope, document = parse_envelope(raw)

    if 200 <= status < 300:
        payload = envelope.data if envelope.data is not None else document
        return parser(payload)

    if not envelope.errors:
        logger.warning("Status %d response carried no errors", status)
        raise MalformedErrorResponse(f"Malformed error response: status {status} reported no errors", status=status)

    first = envelope.errors[0]
    raise APIError(first.message, code=first.code, status=status)
