"""
Error types for the Medium client.

Every failure has the same flat shape: a message and a numeric code. Failures
generated locally (encoding, transport, parsing) carry DEFAULT_CODE; failures
reported by the API carry the code the server assigned.
"""

from typing import Any

DEFAULT_CODE = -1


class MediumError(Exception):
    """Base error class for all client failures."""

    def __init__(self, message: str, code: int = DEFAULT_CODE, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status

    def __str__(self) -> str:
        return f"medium: {self.message} ({self.code})"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.status:
            result["status"] = self.status
        return result


class EncodingError(MediumError):
    """The request payload could not be encoded."""


class RequestError(MediumError):
    """The request could not be built or sent (including timeouts)."""


class ParseError(MediumError):
    """The response body is not a valid envelope."""


class MalformedErrorResponse(ParseError):
    """A non-2xx response whose envelope reports no errors."""


class APIError(MediumError):
    """An error reported by the API in the response envelope."""
