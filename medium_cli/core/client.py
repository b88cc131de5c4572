"""
Core HTTP client for the Medium API.

Handles credentials, request encoding, transport and response decoding.
"""

import http.client
import logging
import os
import socket
import time
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from typing import Any, TypeVar

from medium_cli.core.encoding import (
    ClientRequest,
    FileOpener,
    FormPayload,
    JSONPayload,
    OSFileOpener,
    PayloadEncoder,
)
from medium_cli.core.envelope import decode_response
from medium_cli.core.errors import RequestError
from medium_cli.core.types import AccessToken

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_HOST = "https://api.medium.com"
DEFAULT_TIMEOUT = 5.0
TOKEN_PATH = "/v1/tokens"
READ_CHUNK_SIZE = 64 * 1024

T = TypeVar("T")


class APIClient:
    """
    Low-level HTTP client for the Medium API.

    An instance holds the application identity, the bearer token, the host,
    the timeout and the injected transport and file opener. Only the bearer
    token changes after construction, and only when a token exchange
    succeeds.

    Each call makes exactly one round trip and nothing is locked: a caller
    that shares one instance between threads while exchanging tokens must
    synchronize those calls itself.
    """

    def __init__(
        self,
        application_id: str | None = None,
        application_secret: str | None = None,
        access_token: str | None = None,
        host: str | None = None,
        timeout: float | None = None,
        transport: urllib.request.OpenerDirector | None = None,
        file_opener: FileOpener | None = None,
    ):
        """
        Initialize the API client.

        Args:
            application_id: OAuth application ID (or MEDIUM_APPLICATION_ID env var)
            application_secret: OAuth application secret (or MEDIUM_APPLICATION_SECRET env var)
            access_token: Bearer token (or MEDIUM_ACCESS_TOKEN env var)
            host: API host (or MEDIUM_HOST env var)
            timeout: Round-trip timeout in seconds (or MEDIUM_TIMEOUT env var)
            transport: urllib opener used to send requests
            file_opener: Opens files for upload

        """
        if application_id is None:
            application_id = os.environ.get("MEDIUM_APPLICATION_ID", "")
        if application_secret is None:
            application_secret = os.environ.get("MEDIUM_APPLICATION_SECRET", "")
        if access_token is None:
            access_token = os.environ.get("MEDIUM_ACCESS_TOKEN", "")
        self.application_id = application_id
        self.application_secret = application_secret
        self.access_token = access_token
        self.host = (host or os.environ.get("MEDIUM_HOST") or DEFAULT_HOST).rstrip("/")
        if timeout is None:
            timeout = float(os.environ.get("MEDIUM_TIMEOUT", DEFAULT_TIMEOUT))
        self.timeout = timeout
        self.transport = transport or urllib.request.build_opener()
        self.file_opener = file_opener or OSFileOpener()
        self._encoder = PayloadEncoder(self.file_opener)

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        return f"{self.host}{path}"

    def _send(self, method: str, url: str, body: bytes, content_type: str) -> tuple[int, bytes]:
        """
        Send one HTTP request and read the whole response.

        Non-2xx responses are returned like any other; only failures to build
        or complete the round trip raise.

        Returns:
            Tuple of (status code, response body)

        Raises:
            RequestError: If the request cannot be built or sent, or times out

        """
        headers = {
            "Content-Type": content_type,
            "Accept": "application/json",
            "Accept-Charset": "utf-8",
            "Authorization": f"Bearer {self.access_token}",
        }

        try:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
        except ValueError as e:
            raise RequestError(f"Could not create request: {e}") from e

        deadline = time.monotonic() + self.timeout
        try:
            with self.transport.open(req, timeout=self.timeout) as response:
                return response.status, self._read_body(response, deadline)

        except urllib.error.HTTPError as e:
            # urllib raises for non-2xx; the body still holds the envelope
            try:
                return e.code, self._read_body(e, deadline)
            except (OSError, http.client.HTTPException) as read_error:
                raise RequestError(f"Could not read response: {read_error}") from read_error
            finally:
                e.close()

        except urllib.error.URLError as e:
            raise RequestError(f"Failed to make request: {e.reason}") from e

        except (OSError, http.client.HTTPException, ValueError) as e:
            raise RequestError(f"Failed to make request: {e}") from e

    def _read_body(self, response: Any, deadline: float) -> bytes:
        """
        Read a response body in chunks, giving up once ``deadline`` passes.

        The socket timeout is narrowed to the remaining time before every
        read, so a server trickling bytes cannot stretch the round trip.
        """
        read = getattr(response, "read1", response.read)
        chunks = []
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise RequestError(f"Failed to make request: timed out after {self.timeout} seconds")
            sock = _response_socket(response)
            if sock is not None:
                sock.settimeout(remaining)
            chunk = read(READ_CHUNK_SIZE)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)

    def request(self, request: ClientRequest, parser: Callable[[Any], T]) -> T:
        """
        Execute a request: encode, send and decode.

        Args:
            request: The logical request
            parser: Builds the result type from the unwrapped response data

        Returns:
            The parsed result

        Raises:
            MediumError: On any encoding, transport, parse or API failure

        """
        body, content_type = self._encoder.encode(request)
        url = self._build_url(request.path)

        logger.debug("%s %s (%s, %d bytes)", request.method, url, request.format, len(body))
        status, raw = self._send(request.method, url, body, content_type)
        logger.debug("%s %s -> %d", request.method, url, status)

        return decode_response(raw, status, parser)

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str, parser: Callable[[Any], T]) -> T:
        """Make a GET request."""
        return self.request(ClientRequest("GET", path), parser)

    def post(self, path: str, data: Any, parser: Callable[[Any], T]) -> T:
        """Make a POST request with a JSON body."""
        return self.request(ClientRequest("POST", path, JSONPayload(data)), parser)

    # =========================================================================
    # Token Exchange
    # =========================================================================

    def acquire_access_token(self, params: dict[str, str]) -> AccessToken:
        """
        Exchange grant parameters for an access token.

        The application ID and secret are added to ``params``. On success the
        new bearer token replaces the current one; on failure it is left
        unchanged.

        Args:
            params: Grant-specific form parameters

        Returns:
            The granted AccessToken

        """
        form = {
            **params,
            "client_id": self.application_id,
            "client_secret": self.application_secret,
        }
        body = urllib.parse.urlencode(sorted(form.items()))
        token = self.request(ClientRequest("POST", TOKEN_PATH, FormPayload(body)), AccessToken.from_dict)

        self.access_token = token.access_token
        logger.info("Acquired %s token with scopes %s", token.token_type or "access", ",".join(token.scope))
        return token


def _response_socket(response: Any) -> socket.socket | None:
    """Find the socket under a urllib response, if there is one."""
    fp = getattr(response, "fp", None)
    # HTTPError wraps the HTTPResponse
    if isinstance(fp, http.client.HTTPResponse):
        fp = fp.fp
    sock = getattr(getattr(fp, "raw", None), "_sock", None)
    return sock if isinstance(sock, socket.socket) else None
