"""Pytest configuration - loads .env for live tests and provides a local API server."""

import io
import json
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


# =============================================================================
# Local API Server
# =============================================================================


@dataclass
class RecordedRequest:
    """A request received by the local server."""

    method: str
    path: str
    headers: dict[str, str]  # lower-cased names
    body: bytes


# A response body may be fixed bytes or built from the request (e.g. an echo)
ResponseBody = bytes | Callable[[RecordedRequest], bytes]


class MockAPI:
    """Scripted HTTP server standing in for the API."""

    def __init__(self) -> None:
        self.requests: list[RecordedRequest] = []
        self.responses: deque[tuple[int, ResponseBody]] = deque()
        self.delay = 0.0
        self._server = ThreadingHTTPServer(("127.0.0.1", 0), _make_handler(self))
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]

    def respond(self, status: int, body: ResponseBody) -> None:
        """Queue a response for the next request."""
        self.responses.append((status, body))

    def respond_json(self, status: int, data: object) -> None:
        self.respond(status, json.dumps(data).encode("utf-8"))

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()


def _make_handler(api: MockAPI) -> type[BaseHTTPRequestHandler]:
    class Handler(BaseHTTPRequestHandler):
        def _handle(self) -> None:
            length = int(self.headers.get("Content-Length") or 0)
            recorded = RecordedRequest(
                method=self.command,
                path=self.path,
                headers={k.lower(): v for k, v in self.headers.items()},
                body=self.rfile.read(length),
            )
            api.requests.append(recorded)

            if api.delay:
                time.sleep(api.delay)

            status, body = api.responses.popleft() if api.responses else (200, b"null")
            if callable(body):
                body = body(recorded)
            try:
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)
            except (BrokenPipeError, ConnectionResetError):
                # Client gave up (timeout tests)
                pass

        do_GET = _handle
        do_POST = _handle

        def log_message(self, format, *args):  # noqa: A002
            pass

    return Handler


@pytest.fixture
def api_server():
    """Run a local API server for the duration of a test."""
    api = MockAPI()
    api.start()
    yield api
    api.stop()


# =============================================================================
# File Opener Double
# =============================================================================


class TrackedStream(io.BytesIO):
    """In-memory file that can be made to fail on read."""

    def __init__(self, contents: bytes, read_error: OSError | None = None):
        super().__init__(contents)
        self.read_error = read_error

    def read(self, size: int | None = -1) -> bytes:
        if self.read_error:
            raise self.read_error
        return super().read(size)


class FakeFileOpener:
    """FileOpener that serves fixed contents from memory."""

    def __init__(
        self,
        contents: bytes = b"contents",
        open_error: OSError | None = None,
        read_error: OSError | None = None,
    ):
        self.contents = contents
        self.open_error = open_error
        self.read_error = read_error
        self.opened: list[str] = []
        self.streams: list[TrackedStream] = []

    def open(self, path: str) -> TrackedStream:
        self.opened.append(path)
        if self.open_error:
            raise self.open_error
        stream = TrackedStream(self.contents, self.read_error)
        self.streams.append(stream)
        return stream


@pytest.fixture
def fake_fs() -> FakeFileOpener:
    return FakeFileOpener()
