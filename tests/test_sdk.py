"""Tests for MediumClient operations against a local server."""

import re
import urllib.parse
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pytest

from medium_cli.core.errors import APIError, RequestError
from medium_cli.core.types import (
    ContentFormat,
    Contributor,
    CreatePostOptions,
    Image,
    License,
    Post,
    Publication,
    PublishStatus,
    Scope,
    UploadOptions,
    User,
)
from medium_cli.sdk import MediumClient

TOKEN_RESPONSE = {
    "token_type": "Bearer",
    "access_token": "fresh-token",
    "refresh_token": "fresh-refresh",
    "scope": ["basicProfile"],
    "expires_at": 1426619566000,
}


@pytest.fixture
def client(api_server, fake_fs):
    return MediumClient("clientId", "clientSecret", access_token="token", host=api_server.url, file_opener=fake_fs)


# =============================================================================
# Request Table
# =============================================================================


@dataclass
class OperationCase:
    """One operation call and the request it must produce."""

    name: str
    call: Callable[[MediumClient], Any]
    response: dict[str, Any]
    method: str
    path: str
    content_type: str
    body_pattern: str
    expected: Any


OPERATION_CASES = [
    OperationCase(
        "current user",
        lambda c: c.users.get(),
        {"data": {"id": "u1", "username": "me"}},
        "GET",
        "/v1/me",
        "application/json",
        "^null$",
        User(id="u1", username="me"),
    ),
    OperationCase(
        "named user",
        lambda c: c.users.get("@dummyUser"),
        {"data": {"id": "u2", "username": "dummyUser"}},
        "GET",
        "/v1/@dummyUser",
        "application/json",
        "^null$",
        User(id="u2", username="dummyUser"),
    ),
    OperationCase(
        "user publications",
        lambda c: c.users.publications("@dummyUser"),
        {"data": [{"id": "b969ac62a46b", "name": "About Medium", "url": "https://medium.com/about"}]},
        "GET",
        "/v1/users/@dummyUser/publications",
        "application/json",
        "^null$",
        [Publication(id="b969ac62a46b", name="About Medium", url="https://medium.com/about")],
    ),
    OperationCase(
        "publication contributors",
        lambda c: c.publications.contributors("b45573563f5a"),
        {"data": [{"publicationId": "b45573563f5a", "userId": "13a06af8f81849", "role": "editor"}]},
        "GET",
        "/v1/publications/b45573563f5a/contributors",
        "application/json",
        "^null$",
        [Contributor(publication_id="b45573563f5a", user_id="13a06af8f81849", role="editor")],
    ),
    OperationCase(
        "create post",
        lambda c: c.posts.create(CreatePostOptions(user_id="42", title="Title", content="Yo", content_format="html")),
        {"data": {"id": "e6f36a", "title": "Title", "authorId": "42", "publishStatus": "public"}},
        "POST",
        "/v1/users/42/posts",
        "application/json",
        r'^\{"title":"Title","content":"Yo","contentFormat":"html"\}$',
        Post(id="e6f36a", title="Title", author_id="42", publish_status="public"),
    ),
    OperationCase(
        "create post with options",
        lambda c: c.posts.create(
            CreatePostOptions(
                user_id="42",
                title="T",
                content="# Yo",
                content_format=ContentFormat.MARKDOWN,
                tags=["go", "python"],
                canonical_url="https://example.com/yo",
                publish_status=PublishStatus.DRAFT,
                license=License.CC_40_BY,
            )
        ),
        {"data": {"id": "p2"}},
        "POST",
        "/v1/users/42/posts",
        "application/json",
        r'^\{"title":"T","content":"# Yo","contentFormat":"markdown","tags":\["go","python"\],'
        r'"canonicalUrl":"https://example.com/yo","publishStatus":"draft","license":"cc-40-by"\}$',
        Post(id="p2"),
    ),
    OperationCase(
        "upload image",
        lambda c: c.images.upload(UploadOptions(file_path="/fake/file.png", content_type="image/png")),
        {"data": {"url": "https://images.medium.com/0*fkfQiTzT7TlUGGyI.png", "md5": "fkfQiTzT7TlUGGyI"}},
        "POST",
        "/v1/images",
        "^multipart/form-data; boundary=[a-f0-9]+$",
        r'^--[a-f0-9]+\r\nContent-Disposition: form-data; name="image"; filename="file.png"\r\n'
        r"Content-Type: image/png\r\n\r\ncontents\r\n--[a-f0-9]+--\r\n$",
        Image(url="https://images.medium.com/0*fkfQiTzT7TlUGGyI.png", md5="fkfQiTzT7TlUGGyI"),
    ),
]


@pytest.mark.parametrize("case", OPERATION_CASES, ids=[c.name for c in OPERATION_CASES])
def test_operation_requests(client, api_server, case):
    api_server.respond_json(200, case.response)

    result = case.call(client)

    req = api_server.last
    assert result == case.expected
    assert req.method == case.method
    assert req.path == case.path
    assert req.headers["authorization"] == "Bearer token"
    assert req.headers["accept"] == "application/json"
    assert re.match(case.content_type, req.headers["content-type"])
    assert re.match(case.body_pattern, req.body.decode("utf-8"))


def test_upload_always_uses_image_field(client, api_server):
    api_server.respond_json(200, {"data": {"url": "u"}})
    client.images.upload(UploadOptions("/fake/file.png", "image/png", field_name="other"))
    assert b'name="image"' in api_server.last.body


@pytest.mark.parametrize(
    "call,expected",
    [
        (lambda c: c.users.get(), User(id="")),
        (lambda c: c.users.publications("u1"), []),
        (lambda c: c.publications.contributors("p1"), []),
        (lambda c: c.images.upload(UploadOptions("/fake/file.png", "image/png")), Image(url="")),
    ],
    ids=["user", "publications", "contributors", "image"],
)
def test_null_data_decodes_to_zero_values(client, api_server, call, expected):
    api_server.respond(200, b'{"data": null}')
    assert call(client) == expected


# =============================================================================
# Authorization
# =============================================================================


class TestAuth:
    """Authorization URL and token exchange."""

    def test_authorization_url(self, client):
        url = client.auth.authorization_url(
            "secretstate", "https://example.com/callback/medium", Scope.BASIC_PROFILE, Scope.PUBLISH_POST
        )
        assert url == (
            "https://medium.com/m/oauth/authorize?client_id=clientId"
            "&redirect_uri=https%3A%2F%2Fexample.com%2Fcallback%2Fmedium"
            "&response_type=code&scope=basicProfile%2CpublishPost&state=secretstate"
        )

    def test_authorization_url_makes_no_request(self, client, api_server):
        client.auth.authorization_url("s", "https://example.com/cb", "listPublications")
        assert api_server.requests == []

    def test_exchange_authorization_code(self, client, api_server):
        api_server.respond_json(201, TOKEN_RESPONSE)
        token = client.auth.exchange_authorization_code("12345", "https://example.com/cb")

        assert token.access_token == "fresh-token"
        assert client.access_token == "fresh-token"
        assert api_server.last.method == "POST"
        assert api_server.last.path == "/v1/tokens"
        assert dict(urllib.parse.parse_qsl(api_server.last.body.decode())) == {
            "code": "12345",
            "client_id": "clientId",
            "client_secret": "clientSecret",
            "grant_type": "authorization_code",
            "redirect_uri": "https://example.com/cb",
        }

    def test_exchange_refresh_token(self, client, api_server):
        api_server.respond_json(201, TOKEN_RESPONSE)
        client.auth.exchange_refresh_token("old-refresh")

        assert client.access_token == "fresh-token"
        assert dict(urllib.parse.parse_qsl(api_server.last.body.decode())) == {
            "refresh_token": "old-refresh",
            "client_id": "clientId",
            "client_secret": "clientSecret",
            "grant_type": "refresh_token",
        }

    def test_failed_exchange_keeps_token(self, client, api_server):
        api_server.respond_json(401, {"errors": [{"message": "Invalid refresh token", "code": 6002}]})
        with pytest.raises(APIError, match="Invalid refresh token"):
            client.auth.exchange_refresh_token("stale")
        assert client.access_token == "token"

    def test_timed_out_exchange_keeps_token(self, client, api_server):
        client._client.timeout = 0.05
        api_server.delay = 0.3
        with pytest.raises(RequestError, match="timed out"):
            client.auth.exchange_authorization_code("12345", "https://example.com/cb")
        assert client.access_token == "token"

    def test_later_calls_use_exchanged_token(self, client, api_server):
        api_server.respond_json(200, {"data": {"id": "u1"}})
        client.users.get()
        first_auth = api_server.last.headers["authorization"]
        api_server.respond_json(201, TOKEN_RESPONSE)
        client.auth.exchange_refresh_token("r")
        api_server.respond_json(200, {"data": {"id": "u1"}})
        client.users.get()

        assert first_auth == "Bearer token"
        assert api_server.last.headers["authorization"] == "Bearer fresh-token"


def test_with_access_token(api_server, fake_fs):
    client = MediumClient.with_access_token("only-token", host=api_server.url, file_opener=fake_fs)
    api_server.respond_json(200, {"data": {"id": "u1"}})

    client.users.get()

    assert client.access_token == "only-token"
    assert api_server.last.headers["authorization"] == "Bearer only-token"
