"""
Medium SDK - High-level client with nice ergonomics.

This layer provides a typed interface for each API endpoint.
Built on top of the core APIClient.
"""

import urllib.parse
import urllib.request
from collections.abc import Callable
from typing import Any, TypeVar

from medium_cli.core.client import APIClient
from medium_cli.core.encoding import ClientRequest, FileOpener, FilePayload
from medium_cli.core.types import (
    AccessToken,
    Contributor,
    CreatePostOptions,
    Image,
    Post,
    Publication,
    Scope,
    UploadOptions,
    User,
)

AUTHORIZE_URL = "https://medium.com/m/oauth/authorize"

T = TypeVar("T")


def _parse_list(parse_item: Callable[[dict[str, Any]], T]) -> Callable[[Any], list[T]]:
    """Build a parser for listing endpoints; anything but an array is an empty listing."""

    def parse(data: Any) -> list[T]:
        if not isinstance(data, list):
            return []
        return [parse_item(item) for item in data]

    return parse


class MediumClient:
    """
    High-level Medium API client with typed methods.

    Example:
        client = MediumClient("app-id", "app-secret")

        # Send the user here, then exchange the code they come back with
        url = client.auth.authorization_url("state", "https://example.com/cb", Scope.BASIC_PROFILE)
        client.auth.exchange_authorization_code(code, "https://example.com/cb")

        me = client.users.get()
        post = client.posts.create(CreatePostOptions(me.id, "Title", "<p>Hi</p>", ContentFormat.HTML))

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
        Initialize the Medium client.

        Args:
            application_id: OAuth application ID (or MEDIUM_APPLICATION_ID env var)
            application_secret: OAuth application secret (or MEDIUM_APPLICATION_SECRET env var)
            access_token: Bearer token (or MEDIUM_ACCESS_TOKEN env var)
            host: API host (or MEDIUM_HOST env var)
            timeout: Round-trip timeout in seconds (or MEDIUM_TIMEOUT env var)
            transport: urllib opener used to send requests
            file_opener: Opens files for upload

        """
        self._client = APIClient(
            application_id=application_id,
            application_secret=application_secret,
            access_token=access_token,
            host=host,
            timeout=timeout,
            transport=transport,
            file_opener=file_opener,
        )

        # Sub-clients for different resources
        self.auth = AuthOperations(self._client)
        self.users = UserOperations(self._client)
        self.publications = PublicationOperations(self._client)
        self.posts = PostOperations(self._client)
        self.images = ImageOperations(self._client)

    @classmethod
    def with_access_token(cls, access_token: str, **kwargs: Any) -> "MediumClient":
        """Create a client that only carries a bearer token."""
        return cls(access_token=access_token, **kwargs)

    @property
    def access_token(self) -> str:
        """Get the current bearer token."""
        return self._client.access_token

    @access_token.setter
    def access_token(self, value: str) -> None:
        """Set the bearer token."""
        self._client.access_token = value

    @property
    def host(self) -> str:
        return self._client.host


# =============================================================================
# Auth Operations
# =============================================================================


class AuthOperations:
    """OAuth2 authorization and token exchange."""

    def __init__(self, client: APIClient):
        self._client = client

    def authorization_url(self, state: str, redirect_url: str, *scopes: Scope | str) -> str:
        """
        Build the URL to send a user to for authorization.

        No request is made.

        Args:
            state: Opaque value echoed back to the redirect URL
            redirect_url: Where the user is sent after authorizing
            scopes: Requested scopes

        Returns:
            Authorization page URL

        """
        params = {
            "client_id": self._client.application_id,
            "scope": ",".join(s.value if isinstance(s, Scope) else s for s in scopes),
            "state": state,
            "response_type": "code",
            "redirect_uri": redirect_url,
        }
        return f"{AUTHORIZE_URL}?{urllib.parse.urlencode(sorted(params.items()))}"

    def exchange_authorization_code(self, code: str, redirect_url: str) -> AccessToken:
        """
        Exchange an authorization code for a long-lived access token.

        The client's bearer token is replaced on success.
        """
        return self._client.acquire_access_token(
            {
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": redirect_url,
            }
        )

    def exchange_refresh_token(self, refresh_token: str) -> AccessToken:
        """
        Exchange a refresh token for a new access token.

        The client's bearer token is replaced on success.
        """
        return self._client.acquire_access_token(
            {
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )


# =============================================================================
# User Operations
# =============================================================================


class UserOperations:
    """Operations on user profiles. Requires the basicProfile scope."""

    def __init__(self, client: APIClient):
        self._client = client

    def get(self, user_id: str = "") -> User:
        """
        Get a user profile.

        Args:
            user_id: User to fetch; the authenticated user when empty

        Returns:
            User

        """
        path = f"/v1/{user_id}" if user_id else "/v1/me"
        return self._client.get(path, User.from_dict)

    def publications(self, user_id: str) -> list[Publication]:
        """
        List publications the user is related to.

        Requires the listPublications scope.
        """
        return self._client.get(
            f"/v1/users/{user_id}/publications",
            _parse_list(Publication.from_dict),
        )


# =============================================================================
# Publication Operations
# =============================================================================


class PublicationOperations:
    """Operations on publications. Requires the listPublications scope."""

    def __init__(self, client: APIClient):
        self._client = client

    def contributors(self, publication_id: str) -> list[Contributor]:
        """List the editors and writers of a publication."""
        return self._client.get(
            f"/v1/publications/{publication_id}/contributors",
            _parse_list(Contributor.from_dict),
        )


# =============================================================================
# Post Operations
# =============================================================================


class PostOperations:
    """Operations on posts. Requires the publishPost scope."""

    def __init__(self, client: APIClient):
        self._client = client

    def create(self, options: CreatePostOptions) -> Post:
        """
        Create a post on a user's profile.

        Args:
            options: Post content and settings; ``user_id`` selects the profile

        Returns:
            The created Post

        """
        return self._client.post(f"/v1/users/{options.user_id}/posts", options.to_dict(), Post.from_dict)


# =============================================================================
# Image Operations
# =============================================================================


class ImageOperations:
    """Image uploads. Requires the uploadImage scope."""

    def __init__(self, client: APIClient):
        self._client = client

    def upload(self, options: UploadOptions) -> Image:
        """
        Upload an image.

        The file is read through the client's file opener and sent as the
        ``image`` form field.
        """
        options = UploadOptions(options.file_path, options.content_type, field_name="image")
        return self._client.request(ClientRequest("POST", "/v1/images", FilePayload(options)), Image.from_dict)
