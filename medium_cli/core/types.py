"""
Core types for the Medium API.

These dataclasses mirror the JSON shapes the API sends and accepts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# Enumerations
# =============================================================================


class Scope(str, Enum):
    """Scopes that may be requested when authorizing an application."""

    BASIC_PROFILE = "basicProfile"
    PUBLISH_POST = "publishPost"
    UPLOAD_IMAGE = "uploadImage"
    LIST_PUBLICATIONS = "listPublications"


class ContentFormat(str, Enum):
    """Formats available for post content."""

    HTML = "html"
    MARKDOWN = "markdown"


class PublishStatus(str, Enum):
    """Publish statuses available when creating a post."""

    DRAFT = "draft"
    UNLISTED = "unlisted"
    PUBLIC = "public"


class License(str, Enum):
    """Licenses available when creating a post."""

    ALL_RIGHTS_RESERVED = "all-rights-reserved"
    CC_40_BY = "cc-40-by"
    CC_40_BY_SA = "cc-40-by-sa"
    CC_40_BY_ND = "cc-40-by-nd"
    CC_40_BY_NC = "cc-40-by-nc"
    CC_40_BY_NC_ND = "cc-40-by-nc-nd"
    CC_40_BY_NC_SA = "cc-40-by-nc-sa"
    CC_40_ZERO = "cc-40-zero"
    PUBLIC_DOMAIN = "public-domain"


# =============================================================================
# Envelope
# =============================================================================


@dataclass
class ErrorEntry:
    """One entry of the envelope's error list."""

    message: str
    code: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorEntry":
        """Create from API response dict."""
        return cls(message=data.get("message") or "", code=data.get("code") or 0)


@dataclass
class Envelope:
    """
    Wire-level wrapper around every response.

    Success responses put their payload under ``data``; failures list their
    errors under ``errors``. Which one is trusted depends on the HTTP status.
    """

    data: Any = None
    errors: list[ErrorEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Envelope":
        """Create from a decoded response body."""
        return cls(
            data=data.get("data"),
            errors=[ErrorEntry.from_dict(e) for e in data.get("errors") or []],
        )


# =============================================================================
# Auth Types
# =============================================================================


@dataclass
class AccessToken:
    """Credentials with which the API may be accessed."""

    token_type: str
    access_token: str
    refresh_token: str = ""
    scope: list[str] = field(default_factory=list)
    expires_at: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccessToken":
        """Create from API response dict."""
        return cls(
            token_type=data.get("token_type", ""),
            access_token=data.get("access_token", ""),
            refresh_token=data.get("refresh_token", ""),
            scope=data.get("scope") or [],
            expires_at=data.get("expires_at", 0),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {
            "token_type": self.token_type,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "scope": self.scope,
            "expires_at": self.expires_at,
        }


# =============================================================================
# User Types
# =============================================================================


@dataclass
class User:
    """A Medium user."""

    id: str
    username: str = ""
    name: str = ""
    url: str = ""
    image_url: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Create from API response dict."""
        return cls(
            id=data.get("id", ""),
            username=data.get("username", ""),
            name=data.get("name", ""),
            url=data.get("url", ""),
            image_url=data.get("imageUrl", ""),
        )


@dataclass
class Publication:
    """A publication a user is related to."""

    id: str
    name: str = ""
    description: str = ""
    url: str = ""
    image_url: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Publication":
        """Create from API response dict."""
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description", ""),
            url=data.get("url", ""),
            image_url=data.get("imageUrl", ""),
        )


@dataclass
class Contributor:
    """A contributor to a publication."""

    publication_id: str
    user_id: str
    role: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Contributor":
        """Create from API response dict."""
        return cls(
            # Older responses spell the ID keys in upper case
            publication_id=data.get("publicationId") or data.get("publicationID", ""),
            user_id=data.get("userId") or data.get("userID", ""),
            role=data.get("role", ""),
        )


# =============================================================================
# Post Types
# =============================================================================


@dataclass
class CreatePostOptions:
    """Options for creating a post on a user's profile."""

    user_id: str
    title: str
    content: str
    content_format: ContentFormat | str
    tags: list[str] = field(default_factory=list)
    canonical_url: str = ""
    publish_status: PublishStatus | str = ""
    license: License | str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request. The user ID is part of the path."""
        result: dict[str, Any] = {
            "title": self.title,
            "content": self.content,
            "contentFormat": _enum_value(self.content_format),
        }
        if self.tags:
            result["tags"] = list(self.tags)
        if self.canonical_url:
            result["canonicalUrl"] = self.canonical_url
        if self.publish_status:
            result["publishStatus"] = _enum_value(self.publish_status)
        if self.license:
            result["license"] = _enum_value(self.license)
        return result


@dataclass
class Post:
    """A created post."""

    id: str
    title: str = ""
    author_id: str = ""
    tags: list[str] = field(default_factory=list)
    url: str = ""
    canonical_url: str = ""
    publish_status: str = ""
    license: str = ""
    license_url: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Post":
        """Create from API response dict."""
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            author_id=data.get("authorId", ""),
            tags=data.get("tags") or [],
            url=data.get("url", ""),
            canonical_url=data.get("canonicalUrl", ""),
            publish_status=data.get("publishStatus", ""),
            license=data.get("license", ""),
            license_url=data.get("licenseUrl", ""),
        )


# =============================================================================
# Image Types
# =============================================================================


@dataclass
class UploadOptions:
    """Options for uploading a file."""

    file_path: str
    content_type: str
    field_name: str = "image"


@dataclass
class Image:
    """An uploaded image."""

    url: str
    md5: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Image":
        """Create from API response dict."""
        return cls(url=data.get("url", ""), md5=data.get("md5", ""))


def _enum_value(value: Enum | str) -> str:
    return value.value if isinstance(value, Enum) else value
