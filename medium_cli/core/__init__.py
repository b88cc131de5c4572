"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses matching the API's JSON shapes
- Payload encoding (JSON, form, multipart file upload)
- Low-level HTTP client with bearer auth and envelope decoding
"""

from medium_cli.core.client import APIClient
from medium_cli.core.encoding import (
    ClientRequest,
    FileOpener,
    FilePayload,
    FormPayload,
    JSONPayload,
    OSFileOpener,
)
from medium_cli.core.errors import (
    APIError,
    EncodingError,
    MalformedErrorResponse,
    MediumError,
    ParseError,
    RequestError,
)
from medium_cli.core.types import (
    AccessToken,
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

__all__ = [
    "APIClient",
    "APIError",
    "AccessToken",
    "ClientRequest",
    "ContentFormat",
    "Contributor",
    "CreatePostOptions",
    "EncodingError",
    "FileOpener",
    "FilePayload",
    "FormPayload",
    "Image",
    "JSONPayload",
    "License",
    "MalformedErrorResponse",
    "MediumError",
    "OSFileOpener",
    "ParseError",
    "Post",
    "Publication",
    "PublishStatus",
    "RequestError",
    "Scope",
    "UploadOptions",
    "User",
]
