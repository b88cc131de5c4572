"""
Medium CLI - Command-line interface.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from medium_cli.core.errors import MediumError
from medium_cli.core.types import (
    ContentFormat,
    CreatePostOptions,
    License,
    PublishStatus,
    Scope,
    UploadOptions,
)
from medium_cli.sdk import MediumClient

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: MediumError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


def table_output(
    headers: list[str],
    rows: list[list[str]],
    widths: list[int],
) -> None:
    """Print a formatted table for human output."""
    header_line = "  ".join(h.ljust(w) for h, w in zip(headers, widths))
    print(header_line)
    print("-" * len(header_line))

    for row in rows:
        print("  ".join(str(v)[:w].ljust(w) for v, w in zip(row, widths)))


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_auth_url(client: MediumClient, args: argparse.Namespace) -> None:
    """Print the authorization URL."""
    url = client.auth.authorization_url(args.state, args.redirect_uri, *args.scope)
    if is_tty():
        print(url)
    else:
        success_output({"url": url})


def cmd_auth_exchange(client: MediumClient, args: argparse.Namespace) -> None:
    """Exchange an authorization code for an access token."""
    try:
        token = client.auth.exchange_authorization_code(args.code, args.redirect_uri)
        success_output(token.to_dict())
    except MediumError as e:
        error_output(e)


def cmd_auth_refresh(client: MediumClient, args: argparse.Namespace) -> None:
    """Exchange a refresh token for a new access token."""
    try:
        token = client.auth.exchange_refresh_token(args.refresh_token)
        success_output(token.to_dict())
    except MediumError as e:
        error_output(e)


def cmd_user_get(client: MediumClient, args: argparse.Namespace) -> None:
    """Get a user profile."""
    try:
        user = client.users.get(args.user_id or "")
        success_output(asdict(user))
    except MediumError as e:
        error_output(e)


def cmd_user_publications(client: MediumClient, args: argparse.Namespace) -> None:
    """List a user's publications."""
    try:
        publications = client.users.publications(args.user_id)

        if is_tty():
            if not publications:
                print("No publications found.")
                return
            table_output(
                ["ID", "Name", "URL"],
                [[p.id, p.name, p.url] for p in publications],
                [14, 30, 50],
            )
        else:
            success_output({"data": [asdict(p) for p in publications]})
    except MediumError as e:
        error_output(e)


def cmd_pub_contributors(client: MediumClient, args: argparse.Namespace) -> None:
    """List contributors of a publication."""
    try:
        contributors = client.publications.contributors(args.publication_id)

        if is_tty():
            if not contributors:
                print("No contributors found.")
                return
            table_output(
                ["User ID", "Role"],
                [[c.user_id, c.role] for c in contributors],
                [70, 10],
            )
        else:
            success_output({"data": [asdict(c) for c in contributors]})
    except MediumError as e:
        error_output(e)


def cmd_post_create(client: MediumClient, args: argparse.Namespace) -> None:
    """Create a post."""
    if args.content == "-":
        content = sys.stdin.read()
    elif args.content.startswith("@"):
        try:
            content = Path(args.content[1:]).read_text()
        except OSError as e:
            error_output(MediumError(f"Could not read content file: {e}"))
            return
    else:
        content = args.content

    options = CreatePostOptions(
        user_id=args.user_id,
        title=args.title,
        content=content,
        content_format=args.format,
        tags=args.tag or [],
        canonical_url=args.canonical_url or "",
        publish_status=args.status or "",
        license=args.license or "",
    )
    try:
        post = client.posts.create(options)
        success_output(asdict(post))
    except MediumError as e:
        error_output(e)


def cmd_image_upload(client: MediumClient, args: argparse.Namespace) -> None:
    """Upload an image."""
    try:
        image = client.images.upload(UploadOptions(args.path, args.content_type))
        success_output(asdict(image))
    except MediumError as e:
        error_output(e)


# =============================================================================
# Parser
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="medium",
        description="Medium CLI - Command-line interface for Medium's API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration:
  MEDIUM_APPLICATION_ID, MEDIUM_APPLICATION_SECRET, MEDIUM_ACCESS_TOKEN,
  MEDIUM_HOST, MEDIUM_TIMEOUT

Examples:
  medium auth url --redirect-uri https://example.com/cb --scope basicProfile publishPost
  medium auth exchange <code> --redirect-uri https://example.com/cb
  medium user get
  medium post create <user_id> --title "Hello" --content @post.md --format markdown
  medium image upload ./cover.png --content-type image/png
""",
    )
    parser.add_argument("--host", help="API host (overrides MEDIUM_HOST)")
    parser.add_argument("--token", help="Access token (overrides MEDIUM_ACCESS_TOKEN)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds (overrides MEDIUM_TIMEOUT)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Auth ==========
    auth = subparsers.add_parser("auth", help="Authorize and exchange tokens")
    auth.set_defaults(func=lambda _c, _a: auth.print_help())
    auth_sub = auth.add_subparsers(dest="subcommand")

    a_url = auth_sub.add_parser("url", help="Print the authorization URL")
    a_url.add_argument("--state", default="", help="Opaque state echoed to the redirect URL")
    a_url.add_argument("--redirect-uri", required=True, help="Redirect URL")
    a_url.add_argument(
        "--scope",
        nargs="+",
        default=[Scope.BASIC_PROFILE.value],
        choices=[s.value for s in Scope],
        help="Scopes to request",
    )
    a_url.set_defaults(func=cmd_auth_url)

    a_exchange = auth_sub.add_parser("exchange", help="Exchange an authorization code")
    a_exchange.add_argument("code", help="Authorization code")
    a_exchange.add_argument("--redirect-uri", required=True, help="Redirect URL used to authorize")
    a_exchange.set_defaults(func=cmd_auth_exchange)

    a_refresh = auth_sub.add_parser("refresh", help="Exchange a refresh token")
    a_refresh.add_argument("refresh_token", help="Refresh token")
    a_refresh.set_defaults(func=cmd_auth_refresh)

    # ========== Users ==========
    user = subparsers.add_parser("user", help="User profiles and publications")
    user.set_defaults(func=lambda _c, _a: user.print_help())
    user_sub = user.add_subparsers(dest="subcommand")

    u_get = user_sub.add_parser("get", help="Get a user profile")
    u_get.add_argument("user_id", nargs="?", help="User ID (default: authenticated user)")
    u_get.set_defaults(func=cmd_user_get)

    u_pubs = user_sub.add_parser("publications", help="List a user's publications")
    u_pubs.add_argument("user_id", help="User ID")
    u_pubs.set_defaults(func=cmd_user_publications)

    # ========== Publications ==========
    pub = subparsers.add_parser("pub", help="Publications")
    pub.set_defaults(func=lambda _c, _a: pub.print_help())
    pub_sub = pub.add_subparsers(dest="subcommand")

    p_contrib = pub_sub.add_parser("contributors", help="List publication contributors")
    p_contrib.add_argument("publication_id", help="Publication ID")
    p_contrib.set_defaults(func=cmd_pub_contributors)

    # ========== Posts ==========
    post = subparsers.add_parser("post", help="Create posts")
    post.set_defaults(func=lambda _c, _a: post.print_help())
    post_sub = post.add_subparsers(dest="subcommand")

    po_create = post_sub.add_parser("create", help="Create a post")
    po_create.add_argument("user_id", help="Author user ID")
    po_create.add_argument("--title", "-t", required=True, help="Post title")
    po_create.add_argument("--content", "-c", required=True, help="Content, @file to read a file, or - for stdin")
    po_create.add_argument(
        "--format",
        "-f",
        default=ContentFormat.HTML.value,
        choices=[f.value for f in ContentFormat],
        help="Content format",
    )
    po_create.add_argument("--tag", action="append", help="Tag (repeatable)")
    po_create.add_argument("--canonical-url", help="Original URL of the content")
    po_create.add_argument("--status", choices=[s.value for s in PublishStatus], help="Publish status")
    po_create.add_argument("--license", choices=[lic.value for lic in License], help="License")
    po_create.set_defaults(func=cmd_post_create)

    # ========== Images ==========
    image = subparsers.add_parser("image", help="Upload images")
    image.set_defaults(func=lambda _c, _a: image.print_help())
    image_sub = image.add_subparsers(dest="subcommand")

    i_upload = image_sub.add_parser("upload", help="Upload an image")
    i_upload.add_argument("path", help="Image file")
    i_upload.add_argument("--content-type", required=True, help="MIME type, e.g. image/png")
    i_upload.set_defaults(func=cmd_image_upload)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Create client
    client = MediumClient(access_token=args.token, host=args.host, timeout=args.timeout)

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
