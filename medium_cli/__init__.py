"""
Medium CLI - Three-layer client for Medium's OAuth2 API.

Layers:
- core: Raw types, payload encoding and HTTP client
- sdk: High-level MediumClient grouped by resource
- cli: Command-line interface
"""

from medium_cli.sdk import MediumClient

__version__ = "0.1.0"
__all__ = ["MediumClient"]
