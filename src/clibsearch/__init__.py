"""
clib-search - search the clib package registry.

Modules:
- cli: Command-line interface entry point.
- operations: Search command (fetch, match, render).
- registry: Registry fetching and wiki markdown parsing.
- matcher: Query matching rules.
- renderer: Text and JSON output.
- cache: On-disk registry cache.
- downloader: HTTP transport.
- config: Configuration management.
"""

__version__ = "0.1.0"

from .cli import main

__all__ = ["main", "__version__"]
