from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional, Sequence, TextIO

from .cache import CacheStore
from .config import Config
from .downloader import Downloader
from .errors import FetchError
from .logger import setup_logger
from .matcher import QuerySpec, matches
from .registry import RegistryClient
from .renderer import make_renderer

_logger = setup_logger()


@dataclass(frozen=True)
class RunOptions:
    color: bool = True
    use_cache: bool = True
    json: bool = False
    verbose: bool = False


def utf8_stream(stream: TextIO) -> TextIO:
    """Switch a text stream with another encoding (e.g. cp1252 on Windows) to UTF-8."""
    encoding = getattr(stream, "encoding", None)
    if encoding and encoding.lower().replace("-", "") != "utf8" and hasattr(stream, "reconfigure"):
        stream.reconfigure(encoding="utf-8")
    return stream


def search(
    options: RunOptions,
    query: Sequence[str],
    config: Config,
    downloader: Optional[Downloader] = None,
    stream: Optional[TextIO] = None,
) -> int:
    """
    Fetch the registry, filter it by query and render the matches.
    Returns the process exit code.
    """
    stream = utf8_stream(stream if stream is not None else sys.stdout)
    spec = query if isinstance(query, QuerySpec) else QuerySpec.from_args(query)

    cache = CacheStore(config.cache_dir, config.cache_ttl)
    client = RegistryClient(downloader or Downloader(config), cache)

    try:
        handle = client.fetch(config.registry_url, use_cache=options.use_cache)
    except FetchError as e:
        _logger.error("error: %s", e)
        return 1

    renderer = make_renderer(options, stream)
    renderer.begin()
    for pkg in client.iterator(handle):
        if matches(spec, pkg):
            renderer.add(pkg)
        else:
            _logger.debug("skipped package %s", pkg.repo)
    renderer.finish()
    return 0
