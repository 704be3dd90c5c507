from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .cache import CacheStore
from .downloader import Downloader
from .errors import ParseError
from .logger import setup_logger

_logger = setup_logger()

# https://github.com/<owner>/<repo>/wiki/<Page>
GITHUB_WIKI_RE = re.compile(
    r"^https?://github\.com/(?P<owner>[^/]+)/(?P<repo>[^/]+)/wiki/(?P<page>[^/?#]+)/?$"
)

CATEGORY_RE = re.compile(r"^\s*#{2,}\s*(?P<category>.+?)\s*#*\s*$")

# * [owner/name](https://github.com/owner/name) - description
ITEM_RE = re.compile(
    r"""
    ^\s*[-*+]\s+
    \[(?P<repo>[^\]]*)\]
    \((?P<href>[^)\s]*)\)
    (?:\s*[-:–—]?\s*(?P<description>.*?))?
    \s*$
    """,
    re.VERBOSE,
)

ITEM_START_RE = re.compile(r"^\s*[-*+]\s+\[")


def parse_name(repo: Optional[str]) -> Optional[str]:
    """
    Short package name from "owner/name[@version]".
    A repo without a usable name part is returned unchanged.
    """
    if repo is None:
        return None
    name = repo.rstrip("/").rsplit("/", 1)[-1]
    name = name.split("@", 1)[0]
    return name or repo


@dataclass(frozen=True)
class PackageRecord:
    repo: Optional[str]
    href: Optional[str]
    description: Optional[str] = ""
    category: Optional[str] = ""

    @property
    def name(self) -> Optional[str]:
        return parse_name(self.repo)

    def to_dict(self) -> Dict[str, str]:
        return {
            "repo": self.repo or "",
            "href": self.href or "",
            "description": self.description or "",
            "category": self.category or "",
        }


@dataclass(frozen=True)
class RegistryHandle:
    url: str
    packages: Tuple[PackageRecord, ...]
    source: str

    def __len__(self) -> int:
        return len(self.packages)


def registry_source_url(url: str) -> str:
    """GitHub wiki pages are fetched as raw markdown; anything else verbatim."""
    m = GITHUB_WIKI_RE.match(url.strip())
    if not m:
        return url
    return "https://raw.githubusercontent.com/wiki/{owner}/{repo}/{page}.md".format(**m.groupdict())


def _parse_item(line: str, category: str) -> PackageRecord:
    m = ITEM_RE.match(line)
    if not m or not m.group("repo").strip() or not m.group("href"):
        raise ParseError(f"malformed package line: {line.strip()!r}")
    return PackageRecord(
        repo=m.group("repo").strip(),
        href=m.group("href"),
        description=(m.group("description") or "").strip(),
        category=category,
    )


def parse_registry(text: str) -> List[PackageRecord]:
    """
    Parse wiki markdown into package records, in page order.

    ``## Heading`` lines set the category of the list items that follow.
    Lines that look like package items but do not parse are skipped.
    """
    packages: List[PackageRecord] = []
    category = ""
    for line in text.splitlines():
        heading = CATEGORY_RE.match(line)
        if heading:
            category = heading.group("category")
            continue
        if not ITEM_START_RE.match(line):
            continue
        try:
            packages.append(_parse_item(line, category))
        except ParseError as e:
            _logger.debug("%s", e)
    return packages


class RegistryClient:
    """
    Fetches and parses the package registry.

    With a CacheStore attached, a fresh cached payload is used instead of the
    network when use_cache is set; every network fetch refreshes the cache.
    """

    def __init__(self, downloader: Downloader, cache: Optional[CacheStore] = None):
        self.downloader = downloader
        self.cache = cache

    def fetch(self, url: str, use_cache: bool = True) -> RegistryHandle:
        payload = self._from_cache() if use_cache else None
        source = "cache"
        if payload is None:
            source = "network"
            payload = self._from_network(url)

        packages = parse_registry(payload.decode("utf-8", errors="replace"))
        _logger.debug("found %d packages", len(packages))
        return RegistryHandle(url=url, packages=tuple(packages), source=source)

    def iterator(self, handle: RegistryHandle) -> Iterator[PackageRecord]:
        for pkg in handle.packages:
            yield pkg

    def _from_cache(self) -> Optional[bytes]:
        if self.cache is None or not self.cache.has_entry():
            return None
        if not self.cache.is_fresh():
            _logger.debug("cache is stale (%s)", self.cache.path)
            return None
        data = self.cache.read_entry()
        if data is not None:
            _logger.debug("using cache %s", self.cache.path)
        return data

    def _from_network(self, url: str) -> bytes:
        _logger.debug("setting cache from %s", url)
        payload = self.downloader.download_to_memory(registry_source_url(url))
        if self.cache is not None:
            self.cache.write_entry(payload)
        return payload
