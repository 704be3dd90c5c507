from __future__ import annotations

import atexit
import sys
from typing import Optional

import requests
import urllib3
from requests.adapters import HTTPAdapter
from tqdm import tqdm

from .config import Config
from .errors import FetchError
from .logger import setup_logger

_logger = setup_logger()

USER_AGENT = "clib-search"


class Downloader:
    """
    Single-shot HTTP transport for registry pages.

    One GET per call, no retries: a failure surfaces as FetchError.
    """

    def __init__(self, config: Config) -> None:
        self.config = config

        self.proxy_url = getattr(self.config, "proxy_url", None)
        self.verify_ssl = getattr(self.config, "verify_ssl", True)
        self.ca_bundle = getattr(self.config, "ca_bundle", None)

        # Timeouts (Connect, Read)
        self.timeout = (
            getattr(self.config, "timeout_connect", 10),
            getattr(self.config, "timeout_read", 60),
        )

        self.session: Optional[requests.Session] = None
        self._init_session()
        atexit.register(self.close)

    def _init_session(self) -> None:
        self.session = requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT

        # An explicit proxy wins over the environment
        if self.proxy_url:
            self.session.trust_env = False
            self.session.proxies.update({"http": self.proxy_url, "https": self.proxy_url})

        adapter = HTTPAdapter(max_retries=0)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        if not self.verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            self.session.verify = False
            _logger.warning("SSL verification disabled (Insecure).")
        else:
            self.session.verify = self.ca_bundle if self.ca_bundle else True

    def close(self) -> None:
        if self.session:
            self.session.close()

    def download_to_memory(self, url: str, max_size_mb: int = 50) -> bytes:
        """
        Download url to bytes.
        Progress goes to stderr, and only when stderr is a terminal.
        """
        if not self.session:
            self._init_session()

        _logger.debug("Downloading %s to memory", url)
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as resp:
                resp.raise_for_status()

                limit = max_size_mb * 1024 * 1024
                try:
                    total = int(resp.headers.get("content-length", 0) or 0)
                except ValueError:
                    # malformed or repeated header: size unknown
                    total = 0
                if total > limit:
                    raise FetchError(url, f"response too large ({total} bytes)")

                chunks = []
                size = 0
                with tqdm(
                    total=total or None,
                    unit="B",
                    unit_scale=True,
                    desc="registry",
                    file=sys.stderr,
                    leave=False,
                    disable=not sys.stderr.isatty(),
                ) as bar:
                    for chunk in resp.iter_content(chunk_size=8192):
                        if not chunk:
                            continue
                        size += len(chunk)
                        if size > limit:
                            raise FetchError(url, f"response exceeds {max_size_mb} MB")
                        chunks.append(chunk)
                        bar.update(len(chunk))
        except requests.exceptions.RequestException as e:
            raise FetchError(url, str(e)) from e

        _logger.debug("Downloaded %s (%d bytes)", url, size)
        return b"".join(chunks)
