from __future__ import annotations

import os
import tempfile
import time
from pathlib import Path
from typing import Callable, Optional, Union

from .errors import CacheReadError, CacheWriteError
from .logger import setup_logger

_logger = setup_logger()

SEARCH_NAMESPACE = "search"


class CacheStore:
    """
    Time-stamped blob store for the last fetched registry payload.

    One file per namespace under cache_dir. The file mtime is the entry
    timestamp; an entry is fresh while ``now - timestamp < retention_seconds``.
    Reads and writes are fail-soft: errors are logged at debug level only.
    """

    def __init__(
        self,
        cache_dir: Union[str, Path],
        retention_seconds: int,
        namespace: str = SEARCH_NAMESPACE,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.retention_seconds = retention_seconds
        self.namespace = namespace
        self.clock = clock
        self.path = self.cache_dir / f"{namespace}.cache"

    def has_entry(self) -> bool:
        return self.path.is_file()

    def timestamp(self) -> Optional[float]:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None

    def age(self, now: Optional[float] = None) -> Optional[float]:
        ts = self.timestamp()
        if ts is None:
            return None
        return (self.clock() if now is None else now) - ts

    def is_fresh(self, now: Optional[float] = None) -> bool:
        age = self.age(now)
        return age is not None and age < self.retention_seconds

    def read_entry(self) -> Optional[bytes]:
        try:
            return self._read()
        except CacheReadError as e:
            _logger.debug("cache miss: %s", e)
            return None

    def write_entry(self, payload: bytes) -> None:
        try:
            self._write(payload)
        except CacheWriteError as e:
            _logger.debug("cache not written: %s", e)
            return
        _logger.debug("wrote cache")

    def _read(self) -> bytes:
        try:
            with open(self.path, "rb") as fh:
                return fh.read()
        except OSError as e:
            raise CacheReadError(f"{self.path}: {e}") from e

    def _write(self, payload: bytes) -> None:
        now = self.clock()
        tmp_name = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=f".{self.namespace}_")
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.utime(tmp_name, (now, now))
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
            raise CacheWriteError(f"{self.path}: {e}") from e
