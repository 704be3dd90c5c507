import configparser
from pathlib import Path
from typing import Optional, Union

from .logger import setup_logger

_logger = setup_logger()

DEFAULT_REGISTRY_URL = "https://github.com/clibs/clib/wiki/Packages"
DEFAULT_CACHE_TTL = 1 * 24 * 60 * 60


class Config:
    def __init__(self, config_dir: Optional[Union[str, Path]] = None) -> None:
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".config" / "clib-search"
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_path = self.config_dir / "clib-search.conf"

        # Default values
        self.registry_url: str = DEFAULT_REGISTRY_URL
        self.cache_dir: Path = Path.home() / ".cache" / "clib-search"
        self.cache_ttl: int = DEFAULT_CACHE_TTL
        self.log_level: str = "WARNING"

        # Network Defaults
        self.timeout_connect: int = 10
        self.timeout_read: int = 60
        self.verify_ssl: bool = True
        self.proxy_url: Optional[str] = None
        self.ca_bundle: Optional[str] = None

        self.load()

    def load(self) -> None:
        parser = configparser.ConfigParser()
        if not self.config_path.exists():
            _logger.debug(f"Config file {self.config_path} not found. Creating default config.")
            self._write_default_config()

        parser.read(self.config_path)

        # [general]
        self.registry_url = parser.get("general", "registry_url", fallback=self.registry_url) or DEFAULT_REGISTRY_URL
        self.cache_dir = Path(parser.get("general", "cache_dir", fallback=str(self.cache_dir))).expanduser()
        self.cache_ttl = self._getint(parser, "general", "cache_ttl", self.cache_ttl)
        self.log_level = parser.get("general", "log_level", fallback=self.log_level).upper()

        # [network]
        if parser.has_section("network"):
            self.timeout_connect = self._getint(parser, "network", "timeout_connect", self.timeout_connect)
            self.timeout_read = self._getint(parser, "network", "timeout_read", self.timeout_read)
            try:
                self.verify_ssl = parser.getboolean("network", "verify_ssl", fallback=True)
            except ValueError:
                _logger.warning("Invalid value for [network] verify_ssl, using true")
                self.verify_ssl = True

            # Handle empty strings mapping to None
            ca = parser.get("network", "ca_bundle", fallback=None)
            self.ca_bundle = ca if ca else None
            p_url = parser.get("network", "proxy_url", fallback=None)
            self.proxy_url = p_url if p_url else None

    @staticmethod
    def _getint(parser: configparser.ConfigParser, section: str, option: str, default: int) -> int:
        try:
            return parser.getint(section, option, fallback=default)
        except ValueError:
            _logger.warning("Invalid value for [%s] %s, using %s", section, option, default)
            return default

    def _write_default_config(self) -> None:
        parser = configparser.ConfigParser()
        parser["general"] = {
            "registry_url": self.registry_url,
            "cache_dir": str(self.cache_dir),
            "cache_ttl": str(self.cache_ttl),
            "log_level": self.log_level,
        }
        parser["network"] = {
            "timeout_connect": str(self.timeout_connect),
            "timeout_read": str(self.timeout_read),
            "verify_ssl": str(self.verify_ssl).lower(),
            "ca_bundle": self.ca_bundle or "",
            "proxy_url": self.proxy_url or "",
        }
        try:
            with self.config_path.open("w") as f:
                parser.write(f)
        except OSError as e:
            _logger.warning("Could not write default config to %s: %s", self.config_path, e)
            return
        _logger.debug(f"Default config written to {self.config_path}")
