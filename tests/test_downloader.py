from types import SimpleNamespace
from unittest import mock

import pytest
import requests

from clibsearch.downloader import Downloader
from clibsearch.errors import FetchError

URL = "https://example.com/Packages.md"


@pytest.fixture
def downloader():
    config = SimpleNamespace(
        proxy_url=None, verify_ssl=True, ca_bundle=None, timeout_connect=3, timeout_read=5
    )
    d = Downloader(config)
    d.session = mock.MagicMock()
    return d


def respond(d, chunks, headers=None):
    resp = mock.MagicMock()
    resp.headers = headers or {}
    resp.iter_content.return_value = chunks
    d.session.get.return_value.__enter__.return_value = resp
    return resp


def test_download_to_memory(downloader):
    respond(downloader, [b"hel", b"", b"lo"], {"content-length": "5"})
    assert downloader.download_to_memory(URL) == b"hello"
    downloader.session.get.assert_called_once_with(URL, stream=True, timeout=(3, 5))


def test_connection_error(downloader):
    downloader.session.get.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(FetchError) as exc:
        downloader.download_to_memory(URL)
    assert exc.value.url == URL
    assert "refused" in str(exc.value)


def test_http_error(downloader):
    resp = respond(downloader, [])
    resp.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Client Error")
    with pytest.raises(FetchError):
        downloader.download_to_memory(URL)


def test_too_large(downloader):
    respond(downloader, [b"x"], {"content-length": str(2 * 1024 * 1024)})
    with pytest.raises(FetchError):
        downloader.download_to_memory(URL, max_size_mb=1)


def test_malformed_content_length(downloader):
    respond(downloader, [b"hello"], {"content-length": "12, 12"})
    assert downloader.download_to_memory(URL) == b"hello"


def test_proxy_and_ssl_settings():
    config = SimpleNamespace(
        proxy_url="http://proxy:3128", verify_ssl=False, ca_bundle=None, timeout_connect=1, timeout_read=1
    )
    d = Downloader(config)
    assert d.session.proxies["https"] == "http://proxy:3128"
    assert d.session.trust_env is False
    assert d.session.verify is False
