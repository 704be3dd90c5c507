import io
import json
from types import SimpleNamespace
from unittest import mock

import pytest

from clibsearch.cache import CacheStore
from clibsearch.errors import FetchError
from clibsearch.operations import RunOptions, search

URL = "https://github.com/clibs/clib/wiki/Packages"
REGISTRY = b"""\
## Tools

* [foo/bar](https://x/bar) - A bar tool
* [baz/qux](https://x/qux) - Something else
"""


@pytest.fixture
def config(tmp_path):
    return SimpleNamespace(registry_url=URL, cache_dir=tmp_path / "cache", cache_ttl=86400)


@pytest.fixture
def downloader():
    d = mock.Mock()
    d.download_to_memory.return_value = REGISTRY
    return d


def run(options, query, config, downloader):
    out = io.StringIO()
    rc = search(options, query, config, downloader=downloader, stream=out)
    return rc, out.getvalue()


def test_text_search(config, downloader):
    rc, out = run(RunOptions(color=False), ["bar"], config, downloader)
    assert rc == 0
    assert out == "\n  foo/bar\n  url: https://x/bar\n  desc: A bar tool\n\n"


def test_no_query_lists_everything(config, downloader):
    rc, out = run(RunOptions(color=False), [], config, downloader)
    assert rc == 0
    assert "foo/bar" in out and "baz/qux" in out
    assert out.index("foo/bar") < out.index("baz/qux")


def test_json_search(config, downloader):
    rc, out = run(RunOptions(json=True), ["BAR"], config, downloader)
    assert rc == 0
    assert json.loads(out) == [
        {"repo": "foo/bar", "href": "https://x/bar", "description": "A bar tool", "category": "Tools"}
    ]


def test_json_zero_matches(config, downloader):
    rc, out = run(RunOptions(json=True), ["zzz"], config, downloader)
    assert rc == 0
    assert out == "[]\n"


def test_fetch_failure(config, downloader, caplog):
    downloader.download_to_memory.side_effect = FetchError(URL, "connection refused")
    rc, out = run(RunOptions(json=True), ["bar"], config, downloader)
    assert rc == 1
    assert out == ""
    assert "connection refused" in caplog.text


def test_fresh_cache_avoids_network(config, downloader):
    CacheStore(config.cache_dir, 86400).write_entry(b"* [cached/pkg](https://c) - cached\n")
    rc, out = run(RunOptions(color=False), [], config, downloader)
    assert rc == 0
    downloader.download_to_memory.assert_not_called()
    assert "cached/pkg" in out


def test_skip_cache_forces_fetch(config, downloader):
    CacheStore(config.cache_dir, 86400).write_entry(b"* [cached/pkg](https://c) - cached\n")
    rc, out = run(RunOptions(color=False, use_cache=False), [], config, downloader)
    assert rc == 0
    downloader.download_to_memory.assert_called_once()
    assert "cached/pkg" not in out
    assert "foo/bar" in out


def test_skipped_packages_are_logged(config, downloader, caplog):
    caplog.set_level("DEBUG", logger="clibsearch")
    run(RunOptions(color=False), ["bar"], config, downloader)
    assert "skipped package baz/qux" in caplog.text


UNICODE_REGISTRY = "* [jp/nihon](https://x/nihon) - 日本 😀\n".encode("utf-8")


def cp1252_stream():
    buf = io.BytesIO()
    return buf, io.TextIOWrapper(buf, encoding="cp1252")


def test_json_output_is_utf8_on_legacy_console(config, downloader):
    downloader.download_to_memory.return_value = UNICODE_REGISTRY
    buf, stream = cp1252_stream()
    rc = search(RunOptions(json=True), [], config, downloader=downloader, stream=stream)
    assert rc == 0
    assert json.loads(buf.getvalue().decode("utf-8"))[0]["description"] == "日本 😀"


def test_text_output_is_utf8_on_legacy_console(config, downloader):
    downloader.download_to_memory.return_value = UNICODE_REGISTRY
    buf, stream = cp1252_stream()
    rc = search(RunOptions(color=False), ["NIHON"], config, downloader=downloader, stream=stream)
    assert rc == 0
    assert "  desc: 日本 😀\n" in buf.getvalue().decode("utf-8")
