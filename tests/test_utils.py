from pathlib import Path

import pytest

from pahest._utils import ensure_cache_dict, filter_mapping, partition, resolve_url, url_origin, url_path, url_scheme


def test_partition():
    expected, stale = partition(["fonts-v1", "fonts-v2", "legacy"], lambda name: name.endswith("-v2"))

    assert expected == ["fonts-v2"]
    assert stale == ["fonts-v1", "legacy"]


def test_filter_mapping_is_case_insensitive():
    assert filter_mapping({"Content-Encoding": "gzip", "vary": "*"}, ["content-encoding"]) == {"vary": "*"}


@pytest.mark.parametrize(
    "url, path",
    [
        ("https://zoo.example", "/"),
        ("https://zoo.example/", "/"),
        ("https://zoo.example/chat/cat?x=1#top", "/chat/cat"),
        ("https://zoo.example/APP.CSS", "/APP.CSS"),
    ],
)
def test_url_path(url: str, path: str):
    assert url_path(url) == path


def test_url_scheme_and_origin():
    assert url_scheme("HTTPS://zoo.example/app.css") == "https"
    assert url_scheme("data:text/plain,hi") == "data"
    assert url_origin("https://zoo.example:8443/chat/cat") == "https://zoo.example:8443"


def test_resolve_url():
    assert resolve_url("https://zoo.example/chat/cat", "/index.html") == "https://zoo.example/index.html"
    assert resolve_url("https://zoo.example", "/public/fonts/a.woff2") == "https://zoo.example/public/fonts/a.woff2"


def test_ensure_cache_dict_creates_gitignore(tmp_path: Path):
    directory = ensure_cache_dict(tmp_path / "cache")

    assert directory.is_dir()
    assert (directory / ".gitignore").read_text(encoding="utf-8") == "# Automatically created by Pahest\n*"
