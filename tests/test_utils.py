from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from hedera.errors import ContextTypeError
from hedera.utils import (
    collapse_slashes,
    copy_file,
    extract_date_from_name,
    has_hidden_part,
    paginate_path,
    parse_date_value,
    replace_suffix,
    require,
    url_join,
)


def test_url_join_uses_single_separator():
    assert url_join("http://example.com/", "/a.html") == "http://example.com/a.html"
    assert url_join("http://example.com", "a.html") == "http://example.com/a.html"
    assert url_join("", "/a.html") == "/a.html"
    assert url_join("", "a.html") == "/a.html"


def test_collapse_slashes():
    assert collapse_slashes("//2020///01/x.html") == "/2020/01/x.html"


def test_extract_date_from_name():
    assert extract_date_from_name("2024-01-15-hello.md") == datetime(2024, 1, 15)
    assert extract_date_from_name("hello.md") is None
    assert extract_date_from_name("2024-13-45-bad-date.md") is None


def test_parse_date_value_formats():
    parsed = parse_date_value("2013-11-22 21:42:47")
    assert (parsed.year, parsed.month, parsed.day, parsed.hour) == (2013, 11, 22, 21)
    assert parsed.tzinfo is not None

    zoned = parse_date_value("2014-01-02 03:04:05.123456789 +0900 JST")
    assert zoned.utcoffset() == timedelta(hours=9)
    assert zoned.microsecond == 123456

    from_date = parse_date_value(date(2020, 1, 2))
    assert (from_date.year, from_date.month, from_date.day) == (2020, 1, 2)
    assert from_date.tzinfo is not None


def test_parse_date_value_rejects_non_dates():
    assert parse_date_value("not a date") is None
    assert parse_date_value("") is None
    assert parse_date_value(5) is None
    assert parse_date_value(None) is None


def test_has_hidden_part(tmp_path):
    assert has_hidden_part(tmp_path / "_layouts" / "a.html", tmp_path)
    assert has_hidden_part(tmp_path / ".git" / "HEAD", tmp_path)
    assert not has_hidden_part(tmp_path / "css" / "site.css", tmp_path)
    assert has_hidden_part(Path("/elsewhere/a.html"), tmp_path)


def test_replace_suffix():
    assert replace_suffix(Path("out/a.md"), ".html") == Path("out/a.html")
    assert replace_suffix(Path("out/index"), ".html") == Path("out/index.html")


def test_copy_file_creates_parents(tmp_path):
    src = tmp_path / "a.bin"
    src.write_bytes(b"\x00\x01")
    dst = tmp_path / "out" / "deep" / "a.bin"
    copy_file(src, dst)
    assert dst.read_bytes() == b"\x00\x01"


def test_require():
    assert require({"n": 1}, "n", int) == 1
    with pytest.raises(ContextTypeError):
        require({"n": "1"}, "n", int)
    with pytest.raises(ContextTypeError):
        require({}, "n", int)


def test_paginate_path():
    assert paginate_path(1) == "/"
    assert paginate_path(3) == "/page3/"
