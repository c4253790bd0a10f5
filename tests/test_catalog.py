from __future__ import annotations

import pytest

from makaba import (
    CatalogReader,
    MakabaDecodeError,
    MakabaHTTPError,
    MakabaTransportError,
    SortMode,
    ThreadMatch,
    ThreadNotFound,
)
from makaba.catalog import parse_catalog


@pytest.fixture
def reader(client):
    with CatalogReader("b", client) as r:
        yield r


@pytest.mark.parametrize("sort, path", [
    (SortMode.THREADS, "/b/threads.json"),
    (SortMode.BUMP, "/b/catalog.json"),
    (SortMode.DATE, "/b/catalog_num.json"),
])
def test_fetch_uses_listing_for_sort_mode(server, reader, catalog_payload, sort, path):
    server.json("GET", path, catalog_payload)

    catalog = reader.fetch(sort)

    assert len(server.sent("GET", path)) == 1
    assert catalog.sort is sort
    assert catalog.board == "b"
    assert catalog.board_info == "Random"
    assert [t.num for t in catalog.threads] == ["1001", "1002"]


def test_fetch_defaults_to_threads(server, reader, catalog_payload):
    server.json("GET", "/b/threads.json", catalog_payload)
    assert reader.fetch() is reader.catalog


def test_entry_fields(catalog_payload):
    entry = parse_catalog(catalog_payload, "b").threads[0]
    assert entry.subject == "Music thread"
    assert entry.comment == "post your tunes"
    assert entry.posts_count == 120
    assert entry.views == 3000
    assert entry.timestamp == 1700000000
    assert entry.lasthit == 1700000500
    assert entry.score == 42.5


@pytest.mark.parametrize("raw, expected", [(42.5, 42.5), (7, 7.0), ("13.25", 13.25), ("", 0.0), (None, 0.0)])
def test_score_is_normalised_to_float(catalog_payload, raw, expected):
    catalog_payload["threads"][0]["score"] = raw
    score = parse_catalog(catalog_payload, "b").threads[0].score
    assert isinstance(score, float)
    assert score == expected


def test_non_numeric_score_is_decode_error(catalog_payload):
    catalog_payload["threads"][1]["score"] = "hot"
    with pytest.raises(MakabaDecodeError):
        parse_catalog(catalog_payload, "b")


def test_integer_num_becomes_string(catalog_payload):
    catalog_payload["threads"][0]["num"] = 1001
    assert parse_catalog(catalog_payload, "b").threads[0].num == "1001"


def test_missing_threads_is_decode_error():
    with pytest.raises(MakabaDecodeError):
        parse_catalog({"board": "b"}, "b")


# ── failures keep the previous listing ───────────────────────────


def test_malformed_body_keeps_previous_catalog(server, reader, catalog_payload):
    server.json("GET", "/b/threads.json", catalog_payload)
    previous = reader.fetch()

    server.raw("GET", "/b/threads.json", b'{"board": "b", "threads": [')
    with pytest.raises(MakabaDecodeError):
        reader.fetch()

    assert reader.catalog is previous


def test_partially_bad_listing_populates_nothing(server, reader, catalog_payload):
    catalog_payload["threads"][1]["posts_count"] = "many"
    server.json("GET", "/b/threads.json", catalog_payload)

    with pytest.raises(MakabaDecodeError):
        reader.fetch()

    assert reader.catalog is None


def test_transport_error_is_distinct_from_decode_error(server, reader):
    server.fail("GET", "/b/threads.json")
    with pytest.raises(MakabaTransportError) as exc_info:
        reader.fetch()
    assert not isinstance(exc_info.value, MakabaDecodeError)
    assert reader.catalog is None


def test_unknown_board_is_http_error(reader):
    with pytest.raises(MakabaHTTPError):
        reader.fetch()


# ── search ───────────────────────────────────────────────────────


def test_find_thread_is_case_insensitive(server, reader, catalog_payload):
    server.json("GET", "/b/threads.json", catalog_payload)

    match = reader.find_thread("foo")

    assert match == ThreadMatch(num="1002", subject="FooBar general")


def test_find_thread_returns_first_match(server, reader, catalog_payload):
    catalog_payload["threads"][0]["subject"] = "foo first"
    server.json("GET", "/b/threads.json", catalog_payload)
    assert reader.find_thread("FOO").num == "1001"


def test_find_thread_not_found_names_keyword(server, reader, catalog_payload):
    server.json("GET", "/b/threads.json", catalog_payload)

    result = reader.find_thread("foo-nope")

    assert isinstance(result, ThreadNotFound)
    assert not result
    assert result.keyword == "foo-nope"
    assert '"foo-nope"' in result.message


def test_find_thread_always_reads_default_listing(server, reader, catalog_payload):
    server.json("GET", "/b/threads.json", catalog_payload)
    reader.find_thread("music")
    assert len(server.sent("GET", "/b/threads.json")) == 1
    assert server.sent("GET", "/b/catalog.json") == []


# ── sort mode parsing ────────────────────────────────────────────


@pytest.mark.parametrize("name, mode", [
    (None, SortMode.THREADS),
    ("", SortMode.THREADS),
    ("bump", SortMode.BUMP),
    ("DATE", SortMode.DATE),
])
def test_sort_mode_parse(name, mode):
    assert SortMode.parse(name) is mode


def test_sort_mode_parse_rejects_unknown():
    with pytest.raises(ValueError):
        SortMode.parse("top")
