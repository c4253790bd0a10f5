"""Board listings – fetch, decode and search thread subjects."""

from __future__ import annotations

import logging
from typing import Any

from .api import MakabaClient
from .errors import MakabaDecodeError
from .models import Catalog, CatalogEntry, SortMode, ThreadMatch, ThreadNotFound

logger = logging.getLogger("makaba.catalog")


def _as_int(thread: dict[str, Any], key: str) -> int:
    value = thread.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, int):
        raise MakabaDecodeError(f"Thread field {key!r} is not an integer: {value!r}")
    return value


def _as_score(value: Any) -> float:
    """``score`` arrives as a JSON number on some boards and as a string on others."""
    if isinstance(value, bool):
        raise MakabaDecodeError(f"Thread score is not numeric: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value) if value.strip() else 0.0
        except ValueError as exc:
            raise MakabaDecodeError(f"Thread score is not numeric: {value!r}") from exc
    if value is None:
        return 0.0
    raise MakabaDecodeError(f"Thread score is not numeric: {value!r}")


def _as_str(thread: dict[str, Any], key: str) -> str:
    value = thread.get(key) or ""
    if not isinstance(value, str):
        raise MakabaDecodeError(f"Thread field {key!r} is not a string: {value!r}")
    return value


def parse_entry(thread: Any) -> CatalogEntry:
    if not isinstance(thread, dict):
        raise MakabaDecodeError(f"Thread entry is not an object: {thread!r}")
    num = thread.get("num")
    if isinstance(num, int) and not isinstance(num, bool):
        num = str(num)
    if not isinstance(num, str) or not num:
        raise MakabaDecodeError(f"Thread entry has no num: {thread!r}")
    return CatalogEntry(
        num=num,
        subject=_as_str(thread, "subject"),
        comment=_as_str(thread, "comment"),
        posts_count=_as_int(thread, "posts_count"),
        views=_as_int(thread, "views"),
        timestamp=_as_int(thread, "timestamp"),
        lasthit=_as_int(thread, "lasthit"),
        score=_as_score(thread.get("score")),
    )


def parse_catalog(data: Any, board: str, sort: SortMode = SortMode.THREADS) -> Catalog:
    """Decode a listing body.  Either every thread decodes or nothing is returned."""
    if not isinstance(data, dict):
        raise MakabaDecodeError(f"Listing for /{board}/ is not a JSON object")
    threads = data.get("threads")
    if not isinstance(threads, list):
        raise MakabaDecodeError(f"Listing for /{board}/ has no threads array")
    board_info = data.get("BoardInfo") or ""
    return Catalog(
        board=data.get("board") or board,
        sort=sort,
        threads=tuple(parse_entry(t) for t in threads),
        board_info=board_info if isinstance(board_info, str) else "",
    )


class CatalogReader:
    """Reads one board's thread listings.

    ``catalog`` holds the last listing that decoded completely; a failed
    fetch leaves it as it was.
    """

    def __init__(self, board: str, client: MakabaClient | None = None) -> None:
        if not board:
            logger.warning("You have to specify board")
        self.board = board
        self._owns_client = client is None
        self.client = client or MakabaClient()
        self.catalog: Catalog | None = None

    def fetch(self, sort: SortMode = SortMode.THREADS) -> Catalog:
        data = self.client.get_listing(self.board, sort)
        catalog = parse_catalog(data, self.board, sort)
        logger.debug("Fetched /%s/ %s: %d threads", self.board, sort.value, len(catalog))
        self.catalog = catalog
        return catalog

    def find_thread(self, keyword: str) -> ThreadMatch | ThreadNotFound:
        """First thread whose subject contains ``keyword``, ignoring case."""
        needle = keyword.lower()
        for entry in self.fetch().threads:
            if needle in entry.subject.lower():
                return ThreadMatch(num=entry.num, subject=entry.subject)
        return ThreadNotFound(keyword)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> CatalogReader:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
