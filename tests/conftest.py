"""Shared fixtures: a fake Makaba server behind httpx.MockTransport."""

from __future__ import annotations

import re
from typing import Any, Callable

import httpx
import pytest

from makaba import MakabaClient

Handler = Callable[[httpx.Request], httpx.Response]


class FakeMakaba:
    """Routes requests by (method, path) and keeps every request it saw."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def json(self, method: str, path: str, payload: Any, status: int = 200) -> None:
        self.routes[(method, path)] = lambda request: httpx.Response(status, json=payload)

    def raw(self, method: str, path: str, content: bytes, status: int = 200) -> None:
        self.routes[(method, path)] = lambda request: httpx.Response(status, content=content)

    def fail(self, method: str, path: str) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.routes[(method, path)] = handler

    def sent(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, text="not found")
        return handler(request)


def multipart_parts(request: httpx.Request) -> list[dict[str, Any]]:
    """Split a multipart/form-data body into {name, filename, content_type, data} dicts."""
    ctype = request.headers["content-type"]
    assert ctype.startswith("multipart/form-data")
    boundary = ctype.split("boundary=", 1)[1].encode()
    parts = []
    for chunk in request.content.split(b"--" + boundary)[1:-1]:
        head, _, body = chunk[2:].partition(b"\r\n\r\n")
        head_text = head.decode()
        name = re.search(r'name="([^"]*)"', head_text)
        filename = re.search(r'filename="([^"]*)"', head_text)
        content_type = re.search(r"Content-Type: (\S+)", head_text)
        parts.append({
            "name": name.group(1) if name else None,
            "filename": filename.group(1) if filename else None,
            "content_type": content_type.group(1) if content_type else None,
            "data": body[:-2],
        })
    return parts


def text_fields(request: httpx.Request) -> dict[str, str]:
    return {p["name"]: p["data"].decode() for p in multipart_parts(request) if p["filename"] is None}


AUTH_PATH = "/makaba/makaba.fcgi"
POSTING_PATH = "/makaba/posting.fcgi"


@pytest.fixture
def server() -> FakeMakaba:
    return FakeMakaba()


@pytest.fixture
def client(server: FakeMakaba):
    with MakabaClient(transport=httpx.MockTransport(server)) as c:
        yield c


@pytest.fixture
def catalog_payload() -> dict[str, Any]:
    return {
        "board": "b",
        "BoardInfo": "Random",
        "threads": [
            {
                "num": "1001",
                "subject": "Music thread",
                "comment": "post your tunes",
                "posts_count": 120,
                "score": 42.5,
                "timestamp": 1700000000,
                "lasthit": 1700000500,
                "views": 3000,
            },
            {
                "num": "1002",
                "subject": "FooBar general",
                "comment": "foo",
                "posts_count": 7,
                "score": "13.25",
                "timestamp": 1700001000,
                "lasthit": 1700001100,
                "views": 80,
            },
        ],
    }
