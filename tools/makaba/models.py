"""Immutable records exchanged with the Makaba API."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Union
from urllib.parse import urlsplit

import httpx

# Map file extension → MIME type
MIME_MAP: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".webm": "video/webm",
    ".mp4": "video/mp4",
    ".mp3": "audio/mpeg",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
}

COOKIE_NAME = "passcode_auth"


def guess_mime(filename: str) -> str:
    return MIME_MAP.get(Path(filename).suffix.lower(), "application/octet-stream")


# ── attachments ──────────────────────────────────────────────────


@dataclass(frozen=True)
class LocalPath:
    """An attachment read from the local filesystem."""
    path: str | Path

    @property
    def filename(self) -> str:
        return Path(self.path).name

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class RemoteURL:
    """An attachment fetched over HTTP when it is attached."""
    url: str

    @property
    def filename(self) -> str:
        name = posixpath.basename(urlsplit(self.url).path)
        return name or "file"

    def __str__(self) -> str:
        return self.url


AttachmentSource = Union[LocalPath, RemoteURL]


@dataclass(frozen=True)
class Attachment:
    fieldname: str
    filename: str
    data: bytes = field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class AttachmentError:
    """A source that could not be read; recorded and skipped."""
    source: AttachmentSource
    cause: Exception

    def __str__(self) -> str:
        return f"{self.source}: {self.cause}"


# ── posting ──────────────────────────────────────────────────────

TEXT_FIELDS = ("board", "thread", "name", "email", "subject", "comment")


@dataclass(frozen=True)
class PostRequest:
    """Snapshot of a post, ready to be serialised.  ``None`` means "not set"."""
    board: str | None = None
    thread: str | None = None
    name: str | None = None
    email: str | None = None
    subject: str | None = None
    comment: str | None = None
    attachments: tuple[Attachment, ...] = ()

    def form_fields(self) -> list[tuple[str, str]]:
        """Text parts of the multipart body, in wire order."""
        fields = [("task", "post")]
        for key in TEXT_FIELDS:
            value = getattr(self, key)
            if value:
                fields.append((key, value))
        return fields


@dataclass(frozen=True)
class PostResult:
    """Outcome of one submission.

    Exactly one of ``num`` and ``error`` is set.  When ``redirect`` is true
    ``num`` is the redirect target rather than a freshly created post.
    """
    num: str | None = None
    redirect: bool = False
    error: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok


# ── auth ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Cookie:
    name: str
    value: str
    path: str = "/"
    domain: str = ""


class Session:
    """A passcode session: token, its cookie and the client that carries it."""

    def __init__(self, token: str, cookie: Cookie, client: httpx.Client) -> None:
        self.token = token
        self.cookie = cookie
        self.client = client

    def __repr__(self) -> str:
        return f"Session(domain={self.cookie.domain!r})"

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> Session:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


@dataclass(frozen=True)
class AuthResult:
    session: Session | None = None
    payload: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.session is not None

    def __bool__(self) -> bool:
        return self.ok


# ── catalog ──────────────────────────────────────────────────────


class SortMode(str, Enum):
    """Board listings; the value is the JSON file stem on the server."""
    THREADS = "threads"
    BUMP = "catalog"
    DATE = "catalog_num"

    @classmethod
    def parse(cls, name: str | None) -> SortMode:
        """Map the short option names (``bump``, ``date``, empty) to a mode."""
        options = {"": cls.THREADS, "threads": cls.THREADS, "bump": cls.BUMP, "date": cls.DATE}
        key = (name or "").lower()
        if key not in options:
            raise ValueError(f"Sort mode can only be bump, date or empty, got {name!r}")
        return options[key]


@dataclass(frozen=True)
class CatalogEntry:
    num: str
    subject: str = ""
    comment: str = ""
    posts_count: int = 0
    views: int = 0
    timestamp: int = 0
    lasthit: int = 0
    score: float = 0.0


@dataclass(frozen=True)
class Catalog:
    board: str
    sort: SortMode = SortMode.THREADS
    threads: tuple[CatalogEntry, ...] = ()
    board_info: str = ""

    def __len__(self) -> int:
        return len(self.threads)


@dataclass(frozen=True)
class ThreadMatch:
    num: str
    subject: str


@dataclass(frozen=True)
class ThreadNotFound:
    keyword: str

    @property
    def message(self) -> str:
        return f'Couldn\'t find any threads matching this "{self.keyword}" keyword'

    def __bool__(self) -> bool:
        return False
