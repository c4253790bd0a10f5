"""Post builder – accumulate a post, authenticate, submit."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from .api import MakabaClient
from .errors import MakabaAuthError, MakabaError
from .models import (
    Attachment,
    AttachmentError,
    AttachmentSource,
    LocalPath,
    PostRequest,
    PostResult,
    RemoteURL,
    Session,
    guess_mime,
)

logger = logging.getLogger("makaba.posting")


def _fieldname(index: int) -> str:
    """``file`` for the first attachment, then ``file2``, ``file3``, ..."""
    return "file" if index == 0 else f"file{index + 1}"


class PostBuilder:
    """Chainable builder for a single post.

    Example::

        with PostBuilder() as p:
            p.board("b").thread("1234").comment("hello").attach(LocalPath("1.png"))
            if p.authenticate(passcode):
                result = p.submit()
    """

    def __init__(self, client: MakabaClient | None = None) -> None:
        self._owns_client = client is None
        self.client = client or MakabaClient()
        self.session: Session | None = None
        self.errors: list[AttachmentError | MakabaError] = []
        self._request = PostRequest()

    # ── fields ───────────────────────────────────────────────────

    def _set(self, **changes: str) -> PostBuilder:
        self._request = replace(self._request, **changes)
        return self

    def board(self, board: str) -> PostBuilder:
        return self._set(board=board)

    def thread(self, thread: str) -> PostBuilder:
        """Thread number to reply to; empty or ``"0"`` starts a new thread."""
        return self._set(thread=thread)

    def name(self, name: str) -> PostBuilder:
        return self._set(name=name)

    def email(self, email: str) -> PostBuilder:
        return self._set(email=email)

    def subject(self, subject: str) -> PostBuilder:
        return self._set(subject=subject)

    def comment(self, comment: str) -> PostBuilder:
        return self._set(comment=comment)

    # ── attachments ──────────────────────────────────────────────

    def _load(self, source: AttachmentSource) -> bytes:
        if isinstance(source, RemoteURL):
            return self.client.download(source.url)
        return Path(source.path).read_bytes()

    def attach(self, *sources: AttachmentSource) -> PostBuilder:
        """Read every source into an attachment.

        A source that cannot be read is recorded in ``errors`` and skipped.
        Anything but a ``LocalPath`` or ``RemoteURL`` raises ``TypeError``
        before any source is read.
        """
        for source in sources:
            if not isinstance(source, (LocalPath, RemoteURL)):
                raise TypeError(f"Attachment source must be LocalPath or RemoteURL, got {type(source).__name__}")

        attachments = list(self._request.attachments)
        for source in sources:
            try:
                data = self._load(source)
            except (OSError, ValueError, MakabaError) as exc:
                logger.warning("Skipping attachment %s: %s", source, exc)
                self.errors.append(AttachmentError(source, exc))
                continue
            attachments.append(
                Attachment(
                    fieldname=_fieldname(len(attachments)),
                    filename=source.filename,
                    data=data,
                    content_type=guess_mime(source.filename),
                )
            )
            logger.debug("Attached %s (%d bytes)", source, len(data))
        self._request = replace(self._request, attachments=tuple(attachments))
        return self

    # ── auth ─────────────────────────────────────────────────────

    def _use_session(self, session: Session) -> None:
        if self.session is not None:
            self.session.close()
        self.session = session

    def authenticate(self, passcode: str) -> bool:
        """Exchange ``passcode`` for a session used by later submits.

        Re-authenticating replaces (and closes) the previous session.  A
        rejected passcode leaves the builder unauthenticated.
        """
        try:
            result = self.client.authenticate(passcode)
        except MakabaError as exc:
            logger.warning("Passcode auth error: %s", exc)
            self.errors.append(exc)
            return False
        if result.session is None:
            return False
        self._use_session(result.session)
        return True

    # ── submit ───────────────────────────────────────────────────

    def build(self) -> PostRequest:
        """Snapshot of the request as it stands now."""
        return self._request

    def submit(self, session: Session | None = None) -> PostResult:
        """Post the current snapshot.

        Uses ``session`` if given, else the builder's own session, else no
        auth at all.  Transport and decode failures raise; an ``Error``
        payload comes back as a failed ``PostResult``.
        """
        request = self.build()
        if not request.board:
            logger.warning("Submitting without a board")
        return self.client.post(request, session or self.session)

    def submit_with_passcode(self, passcode: str) -> PostResult:
        """Authenticate, then submit.  Nothing is posted if auth fails."""
        result = self.client.authenticate(passcode)
        if result.session is None:
            raise MakabaAuthError(result.payload)
        self._use_session(result.session)
        return self.submit()

    # ── lifecycle ────────────────────────────────────────────────

    def close(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> PostBuilder:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
