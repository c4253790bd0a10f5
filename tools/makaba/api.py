"""Makaba API client – passcode auth, multipart posting, board listings."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import MakabaConfig
from .errors import MakabaDecodeError, MakabaHTTPError, MakabaTransportError
from .models import COOKIE_NAME, AuthResult, Cookie, PostRequest, PostResult, Session, SortMode

logger = logging.getLogger("makaba.api")


def _post_number(payload: dict[str, Any], key: str, body: str) -> str:
    """Render an integral JSON number as a decimal string without a fraction."""
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MakabaDecodeError(f"Posting response has no numeric {key!r}: {payload}", body)
    if isinstance(value, float):
        return "%.0f" % value
    return str(value)


def parse_post_result(payload: dict[str, Any], body: str = "") -> PostResult:
    """Classify a decoded posting response.

    A non-null ``Error`` wins over everything else.  ``Status: "Redirect"``
    points at ``Target``, anything else carries the new ``Num``.
    """
    if payload.get("Error") is not None:
        logger.warning("Posting failed: %s", payload)
        return PostResult(error=payload)
    if payload.get("Status") == "Redirect":
        target = _post_number(payload, "Target", body)
        logger.info("Posting redirected to %s", target)
        return PostResult(num=target, redirect=True)
    num = _post_number(payload, "Num", body)
    logger.info("Posting succeeded: %s", num)
    return PostResult(num=num)


class MakabaClient:
    """Thin wrapper around the Makaba JSON endpoints.

    One ``httpx.Client`` is used for unauthenticated traffic; every passcode
    session gets a client of its own carrying the auth cookie.  ``transport``
    is handed to all of them (tests pass an ``httpx.MockTransport``).
    """

    def __init__(self, cfg: MakabaConfig | None = None, transport: httpx.BaseTransport | None = None) -> None:
        self.cfg = cfg or MakabaConfig()
        self._transport = transport
        self._client = self._make_client()

    def _make_client(self, cookies: httpx.Cookies | None = None) -> httpx.Client:
        return httpx.Client(
            timeout=self.cfg.timeout,
            headers={"User-Agent": self.cfg.user_agent},
            cookies=cookies,
            follow_redirects=True,
            transport=self._transport,
        )

    # ── request helpers ──────────────────────────────────────────

    def _send(self, client: httpx.Client, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise MakabaTransportError(f"{method} {url} failed: {exc}") from exc

    def _get(self, url: str) -> httpx.Response:
        resp = self._send(self._client, "GET", url)
        if not resp.is_success:
            logger.warning("%d: %s", resp.status_code, url)
            raise MakabaHTTPError(url, resp.status_code)
        return resp

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise MakabaDecodeError(f"Malformed JSON from {resp.request.url}: {exc}", resp.text) from exc

    def _decode_object(self, resp: httpx.Response) -> dict[str, Any]:
        data = self._decode(resp)
        if not isinstance(data, dict):
            raise MakabaDecodeError(f"Expected a JSON object from {resp.request.url}", resp.text)
        return data

    # ── auth ─────────────────────────────────────────────────────

    def open_session(self, token: str) -> Session:
        """Bind a passcode hash to a fresh client as the ``passcode_auth`` cookie."""
        host = httpx.URL(self.cfg.base_url).host
        cookie = Cookie(name=COOKIE_NAME, value=token, path="/", domain=host)
        # cookiejar matches dotless hosts (localhost) as "<host>.local"
        jar_domain = host if "." in host else f"{host}.local"
        jar = httpx.Cookies()
        jar.set(cookie.name, cookie.value, domain=jar_domain, path=cookie.path)
        return Session(token, cookie, self._make_client(jar))

    def authenticate(self, passcode: str) -> AuthResult:
        """Exchange a passcode for a session.

        ``result: 1`` yields a session, anything else a negative result
        carrying the payload.  Transport and decode failures raise.
        """
        form = {"json": "1", "task": "auth", "usercode": passcode}
        resp = self._send(self._client, "POST", self.cfg.auth_url, data=form)
        result = self._decode_object(resp)

        code = result.get("result")
        if isinstance(code, bool) or not isinstance(code, (int, float)):
            raise MakabaDecodeError(f"Auth response has no numeric result: {result}", resp.text)

        if code != 1:
            logger.warning("Passcode auth failed: %s", result)
            return AuthResult(payload=result)

        token = result.get("hash")
        if not isinstance(token, str) or not token:
            raise MakabaDecodeError(f"Auth response has no hash: {result}", resp.text)
        logger.debug("Passcode auth succeeded for %s", self.cfg.host)
        return AuthResult(session=self.open_session(token), payload=result)

    # ── posting ──────────────────────────────────────────────────

    def post(self, request: PostRequest, session: Session | None = None) -> PostResult:
        """Send one post as ``multipart/form-data``.

        Text fields become parts without a filename so the body is multipart
        even when there are no attachments.
        """
        files: list[tuple[str, Any]] = [
            (key, (None, value.encode("utf-8"))) for key, value in request.form_fields()
        ]
        files.extend(
            (a.fieldname, (a.filename, a.data, a.content_type)) for a in request.attachments
        )
        client = session.client if session is not None else self._client
        resp = self._send(client, "POST", self.cfg.posting_url, files=files)
        return parse_post_result(self._decode_object(resp), resp.text)

    # ── reading ──────────────────────────────────────────────────

    def get_listing(self, board: str, sort: SortMode = SortMode.THREADS) -> Any:
        """Fetch a board listing as decoded JSON, without the session cookie."""
        return self._decode(self._get(self.cfg.catalog_url(board, sort.value)))

    def download(self, url: str) -> bytes:
        """Fetch a remote attachment body."""
        return self._get(url).content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> MakabaClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
