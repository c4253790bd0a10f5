"""
Makaba client – post to and read from a Makaba imageboard (2ch.hk by default).

Supports:
  • Building posts with text fields and file attachments (local or remote)
  • Passcode authentication via the passcode_auth cookie
  • Reading board listings (threads / bump order / creation order)
  • Case-insensitive search over thread subjects
"""

from .api import MakabaClient
from .catalog import CatalogReader
from .config import MakabaConfig
from .errors import MakabaAuthError, MakabaDecodeError, MakabaError, MakabaHTTPError, MakabaTransportError
from .models import (
    Attachment,
    AttachmentError,
    AuthResult,
    Catalog,
    CatalogEntry,
    Cookie,
    LocalPath,
    PostRequest,
    PostResult,
    RemoteURL,
    Session,
    SortMode,
    ThreadMatch,
    ThreadNotFound,
)
from .posting import PostBuilder

__all__ = [
    "Attachment",
    "AttachmentError",
    "AuthResult",
    "Catalog",
    "CatalogEntry",
    "CatalogReader",
    "Cookie",
    "LocalPath",
    "MakabaAuthError",
    "MakabaClient",
    "MakabaConfig",
    "MakabaDecodeError",
    "MakabaError",
    "MakabaHTTPError",
    "MakabaTransportError",
    "PostBuilder",
    "PostRequest",
    "PostResult",
    "RemoteURL",
    "Session",
    "SortMode",
    "ThreadMatch",
    "ThreadNotFound",
]
