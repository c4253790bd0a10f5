"""Configuration and environment settings for the Makaba client."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class MakabaConfig:
    """Makaba endpoint configuration.  Paths are fixed by the engine, only the host varies."""
    host: str = "2ch.hk"
    scheme: str = "https"
    timeout: float = 30.0
    user_agent: str = "makaba-client/1.0"

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}"

    @property
    def auth_url(self) -> str:
        return f"{self.base_url}/makaba/makaba.fcgi"

    @property
    def posting_url(self) -> str:
        return f"{self.base_url}/makaba/posting.fcgi?json=1"

    def catalog_url(self, board: str, listing: str) -> str:
        """URL of a board listing, ``listing`` being the JSON file stem."""
        return f"{self.base_url}/{board}/{listing}.json"

    @classmethod
    def from_env(cls) -> MakabaConfig:
        return cls(
            host=os.getenv("MAKABA_HOST", "2ch.hk"),
            scheme=os.getenv("MAKABA_SCHEME", "https"),
            timeout=float(os.getenv("MAKABA_TIMEOUT", "30")),
            user_agent=os.getenv("MAKABA_USER_AGENT", "makaba-client/1.0"),
        )
