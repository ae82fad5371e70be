"""Immutable client configuration shared by the content client and link resolver."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from newsreader.core.settings import Settings, get_settings
from newsreader.utils.url_utils import split_url, url_host

DEFAULT_API_VERSION = "v6.0"
DEFAULT_APP_SCHEME = "mattelevizion"


@dataclass(frozen=True)
class ClientConfig:
    """Backend coordinates resolved once at startup.

    Never mutated after construction, so any number of concurrent
    operations may read it without coordination.
    """

    base_url: str
    api_key: str
    api_version: str = DEFAULT_API_VERSION
    app_scheme: str = DEFAULT_APP_SCHEME

    @classmethod
    def from_settings(cls, settings: Settings) -> ClientConfig:
        return cls(
            base_url=settings.ghost_url,
            api_key=settings.ghost_content_api_key,
            api_version=settings.ghost_api_version,
            app_scheme=settings.app_scheme,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url.strip()) and bool(self.api_key.strip())

    @property
    def host(self) -> str:
        """Host (with non-default port) of the backend site, or "" when unusable."""
        parts = split_url(self.base_url)
        return url_host(parts) if parts else ""

    @property
    def api_root(self) -> str:
        return f"{self.base_url.strip().rstrip('/')}/ghost/api/content"


@lru_cache
def get_client_config() -> ClientConfig:
    """Build the process-wide configuration from settings exactly once."""
    return ClientConfig.from_settings(get_settings())
