"""URL helpers shared by configuration and deep-link parsing."""

from __future__ import annotations

from urllib.parse import SplitResult, urlsplit

_DEFAULT_PORTS = {"http": 80, "https": 443}


def split_url(value: str | None) -> SplitResult | None:
    """Parse value into URL parts, returning None when it is not a usable URL."""
    if not value or not isinstance(value, str):
        return None
    try:
        parts = urlsplit(value.strip())
        # Accessing .port validates it; urlsplit defers that check
        parts.port  # noqa: B018
    except ValueError:
        return None
    if not parts.scheme:
        return None
    return parts


def url_host(parts: SplitResult) -> str:
    """Host as browsers report it: lowercase hostname plus any non-default port."""
    hostname = (parts.hostname or "").lower()
    if not hostname:
        return ""
    port = parts.port
    if port is None or _DEFAULT_PORTS.get(parts.scheme) == port:
        return hostname
    return f"{hostname}:{port}"


def path_segments(path: str) -> list[str]:
    """Non-empty path segments with leading and trailing separators ignored."""
    return [segment for segment in path.strip("/").split("/") if segment]
