"""
Routes resolved article references to the screen router.

Handles deep links so that opening a link (e.g. from Facebook) opens the
article in-app. Notification taps reach the same dispatcher through
newsreader.services.notifications.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol

from newsreader.config import ClientConfig
from newsreader.constants import ARTICLE_ROUTE_PREFIX
from newsreader.core.logging import get_logger
from newsreader.links.linking import parse_article_link
from newsreader.models.ghost import is_path_safe_slug

logger = get_logger(__name__)


class Navigator(Protocol):
    """Screen router supplied by the UI layer."""

    def push(self, route: str) -> None: ...


class Subscription(Protocol):
    def remove(self) -> None: ...


class LinkingCapability(Protocol):
    """Platform URL source: the launch URL plus live URL events."""

    def get_initial_url(self) -> Awaitable[str | None]: ...

    def add_url_listener(self, listener: Callable[[str], None]) -> Subscription: ...


def article_route(slug: str) -> str:
    return f"{ARTICLE_ROUTE_PREFIX}{slug}"


class NavigationDispatcher:
    """Issues one navigation per call through the most recently installed router.

    The router may be recreated while trigger listeners stay subscribed, so
    listeners hold the dispatcher and the dispatcher holds the router.
    Repeated identical triggers are not deduplicated.
    """

    def __init__(self, navigator: Navigator | None = None) -> None:
        self._navigator = navigator

    def set_navigator(self, navigator: Navigator | None) -> None:
        self._navigator = navigator

    def open_article(self, slug: str) -> bool:
        """Push the article screen for slug; returns False when nothing was pushed."""
        if not is_path_safe_slug(slug):
            if slug:
                logger.warning("Refusing to open article with unsafe slug: %r", slug)
            return False
        navigator = self._navigator
        if navigator is None:
            logger.warning("No navigator installed, dropping navigation to %s", slug)
            return False
        navigator.push(article_route(slug))
        logger.debug("Opened article %s", slug)
        return True


class DeepLinkHandler:
    """Listens for launch and live URLs and opens the articles they point to."""

    def __init__(self, dispatcher: NavigationDispatcher, config: ClientConfig) -> None:
        self.dispatcher = dispatcher
        self.config = config
        self._subscription: Subscription | None = None

    def handle_url(self, url: str | None) -> bool:
        link = parse_article_link(url, self.config)
        if link is None:
            # Unrecognized links are not errors
            logger.debug("Ignoring non-article link: %s", url)
            return False
        return self.dispatcher.open_article(link.slug)

    async def start(self, linking: LinkingCapability) -> None:
        """Check the launch URL once, then subscribe to live URL events."""
        if self._subscription is None:
            self._subscription = linking.add_url_listener(self.handle_url)
        initial_url = await linking.get_initial_url()
        if initial_url:
            self.handle_url(initial_url)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.remove()
            self._subscription = None
