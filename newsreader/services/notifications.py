"""
Push notification bridge.

Routes a tapped notification to the article it names and, independently,
registers this device's push token with the token store. A failed
registration never affects tap routing.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import ValidationError

from newsreader.core.logging import get_logger
from newsreader.core.settings import get_settings
from newsreader.links.dispatcher import NavigationDispatcher, Subscription
from newsreader.models.ghost import ArticleReference
from newsreader.utils.error_logger import log_error

logger = get_logger(__name__)

SLUG_KEY = "slug"
POST_SLUG_KEY = "postSlug"


@dataclass(frozen=True)
class HasSlug:
    slug: str


@dataclass(frozen=True)
class HasPostSlug:
    slug: str


@dataclass(frozen=True)
class NoTarget:
    pass


NotificationTarget = HasSlug | HasPostSlug | NoTarget


def _article_slug(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return ArticleReference(slug=value).slug
    except ValidationError:
        logger.warning("Ignoring notification slug that is not path-safe: %r", value)
        return None


def classify_payload(data: Any) -> NotificationTarget:
    """Classify an untyped notification data payload by where its slug lives.

    Only path-safe slugs count; anything else is treated as no target.
    """
    if not isinstance(data, Mapping):
        return NoTarget()
    slug = _article_slug(data.get(SLUG_KEY))
    if slug:
        return HasSlug(slug)
    post_slug = _article_slug(data.get(POST_SLUG_KEY))
    if post_slug:
        return HasPostSlug(post_slug)
    return NoTarget()


def extract_notification_slug(data: Any) -> str | None:
    """Slug named by a notification payload (`slug`, then `postSlug`), if any."""
    target = classify_payload(data)
    if isinstance(target, NoTarget):
        return None
    return target.slug


class PushCapability(Protocol):
    """Platform push API. Absent entirely on platforms without push."""

    async def permission_granted(self) -> bool: ...

    async def get_push_token(self, project_id: str | None) -> str | None: ...

    def add_response_listener(
        self, listener: Callable[[Mapping[str, Any] | None], None]
    ) -> Subscription: ...

    def add_received_listener(
        self, listener: Callable[[Mapping[str, Any] | None], None]
    ) -> Subscription: ...


class TokenStore(Protocol):
    async def register(self, token: str) -> bool: ...


class NotificationBridge:
    """Subscribes to notification taps and registers the push token."""

    def __init__(
        self,
        dispatcher: NavigationDispatcher,
        capability: PushCapability | None = None,
        token_store: TokenStore | None = None,
        project_id: str | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.capability = capability
        self.token_store = token_store
        self.project_id = project_id if project_id is not None else get_settings().push_project_id
        self.push_token: str | None = None
        self.error: str | None = None
        self._subscriptions: list[Subscription] = []
        self._registration: asyncio.Task[None] | None = None

    def handle_response(self, data: Mapping[str, Any] | None) -> bool:
        """Open the article named by a tapped notification's data payload."""
        slug = extract_notification_slug(data)
        if slug is None:
            logger.debug("Notification tap without article slug: %s", data)
            return False
        return self.dispatcher.open_article(slug)

    def _handle_received(self, data: Mapping[str, Any] | None) -> None:
        logger.info("Notification received: %s", data)

    async def start(self) -> None:
        """Subscribe to taps, then register the push token in the background."""
        if self.capability is None:
            logger.info("Push notifications not supported on this platform")
            return
        if self._subscriptions:
            return

        self._subscriptions.append(self.capability.add_response_listener(self.handle_response))
        self._subscriptions.append(self.capability.add_received_listener(self._handle_received))
        self._registration = asyncio.create_task(self._register_token(self.capability))

    async def wait_registered(self) -> None:
        """Wait for the background registration to finish (it never raises)."""
        if self._registration is not None:
            await asyncio.gather(self._registration, return_exceptions=True)

    def stop(self) -> None:
        for subscription in self._subscriptions:
            subscription.remove()
        self._subscriptions.clear()
        if self._registration is not None and not self._registration.done():
            self._registration.cancel()
        self._registration = None

    async def _register_token(self, capability: PushCapability) -> None:
        try:
            if not await capability.permission_granted():
                logger.warning("Failed to get push notification permissions")
                return

            token = await capability.get_push_token(self.project_id)
            if not token:
                logger.warning("No push token issued")
                return
            self.push_token = token

            if self.token_store is None:
                return
            if not await self.token_store.register(token):
                self.error = "Failed to register for notifications"
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            log_error("notifications", exc, operation="register_push_token")
            self.error = str(exc) or "Failed to register for notifications"
