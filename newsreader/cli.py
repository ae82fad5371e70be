#!/usr/bin/env python3
"""
Command line entry point for exercising the reader core against a Ghost site.

Examples:
    newsreader feed --tag sport --limit 5
    newsreader article my-article
    newsreader resolve https://your-ghost-site.com/posts/my-article/
    newsreader notify '{"postSlug": "my-article"}'
    newsreader register-token 'ExponentPushToken[abc]'
"""

import argparse
import asyncio
import json
import sys

from newsreader.config import get_client_config
from newsreader.constants import FEED_TAG_SLUGS, tag_label
from newsreader.core.logging import setup_logging
from newsreader.links.dispatcher import DeepLinkHandler, NavigationDispatcher
from newsreader.models.ghost import DEFAULT_POSTS_LIMIT, FeedQuery
from newsreader.services.ghost_api import GhostApiError, GhostContentClient
from newsreader.services.notifications import NotificationBridge
from newsreader.services.push_tokens import get_push_token_store


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


class PrintNavigator:
    """Navigator that writes pushed routes to stdout."""

    def push(self, route: str) -> None:
        print(route)


async def _show_feed(args: argparse.Namespace) -> int:
    async with GhostContentClient(get_client_config()) as client:
        page = await client.list_posts(FeedQuery(limit=args.limit, tag=args.tag))

    print(f"# {tag_label(args.tag) or args.tag}")
    for post in page:
        published = post.published_at.strftime("%Y-%m-%d %H:%M")
        print(f"{published}  {post.slug}  {post.title}")
    if page.pagination:
        p = page.pagination
        print(f"-- page {p.page}/{p.pages}, {p.total} posts")
    return 0


async def _show_article(args: argparse.Namespace) -> int:
    async with GhostContentClient(get_client_config()) as client:
        post = await client.get_post(args.slug)

    if post is None:
        print("Missing article.", file=sys.stderr)
        return 1
    print(post.title)
    print(post.url)
    if post.tags:
        print("Tags: " + ", ".join(tag.name for tag in post.tags))
    print()
    print(post.plaintext or post.excerpt or "No content.")
    return 0


def _resolve(args: argparse.Namespace) -> int:
    handler = DeepLinkHandler(NavigationDispatcher(PrintNavigator()), get_client_config())
    if not handler.handle_url(args.url):
        print("Not an article link", file=sys.stderr)
        return 1
    return 0


def _notify(args: argparse.Namespace) -> int:
    try:
        payload = json.loads(args.payload)
    except json.JSONDecodeError as e:
        print(f"Invalid JSON payload: {e}", file=sys.stderr)
        return 2

    bridge = NotificationBridge(NavigationDispatcher(PrintNavigator()))
    if not bridge.handle_response(payload):
        print("Notification does not name an article", file=sys.stderr)
        return 1
    return 0


async def _push_token(args: argparse.Namespace) -> int:
    store = get_push_token_store()
    if not store.is_configured():
        print("Supabase not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY.", file=sys.stderr)
        return 1
    if args.command == "register-token":
        ok = await store.register(args.token)
    else:
        ok = await store.unregister(args.token)
    if not ok:
        print(f"Failed to {args.command.replace('-', ' ')}", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="newsreader", description="Ghost news reader core")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    feed = subparsers.add_parser("feed", help="List the latest posts")
    feed.add_argument("--tag", choices=FEED_TAG_SLUGS, default=None, help="Feed section")
    feed.add_argument("--limit", type=_positive_int, default=DEFAULT_POSTS_LIMIT, help="Posts per page")

    article = subparsers.add_parser("article", help="Show one post by slug")
    article.add_argument("slug")

    resolve = subparsers.add_parser("resolve", help="Print the route a link opens")
    resolve.add_argument("url")

    notify = subparsers.add_parser("notify", help="Route a notification data payload")
    notify.add_argument("payload", help="JSON object, e.g. '{\"slug\": \"my-article\"}'")

    register = subparsers.add_parser("register-token", help="Store a device push token")
    register.add_argument("token")

    unregister = subparsers.add_parser("unregister-token", help="Deactivate a device push token")
    unregister.add_argument("token")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    # stdout carries command output only
    setup_logging(level=args.log_level, stream=sys.stderr)

    try:
        if args.command == "feed":
            return asyncio.run(_show_feed(args))
        if args.command == "article":
            return asyncio.run(_show_article(args))
        if args.command == "resolve":
            return _resolve(args)
        if args.command in ("register-token", "unregister-token"):
            return asyncio.run(_push_token(args))
        return _notify(args)
    except GhostApiError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
