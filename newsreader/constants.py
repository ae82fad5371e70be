"""Application-wide constants and defaults."""

# Feed sections offered in the tag menu, in display order
FEED_TAG_SLUGS: tuple[str, ...] = (
    "aktualitet",
    "sociale",
    "mat",
    "klos",
    "diber",
    "opinion",
    "ekonomi",
    "sport",
)

FEED_TAG_LABELS: dict[str, str] = {
    "aktualitet": "Aktualitet",
    "sociale": "Sociale",
    "mat": "Mat",
    "klos": "Klos",
    "diber": "Dibër",
    "opinion": "Opinion",
    "ekonomi": "Ekonomi",
    "sport": "Sport",
}

# Label for the unfiltered feed
ALL_TAGS_LABEL = "Të gjitha"

# Article screen: fetch one extra so the current post can be dropped
RECENT_POSTS_FETCH_LIMIT = 6
RECENT_POSTS_SHOWN = 5

# Route pushed for an article
ARTICLE_ROUTE_PREFIX = "/article/"


def tag_label(slug: str | None) -> str | None:
    """Display label for a known feed tag; None for tags outside the menu."""
    if slug is None:
        return ALL_TAGS_LABEL
    return FEED_TAG_LABELS.get(slug)
