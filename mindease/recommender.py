"""
Topic-based article recommendation.
"""

from collections.abc import Sequence

from .catalog import GENERAL_TOPIC
from .models import Article

FALLBACK_COUNT = 3


def recommend(
    text: str, selected_topic: str | None, catalog: Sequence[Article]
) -> list[Article]:
    """
    Pick the catalog articles relevant to a piece of user text.

    An article qualifies when one of its topic tags occurs in the lower-cased
    text, or when it carries the selected topic (unless that topic is the
    general sentinel). Qualifying articles keep catalog order. When nothing
    qualifies the first few catalog entries are returned instead.

    Args:
        text: The latest user text
        selected_topic: The user's topic preference, if any
        catalog: Articles to choose from, in display order

    Returns:
        The qualifying articles, never empty for a non-empty catalog
    """
    lowered = text.lower()
    use_topic = bool(selected_topic) and selected_topic != GENERAL_TOPIC

    matches = [
        article
        for article in catalog
        if any(topic in lowered for topic in article.topics)
        or (use_topic and selected_topic in article.topics)
    ]
    if matches:
        return matches
    return list(catalog[:FALLBACK_COUNT])
