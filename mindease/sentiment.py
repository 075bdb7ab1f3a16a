"""
Lexicon-based sentiment classification.

Counts how many positive and negative affect terms occur in a text and maps
the resulting balance onto one of five categories. Matching is plain
case-insensitive substring containment, so "like" is found inside "dislike"
and both lexicons may fire on one word.
"""

from .models import Sentiment, SentimentCategory

POSITIVE_TERMS: frozenset[str] = frozenset(
    {
        "happy",
        "good",
        "great",
        "excellent",
        "wonderful",
        "love",
        "like",
        "enjoy",
        "positive",
        "joy",
        "grateful",
        "thankful",
        "excited",
    }
)

NEGATIVE_TERMS: frozenset[str] = frozenset(
    {
        "sad",
        "bad",
        "terrible",
        "awful",
        "hate",
        "dislike",
        "negative",
        "anxious",
        "worry",
        "depressed",
        "angry",
        "upset",
        "frustrated",
    }
)


def category_for(polarity: float) -> SentimentCategory:
    """Map a polarity value onto its category. First matching threshold wins."""
    if polarity > 0.5:
        return SentimentCategory.VERY_POSITIVE
    if polarity > 0.1:
        return SentimentCategory.POSITIVE
    if -0.1 <= polarity <= 0.1:
        return SentimentCategory.NEUTRAL
    if polarity >= -0.5:
        return SentimentCategory.NEGATIVE
    return SentimentCategory.VERY_NEGATIVE


def classify(text: str) -> Sentiment:
    """
    Classify the emotional polarity of a text.

    Args:
        text: Free-form user input, possibly empty

    Returns:
        Sentiment with polarity in [-1, 1] and its derived category
    """
    lowered = text.lower()
    positive = sum(1 for term in POSITIVE_TERMS if term in lowered)
    negative = sum(1 for term in NEGATIVE_TERMS if term in lowered)

    polarity = (positive - negative) / max(1, positive + negative)
    return Sentiment(category=category_for(polarity), polarity=polarity)
