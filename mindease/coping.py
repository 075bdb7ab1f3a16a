"""
Coping suggestions keyed by sentiment category.
"""

from .models import SentimentCategory

FALLBACK_SUGGESTION = (
    "Take a moment for yourself. A few slow breaths can help you check in "
    "with how you are feeling."
)

_SUGGESTIONS: dict[SentimentCategory, str] = {
    SentimentCategory.VERY_POSITIVE: (
        "It's great that you're feeling this way! Consider writing down what "
        "went well today so you can come back to it on harder days."
    ),
    SentimentCategory.POSITIVE: (
        "Nice to hear things are going okay. A short walk or a moment of "
        "gratitude can help you hold on to this feeling."
    ),
    SentimentCategory.NEUTRAL: (
        "Try a quick mindfulness check-in: name one thing you can see, one "
        "thing you can hear and one thing you can feel right now."
    ),
    SentimentCategory.NEGATIVE: (
        "Try the 4-7-8 breathing technique: inhale for 4 seconds, hold for 7, "
        "and exhale for 8. Reaching out to someone you trust can help too."
    ),
    SentimentCategory.VERY_NEGATIVE: (
        "You don't have to face this alone. Try grounding yourself by feeling "
        "your feet on the floor, and consider contacting a mental health "
        "professional or a support line."
    ),
}


def suggest(category: SentimentCategory) -> str:
    """Return the coping suggestion for a category, or a general fallback."""
    return _SUGGESTIONS.get(category, FALLBACK_SUGGESTION)
