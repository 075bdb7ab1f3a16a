"""
Tests for topic-based article recommendation.
"""

from mindease.catalog import ARTICLES, GENERAL_TOPIC
from mindease.recommender import recommend


def titles(articles):
    return [article.title for article in articles]


class TestRecommend:
    """Test suite for recommend()."""

    def test_topic_in_text_selects_tagged_articles(self):
        """Test that every article tagged with a mentioned topic is returned."""
        result = recommend("I've been so stressed at work", GENERAL_TOPIC, ARTICLES)
        assert titles(result) == [
            "5 Ways to Manage Anxiety",
            "Mindfulness Techniques for Daily Life",
            "Recognizing Burnout and Recovery Strategies",
        ]

    def test_matching_ignores_case(self):
        result = recommend("SLEEP has been hard", None, ARTICLES)
        assert titles(result) == ["How to Improve Your Sleep Quality"]

    def test_selected_topic_widens_results(self):
        result = recommend("hello", "sleep", ARTICLES)
        assert titles(result) == ["How to Improve Your Sleep Quality"]

    def test_text_and_topic_matches_keep_catalog_order(self):
        result = recommend("my relationships", "depression", ARTICLES)
        assert titles(result) == [
            "Understanding Depression: Signs and Support",
            "Building Healthy Relationships",
        ]

    def test_general_topic_is_not_a_filter(self):
        """Test that the general sentinel alone falls back to the first entries."""
        result = recommend("hello", GENERAL_TOPIC, ARTICLES)
        assert result == list(ARTICLES[:3])

    def test_general_tag_still_matches_text(self):
        result = recommend("just a general question", GENERAL_TOPIC, ARTICLES)
        assert titles(result) == [
            "Mindfulness Techniques for Daily Life",
            "Recognizing Burnout and Recovery Strategies",
        ]

    def test_no_match_falls_back_to_first_three(self):
        result = recommend("", None, ARTICLES)
        assert result == list(ARTICLES[:3])

    def test_small_catalog_fallback(self):
        assert recommend("nothing", None, ARTICLES[:2]) == list(ARTICLES[:2])

    def test_empty_catalog(self):
        assert recommend("anxiety", "sleep", ()) == []

    def test_idempotent(self):
        first = recommend("anxiety and sleep", "relationships", ARTICLES)
        second = recommend("anxiety and sleep", "relationships", ARTICLES)
        assert first == second
