"""Tests for category suggestions."""

import pytest

from budget_core.models import Category, CategorySet
from budget_core.tagging import build_history, match_confidence, suggest_category


@pytest.fixture
def categories() -> CategorySet:
    return CategorySet(
        categories=(
            Category(id=1, name="Utilities"),
            Category(id=2, name="Housing"),
            Category(id=3, name="Food"),
        )
    )


class TestMatchConfidence:
    """Tests for the keyword score."""

    def test_exact_description(self):
        """A keyword that is the whole description scores 1.0."""
        assert match_confidence("rent", "rent") == pytest.approx(1.0)

    def test_earlier_and_longer_scores_higher(self):
        """Coverage and position both raise the score."""
        early = match_confidence("rent payment", "rent")
        late = match_confidence("monthly rent", "rent")
        assert early > late

    def test_missing_keyword(self):
        assert match_confidence("coffee", "rent") == 0.0


class TestSuggestCategory:
    """Tests for suggest_category."""

    def test_keyword_match(self, categories):
        """'Electric bill' is a utility."""
        match = suggest_category("Electric bill", categories)

        assert match.category.name == "Utilities"
        assert match.confidence == pytest.approx(8 / 13 * 0.5 + 0.5)

    def test_late_keyword_scores_lower(self, categories):
        match = suggest_category("Monthly rent", categories)

        assert match.category.name == "Housing"
        assert match.confidence < 0.5

    def test_history_wins(self, categories):
        """An exact historical description is returned with full confidence."""
        history = build_history(
            [
                {"description": "Costco Run", "category_id": 3},
                {"description": "ignored", "category_id": None},
            ]
        )
        match = suggest_category("  costco run ", categories, history)

        assert history == {"costco run": 3}
        assert match.category.name == "Food"
        assert match.confidence == 1.0

    def test_history_with_unknown_category_falls_back(self, categories):
        """A stale history entry does not block keyword matching."""
        match = suggest_category(
            "Water utility", categories, history={"water utility": 42}
        )
        assert match.category.name == "Utilities"
        assert match.confidence < 1.0

    def test_only_known_categories_suggested(self, categories):
        """Keywords of categories the user does not have are ignored."""
        assert suggest_category("Netflix", categories) is None

    def test_no_match(self, categories):
        assert suggest_category("Birthday present", categories) is None
        assert suggest_category("   ", categories) is None

    def test_custom_keywords(self, categories):
        """Callers can supply their own keyword table."""
        match = suggest_category(
            "Landlord transfer", categories, keywords={"Housing": ["landlord"]}
        )
        assert match.category.name == "Housing"
