"""Keyword-based category suggestions for new bills and expenses."""

from typing import Iterable, Mapping, Optional

import structlog

from budget_core.models import CategoryId, CategorySet, TagMatch

logger = structlog.get_logger()


# Category name -> keywords found in descriptions
CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "Utilities": [
        "electric", "electricity", "power", "energy", "water", "gas", "utility",
        "internet", "wifi", "broadband", "phone", "cellular", "mobile",
    ],
    "Housing": [
        "rent", "mortgage", "hoa", "maintenance", "repair", "property tax",
        "insurance", "home", "house", "apartment",
    ],
    "Transportation": [
        "gas", "fuel", "parking", "car", "auto", "vehicle", "maintenance",
        "repair", "insurance", "uber", "lyft", "taxi", "bus", "train",
    ],
    "Food": [
        "grocery", "groceries", "restaurant", "dining", "food", "meal",
        "breakfast", "lunch", "dinner", "takeout", "delivery",
    ],
    "Entertainment": [
        "movie", "theatre", "concert", "show", "game", "streaming",
        "netflix", "hulu", "spotify", "apple", "subscription",
    ],
    "Healthcare": [
        "doctor", "medical", "health", "dental", "vision", "prescription",
        "medicine", "pharmacy", "hospital", "clinic", "insurance",
    ],
}


def match_confidence(description: str, keyword: str) -> float:
    """Score a keyword hit in [0, 1].

    Half the score rewards how much of the description the keyword covers,
    half rewards how early it appears.
    """
    length = len(description)
    position = description.find(keyword)
    if length == 0 or position < 0:
        return 0.0
    coverage = min(0.5, (len(keyword) / length) * 0.5)
    position_score = 0.5 * (1 - position / length)
    return coverage + position_score


def build_history(records: Iterable[Mapping]) -> dict[str, CategoryId]:
    """Map previously categorised descriptions (lower-cased) to their category id."""
    history: dict[str, CategoryId] = {}
    for record in records:
        category_id = record.get("category_id")
        description = record.get("description")
        if category_id is not None and description:
            history[str(description).strip().lower()] = category_id
    return history


def suggest_category(
    description: str,
    categories: CategorySet,
    history: Optional[Mapping[str, CategoryId]] = None,
    keywords: Optional[Mapping[str, list[str]]] = None,
) -> Optional[TagMatch]:
    """Suggest a category for ``description``.

    Args:
        description: Free-text bill or expense description.
        categories: Categories available to choose from.
        history: Description -> category id from earlier entries. An exact
            (case-insensitive) hit wins outright with confidence 1.0.
        keywords: Category name -> keywords; defaults to CATEGORY_KEYWORDS.

    Returns:
        Best TagMatch, or None when nothing matches.
    """
    normalized = description.strip().lower()
    if not normalized:
        return None

    if history and normalized in history:
        category = categories.resolve(history[normalized])
        if category is not None:
            return TagMatch(category=category, confidence=1.0)

    keywords = keywords if keywords is not None else CATEGORY_KEYWORDS
    best: Optional[TagMatch] = None
    for category in categories.categories:
        for keyword in keywords.get(category.name, []):
            if keyword not in normalized:
                continue
            confidence = match_confidence(normalized, keyword)
            if best is None or confidence > best.confidence:
                best = TagMatch(category=category, confidence=confidence)

    if best is not None:
        logger.debug(
            "category_suggested",
            description=description,
            category=best.category.name,
            confidence=round(best.confidence, 3),
        )
    return best
