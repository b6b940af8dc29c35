"""Occurred / pending classification against a caller-supplied reference date."""

from datetime import date
from typing import Iterable

from budget_core.models import Occurrence, OccurrenceStatus


def classify(occurrence_date: date, reference_date: date) -> OccurrenceStatus:
    """Same-day counts as occurred."""
    if occurrence_date <= reference_date:
        return OccurrenceStatus.OCCURRED
    return OccurrenceStatus.PENDING


def effective_status(occurrence: Occurrence, reference_date: date) -> OccurrenceStatus:
    """Projections stay pending; anything else is classified by date."""
    if occurrence.projected:
        return OccurrenceStatus.PENDING
    return classify(occurrence.date, reference_date)


def classify_occurrences(
    occurrences: Iterable[Occurrence],
    reference_date: date,
) -> list[Occurrence]:
    """Return copies of ``occurrences`` carrying their status."""
    return [o.with_status(effective_status(o, reference_date)) for o in occurrences]
