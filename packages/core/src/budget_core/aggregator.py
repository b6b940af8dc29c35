"""Period aggregation of occurrences.

Sums amounts into occurred / pending buckets and, on request, groups them
by category, by month (income / expenses / net) or by any caller-supplied
key. Aggregation is additive: splitting a window into disjoint parts and
adding the part results gives exactly the whole-window result.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional

import structlog

from budget_core.models import (
    AggregationResult,
    Anomaly,
    AnomalyKind,
    Bucket,
    CategorySet,
    DaySummary,
    FlowType,
    MonthTotals,
    Occurrence,
)
from budget_core.periods import month_key
from budget_core.status import effective_status

logger = structlog.get_logger()

UNCATEGORIZED = "Uncategorized"

GroupKey = Callable[[Occurrence], str]


def by_label(occurrence: Occurrence) -> str:
    """Group key: the occurrence's label."""
    return occurrence.label


def by_flow(occurrence: Occurrence) -> str:
    """Group key: 'income' or 'expense'."""
    return occurrence.flow.value


def aggregate(
    occurrences: Iterable[Occurrence],
    reference_date: date,
    *,
    categories: Optional[CategorySet] = None,
    group_by: Optional[GroupKey] = None,
    monthly: bool = False,
    uncategorized_label: str = UNCATEGORIZED,
) -> AggregationResult:
    """Aggregate occurrences as of ``reference_date``.

    Args:
        occurrences: Occurrences to sum, in any order.
        reference_date: As-of date splitting occurred from pending.
        categories: When given, fill ``by_category`` keyed by category name.
            Ids that do not resolve land in ``uncategorized_label`` and are
            reported as anomalies.
        group_by: When given, fill ``groups`` keyed by its return value.
        monthly: When True, fill ``by_month`` with income / expenses per
            'YYYY-MM'.
        uncategorized_label: Bucket name for missing or unknown categories.

    Returns:
        AggregationResult. Invalid occurrences are excluded from every total
        and counted in ``skipped_count``.
    """
    occurred_total = Decimal("0")
    pending_total = Decimal("0")
    by_category: Optional[dict[str, Bucket]] = {} if categories is not None else None
    groups: Optional[dict[str, Bucket]] = {} if group_by is not None else None
    months: Optional[dict[str, MonthTotals]] = {} if monthly else None
    anomalies: list[Anomaly] = []
    count = 0
    skipped = 0

    for occurrence in occurrences:
        if not occurrence.valid:
            skipped += 1
            continue
        count += 1
        status = effective_status(occurrence, reference_date)
        amount = occurrence.amount
        bucket = Bucket()
        bucket.add(status, amount)
        occurred_total += bucket.occurred
        pending_total += bucket.pending

        if by_category is not None:
            name = _category_name(
                occurrence, categories, uncategorized_label, anomalies
            )
            by_category[name] = by_category.get(name, Bucket()) + bucket

        if groups is not None:
            key = group_by(occurrence)
            groups[key] = groups.get(key, Bucket()) + bucket

        if months is not None:
            totals = months.setdefault(month_key(occurrence.date), MonthTotals())
            if occurrence.flow == FlowType.INCOME:
                totals.income.add(status, amount)
            else:
                totals.expenses.add(status, amount)

    if skipped:
        logger.info("invalid_occurrences_skipped", count=skipped)

    return AggregationResult(
        occurred_total=occurred_total,
        pending_total=pending_total,
        by_category=by_category,
        by_month=dict(sorted(months.items())) if months is not None else None,
        groups=groups,
        occurrence_count=count,
        skipped_count=skipped,
        anomalies=anomalies,
    )


def _category_name(
    occurrence: Occurrence,
    categories: CategorySet,
    uncategorized_label: str,
    anomalies: list[Anomaly],
) -> str:
    if occurrence.category_id is None:
        return uncategorized_label
    category = categories.resolve(occurrence.category_id)
    if category is not None:
        return category.name
    anomalies.append(
        Anomaly(
            kind=AnomalyKind.UNRESOLVED_CATEGORY,
            message=f"Category {occurrence.category_id!r} not found",
            reference=occurrence.label,
        )
    )
    logger.warning(
        "category_unresolved",
        category_id=str(occurrence.category_id),
        label=occurrence.label,
        date=occurrence.date.isoformat(),
    )
    return uncategorized_label


def combine(results: Iterable[AggregationResult]) -> AggregationResult:
    """Add aggregation results of disjoint windows."""
    total = AggregationResult()
    for result in results:
        total = total + result
    return total


def summarize_days(
    occurrences: Iterable[Occurrence],
    reference_date: date,
) -> dict[date, DaySummary]:
    """Per-day incomes and bills for calendar cells.

    Only days with at least one occurrence appear; keys are ascending.
    """
    grouped: dict[date, tuple[list[Occurrence], list[Occurrence]]] = {}
    for occurrence in occurrences:
        classified = occurrence.with_status(effective_status(occurrence, reference_date))
        incomes, bills = grouped.setdefault(occurrence.date, ([], []))
        if occurrence.flow == FlowType.INCOME:
            incomes.append(classified)
        else:
            bills.append(classified)

    return {
        day: DaySummary(day=day, incomes=incomes, bills=bills)
        for day, (incomes, bills) in sorted(grouped.items())
    }
