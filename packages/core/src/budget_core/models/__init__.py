"""Data models for budget-core.

This package provides the engine's value types:
- Recurrence rules, patterns and categories (rules.py)
- Occurrences and recorded transactions (occurrence.py)
- Aggregations, day summaries, reconciliation output (results.py)
- Report shapes consumed by calendar and report views (reports.py)
"""

from budget_core.models.rules import (
    CategoryId,
    RuleId,
    FlowType,
    Category,
    CategorySet,
    OncePattern,
    WeeklyPattern,
    BiweeklyPattern,
    MonthlyPattern,
    TwiceMonthlyPattern,
    YearlyPattern,
    RecurrencePattern,
    RecurrenceRule,
    parse_rule,
)
from budget_core.models.occurrence import (
    OccurrenceStatus,
    OccurrenceSource,
    AnomalyKind,
    Anomaly,
    Occurrence,
    ActualTransaction,
    parse_amount,
    normalize_label,
)
from budget_core.models.results import (
    Bucket,
    MonthTotals,
    AggregationResult,
    DaySummary,
    ReconciliationResult,
    BillReminder,
    TagMatch,
)
from budget_core.models.reports import (
    DateRangeReport,
    AnnualReport,
    MonthToDateReport,
)

__all__ = [
    # Identifiers
    "CategoryId",
    "RuleId",
    # Rules
    "FlowType",
    "Category",
    "CategorySet",
    "OncePattern",
    "WeeklyPattern",
    "BiweeklyPattern",
    "MonthlyPattern",
    "TwiceMonthlyPattern",
    "YearlyPattern",
    "RecurrencePattern",
    "RecurrenceRule",
    "parse_rule",
    # Occurrences
    "OccurrenceStatus",
    "OccurrenceSource",
    "AnomalyKind",
    "Anomaly",
    "Occurrence",
    "ActualTransaction",
    "parse_amount",
    "normalize_label",
    # Results
    "Bucket",
    "MonthTotals",
    "AggregationResult",
    "DaySummary",
    "ReconciliationResult",
    "BillReminder",
    "TagMatch",
    # Reports
    "DateRangeReport",
    "AnnualReport",
    "MonthToDateReport",
]
