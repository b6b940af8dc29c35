"""Computed result models: totals buckets, aggregations, day summaries,
reconciliation output, reminders and category suggestions.

None of these are persisted; they are rebuilt on demand from rules, actual
records, a window and a reference date.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from budget_core.models.occurrence import (
    Anomaly,
    Occurrence,
    OccurrenceStatus,
)
from budget_core.models.rules import Category, RuleId


class Bucket(BaseModel):
    """Occurred / pending split of an amount."""

    occurred: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")

    @computed_field
    @property
    def total(self) -> Decimal:
        """Occurred plus pending."""
        return self.occurred + self.pending

    def add(self, status: OccurrenceStatus, amount: Decimal) -> None:
        """Accumulate ``amount`` into the side matching ``status``."""
        if status == OccurrenceStatus.OCCURRED:
            self.occurred += amount
        else:
            self.pending += amount

    def __add__(self, other: "Bucket") -> "Bucket":
        return Bucket(
            occurred=self.occurred + other.occurred,
            pending=self.pending + other.pending,
        )

    def __sub__(self, other: "Bucket") -> "Bucket":
        return Bucket(
            occurred=self.occurred - other.occurred,
            pending=self.pending - other.pending,
        )


class MonthTotals(BaseModel):
    """Income and expenses for one calendar month."""

    income: Bucket = Field(default_factory=Bucket)
    expenses: Bucket = Field(default_factory=Bucket)

    @computed_field
    @property
    def net(self) -> Bucket:
        """Income minus expenses, side by side."""
        return self.income - self.expenses

    def __add__(self, other: "MonthTotals") -> "MonthTotals":
        return MonthTotals(
            income=self.income + other.income,
            expenses=self.expenses + other.expenses,
        )


def _merge_buckets(
    left: Optional[dict[str, Bucket]],
    right: Optional[dict[str, Bucket]],
) -> Optional[dict[str, Bucket]]:
    if left is None and right is None:
        return None
    merged = {k: v.model_copy() for k, v in (left or {}).items()}
    for key, bucket in (right or {}).items():
        merged[key] = merged[key] + bucket if key in merged else bucket.model_copy()
    return merged


def _merge_months(
    left: Optional[dict[str, MonthTotals]],
    right: Optional[dict[str, MonthTotals]],
) -> Optional[dict[str, MonthTotals]]:
    if left is None and right is None:
        return None
    merged = {k: v.model_copy(deep=True) for k, v in (left or {}).items()}
    for key, totals in (right or {}).items():
        merged[key] = merged[key] + totals if key in merged else totals.model_copy(deep=True)
    return dict(sorted(merged.items()))


class AggregationResult(BaseModel):
    """Totals of a set of occurrences, split occurred/pending.

    Results are additive: aggregating two disjoint sub-windows and adding
    the results equals aggregating the whole window.
    """

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "occurred_total": "6907",
                    "pending_total": "6907",
                    "occurrence_count": 4,
                    "skipped_count": 0,
                }
            ]
        }
    }

    occurred_total: Decimal = Decimal("0")
    pending_total: Decimal = Decimal("0")
    by_category: Optional[dict[str, Bucket]] = Field(
        default=None,
        description="Category name -> bucket, when categories were supplied",
    )
    by_month: Optional[dict[str, MonthTotals]] = Field(
        default=None,
        description="'YYYY-MM' -> income/expenses/net, when requested",
    )
    groups: Optional[dict[str, Bucket]] = Field(
        default=None,
        description="Caller-keyed buckets, when a grouping key was supplied",
    )
    occurrence_count: int = Field(default=0, ge=0)
    skipped_count: int = Field(
        default=0,
        ge=0,
        description="Invalid occurrences excluded from every total",
    )
    anomalies: list[Anomaly] = Field(default_factory=list)

    @computed_field
    @property
    def total(self) -> Decimal:
        """Occurred plus pending."""
        return self.occurred_total + self.pending_total

    def __add__(self, other: "AggregationResult") -> "AggregationResult":
        return AggregationResult(
            occurred_total=self.occurred_total + other.occurred_total,
            pending_total=self.pending_total + other.pending_total,
            by_category=_merge_buckets(self.by_category, other.by_category),
            by_month=_merge_months(self.by_month, other.by_month),
            groups=_merge_buckets(self.groups, other.groups),
            occurrence_count=self.occurrence_count + other.occurrence_count,
            skipped_count=self.skipped_count + other.skipped_count,
            anomalies=[*self.anomalies, *other.anomalies],
        )


class DaySummary(BaseModel):
    """Everything landing on one calendar day, for a calendar cell."""

    day: date
    incomes: list[Occurrence] = Field(default_factory=list)
    bills: list[Occurrence] = Field(default_factory=list)

    @computed_field
    @property
    def total_income(self) -> Decimal:
        return sum((o.amount for o in self.incomes if o.valid), Decimal("0"))

    @computed_field
    @property
    def total_expense(self) -> Decimal:
        return sum((o.amount for o in self.bills if o.valid), Decimal("0"))

    @computed_field
    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense


class ReconciliationResult(BaseModel):
    """Actual records merged with the projections still outstanding."""

    occurrences: list[Occurrence] = Field(default_factory=list)
    projected_count: int = Field(default=0, ge=0)
    suppressed_count: int = Field(
        default=0,
        ge=0,
        description="Expected occurrences dropped because a record exists",
    )
    skipped_count: int = Field(
        default=0,
        ge=0,
        description="Actual records whose amount could not be parsed",
    )
    anomalies: list[Anomaly] = Field(default_factory=list)


class BillReminder(BaseModel):
    """An upcoming bill whose reminder falls inside the horizon."""

    rule_id: RuleId
    label: str
    amount: Decimal
    due_date: date
    reminder_date: date


class TagMatch(BaseModel):
    """A suggested category for a free-text description."""

    category: Category
    confidence: float = Field(ge=0.0, le=1.0)
