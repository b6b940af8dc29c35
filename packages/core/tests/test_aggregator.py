"""Tests for period aggregation.

Covers the February salary scenario, additivity across split windows,
category fallback and per-day calendar summaries.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from budget_core.aggregator import (
    UNCATEGORIZED,
    aggregate,
    by_flow,
    by_label,
    combine,
    summarize_days,
)
from budget_core.generator import generate_all
from budget_core.models import (
    AnomalyKind,
    BiweeklyPattern,
    Category,
    CategorySet,
    FlowType,
    MonthlyPattern,
    Occurrence,
    OccurrenceStatus,
    RecurrenceRule,
)

FEB_START = date(2025, 2, 1)
FEB_END = date(2025, 2, 28)


@pytest.fixture
def salary_rules() -> list[RecurrenceRule]:
    """Two monthly Salary-A rules and a biweekly Salary-B rule."""
    return [
        RecurrenceRule(
            id=1,
            label="Salary-A",
            amount=Decimal("4739"),
            flow=FlowType.INCOME,
            pattern=MonthlyPattern(day_of_month=1),
        ),
        RecurrenceRule(
            id=2,
            label="Salary-A",
            amount=Decimal("4739"),
            flow=FlowType.INCOME,
            pattern=MonthlyPattern(day_of_month=15),
        ),
        RecurrenceRule(
            id=3,
            label="Salary-B",
            amount=Decimal("2168"),
            flow=FlowType.INCOME,
            pattern=BiweeklyPattern(anchor_date=date(2025, 1, 10)),
        ),
    ]


@pytest.fixture
def household_rules(salary_rules) -> list[RecurrenceRule]:
    """Salaries plus two categorised bills."""
    return salary_rules + [
        RecurrenceRule(
            id=10,
            label="Rent",
            amount=Decimal("3750"),
            category_id=1,
            pattern=MonthlyPattern(day_of_month=1),
        ),
        RecurrenceRule(
            id=11,
            label="Electric",
            amount=Decimal("120.50"),
            category_id=2,
            pattern=MonthlyPattern(day_of_month=20),
        ),
    ]


@pytest.fixture
def categories() -> CategorySet:
    return CategorySet(
        categories=(
            Category(id=1, name="Housing"),
            Category(id=2, name="Utilities"),
        )
    )


class TestFebruaryScenario:
    """Tests for the February 2025 salary scenario."""

    def test_reference_feb_2(self, salary_rules):
        """On Feb 2 only the Feb 1 salary has occurred."""
        occurrences = generate_all(salary_rules, FEB_START, FEB_END)
        result = aggregate(occurrences, date(2025, 2, 2))

        assert result.occurrence_count == 4
        assert result.occurred_total == Decimal("4739")
        assert result.pending_total == Decimal("9075")
        assert result.total == Decimal("13814")

    def test_reference_feb_7(self, salary_rules):
        """By Feb 7 one payment from each salary has landed."""
        occurrences = generate_all(salary_rules, FEB_START, FEB_END)
        result = aggregate(occurrences, date(2025, 2, 7), group_by=by_label)

        assert result.occurred_total == Decimal("6907")
        assert result.pending_total == Decimal("6907")
        assert result.groups["Salary-A"].total == Decimal("9478")
        assert result.groups["Salary-B"].total == Decimal("4336")
        assert result.groups["Salary-B"].occurred == Decimal("2168")


class TestGrouping:
    """Tests for category, month and custom grouping."""

    def test_by_category(self, household_rules, categories):
        """Categorised occurrences land in their category's bucket."""
        occurrences = generate_all(household_rules, FEB_START, FEB_END)
        result = aggregate(occurrences, date(2025, 2, 10), categories=categories)

        assert result.by_category["Housing"].occurred == Decimal("3750")
        assert result.by_category["Utilities"].pending == Decimal("120.50")
        # salaries carry no category
        assert result.by_category[UNCATEGORIZED].total == Decimal("13814")
        assert result.anomalies == []

    def test_unresolved_category_falls_back(self, categories):
        """Unknown category ids go to the uncategorized bucket with an anomaly."""
        occurrence = Occurrence(
            label="Gym", amount=Decimal("40"), category_id=99, date=date(2025, 2, 3)
        )
        result = aggregate(
            [occurrence],
            date(2025, 2, 10),
            categories=categories,
            uncategorized_label="Other",
        )

        assert list(result.by_category) == ["Other"]
        assert result.by_category["Other"].occurred == Decimal("40")
        assert len(result.anomalies) == 1
        assert result.anomalies[0].kind == AnomalyKind.UNRESOLVED_CATEGORY
        assert result.anomalies[0].reference == "Gym"

    def test_by_month_separates_flows(self, household_rules):
        """Monthly totals keep income and expenses apart."""
        occurrences = generate_all(household_rules, FEB_START, date(2025, 3, 31))
        result = aggregate(occurrences, date(2025, 2, 28), monthly=True)

        assert list(result.by_month) == ["2025-02", "2025-03"]
        february = result.by_month["2025-02"]
        assert february.income.total == Decimal("13814")
        assert february.expenses.total == Decimal("3870.50")
        assert february.net.total == Decimal("9943.50")
        assert result.by_month["2025-03"].income.occurred == Decimal("0")

    def test_by_flow(self, household_rules):
        """Any key function can be used for grouping."""
        occurrences = generate_all(household_rules, FEB_START, FEB_END)
        result = aggregate(occurrences, date(2025, 2, 28), group_by=by_flow)

        assert set(result.groups) == {"income", "expense"}
        assert result.groups["expense"].occurred == Decimal("3870.50")

    def test_no_grouping_leaves_fields_unset(self, salary_rules):
        occurrences = generate_all(salary_rules, FEB_START, FEB_END)
        result = aggregate(occurrences, date(2025, 2, 2))

        assert result.by_category is None
        assert result.by_month is None
        assert result.groups is None


class TestInvalidOccurrences:
    """Tests for records that could not be parsed."""

    def test_invalid_excluded_and_counted(self):
        """Invalid occurrences contribute nothing and are counted."""
        occurrences = [
            Occurrence(label="Rent", amount=Decimal("3750"), date=date(2025, 2, 1)),
            Occurrence(label="Rent", valid=False, date=date(2025, 2, 2)),
        ]
        result = aggregate(occurrences, date(2025, 2, 28))

        assert result.occurred_total == Decimal("3750")
        assert result.occurrence_count == 1
        assert result.skipped_count == 1


class TestAdditivity:
    """Tests for additivity across disjoint windows."""

    def test_split_window_equals_whole(self, household_rules, categories):
        """Aggregating halves and adding them equals the whole month."""
        reference = date(2025, 2, 10)
        options = {"categories": categories, "group_by": by_label, "monthly": True}

        whole = aggregate(
            generate_all(household_rules, FEB_START, FEB_END), reference, **options
        )
        first = aggregate(
            generate_all(household_rules, FEB_START, date(2025, 2, 14)),
            reference,
            **options,
        )
        second = aggregate(
            generate_all(household_rules, date(2025, 2, 15), FEB_END),
            reference,
            **options,
        )

        assert first + second == whole

    def test_per_day_sum_equals_truncated_window(self, household_rules):
        """Summing per-day results for days 1..D equals the window up to D."""
        reference = date(2025, 2, 10)
        cutoff = date(2025, 2, 21)

        per_day = []
        day = FEB_START
        while day <= cutoff:
            per_day.append(
                aggregate(generate_all(household_rules, day, day), reference)
            )
            day += timedelta(days=1)

        truncated = aggregate(generate_all(household_rules, FEB_START, cutoff), reference)
        combined = combine(per_day)

        assert combined.occurred_total == truncated.occurred_total
        assert combined.pending_total == truncated.pending_total
        assert combined.occurrence_count == truncated.occurrence_count

    def test_combine_empty(self):
        """Combining nothing gives an empty result."""
        result = combine([])
        assert result.total == Decimal("0")
        assert result.occurrence_count == 0


class TestSummarizeDays:
    """Tests for per-day calendar summaries."""

    def test_same_day_from_different_rules(self, household_rules):
        """Feb 1 carries Salary-A income and the Rent bill."""
        occurrences = generate_all(household_rules, FEB_START, FEB_END)
        days = summarize_days(occurrences, date(2025, 2, 2))

        feb_1 = days[FEB_START]
        assert [o.label for o in feb_1.incomes] == ["Salary-A"]
        assert [o.label for o in feb_1.bills] == ["Rent"]
        assert feb_1.balance == Decimal("989")
        assert feb_1.incomes[0].status == OccurrenceStatus.OCCURRED

    def test_only_busy_days_sorted(self, household_rules):
        """Only days with occurrences appear, in ascending order."""
        occurrences = generate_all(household_rules, FEB_START, FEB_END)
        days = summarize_days(occurrences, date(2025, 2, 2))

        assert list(days) == [
            date(2025, 2, 1),
            date(2025, 2, 7),
            date(2025, 2, 15),
            date(2025, 2, 20),
            date(2025, 2, 21),
        ]
        assert days[date(2025, 2, 20)].bills[0].status == OccurrenceStatus.PENDING

    def test_invalid_occurrence_not_in_totals(self):
        """Invalid records are listed but not summed."""
        occurrences = [
            Occurrence(label="Gym", amount=Decimal("40"), date=date(2025, 2, 3)),
            Occurrence(label="Gym", valid=False, date=date(2025, 2, 3)),
        ]
        days = summarize_days(occurrences, date(2025, 2, 28))

        assert len(days[date(2025, 2, 3)].bills) == 2
        assert days[date(2025, 2, 3)].total_expense == Decimal("40")
