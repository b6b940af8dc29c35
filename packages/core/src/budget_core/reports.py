"""Report building for calendar and report views.

``BudgetReportBuilder`` is the one place that resolves "today": every
engine function below it takes the reference date as a parameter. The
builder generates occurrences, reconciles them against recorded
transactions when those are supplied, and aggregates. Views only format
what it returns.
"""

from datetime import date
from typing import Iterable, Optional

import structlog

from budget_core.aggregator import aggregate, by_label, summarize_days
from budget_core.config import EngineConfig
from budget_core.exceptions import BudgetError
from budget_core.generator import generate_all
from budget_core.models import (
    ActualTransaction,
    AnnualReport,
    Bucket,
    CategorySet,
    DateRangeReport,
    DaySummary,
    FlowType,
    MonthToDateReport,
    MonthTotals,
    RecurrenceRule,
)
from budget_core.periods import local_today, month_window, year_window
from budget_core.reconciler import reconcile
from budget_core.status import classify_occurrences

logger = structlog.get_logger()


class BudgetReportBuilder:
    """
    Build date-range, monthly, annual and month-to-date reports.

    Each step is logged so a report can be traced back to the rules and
    records it was built from.

    Example:
        builder = BudgetReportBuilder(EngineConfig(timezone="America/New_York"))
        report = builder.monthly_report(rules, 2025, 2, reference_date=date(2025, 2, 14))
        print(report.income.occurred, report.income.pending)
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize the builder.

        Args:
            config: Engine configuration (default: loaded from environment)
        """
        self.config = config or EngineConfig()

    def _log_step(self, report: str, step: str, **context) -> None:
        logger.info("report_step", report=report, step=step, **context)

    def resolve_reference_date(self, reference_date: Optional[date] = None) -> date:
        """Explicit reference date, else today in the configured timezone."""
        if reference_date is not None:
            return reference_date
        return local_today(self.config.timezone)

    # =========================================================================
    # DATE RANGE
    # =========================================================================

    def date_range_report(
        self,
        rules: Iterable[RecurrenceRule],
        start_date: date,
        end_date: date,
        *,
        actual: Optional[Iterable[ActualTransaction]] = None,
        categories: Optional[CategorySet] = None,
        reference_date: Optional[date] = None,
    ) -> DateRangeReport:
        """
        Occurrences and totals for an inclusive window.

        Args:
            rules: Income and bill rules.
            start_date: First day of the window.
            end_date: Last day of the window.
            actual: Recorded transactions. When given, they replace the
                expected occurrences they match and the rest become
                pending projections.
            categories: When given, the summary carries ``by_category``.
            reference_date: As-of date (default: today in config.timezone).

        Returns:
            DateRangeReport with classified occurrences, an overall summary
            (by category, by month, by label) and income / expense buckets.

        Raises:
            BudgetError: If the window ends before it starts.
        """
        if start_date > end_date:
            raise BudgetError(
                "Report window ends before it starts",
                details={
                    "start_date": start_date.isoformat(),
                    "end_date": end_date.isoformat(),
                },
                recoverable=True,
            )
        rules = list(rules)
        ref = self.resolve_reference_date(reference_date)

        expected = generate_all(rules, start_date, end_date)
        self._log_step(
            "date_range",
            "generate",
            rules=len(rules),
            occurrences=len(expected),
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )

        projected_count = 0
        anomalies = []
        occurrences = expected
        if actual is not None:
            reconciled = reconcile(
                rules,
                expected,
                actual,
                ref,
                window_start=start_date,
                window_end=end_date,
            )
            occurrences = reconciled.occurrences
            projected_count = reconciled.projected_count
            anomalies.extend(reconciled.anomalies)
            self._log_step(
                "date_range",
                "reconcile",
                projected=reconciled.projected_count,
                suppressed=reconciled.suppressed_count,
            )

        occurrences = classify_occurrences(occurrences, ref)
        summary = aggregate(
            occurrences,
            ref,
            categories=categories,
            group_by=by_label,
            monthly=True,
            uncategorized_label=self.config.uncategorized_label,
        )
        anomalies.extend(summary.anomalies)

        income = Bucket()
        expenses = Bucket()
        for totals in (summary.by_month or {}).values():
            income = income + totals.income
            expenses = expenses + totals.expenses

        self._log_step(
            "date_range",
            "aggregate",
            reference_date=ref.isoformat(),
            income=str(income.total),
            expenses=str(expenses.total),
            skipped=summary.skipped_count,
        )

        return DateRangeReport(
            start_date=start_date,
            end_date=end_date,
            reference_date=ref,
            occurrences=occurrences,
            summary=summary,
            income=income,
            expenses=expenses,
            projected_count=projected_count,
            skipped_count=summary.skipped_count,
            anomalies=anomalies,
        )

    def monthly_report(
        self,
        rules: Iterable[RecurrenceRule],
        year: int,
        month: int,
        **kwargs,
    ) -> DateRangeReport:
        """Date-range report covering one calendar month."""
        start, end = month_window(year, month)
        return self.date_range_report(rules, start, end, **kwargs)

    def calendar_days(
        self,
        rules: Iterable[RecurrenceRule],
        year: int,
        month: int,
        **kwargs,
    ) -> dict[date, DaySummary]:
        """Per-day incomes and bills for a month's calendar grid."""
        report = self.monthly_report(rules, year, month, **kwargs)
        return summarize_days(report.occurrences, report.reference_date)

    # =========================================================================
    # ANNUAL
    # =========================================================================

    def annual_report(
        self,
        rules: Iterable[RecurrenceRule],
        year: int,
        *,
        actual: Optional[Iterable[ActualTransaction]] = None,
        categories: Optional[CategorySet] = None,
        reference_date: Optional[date] = None,
    ) -> AnnualReport:
        """
        Twelve-month breakdown for ``year``.

        Every month is present in ``months`` even when nothing fires in it.
        Income is broken down by label; expenses by category name (all
        expenses fall in the uncategorized bucket when no categories are
        given).
        """
        start, end = year_window(year)
        report = self.date_range_report(
            rules,
            start,
            end,
            actual=actual,
            categories=categories,
            reference_date=reference_date,
        )
        ref = report.reference_date

        months = {f"{year:04d}-{m:02d}": MonthTotals() for m in range(1, 13)}
        months.update(report.summary.by_month or {})

        incomes = [o for o in report.occurrences if o.flow == FlowType.INCOME]
        expenses = [o for o in report.occurrences if o.flow == FlowType.EXPENSE]

        uncategorized = self.config.uncategorized_label

        def category_name(occurrence) -> str:
            # unresolved ids were already reported by the date-range summary
            if categories is None:
                return uncategorized
            category = categories.resolve(occurrence.category_id)
            return category.name if category is not None else uncategorized

        income_by_label = aggregate(incomes, ref, group_by=by_label).groups or {}
        expenses_by_category = aggregate(
            expenses, ref, group_by=category_name
        ).groups or {}

        self._log_step(
            "annual",
            "breakdown",
            year=year,
            income_labels=len(income_by_label),
            expense_categories=len(expenses_by_category),
        )

        return AnnualReport(
            year=year,
            reference_date=ref,
            months=dict(sorted(months.items())),
            income_by_label=dict(sorted(income_by_label.items())),
            expenses_by_category=dict(sorted(expenses_by_category.items())),
            total_income=report.income,
            total_expenses=report.expenses,
            skipped_count=report.skipped_count,
            anomalies=report.anomalies,
        )

    # =========================================================================
    # MONTH TO DATE
    # =========================================================================

    def month_to_date(
        self,
        rules: Iterable[RecurrenceRule],
        reference_date: Optional[date] = None,
        *,
        actual: Optional[Iterable[ActualTransaction]] = None,
    ) -> MonthToDateReport:
        """
        How much of the reference month has already moved.

        Incurred amounts are those on or before the reference date; the
        remaining fields are what is still expected for the rest of the
        month.
        """
        ref = self.resolve_reference_date(reference_date)
        report = self.monthly_report(
            rules, ref.year, ref.month, actual=actual, reference_date=ref
        )
        result = MonthToDateReport(
            year=ref.year,
            month=ref.month,
            reference_date=ref,
            month_income=report.income.total,
            month_expenses=report.expenses.total,
            incurred_income=report.income.occurred,
            incurred_expenses=report.expenses.occurred,
        )
        self._log_step(
            "month_to_date",
            "complete",
            month=result.label,
            remaining_balance=str(result.remaining_balance),
        )
        return result
