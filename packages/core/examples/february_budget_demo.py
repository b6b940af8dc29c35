#!/usr/bin/env python3
"""
February Budget Demonstration

This script walks through the budget calendar workflow:
1. Map stored income and bill rows to recurrence rules
2. Build a monthly report, reconciling a recorded rent payment
3. Show month-to-date totals, calendar cells, reminders and tag suggestions

Run: python examples/february_budget_demo.py
"""

from datetime import date

from budget_core import (
    BudgetReportBuilder,
    CategorySet,
    ActualTransaction,
    EngineConfig,
    configure_logging,
    suggest_category,
    upcoming_reminders,
)
from budget_core.mapping import rule_from_bill, rule_from_income
from budget_core.models import Category

REFERENCE_DATE = date(2025, 2, 7)

INCOME_ROWS = [
    {
        "id": 1,
        "source": "Salary-A",
        "amount": "4739",
        "occurrenceType": "twice-monthly",
        "firstDate": 1,
        "secondDate": 15,
    },
    {
        "id": 2,
        "source": "Salary-B",
        "amount": "2168",
        "date": "2025-01-10",
        "occurrenceType": "biweekly",
    },
]

BILL_ROWS = [
    {"id": 10, "name": "Rent", "amount": "3750", "day": 1, "category_id": 1},
    {
        "id": 11,
        "name": "Electric",
        "amount": "120.50",
        "day": 20,
        "category_id": 2,
        "reminderEnabled": True,
        "reminderDays": 3,
    },
    {
        "id": 12,
        "name": "Internet",
        "amount": "79.99",
        "day": 12,
        "category_id": 2,
        "reminderEnabled": True,
    },
]


def main():
    """Run the February budget demonstration."""
    config = EngineConfig(log_level="WARNING")
    configure_logging(config)

    print("=" * 70)
    print("BUDGET CORE - February 2025 Calendar Demo")
    print("=" * 70)
    print()

    # Step 1: Rules
    print("Step 1: Mapping stored rows to rules...")
    rules = [rule_from_income(row) for row in INCOME_ROWS]
    rules += [rule_from_bill(row) for row in BILL_ROWS]
    for rule in rules:
        print(f"  - {rule.label:<10} {rule.pattern.kind:<14} ${rule.amount:>10,.2f}")
    print()

    categories = CategorySet(
        categories=(
            Category(id=1, name="Housing"),
            Category(id=2, name="Utilities"),
        )
    )
    actual = [ActualTransaction(label="Rent", amount="$3,750.00", date=date(2025, 2, 3))]

    # Step 2: Monthly report
    print(f"Step 2: Building the February report as of {REFERENCE_DATE}...")
    builder = BudgetReportBuilder(config)
    report = builder.monthly_report(
        rules,
        2025,
        2,
        actual=actual,
        categories=categories,
        reference_date=REFERENCE_DATE,
    )
    print(f"  - Income:   occurred ${report.income.occurred:,.2f}, pending ${report.income.pending:,.2f}")
    print(f"  - Expenses: occurred ${report.expenses.occurred:,.2f}, pending ${report.expenses.pending:,.2f}")
    print(f"  - Net:      ${report.net.total:,.2f}")
    print(f"  - Projections still outstanding: {report.projected_count}")
    for name, bucket in (report.summary.by_category or {}).items():
        print(f"  - {name:<14} ${bucket.total:>10,.2f}")
    print()

    # Step 3: Month to date
    print("Step 3: Month to date...")
    mtd = builder.month_to_date(rules, REFERENCE_DATE)
    print(f"  - {mtd.label}: net to date ${mtd.net_to_date:,.2f}")
    print(f"  - Remaining balance for the month: ${mtd.remaining_balance:,.2f}")
    print()

    # Step 4: Calendar cells
    print("Step 4: Calendar cells...")
    for day, summary in builder.calendar_days(
        rules, 2025, 2, reference_date=REFERENCE_DATE
    ).items():
        labels = ", ".join(o.label for o in summary.incomes + summary.bills)
        print(f"  - {day:%a %d}: {labels:<30} balance ${summary.balance:>10,.2f}")
    print()

    # Step 5: Reminders and tagging
    print("Step 5: Reminders and suggestions...")
    for reminder in upcoming_reminders(
        rules,
        REFERENCE_DATE,
        horizon_days=config.reminder_horizon_days,
        default_lead_days=config.default_reminder_days,
    ):
        print(f"  - Remind {reminder.reminder_date}: {reminder.label} due {reminder.due_date}")
    match = suggest_category("Water utility", categories)
    if match is not None:
        print(f"  - 'Water utility' looks like {match.category.name} ({match.confidence:.0%})")

    print()
    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
