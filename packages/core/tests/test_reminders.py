"""Tests for bill reminders."""

from datetime import date
from decimal import Decimal

from budget_core.models import (
    FlowType,
    MonthlyPattern,
    OncePattern,
    RecurrenceRule,
)
from budget_core.reminders import next_due_date, upcoming_reminders

TODAY = date(2025, 2, 10)


def _bill(id, label, pattern, *, enabled=True, days=None, flow=FlowType.EXPENSE):
    return RecurrenceRule(
        id=id,
        label=label,
        amount=Decimal("100"),
        flow=flow,
        pattern=pattern,
        reminder_enabled=enabled,
        reminder_days=days,
    )


class TestNextDueDate:
    """Tests for next_due_date."""

    def test_due_today(self):
        """A bill due today is due today, not next month."""
        rule = _bill(1, "Phone", MonthlyPattern(day_of_month=10))
        assert next_due_date(rule, TODAY, within_days=31) == TODAY

    def test_nothing_within_range(self):
        rule = _bill(1, "Gift", OncePattern(date=date(2025, 12, 24)))
        assert next_due_date(rule, TODAY, within_days=30) is None


class TestUpcomingReminders:
    """Tests for upcoming_reminders."""

    def test_lead_time_applied(self):
        """Reminder date is the due date minus the lead time."""
        rules = [_bill(1, "Electric", MonthlyPattern(day_of_month=20), days=3)]
        reminders = upcoming_reminders(rules, TODAY, horizon_days=30)

        assert len(reminders) == 1
        assert reminders[0].due_date == date(2025, 2, 20)
        assert reminders[0].reminder_date == date(2025, 2, 17)
        assert reminders[0].amount == Decimal("100")

    def test_default_lead_time(self):
        """Bills without their own lead time use the default."""
        rules = [_bill(1, "Electric", MonthlyPattern(day_of_month=20))]
        reminders = upcoming_reminders(rules, TODAY, default_lead_days=5)

        assert reminders[0].reminder_date == date(2025, 2, 15)

    def test_outside_horizon_excluded(self):
        """Reminders after today + horizon are left out."""
        rules = [_bill(1, "Insurance", OncePattern(date=date(2025, 4, 1)), days=7)]
        assert upcoming_reminders(rules, TODAY, horizon_days=30) == []
        assert len(upcoming_reminders(rules, TODAY, horizon_days=45)) == 1

    def test_lead_time_reaches_into_horizon(self):
        """A bill due past the horizon still reminds if its reminder is inside."""
        rules = [_bill(1, "Insurance", OncePattern(date=date(2025, 3, 20)), days=14)]
        reminders = upcoming_reminders(rules, TODAY, horizon_days=30)

        assert reminders[0].reminder_date == date(2025, 3, 6)

    def test_disabled_and_income_skipped(self):
        """Only expense rules with reminders enabled are considered."""
        rules = [
            _bill(1, "Rent", MonthlyPattern(day_of_month=15), enabled=False),
            _bill(2, "Salary", MonthlyPattern(day_of_month=15), flow=FlowType.INCOME),
        ]
        assert upcoming_reminders(rules, TODAY) == []

    def test_sorted_by_reminder_date_then_label(self):
        rules = [
            _bill(1, "Water", MonthlyPattern(day_of_month=25), days=5),
            _bill(2, "Internet", MonthlyPattern(day_of_month=20)),
            _bill(3, "Electric", MonthlyPattern(day_of_month=27), days=7),
        ]
        reminders = upcoming_reminders(rules, TODAY)

        assert [r.label for r in reminders] == ["Internet", "Electric", "Water"]
