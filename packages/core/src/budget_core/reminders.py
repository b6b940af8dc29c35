"""Upcoming bill reminders."""

from datetime import date, timedelta
from typing import Iterable, Optional

import structlog

from budget_core.generator import occurrence_dates
from budget_core.models import BillReminder, FlowType, RecurrenceRule

logger = structlog.get_logger()


def next_due_date(rule: RecurrenceRule, on_or_after: date, *, within_days: int) -> Optional[date]:
    """First date on or after ``on_or_after`` the rule fires, looking ``within_days`` ahead."""
    dates = occurrence_dates(
        rule.pattern, on_or_after, on_or_after + timedelta(days=within_days)
    )
    return dates[0] if dates else None


def upcoming_reminders(
    rules: Iterable[RecurrenceRule],
    today: date,
    *,
    horizon_days: int = 30,
    default_lead_days: int = 7,
) -> list[BillReminder]:
    """Reminders for bills due soon.

    For each expense rule with reminders enabled, take its next due date on
    or after ``today``. The reminder date is the due date minus the rule's
    lead time (``default_lead_days`` when unset or zero). A reminder is included when
    it falls on or before ``today + horizon_days``.

    Returns:
        Reminders sorted by reminder date, then label.
    """
    horizon_end = today + timedelta(days=horizon_days)
    reminders: list[BillReminder] = []

    for rule in rules:
        if rule.flow != FlowType.EXPENSE or not rule.reminder_enabled:
            continue
        lead = rule.reminder_days or default_lead_days
        due = next_due_date(rule, today, within_days=horizon_days + lead)
        if due is None:
            continue
        reminder_date = due - timedelta(days=lead)
        if reminder_date > horizon_end:
            continue
        reminders.append(
            BillReminder(
                rule_id=rule.id,
                label=rule.label,
                amount=rule.amount,
                due_date=due,
                reminder_date=reminder_date,
            )
        )

    reminders.sort(key=lambda r: (r.reminder_date, r.label))
    logger.debug("reminders_computed", today=today.isoformat(), count=len(reminders))
    return reminders
