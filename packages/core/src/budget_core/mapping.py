"""Translate persisted income and bill rows into recurrence rules.

Rows are plain mappings as the storage layer returns them. Both the
camelCase keys used by the web client (``occurrenceType``, ``isOneTime``)
and snake_case column names (``recurring_type``, ``is_one_time``) are
accepted. Any row that cannot become a valid rule raises InvalidRuleError.
"""

from datetime import date, datetime
from typing import Any, Mapping

from budget_core.exceptions import InvalidRuleError
from budget_core.models import FlowType, RecurrenceRule, parse_rule

# income occurrence types as stored -> pattern kind
INCOME_KINDS = {
    "once": "once",
    "weekly": "weekly",
    "biweekly": "biweekly",
    "bi-weekly": "biweekly",
    "monthly": "monthly",
    "twice-monthly": "twice_monthly",
    "twice_monthly": "twice_monthly",
}

DEFAULT_FIRST_DAY = 1
DEFAULT_SECOND_DAY = 15


def _get(row: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if name in row and row[name] is not None:
            return row[name]
    return default


def parse_row_date(value: Any, field: str) -> date:
    """Accept a date, a datetime or an ISO string (time part ignored)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as e:
            raise InvalidRuleError(
                f"Invalid date for {field}: {value!r}",
                field=field,
                value=value,
                constraint="YYYY-MM-DD",
            ) from e
    raise InvalidRuleError(
        f"Missing date for {field}",
        field=field,
        value=value,
        constraint="required",
    )


def rule_from_income(row: Mapping[str, Any]) -> RecurrenceRule:
    """Build an income rule from a stored income row."""
    raw_kind = _get(row, "occurrenceType", "occurrence_type", "recurring_type")
    if raw_kind is None:
        raw_kind = "monthly" if _get(row, "is_recurring", "isRecurring") else "once"
    kind = INCOME_KINDS.get(str(raw_kind).strip().lower())
    if kind is None:
        raise InvalidRuleError(
            f"Unknown income occurrence type: {raw_kind!r}",
            field="occurrenceType",
            value=raw_kind,
            constraint=f"one of {sorted(INCOME_KINDS)}",
        )

    pattern: dict[str, Any] = {"kind": kind}
    if kind == "twice_monthly":
        pattern["first_day"] = _get(row, "firstDate", "first_date", default=DEFAULT_FIRST_DAY)
        pattern["second_day"] = _get(row, "secondDate", "second_date", default=DEFAULT_SECOND_DAY)
    else:
        start = parse_row_date(_get(row, "date"), "date")
        if kind == "once":
            pattern["date"] = start
        elif kind in ("weekly", "biweekly"):
            pattern["anchor_date"] = start
        else:
            pattern["day_of_month"] = start.day

    return parse_rule(
        {
            "id": _get(row, "id"),
            "label": _get(row, "source", "description", default=""),
            "amount": _get(row, "amount"),
            "flow": FlowType.INCOME,
            "category_id": _get(row, "category_id", "categoryId"),
            "pattern": pattern,
        }
    )


def rule_from_bill(row: Mapping[str, Any]) -> RecurrenceRule:
    """Build an expense rule from a stored bill row."""
    one_time = bool(_get(row, "isOneTime", "is_one_time", default=False))
    yearly = bool(_get(row, "isYearly", "is_yearly", default=False))
    day = _get(row, "day")

    if one_time:
        pattern: dict[str, Any] = {
            "kind": "once",
            "date": parse_row_date(_get(row, "date"), "date"),
        }
    elif yearly:
        due = parse_row_date(_get(row, "date"), "date")
        pattern = {"kind": "yearly", "month": due.month, "day_of_month": day or due.day}
    else:
        if day is None and _get(row, "date") is not None:
            day = parse_row_date(_get(row, "date"), "date").day
        pattern = {"kind": "monthly", "day_of_month": day}

    data: dict[str, Any] = {
        "id": _get(row, "id"),
        "label": _get(row, "name", "description", default=""),
        "amount": _get(row, "amount"),
        "flow": FlowType.EXPENSE,
        "category_id": _get(row, "category_id", "categoryId"),
        "pattern": pattern,
        "reminder_enabled": bool(
            _get(row, "reminderEnabled", "reminder_enabled", default=False)
        ),
    }
    # 0 means "use the configured default"
    reminder_days = _get(row, "reminderDays", "reminder_days")
    if reminder_days:
        data["reminder_days"] = reminder_days
    return parse_rule(data)
