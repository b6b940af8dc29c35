"""Recurrence rule models.

A rule describes how an income source or a bill repeats: a closed set of
pattern variants (once, weekly, biweekly, monthly, twice-monthly, yearly),
an amount, a flow direction and an optional category reference.

Rules are frozen once constructed. Editing a rule means building a new one,
so occurrences already reported against the old rule are never mutated.
"""

import calendar
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from budget_core.exceptions import InvalidRuleError

RuleId = Union[int, str]
CategoryId = Union[int, str]

DayOfMonth = Annotated[int, Field(ge=1, le=31, description="Day of month (1-31)")]


class FlowType(str, Enum):
    """Direction of money for a rule or transaction."""

    INCOME = "income"
    EXPENSE = "expense"


class Category(BaseModel):
    """A flat, uniquely named spending or income category."""

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {"id": 3, "name": "Utilities", "color": "#f59e0b", "icon": "bolt"}
            ]
        },
    }

    id: CategoryId = Field(description="Opaque category identifier")
    name: str = Field(min_length=1, description="Unique display name")
    color: Optional[str] = Field(default=None, description="Display color")
    icon: Optional[str] = Field(default=None, description="Display icon name")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Names are compared trimmed."""
        v = v.strip()
        if not v:
            raise ValueError("Category name cannot be empty")
        return v


class CategorySet(BaseModel):
    """Lookup set of categories keyed by id.

    Names must be unique (case-insensitive). There is no hierarchy.
    """

    model_config = {"frozen": True}

    categories: tuple[Category, ...] = Field(default_factory=tuple)

    @field_validator("categories")
    @classmethod
    def names_unique(cls, v: tuple[Category, ...]) -> tuple[Category, ...]:
        """Reject duplicate category names and ids."""
        seen_names: set[str] = set()
        seen_ids: set[CategoryId] = set()
        for category in v:
            key = category.name.casefold()
            if key in seen_names:
                raise ValueError(f"Duplicate category name: {category.name}")
            if category.id in seen_ids:
                raise ValueError(f"Duplicate category id: {category.id}")
            seen_names.add(key)
            seen_ids.add(category.id)
        return v

    def resolve(self, category_id: Optional[CategoryId]) -> Optional[Category]:
        """Return the category for an id, or None when it does not resolve."""
        if category_id is None:
            return None
        for category in self.categories:
            if category.id == category_id or str(category.id) == str(category_id):
                return category
        return None

    def by_name(self, name: str) -> Optional[Category]:
        """Look a category up by its (case-insensitive) name."""
        key = name.strip().casefold()
        for category in self.categories:
            if category.name.casefold() == key:
                return category
        return None

    def __len__(self) -> int:
        return len(self.categories)


# =============================================================================
# PATTERNS
# =============================================================================


class OncePattern(BaseModel):
    """Fires exactly once, on ``date``."""

    model_config = {"frozen": True}

    kind: Literal["once"] = "once"
    date: date


class WeeklyPattern(BaseModel):
    """Fires every 7 days from ``anchor_date``, forward only."""

    model_config = {"frozen": True}

    kind: Literal["weekly"] = "weekly"
    anchor_date: date


class BiweeklyPattern(BaseModel):
    """Fires every 14 days from ``anchor_date``, forward only.

    The anchor is the permanent parity epoch: a date fires when it shares
    the anchor's weekday and lies an even number of whole weeks after it.
    """

    model_config = {"frozen": True}

    kind: Literal["biweekly"] = "biweekly"
    anchor_date: date


class MonthlyPattern(BaseModel):
    """Fires on ``day_of_month`` in every month that has that day.

    Short months are skipped, never clamped to their last day.
    """

    model_config = {"frozen": True}

    kind: Literal["monthly"] = "monthly"
    day_of_month: DayOfMonth


class TwiceMonthlyPattern(BaseModel):
    """Fires on two distinct days of every month."""

    model_config = {"frozen": True}

    kind: Literal["twice_monthly"] = "twice_monthly"
    first_day: DayOfMonth
    second_day: DayOfMonth

    @model_validator(mode="after")
    def days_distinct(self) -> "TwiceMonthlyPattern":
        if self.first_day == self.second_day:
            raise ValueError("first_day and second_day must differ")
        return self


class YearlyPattern(BaseModel):
    """Fires once a year on ``month``/``day_of_month``.

    Feb 29 is accepted and only fires in leap years.
    """

    model_config = {"frozen": True}

    kind: Literal["yearly"] = "yearly"
    month: int = Field(ge=1, le=12, description="Month number (1-12)")
    day_of_month: DayOfMonth

    @model_validator(mode="after")
    def day_exists_in_month(self) -> "YearlyPattern":
        # 2000 is a leap year, so Feb 29 passes
        longest = calendar.monthrange(2000, self.month)[1]
        if self.day_of_month > longest:
            raise ValueError(
                f"Month {self.month} never has a day {self.day_of_month}"
            )
        return self


RecurrencePattern = Annotated[
    Union[
        OncePattern,
        WeeklyPattern,
        BiweeklyPattern,
        MonthlyPattern,
        TwiceMonthlyPattern,
        YearlyPattern,
    ],
    Field(discriminator="kind"),
]


class RecurrenceRule(BaseModel):
    """How an income source or bill repeats.

    Example:
        >>> RecurrenceRule(
        ...     id=1,
        ...     label="Monthly Rent",
        ...     amount="3750",
        ...     flow=FlowType.EXPENSE,
        ...     pattern=MonthlyPattern(day_of_month=1),
        ... )
    """

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": 7,
                    "label": "Salary-B",
                    "amount": "2168",
                    "flow": "income",
                    "category_id": None,
                    "pattern": {"kind": "biweekly", "anchor_date": "2025-01-10"},
                }
            ]
        },
    }

    id: RuleId = Field(description="Opaque rule identifier")
    label: str = Field(min_length=1, description="Income source or bill name")
    amount: Decimal = Field(
        ge=Decimal("0"),
        description="Amount per occurrence, currency-agnostic",
    )
    flow: FlowType = Field(
        default=FlowType.EXPENSE,
        description="Whether occurrences are income or expenses",
    )
    category_id: Optional[CategoryId] = Field(
        default=None,
        description="Reference into the CategorySet, if any",
    )
    pattern: RecurrencePattern
    reminder_enabled: bool = Field(
        default=False,
        description="Whether upcoming occurrences should raise reminders",
    )
    reminder_days: Optional[int] = Field(
        default=None,
        ge=0,
        le=365,
        description="Days of notice before a due date; None uses the configured default",
    )

    @field_validator("label")
    @classmethod
    def strip_label(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Label cannot be empty")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce string and float amounts to Decimal."""
        if isinstance(v, str):
            try:
                return Decimal(v.strip())
            except InvalidOperation as e:
                raise ValueError(f"Invalid amount: {v!r}") from e
        if isinstance(v, float):
            return Decimal(str(v))
        return v


def parse_rule(data: Mapping[str, Any]) -> RecurrenceRule:
    """Build a rule from plain data, raising InvalidRuleError on bad input.

    This is the rule editor's entry point: pydantic's error is reduced to
    the first offending field so the form can highlight it.
    """
    try:
        return RecurrenceRule.model_validate(dict(data))
    except ValidationError as e:
        errors = e.errors()
        first = errors[0]
        field = ".".join(str(part) for part in first["loc"])
        raise InvalidRuleError(
            f"Invalid recurrence rule: {first['msg']}",
            field=field or None,
            value=first.get("input"),
            constraint=first.get("type"),
            details={"error_count": len(errors)},
        ) from e
