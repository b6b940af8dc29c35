"""Report shapes handed to calendar and report views.

Views only format these; every number here is computed by the engine.
"""

from calendar import month_name
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, computed_field, field_validator

from budget_core.models.occurrence import Anomaly, Occurrence
from budget_core.models.results import AggregationResult, Bucket, MonthTotals


class DateRangeReport(BaseModel):
    """Occurrences and totals for an arbitrary inclusive window."""

    start_date: date = Field(description="First day of the window (inclusive)")
    end_date: date = Field(description="Last day of the window (inclusive)")
    reference_date: date = Field(description="As-of date used for status")
    occurrences: list[Occurrence] = Field(default_factory=list)
    summary: AggregationResult = Field(default_factory=AggregationResult)
    income: Bucket = Field(default_factory=Bucket)
    expenses: Bucket = Field(default_factory=Bucket)
    projected_count: int = Field(default=0, ge=0)
    skipped_count: int = Field(default=0, ge=0)
    anomalies: list[Anomaly] = Field(default_factory=list)

    @computed_field
    @property
    def net(self) -> Bucket:
        """Income minus expenses."""
        return self.income - self.expenses

    @field_validator("end_date")
    @classmethod
    def end_date_after_start_date(cls, v, info):
        """Validate that end_date is not before start_date."""
        if "start_date" in info.data and v < info.data["start_date"]:
            raise ValueError("end_date must be on or after start_date")
        return v


class AnnualReport(BaseModel):
    """Twelve-month breakdown for one calendar year."""

    year: int = Field(ge=1900, le=2100)
    reference_date: date
    months: dict[str, MonthTotals] = Field(
        default_factory=dict,
        description="'YYYY-MM' -> totals; all twelve months are present",
    )
    income_by_label: dict[str, Bucket] = Field(default_factory=dict)
    expenses_by_category: dict[str, Bucket] = Field(default_factory=dict)
    total_income: Bucket = Field(default_factory=Bucket)
    total_expenses: Bucket = Field(default_factory=Bucket)
    skipped_count: int = Field(default=0, ge=0)
    anomalies: list[Anomaly] = Field(default_factory=list)

    @computed_field
    @property
    def net(self) -> Bucket:
        """Total income minus total expenses."""
        return self.total_income - self.total_expenses


class MonthToDateReport(BaseModel):
    """How much of a month's money has moved as of the reference date."""

    year: int = Field(ge=1900, le=2100)
    month: int = Field(ge=1, le=12)
    reference_date: date
    month_income: Decimal = Decimal("0")
    month_expenses: Decimal = Decimal("0")
    incurred_income: Decimal = Decimal("0")
    incurred_expenses: Decimal = Decimal("0")

    @computed_field
    @property
    def remaining_income(self) -> Decimal:
        return self.month_income - self.incurred_income

    @computed_field
    @property
    def remaining_expenses(self) -> Decimal:
        return self.month_expenses - self.incurred_expenses

    @computed_field
    @property
    def remaining_balance(self) -> Decimal:
        """Income still to arrive minus bills still to pay."""
        return self.remaining_income - self.remaining_expenses

    @computed_field
    @property
    def net_to_date(self) -> Decimal:
        return self.incurred_income - self.incurred_expenses

    @computed_field
    @property
    def label(self) -> str:
        """Human-readable label for the month (e.g., 'February 2025')."""
        return f"{month_name[self.month]} {self.year}"
