"""Occurrence and actual-transaction models.

Occurrences are derived values: they are recomputed from rules on demand
and never persisted. Actual transactions are the externally recorded
events the reconciler merges them with.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from budget_core.models.rules import CategoryId, FlowType, RuleId


class OccurrenceStatus(str, Enum):
    """Whether an occurrence has happened as of the reference date."""

    OCCURRED = "occurred"
    PENDING = "pending"


class OccurrenceSource(str, Enum):
    """Where an occurrence in a merged list came from."""

    EXPECTED = "expected"  # generated from a rule's cadence
    ACTUAL = "actual"  # recorded transaction


class AnomalyKind(str, Enum):
    """Non-fatal problems absorbed while building a result."""

    UNRESOLVED_CATEGORY = "unresolved_category"
    UNPARSABLE_AMOUNT = "unparsable_amount"


class Anomaly(BaseModel):
    """A record that was absorbed into a fallback rather than failing."""

    model_config = {"frozen": True}

    kind: AnomalyKind
    message: str
    reference: Optional[str] = Field(
        default=None,
        description="Label, id or date of the offending record",
    )


class Occurrence(BaseModel):
    """A single concrete dated instance of a rule firing.

    ``status`` is None until the occurrence has been classified against a
    reference date. Projections produced by the reconciler carry
    ``projected=True`` and are always pending.
    """

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "rule_id": 7,
                    "label": "Salary-B",
                    "amount": "2168",
                    "flow": "income",
                    "category_id": None,
                    "status": "occurred",
                    "source": "expected",
                    "projected": False,
                    "valid": True,
                    "date": "2025-02-07",
                }
            ]
        },
    }

    rule_id: Optional[RuleId] = Field(
        default=None,
        description="Rule that produced (or matched) this occurrence",
    )
    label: str = Field(description="Income source or bill name")
    amount: Decimal = Field(
        default=Decimal("0"),
        description="Amount of this occurrence; zero when the record is invalid",
    )
    flow: FlowType = Field(default=FlowType.EXPENSE)
    category_id: Optional[CategoryId] = None
    status: Optional[OccurrenceStatus] = None
    source: OccurrenceSource = OccurrenceSource.EXPECTED
    projected: bool = Field(
        default=False,
        description="True for reconciler projections not yet recorded",
    )
    valid: bool = Field(
        default=True,
        description="False when the underlying record could not be parsed",
    )
    date: date

    def with_status(self, status: OccurrenceStatus) -> "Occurrence":
        """Return a copy carrying ``status``."""
        return self.model_copy(update={"status": status})


_AMOUNT_NOISE = re.compile(r"[$,\s]")


def parse_amount(value: Any) -> Optional[Decimal]:
    """Parse a recorded amount into a non-negative Decimal.

    Accepts Decimal, int, float and strings with currency symbols or
    thousands separators. Returns None for anything that is not a finite,
    non-negative number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, float):
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        clean = _AMOUNT_NOISE.sub("", value)
        if not clean:
            return None
        try:
            parsed = Decimal(clean)
        except InvalidOperation:
            return None
    else:
        return None

    if not parsed.is_finite() or parsed < 0:
        return None
    return parsed


class ActualTransaction(BaseModel):
    """An already-recorded transaction supplied by the persistence layer.

    ``amount`` is kept exactly as recorded; use :attr:`parsed_amount` to get
    a Decimal, which is None when the raw value cannot be coerced. When
    ``flow`` is left unset the reconciler takes it from the matched rule,
    falling back to expense for records that match no rule.
    """

    model_config = {"frozen": True}

    label: str = Field(description="Description as recorded")
    amount: Any = Field(description="Raw recorded amount")
    category_id: Optional[CategoryId] = None
    rule_id: Optional[RuleId] = Field(
        default=None,
        description="Rule this transaction was posted against, if known",
    )
    flow: Optional[FlowType] = Field(
        default=None,
        description="Income or expense; None takes the matched rule's flow",
    )
    date: date

    @field_validator("label")
    @classmethod
    def strip_label(cls, v: str) -> str:
        """Labels are compared trimmed."""
        return v.strip()

    @property
    def parsed_amount(self) -> Optional[Decimal]:
        """The recorded amount as a non-negative Decimal, if parsable."""
        return parse_amount(self.amount)


def normalize_label(label: str) -> str:
    """Normalise a label for matching: trimmed, collapsed, case-folded."""
    return " ".join(label.split()).casefold()
