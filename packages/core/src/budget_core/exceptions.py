"""Custom exceptions for the budget engine.

Only construction-time problems are raised: a rule that cannot be built,
settings that cannot be loaded, a report asked for over an inverted range.
Anomalies met while generating or aggregating (a category id that does not
resolve, a recorded amount that cannot be parsed) are absorbed into
fallback buckets and reported as :class:`budget_core.models.Anomaly`
records instead.

Example:
    try:
        rule = parse_rule(form_data)
    except InvalidRuleError as e:
        show_field_error(e.field, e.message)
"""

from typing import Any, Optional


class BudgetError(Exception):
    """Base class for every error the engine raises.

    Attributes:
        message: Human-readable error description.
        details: Extra context (offending field, value, config key...).
        recoverable: True when the caller can fix the input and retry.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        self.recoverable = recoverable

    def _add_context(self, **context: Any) -> None:
        """Copy the non-empty entries of ``context`` into ``details``."""
        for key, item in context.items():
            if item is not None and item != "":
                self.details[key] = item

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, "
            f"details={self.details!r}, recoverable={self.recoverable!r})"
        )


class InvalidRuleError(BudgetError):
    """A recurrence rule (or the stored row behind it) is malformed.

    Typical causes are a negative amount, a day of month outside 1-31, a
    twice-monthly rule repeating one day, or an income row with an unknown
    occurrence type. A rule that fails here never reaches the generator.
    Recoverable by default: the rule editor can resubmit.

    Example:
        >>> raise InvalidRuleError(
        ...     "Day of month out of range",
        ...     field="pattern.monthly.day_of_month",
        ...     value=32,
        ...     constraint="less_than_equal",
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Any = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint
        self._add_context(field=field, value=value, constraint=constraint)


class ConfigurationError(BudgetError):
    """Engine settings could not be loaded.

    ``config_key`` is the environment variable name (``BUDGET_TIMEZONE``)
    so the message points at what to change. Not recoverable without a
    restart on corrected settings.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Any = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual
        self._add_context(config_key=config_key, expected=expected, actual=actual)


__all__ = [
    "BudgetError",
    "InvalidRuleError",
    "ConfigurationError",
]
