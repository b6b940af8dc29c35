"""Budget Core - Recurring income and bill calendar engine."""

__version__ = "0.1.0"

from .aggregator import aggregate, combine, summarize_days
from .config import EngineConfig, configure_logging, load_config
from .exceptions import BudgetError, ConfigurationError, InvalidRuleError
from .generator import fires_on, generate, generate_all, occurrence_dates
from .models import ActualTransaction, CategorySet, RecurrenceRule, parse_rule
from .reconciler import reconcile
from .reminders import upcoming_reminders
from .reports import BudgetReportBuilder
from .status import classify
from .tagging import suggest_category

__all__ = [
    "ActualTransaction",
    "BudgetError",
    "BudgetReportBuilder",
    "CategorySet",
    "ConfigurationError",
    "EngineConfig",
    "InvalidRuleError",
    "RecurrenceRule",
    "aggregate",
    "classify",
    "combine",
    "configure_logging",
    "fires_on",
    "generate",
    "generate_all",
    "load_config",
    "occurrence_dates",
    "parse_rule",
    "reconcile",
    "suggest_category",
    "summarize_days",
    "upcoming_reminders",
]
