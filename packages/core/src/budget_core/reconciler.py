"""Projection reconciliation.

Merges already-recorded transactions with the occurrences a set of rules
says should happen in the same window, so that posted transactions are not
counted a second time as projections.

A recorded transaction matches a rule by ``rule_id`` or, failing that, by
normalised label. When several rules share the label, the first rule (in
input order) that is due that day and still has an unrecorded occurrence
that day wins, then the first rule due that day, then the first rule.

For each rule:
1. each recorded transaction matched to the rule suppresses one expected
   occurrence of that rule on the same date;
2. the rest are emitted as pending projections (``projected=True``);
3. never more than ``max(0, expected - recorded_matching_rule)`` projections
   are emitted. When records landed on other dates (paid late, paid early)
   the earliest surviving projections are the ones dropped.

Recorded transactions whose amount cannot be parsed stay in the merged list
flagged ``valid=False``; they count as recorded events but contribute
nothing to totals. A record without a flow takes the matched rule's flow.
"""

from collections import Counter, defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

import structlog

from budget_core.models import (
    ActualTransaction,
    Anomaly,
    AnomalyKind,
    FlowType,
    Occurrence,
    OccurrenceSource,
    OccurrenceStatus,
    ReconciliationResult,
    RecurrenceRule,
    normalize_label,
)
from budget_core.generator import fires_on
from budget_core.status import classify

logger = structlog.get_logger()


def _match_rule(
    transaction: ActualTransaction,
    rules_by_id: dict[str, RecurrenceRule],
    rules_by_label: dict[str, list[RecurrenceRule]],
    open_dates: dict[str, Counter],
) -> Optional[RecurrenceRule]:
    if transaction.rule_id is not None:
        rule = rules_by_id.get(str(transaction.rule_id))
        if rule is not None:
            return rule
    candidates = rules_by_label.get(normalize_label(transaction.label), [])
    if len(candidates) > 1:
        due = [r for r in candidates if fires_on(r.pattern, transaction.date)]
        unrecorded = [r for r in due if open_dates[str(r.id)][transaction.date] > 0]
        candidates = unrecorded or due or candidates
    return candidates[0] if candidates else None


def _to_occurrence(
    transaction: ActualTransaction,
    rule: Optional[RecurrenceRule],
    reference_date: date,
) -> Occurrence:
    amount = transaction.parsed_amount
    category_id = transaction.category_id
    if category_id is None and rule is not None:
        category_id = rule.category_id
    flow = transaction.flow
    if flow is None:
        flow = rule.flow if rule is not None else FlowType.EXPENSE
    return Occurrence(
        rule_id=rule.id if rule is not None else transaction.rule_id,
        label=transaction.label,
        amount=amount if amount is not None else Decimal("0"),
        flow=flow,
        category_id=category_id,
        status=classify(transaction.date, reference_date),
        source=OccurrenceSource.ACTUAL,
        valid=amount is not None,
        date=transaction.date,
    )


def reconcile(
    rules: Iterable[RecurrenceRule],
    expected: Iterable[Occurrence],
    actual_transactions: Iterable[ActualTransaction],
    reference_date: date,
    *,
    window_start: Optional[date] = None,
    window_end: Optional[date] = None,
) -> ReconciliationResult:
    """Merge recorded transactions with outstanding projections.

    Args:
        rules: Rules that produced ``expected``.
        expected: Occurrences generated for ``rules`` over the window.
        actual_transactions: Recorded transactions. Those outside
            ``window_start``/``window_end`` (when given) are ignored.
        reference_date: As-of date used to classify recorded transactions.
        window_start: Optional inclusive lower bound for recorded transactions.
        window_end: Optional inclusive upper bound for recorded transactions.

    Returns:
        ReconciliationResult with every recorded transaction plus the
        surviving projections, sorted by date then label.
    """
    rules = list(rules)
    rules_by_id = {str(rule.id): rule for rule in rules}
    rules_by_label: dict[str, list[RecurrenceRule]] = defaultdict(list)
    for rule in rules:
        rules_by_label[normalize_label(rule.label)].append(rule)

    expected_per_rule: dict[str, list[Occurrence]] = defaultdict(list)
    for occurrence in expected:
        expected_per_rule[str(occurrence.rule_id)].append(occurrence)
    # per rule: expected occurrences per date not yet taken by a record
    open_dates: dict[str, Counter] = defaultdict(Counter)
    for rule_key, occurrences in expected_per_rule.items():
        open_dates[rule_key].update(o.date for o in occurrences)

    merged: list[Occurrence] = []
    anomalies: list[Anomaly] = []
    recorded_per_rule: dict[str, int] = defaultdict(int)
    suppressed_dates: dict[str, Counter] = defaultdict(Counter)
    skipped = 0

    for transaction in actual_transactions:
        if window_start is not None and transaction.date < window_start:
            continue
        if window_end is not None and transaction.date > window_end:
            continue
        rule = _match_rule(transaction, rules_by_id, rules_by_label, open_dates)
        occurrence = _to_occurrence(transaction, rule, reference_date)
        if not occurrence.valid:
            skipped += 1
            anomalies.append(
                Anomaly(
                    kind=AnomalyKind.UNPARSABLE_AMOUNT,
                    message=f"Amount {transaction.amount!r} is not a non-negative number",
                    reference=f"{transaction.label}@{transaction.date.isoformat()}",
                )
            )
            logger.warning(
                "actual_amount_unparsable",
                label=transaction.label,
                date=transaction.date.isoformat(),
                amount=repr(transaction.amount),
            )
        merged.append(occurrence)
        if rule is None:
            continue
        rule_key = str(rule.id)
        recorded_per_rule[rule_key] += 1
        if open_dates[rule_key][transaction.date] > 0:
            open_dates[rule_key][transaction.date] -= 1
            suppressed_dates[rule_key][transaction.date] += 1

    projected = 0
    suppressed = 0
    for rule_key, occurrences in expected_per_rule.items():
        occurrences.sort(key=lambda o: o.date)
        taken = suppressed_dates[rule_key]
        survivors = []
        for occurrence in occurrences:
            if taken[occurrence.date] > 0:
                taken[occurrence.date] -= 1
            else:
                survivors.append(occurrence)
        allowed = max(0, len(occurrences) - recorded_per_rule.get(rule_key, 0))
        dropped = len(survivors) - allowed
        if dropped > 0:
            survivors = survivors[dropped:]
        suppressed += len(occurrences) - len(survivors)
        for occurrence in survivors:
            merged.append(
                occurrence.model_copy(
                    update={
                        "status": OccurrenceStatus.PENDING,
                        "projected": True,
                        "source": OccurrenceSource.EXPECTED,
                    }
                )
            )
        projected += len(survivors)

    merged.sort(key=lambda o: (o.date, o.label, o.source.value))
    logger.info(
        "projections_reconciled",
        recorded=len(merged) - projected,
        projected=projected,
        suppressed=suppressed,
        skipped=skipped,
    )
    return ReconciliationResult(
        occurrences=merged,
        projected_count=projected,
        suppressed_count=suppressed,
        skipped_count=skipped,
        anomalies=anomalies,
    )


def reconcile_rule(
    rule: RecurrenceRule,
    expected: Iterable[Occurrence],
    actual_transactions: Iterable[ActualTransaction],
    reference_date: date,
    *,
    window_start: Optional[date] = None,
    window_end: Optional[date] = None,
) -> ReconciliationResult:
    """Reconcile a single rule; only transactions matching it are kept.

    The window bounds are applied as in :func:`reconcile`, so records from
    other months do not cap this window's projections.
    """
    key = normalize_label(rule.label)
    matching = [
        t for t in actual_transactions
        if (t.rule_id is not None and str(t.rule_id) == str(rule.id))
        or (t.rule_id is None and normalize_label(t.label) == key)
    ]
    return reconcile(
        [rule],
        expected,
        matching,
        reference_date,
        window_start=window_start,
        window_end=window_end,
    )
