"""
Domain: Progress ledger aggregation (pure).

The ledger is the append-only list of progress entries of an objective. For
objectives that are not auto-linked, the current value is exactly the sum of
the entries' values.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from .objective import ProgressEntry


@dataclass(frozen=True, slots=True)
class MonthTotal:
    """Aggregate of the entries logged in one calendar month."""

    month: int  # 1-12
    entry_count: int
    total: Decimal


def ledger_total(entries: Iterable[ProgressEntry]) -> Decimal:
    return sum((entry.value for entry in entries), Decimal("0"))


def newest_first(entries: Iterable[ProgressEntry]) -> Tuple[ProgressEntry, ...]:
    """
    Order entries by logged_at, newest first.

    Entries sharing a timestamp keep their insertion order (sorted() is stable,
    including with reverse=True).
    """

    return tuple(sorted(entries, key=lambda entry: entry.logged_at, reverse=True))


def monthly_totals(entries: Sequence[ProgressEntry], year: int) -> List[MonthTotal]:
    """Twelve month buckets (January first) for the entries logged in `year`."""

    counts = [0] * 12
    totals = [Decimal("0")] * 12
    for entry in entries:
        if entry.logged_at.year != year:
            continue
        index = entry.logged_at.month - 1
        counts[index] += 1
        totals[index] += entry.value
    return [
        MonthTotal(month=index + 1, entry_count=counts[index], total=totals[index])
        for index in range(12)
    ]
