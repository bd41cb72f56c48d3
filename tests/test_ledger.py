"""
Tests for `domain/ledger.py` and the objective value helpers.

Covers contract rules:
- The ledger total is the sum of entry values.
- Entries are listed newest first; ties keep insertion order.
- Monthly totals bucket entries of one year into twelve months.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from domain.ledger import ledger_total, monthly_totals, newest_first
from domain.objective import ObjectiveUnit, ProgressEntry, format_value, progress_percent
from domain.time import month_anchor

OBJECTIVE_ID = UUID("00000000-0000-0000-0000-000000000010")


def _entry(value: str, logged_at: datetime) -> ProgressEntry:
    return ProgressEntry(
        entry_id=uuid4(),
        objective_id=OBJECTIVE_ID,
        value=Decimal(value),
        logged_at=logged_at,
    )


def test_ledger_total_sums_values() -> None:
    entries = [
        _entry("2", month_anchor(2025, 1)),
        _entry("2.5", month_anchor(2025, 2)),
        _entry("-0.5", month_anchor(2025, 3)),
    ]

    assert ledger_total(entries) == Decimal("4.0")
    assert ledger_total([]) == Decimal("0")


def test_newest_first_orders_by_logged_at() -> None:
    jan = _entry("1", month_anchor(2025, 1))
    mar = _entry("3", month_anchor(2025, 3))
    feb = _entry("2", month_anchor(2025, 2))

    assert [e.value for e in newest_first([jan, mar, feb])] == [Decimal("3"), Decimal("2"), Decimal("1")]


def test_newest_first_keeps_insertion_order_on_ties() -> None:
    """Verify entries sharing a timestamp keep their insertion order."""

    stamp = month_anchor(2025, 4)
    first = _entry("1", stamp)
    second = _entry("2", stamp)
    third = _entry("3", stamp)

    assert newest_first([first, second, third]) == (first, second, third)


def test_progress_entry_requires_utc() -> None:
    with pytest.raises(ValueError):
        _entry("1", datetime(2025, 1, 1, 12))


def test_monthly_totals_buckets_one_year() -> None:
    entries = [
        _entry("2", month_anchor(2025, 3)),
        _entry("3", datetime(2025, 3, 31, 23, 59, tzinfo=timezone.utc)),
        _entry("7", month_anchor(2025, 12)),
        _entry("100", month_anchor(2024, 3)),
    ]

    months = monthly_totals(entries, 2025)

    assert len(months) == 12
    assert [m.month for m in months] == list(range(1, 13))
    assert months[2].entry_count == 2
    assert months[2].total == Decimal("5")
    assert months[11].total == Decimal("7")
    assert months[0].entry_count == 0
    assert months[0].total == Decimal("0")


def test_month_anchor_is_noon_on_the_first() -> None:
    assert month_anchor(2025, 3) == datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
    with pytest.raises(ValueError):
        month_anchor(2025, 13)


def test_progress_percent() -> None:
    assert progress_percent(Decimal("98500"), Decimal("100000")) == 99
    assert progress_percent(Decimal("4"), Decimal("10")) == 40
    assert progress_percent(Decimal("4"), None) == 0
    assert progress_percent(Decimal("4"), Decimal("0")) == 0


def test_format_value_by_unit() -> None:
    assert format_value(Decimal("1234.5"), ObjectiveUnit.CURRENCY.value) == "R$ 1.234,5"
    assert format_value(Decimal("1500000"), ObjectiveUnit.CURRENCY.value) == "R$ 1.500.000"
    assert format_value(Decimal("85.0"), ObjectiveUnit.PERCENT.value) == "85%"
    assert format_value(Decimal("12"), ObjectiveUnit.COUNT.value) == "12"
    assert format_value(Decimal("2.50"), ObjectiveUnit.COUNT.value) == "2.5"
