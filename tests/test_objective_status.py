"""
Tests for `domain/objective_status.py`.

Covers contract rules:
- Completion is checked before the deadline.
- Past the deadline an unfinished objective is overdue.
- Before the deadline, the time-linear expectation with a 10 point grace band
  decides between in-progress and overdue.
- Missing deadline or non-positive target never raises and is in-progress.
- Paused is never produced by classification.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from domain.objective import ObjectiveStatus
from domain.objective_status import GRACE_BAND_PCT, classify, expected_progress_pct


def _utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


def test_ahead_of_schedule_is_in_progress() -> None:
    """Verify 98.5% progress mid-February is in progress."""

    status = classify(Decimal("98500"), Decimal("100000"), date(2025, 3, 31), _utc(2025, 2, 15))

    assert status == ObjectiveStatus.EM_ANDAMENTO


def test_past_deadline_and_unfinished_is_overdue() -> None:
    """Verify an unfinished objective after its end date is overdue."""

    status = classify(Decimal("4"), Decimal("10"), date(2025, 2, 28), _utc(2025, 3, 5))

    assert status == ObjectiveStatus.ATRASADO


def test_target_reached_is_completed_regardless_of_now() -> None:
    """Verify reaching the target completes the objective, even after the deadline."""

    for now in (_utc(2025, 1, 2), _utc(2025, 12, 31, 23), _utc(2026, 6, 1)):
        status = classify(Decimal("85"), Decimal("85"), date(2025, 12, 31), now)
        assert status == ObjectiveStatus.CONCLUIDO


def test_exceeding_target_is_completed() -> None:
    assert classify(Decimal("12"), Decimal("10"), date(2025, 1, 31), _utc(2025, 5, 1)) == ObjectiveStatus.CONCLUIDO


def test_missing_end_date_is_in_progress() -> None:
    """Verify lateness does not apply without a deadline."""

    status = classify(Decimal("0"), Decimal("100"), None, _utc(2030, 1, 1))

    assert status == ObjectiveStatus.EM_ANDAMENTO


@pytest.mark.parametrize("target", [None, Decimal("0"), Decimal("-5"), Decimal("NaN"), Decimal("Infinity")])
def test_degenerate_target_is_in_progress(target) -> None:
    """Verify missing, zero, negative or non-finite targets never raise."""

    status = classify(Decimal("3"), target, date(2025, 1, 31), _utc(2025, 6, 1))

    assert status == ObjectiveStatus.EM_ANDAMENTO


def test_deadline_day_itself_counts_as_past_after_midnight() -> None:
    """Verify the deadline instant is 00:00 UTC of the end date."""

    at_midnight = classify(Decimal("0"), Decimal("10"), date(2025, 6, 30), _utc(2025, 6, 30))
    later_that_day = classify(Decimal("0"), Decimal("10"), date(2025, 6, 30), _utc(2025, 6, 30, 1))

    # At exactly midnight the expected progress is 100%, so 0% is still overdue.
    assert at_midnight == ObjectiveStatus.ATRASADO
    assert later_that_day == ObjectiveStatus.ATRASADO


def test_grace_band_boundary() -> None:
    """Verify progress exactly 10 points behind the expectation is still in progress."""

    end = date(2025, 12, 31)
    now = _utc(2025, 7, 1)
    expected = expected_progress_pct(end, now)
    target = Decimal("1000")

    on_boundary = Decimal(str(expected - GRACE_BAND_PCT)) / 100 * target
    behind = on_boundary - Decimal("5")

    assert classify(on_boundary + Decimal("0.001"), target, end, now) == ObjectiveStatus.EM_ANDAMENTO
    assert classify(behind, target, end, now) == ObjectiveStatus.ATRASADO


def test_expected_progress_uses_year_start_not_objective_start() -> None:
    """Verify the expectation window starts on 1 January of now's year."""

    pct = expected_progress_pct(date(2025, 12, 31), _utc(2025, 1, 1))

    assert pct == 0.0
    assert expected_progress_pct(date(2025, 12, 31), _utc(2025, 12, 31)) == pytest.approx(100.0)


def test_expected_progress_is_full_when_window_is_empty() -> None:
    """Verify a deadline on or before 1 January yields a 100% expectation."""

    assert expected_progress_pct(date(2025, 1, 1), _utc(2025, 1, 1)) == 100.0
    assert expected_progress_pct(date(2024, 11, 30), _utc(2025, 1, 1)) == 100.0


def test_classification_is_deterministic() -> None:
    now = _utc(2025, 4, 10)
    results = {
        classify(Decimal("30"), Decimal("100"), date(2025, 9, 30), now)
        for _ in range(5)
    }

    assert len(results) == 1


def test_classification_never_returns_paused() -> None:
    """Verify rule-based classification never produces pausado."""

    start = _utc(2025, 1, 1)
    for offset in range(0, 400, 17):
        now = start + timedelta(days=offset)
        for current in (Decimal("0"), Decimal("50"), Decimal("100")):
            status = classify(current, Decimal("100"), date(2025, 10, 15), now)
            assert status != ObjectiveStatus.PAUSADO


def test_classify_rejects_naive_now() -> None:
    with pytest.raises(ValueError):
        classify(Decimal("1"), Decimal("10"), date(2025, 12, 31), datetime(2025, 6, 1))
