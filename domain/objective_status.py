"""
Domain: Objective status classification (pure).

Rules, in order:
1. No deadline, or no positive target: em_andamento (lateness does not apply).
2. progress_pct = current / target * 100
3. progress_pct >= 100: concluido (checked before the deadline, so a goal
   finished late is still reported as completed).
4. now strictly after the deadline: atrasado.
5. expected_pct interpolates linearly between 1 January of the current year and
   the deadline.
6. progress_pct >= expected_pct - 10: em_andamento, otherwise atrasado.

The expected-progress window always starts on 1 January of `now`'s year, not on
the objective's own start_date. Objectives starting mid-year are judged against
a full-year window; this is the observed behaviour and is kept as-is.

`pausado` is never returned here.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from .objective import ObjectiveStatus
from .time import require_utc_timestamp, start_of_day_utc, utc_now

# Percentage points an objective may trail the time-linear expectation.
GRACE_BAND_PCT = 10.0


def expected_progress_pct(end_date: date, now: datetime) -> float:
    """Share of the [year start, deadline] window already elapsed, in percent."""

    year_start = datetime(now.year, 1, 1, tzinfo=timezone.utc)
    deadline = start_of_day_utc(end_date)
    total = (deadline - year_start).total_seconds()
    if total <= 0:
        return 100.0
    elapsed = (now - year_start).total_seconds()
    return elapsed / total * 100


def classify(
    current_value: Decimal,
    target_value: Optional[Decimal],
    end_date: Optional[date],
    now: Optional[datetime] = None,
) -> ObjectiveStatus:
    """
    Derive the lifecycle status of an objective.

    Never raises for missing or degenerate targets; those short-circuit to
    em_andamento.
    """

    if end_date is None or target_value is None:
        return ObjectiveStatus.EM_ANDAMENTO
    if not target_value.is_finite() or target_value <= 0:
        return ObjectiveStatus.EM_ANDAMENTO

    if now is None:
        now = utc_now()
    require_utc_timestamp("now", now)

    progress_pct = float(current_value / target_value * 100)
    if progress_pct >= 100:
        return ObjectiveStatus.CONCLUIDO

    if now > start_of_day_utc(end_date):
        return ObjectiveStatus.ATRASADO

    if progress_pct >= expected_progress_pct(end_date, now) - GRACE_BAND_PCT:
        return ObjectiveStatus.EM_ANDAMENTO
    return ObjectiveStatus.ATRASADO
