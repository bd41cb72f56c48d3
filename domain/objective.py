"""
Domain: Strategic objectives and their progress ledger entries.

An Objective tracks a target value over a period. Its current value is either
the sum of its progress entries or, for auto-linked (commercial) objectives,
an aggregate computed from the space's leads and clients.

Invariants:
- Every objective belongs to exactly one space.
- `pausado` is only ever set explicitly; rule-based classification never
  produces it.
- Progress entries are immutable; they are created and deleted, never edited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID

from .time import require_utc_timestamp


class ObjectiveStatus(str, Enum):
    EM_ANDAMENTO = "em_andamento"
    CONCLUIDO = "concluido"
    ATRASADO = "atrasado"
    PAUSADO = "pausado"


class ObjectiveUnit(str, Enum):
    PERCENT = "%"
    CURRENCY = "R$"
    COUNT = "un"


class AutoMetricSource(str, Enum):
    NONE = "none"
    CRM_PIPELINE = "crm_pipeline"
    CRM_WON = "crm_won"
    CLIENTS_MRR = "clients_mrr"
    CLIENTS_COUNT = "clients_count"

    @staticmethod
    def parse(value: Optional[str]) -> "AutoMetricSource":
        """Unknown or empty selectors fall back to NONE."""

        if not value:
            return AutoMetricSource.NONE
        try:
            return AutoMetricSource(value)
        except ValueError:
            return AutoMetricSource.NONE


@dataclass(frozen=True, slots=True)
class ProgressEntry:
    """
    A single dated contribution towards an objective's current value.

    `logged_at` defaults to creation time but may be backdated to a month.
    """

    entry_id: UUID
    objective_id: UUID
    value: Decimal
    logged_at: datetime
    notes: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("logged_at", self.logged_at)
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)


@dataclass(frozen=True, slots=True)
class Objective:
    objective_id: UUID
    space_id: UUID
    title: str
    unit: ObjectiveUnit = ObjectiveUnit.COUNT
    target_value: Optional[Decimal] = None
    current_value: Decimal = Decimal("0")
    status: ObjectiveStatus = ObjectiveStatus.EM_ANDAMENTO

    description: Optional[str] = None
    category: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    is_commercial: bool = False
    value_type: Optional[str] = None

    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Newest-first; only populated when loaded together with the ledger.
    progress_entries: Tuple[ProgressEntry, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    @property
    def auto_metric_source(self) -> AutoMetricSource:
        return AutoMetricSource.parse(self.value_type)

    @property
    def is_auto_linked(self) -> bool:
        """True when the current value is driven by lead/client aggregates."""

        return self.is_commercial and self.auto_metric_source != AutoMetricSource.NONE


def progress_percent(current_value: Decimal, target_value: Optional[Decimal]) -> int:
    """Progress rounded to a whole percent; 0 when there is no target."""

    if not target_value:
        return 0
    pct = current_value / target_value * 100
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _group_thousands(digits: str) -> str:
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return ".".join(groups)


def format_value(value: Decimal, unit: str) -> str:
    """
    Human readable value for a unit.

    Currency follows the Brazilian convention: "R$ 1.234,5".
    """

    if unit == ObjectiveUnit.CURRENCY.value:
        normalized = value.normalize()
        if normalized == normalized.to_integral_value():
            normalized = normalized.quantize(Decimal("1"))
        sign = "-" if normalized < 0 else ""
        integer, _, fraction = format(abs(normalized), "f").partition(".")
        text = _group_thousands(integer)
        if fraction:
            text = f"{text},{fraction}"
        return f"R$ {sign}{text}"
    text = _plain_number(value)
    if unit == ObjectiveUnit.PERCENT.value:
        return f"{text}%"
    return text


def _plain_number(value: Decimal) -> str:
    normalized = value.normalize()
    if normalized == normalized.to_integral_value():
        return str(normalized.quantize(Decimal("1")))
    return format(normalized, "f")
