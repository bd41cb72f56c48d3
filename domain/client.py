"""
Domain: Client roster and NPS history.

A Client is an active (or former) customer of a space with a monthly recurring
value. NPS surveys are recorded per client, one score per month.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Optional, Tuple
from uuid import UUID

from .time import require_utc_timestamp

NPS_MIN = 0
NPS_MAX = 10
NPS_PROMOTER_MIN = 9
NPS_PASSIVE_MIN = 7


class ClientStatus(str, Enum):
    ATIVO = "ativo"
    INATIVO = "inativo"
    CHURN = "churn"

    @staticmethod
    def parse(value: str) -> "ClientStatus":
        key = value.strip().lower()
        try:
            return _CLIENT_STATUS_ALIASES[key]
        except KeyError:
            raise ValueError(f"Unknown client status: {value!r}") from None


_CLIENT_STATUS_ALIASES = {
    "active": ClientStatus.ATIVO,
    "inactive": ClientStatus.INATIVO,
    "churned": ClientStatus.CHURN,
    **{status.value: status for status in ClientStatus},
}


class NPSCategory(str, Enum):
    PROMOTER = "promoter"
    PASSIVE = "passive"
    DETRACTOR = "detractor"


@dataclass(frozen=True, slots=True)
class NPSRecord:
    """A single NPS survey answer; `recorded_at` is the first day of the surveyed month."""

    record_id: UUID
    client_id: UUID
    space_id: UUID
    score: Optional[int]
    recorded_at: datetime
    feedback: Optional[str] = None
    created_by: Optional[UUID] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("recorded_at", self.recorded_at)
        if self.score is not None and not NPS_MIN <= self.score <= NPS_MAX:
            raise ValueError(f"score must be between {NPS_MIN} and {NPS_MAX}")


@dataclass(frozen=True, slots=True)
class Client:
    """
    Client account of a space.

    Status semantics:
    - ativo: paying customer, counts towards MRR and active-count metrics
    - inativo: paused relationship
    - churn: lost customer
    """

    client_id: UUID
    space_id: UUID
    name: str
    status: ClientStatus = ClientStatus.ATIVO
    monthly_value: Optional[Decimal] = None

    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    segment: Optional[str] = None
    contract_start: Optional[str] = None
    package: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[UUID] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    nps_history: Tuple[NPSRecord, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    def is_active(self) -> bool:
        return self.status == ClientStatus.ATIVO


def nps_category(score: int) -> NPSCategory:
    if score >= NPS_PROMOTER_MIN:
        return NPSCategory.PROMOTER
    if score >= NPS_PASSIVE_MIN:
        return NPSCategory.PASSIVE
    return NPSCategory.DETRACTOR


def average_score(scores: Iterable[int]) -> Decimal:
    """Mean of the scores rounded to one decimal place; 0 when there are none."""

    values = list(scores)
    if not values:
        return Decimal("0")
    mean = Decimal(sum(values)) / Decimal(len(values))
    return mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def average_nps(history: Iterable[NPSRecord]) -> Decimal:
    return average_score(record.score for record in history if record.score is not None)


def latest_nps(history: Iterable[NPSRecord]) -> Optional[int]:
    """Score of the most recently recorded survey (None when there is no history)."""

    records = list(history)
    if not records:
        return None
    latest = max(records, key=lambda record: record.recorded_at)
    return latest.score
