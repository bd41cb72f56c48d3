"""
Domain: Lead entity (CRM pipeline).

A Lead is a sales opportunity belonging to exactly one space. It moves through
a fixed, ordered set of pipeline statuses; `ganho` (won) and `perdido` (lost)
are terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple
from uuid import UUID

from .time import require_utc_timestamp


class LeadStatus(str, Enum):
    NOVO = "novo"
    CONTATO = "contato"
    REUNIAO_AGENDADA = "reuniao_agendada"
    REUNIAO_FEITA = "reuniao_feita"
    PROPOSTA = "proposta"
    NEGOCIACAO = "negociacao"
    GANHO = "ganho"
    PERDIDO = "perdido"

    @property
    def is_terminal(self) -> bool:
        return self in (LeadStatus.GANHO, LeadStatus.PERDIDO)

    @staticmethod
    def parse(value: str) -> "LeadStatus":
        """
        Resolve a status from its stored code or an English alias.

        Raises ValueError for unknown values.
        """

        key = value.strip().lower()
        try:
            return _LEAD_STATUS_ALIASES[key]
        except KeyError:
            raise ValueError(f"Unknown lead status: {value!r}") from None


# Kanban column order.
PIPELINE_ORDER: Tuple[LeadStatus, ...] = tuple(LeadStatus)

# Every non-terminal status counts towards the open pipeline.
ACTIVE_PIPELINE_STATUSES: Tuple[LeadStatus, ...] = tuple(
    status for status in LeadStatus if not status.is_terminal
)

# Statuses reached only after a proposal was sent.
PROPOSAL_STATUSES: Tuple[LeadStatus, ...] = (
    LeadStatus.PROPOSTA,
    LeadStatus.NEGOCIACAO,
    LeadStatus.GANHO,
)

_LEAD_STATUS_ALIASES = {
    "new": LeadStatus.NOVO,
    "contact": LeadStatus.CONTATO,
    "contacted": LeadStatus.CONTATO,
    "meeting_scheduled": LeadStatus.REUNIAO_AGENDADA,
    "meeting_done": LeadStatus.REUNIAO_FEITA,
    "proposal": LeadStatus.PROPOSTA,
    "followup": LeadStatus.NEGOCIACAO,
    "negotiation": LeadStatus.NEGOCIACAO,
    "won": LeadStatus.GANHO,
    "lost": LeadStatus.PERDIDO,
    **{status.value: status for status in LeadStatus},
}


class LeadTemperature(str, Enum):
    COLD = "cold"
    WARM = "warm"
    HOT = "hot"


@dataclass(frozen=True, slots=True)
class Lead:
    """
    Pure domain entity for a Lead.

    `value` is the expected deal value; None is treated as zero by every
    aggregate.
    """

    lead_id: UUID
    space_id: UUID
    name: str
    status: LeadStatus = LeadStatus.NOVO
    value: Optional[Decimal] = None
    temperature: LeadTemperature = LeadTemperature.COLD

    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[UUID] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    def is_open(self) -> bool:
        return not self.status.is_terminal
