"""
Pipeline service for the CRM lead board.

Lead CRUD, Kanban moves between statuses and the pipeline summary shown on
the dashboard.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.lead import (
    ACTIVE_PIPELINE_STATUSES,
    PIPELINE_ORDER,
    PROPOSAL_STATUSES,
    Lead,
    LeadStatus,
    LeadTemperature,
)
from domain.numbers import decimal_or_zero
from domain.time import utc_now
from repositories.errors import NotFoundError
from repositories.ports import LeadRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({
    "name",
    "company",
    "email",
    "phone",
    "status",
    "source",
    "value",
    "temperature",
    "notes",
})


@dataclass(frozen=True, slots=True)
class PipelineStats:
    """
    Summary of a space's pipeline.

    active_count / active_value cover non-terminal leads only; conversion_rate
    is the rounded share of won leads over every lead of the space.
    """

    active_count: int
    active_value: Decimal
    proposals_sent: int
    conversion_rate: int
    won_count: int
    won_value: Decimal


class PipelineService:
    def __init__(self, leads: LeadRepository, clock: Callable[[], datetime] = utc_now) -> None:
        self._leads = leads
        self._clock = clock

    def _load(self, lead_id: UUID) -> Lead:
        lead = self._leads.get_lead(lead_id)
        if lead is None:
            raise NotFoundError(f"Lead not found: {lead_id}")
        return lead

    def list_leads(self, space_id: UUID, status: Optional[LeadStatus] = None) -> List[Lead]:
        return self._leads.list_leads(space_id, status)

    def get_lead(self, lead_id: UUID) -> Lead:
        return self._load(lead_id)

    def create_lead(
        self,
        space_id: UUID,
        name: str,
        *,
        status: LeadStatus = LeadStatus.NOVO,
        value: Optional[Decimal] = None,
        temperature: LeadTemperature = LeadTemperature.COLD,
        company: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        source: Optional[str] = None,
        notes: Optional[str] = None,
        created_by: Optional[UUID] = None,
    ) -> Lead:
        if not name or not name.strip():
            raise ValueError("name must not be empty")

        now = self._clock()
        lead = self._leads.save_lead(
            Lead(
                lead_id=uuid4(),
                space_id=space_id,
                name=name.strip(),
                status=status,
                value=value,
                temperature=temperature,
                company=company,
                email=email,
                phone=phone,
                source=source,
                notes=notes,
                created_by=created_by,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("Created lead %s in space %s", lead.lead_id, space_id)
        return lead

    def update_lead(self, lead_id: UUID, changes: Mapping[str, Any]) -> Lead:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown lead fields: {', '.join(sorted(unknown))}")
        if "name" in changes and not str(changes["name"] or "").strip():
            raise ValueError("name must not be empty")
        for required in ("status", "temperature"):
            if required in changes and changes[required] is None:
                raise ValueError(f"{required} cannot be cleared")

        lead = self._load(lead_id)
        return self._leads.save_lead(replace(lead, **dict(changes), updated_at=self._clock()))

    def move_lead(self, lead_id: UUID, status: LeadStatus) -> Lead:
        """Move a lead to another pipeline column."""

        lead = self._load(lead_id)
        if lead.status == status:
            return lead
        moved = self._leads.save_lead(replace(lead, status=status, updated_at=self._clock()))
        logger.info("Moved lead %s from %s to %s", lead_id, lead.status.value, status.value)
        return moved

    def delete_lead(self, lead_id: UUID) -> None:
        self._leads.delete_lead(lead_id)
        logger.info("Deleted lead %s", lead_id)

    def board(self, space_id: UUID) -> Dict[LeadStatus, List[Lead]]:
        """Leads grouped by status, in pipeline column order."""

        columns: Dict[LeadStatus, List[Lead]] = {status: [] for status in PIPELINE_ORDER}
        for lead in self._leads.list_leads(space_id):
            columns[lead.status].append(lead)
        return columns

    def pipeline_stats(self, space_id: UUID) -> PipelineStats:
        leads = self._leads.list_leads(space_id)
        active = [lead for lead in leads if lead.status in ACTIVE_PIPELINE_STATUSES]
        won = [lead for lead in leads if lead.status == LeadStatus.GANHO]
        proposals = [lead for lead in leads if lead.status in PROPOSAL_STATUSES]

        conversion = 0
        if leads:
            rate = Decimal(len(won)) / Decimal(len(leads)) * 100
            conversion = int(rate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

        return PipelineStats(
            active_count=len(active),
            active_value=sum((decimal_or_zero(lead.value) for lead in active), Decimal("0")),
            proposals_sent=len(proposals),
            conversion_rate=conversion,
            won_count=len(won),
            won_value=sum((decimal_or_zero(lead.value) for lead in won), Decimal("0")),
        )


__all__ = ["PipelineService", "PipelineStats"]
