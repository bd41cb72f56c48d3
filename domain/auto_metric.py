"""
Domain: Auto-metric resolution for commercial objectives (pure).

Computes the current value of an auto-linked objective from a snapshot of the
space's leads and clients:

- crm_pipeline:  sum of lead values in any non-terminal status
- crm_won:       sum of lead values with status ganho
- clients_mrr:   sum of monthly values of active clients
- clients_count: number of active clients
- none / unknown selector: 0

Rows belonging to other spaces are ignored, so callers may pass a wider
snapshot without leaking values across spaces. Missing numeric fields count as
zero.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Union
from uuid import UUID

from .client import Client, ClientStatus
from .lead import ACTIVE_PIPELINE_STATUSES, Lead, LeadStatus
from .numbers import decimal_or_zero
from .objective import AutoMetricSource

_ZERO = Decimal("0")


def _sum_lead_values(leads: Iterable[Lead]) -> Decimal:
    return sum((decimal_or_zero(lead.value) for lead in leads), _ZERO)


def resolve_auto_value(
    source: Union[AutoMetricSource, str, None],
    space_id: UUID,
    leads: Iterable[Lead],
    clients: Iterable[Client],
) -> Decimal:
    """Resolve the value of an auto-metric source for one space. Never raises for unknown sources."""

    kind = source if isinstance(source, AutoMetricSource) else AutoMetricSource.parse(source)
    if kind == AutoMetricSource.NONE:
        return _ZERO

    if kind in (AutoMetricSource.CRM_PIPELINE, AutoMetricSource.CRM_WON):
        space_leads = [lead for lead in leads if lead.space_id == space_id]
        if kind == AutoMetricSource.CRM_PIPELINE:
            return _sum_lead_values(
                lead for lead in space_leads if lead.status in ACTIVE_PIPELINE_STATUSES
            )
        return _sum_lead_values(lead for lead in space_leads if lead.status == LeadStatus.GANHO)

    active_clients = [
        client
        for client in clients
        if client.space_id == space_id and client.status == ClientStatus.ATIVO
    ]
    if kind == AutoMetricSource.CLIENTS_MRR:
        return sum((decimal_or_zero(client.monthly_value) for client in active_clients), _ZERO)
    if kind == AutoMetricSource.CLIENTS_COUNT:
        return Decimal(len(active_clients))
    return _ZERO


def needs_leads(source: Optional[AutoMetricSource]) -> bool:
    return source in (AutoMetricSource.CRM_PIPELINE, AutoMetricSource.CRM_WON)


def needs_clients(source: Optional[AutoMetricSource]) -> bool:
    return source in (AutoMetricSource.CLIENTS_MRR, AutoMetricSource.CLIENTS_COUNT)
