"""
Client roster service.

Client CRUD, monthly NPS survey recording and the roster summary (MRR,
average ticket, average NPS).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.client import Client, ClientStatus, NPSRecord, average_score
from domain.numbers import decimal_or_zero
from domain.time import month_start, utc_now
from repositories.errors import NotFoundError
from repositories.ports import ClientRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({
    "name",
    "company",
    "email",
    "phone",
    "segment",
    "status",
    "monthly_value",
    "contract_start",
    "package",
    "notes",
})


@dataclass(frozen=True, slots=True)
class ClientStats:
    active_count: int
    inactive_count: int
    churn_count: int
    total_mrr: Decimal
    average_ticket: Decimal
    average_nps: Decimal


class ClientService:
    def __init__(self, clients: ClientRepository, clock: Callable[[], datetime] = utc_now) -> None:
        self._clients = clients
        self._clock = clock

    def _load(self, client_id: UUID) -> Client:
        client = self._clients.get_client(client_id)
        if client is None:
            raise NotFoundError(f"Client not found: {client_id}")
        return client

    def list_clients(self, space_id: UUID) -> List[Client]:
        return self._clients.list_clients(space_id)

    def get_client(self, client_id: UUID) -> Client:
        return self._load(client_id)

    def create_client(
        self,
        space_id: UUID,
        name: str,
        *,
        status: ClientStatus = ClientStatus.ATIVO,
        monthly_value: Optional[Decimal] = None,
        company: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        segment: Optional[str] = None,
        contract_start: Optional[str] = None,
        package: Optional[str] = None,
        notes: Optional[str] = None,
        created_by: Optional[UUID] = None,
    ) -> Client:
        if not name or not name.strip():
            raise ValueError("name must not be empty")

        now = self._clock()
        client = self._clients.save_client(
            Client(
                client_id=uuid4(),
                space_id=space_id,
                name=name.strip(),
                status=status,
                monthly_value=monthly_value,
                company=company,
                email=email,
                phone=phone,
                segment=segment,
                contract_start=contract_start,
                package=package,
                notes=notes,
                created_by=created_by,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info("Created client %s in space %s", client.client_id, space_id)
        return client

    def update_client(self, client_id: UUID, changes: Mapping[str, Any]) -> Client:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown client fields: {', '.join(sorted(unknown))}")
        if "name" in changes and not str(changes["name"] or "").strip():
            raise ValueError("name must not be empty")
        if "status" in changes and changes["status"] is None:
            raise ValueError("status cannot be cleared")

        client = self._load(client_id)
        return self._clients.save_client(replace(client, **dict(changes), updated_at=self._clock()))

    def delete_client(self, client_id: UUID) -> None:
        self._clients.delete_client(client_id)
        logger.info("Deleted client %s", client_id)

    def add_nps_record(
        self,
        client_id: UUID,
        score: int,
        feedback: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        created_by: Optional[UUID] = None,
    ) -> NPSRecord:
        """
        Record an NPS answer for a month (defaults to the current month).

        The record is stamped on the first day of that month.
        """

        client = self._load(client_id)
        now = self._clock()
        record = self._clients.insert_nps_record(
            NPSRecord(
                record_id=uuid4(),
                client_id=client_id,
                space_id=client.space_id,
                score=score,
                feedback=feedback or None,
                recorded_at=month_start(
                    year if year is not None else now.year,
                    month if month is not None else now.month,
                ),
                created_by=created_by,
            )
        )
        logger.info("Recorded NPS %s for client %s", score, client_id)
        return record

    def delete_nps_record(self, client_id: UUID, record_id: UUID) -> None:
        client = self._load(client_id)
        if not any(record.record_id == record_id for record in client.nps_history):
            raise NotFoundError(f"NPS record {record_id} not found on client {client_id}")
        self._clients.delete_nps_record(record_id)

    def client_stats(self, space_id: UUID) -> ClientStats:
        clients = self._clients.list_clients(space_id)
        active = [client for client in clients if client.status == ClientStatus.ATIVO]
        total_mrr = sum((decimal_or_zero(c.monthly_value) for c in active), Decimal("0"))

        average_ticket = Decimal("0")
        if active:
            average_ticket = (total_mrr / len(active)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)

        scores = [
            record.score
            for client in clients
            for record in client.nps_history
            if record.score is not None
        ]
        return ClientStats(
            active_count=len(active),
            inactive_count=sum(1 for c in clients if c.status == ClientStatus.INATIVO),
            churn_count=sum(1 for c in clients if c.status == ClientStatus.CHURN),
            total_mrr=total_mrr,
            average_ticket=average_ticket,
            average_nps=average_score(scores),
        )


__all__ = ["ClientService", "ClientStats"]
