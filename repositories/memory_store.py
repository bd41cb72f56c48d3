"""
In-memory repositories.

Used for the demo backend (DATA_BACKEND=memory) and by the test-suite. Each
instance owns its own state; nothing is shared at module level. Every mutation
is published on the injected ChangeNotifier.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional
from uuid import UUID

from domain.client import Client, NPSRecord
from domain.lead import Lead, LeadStatus
from domain.objective import Objective, ProgressEntry
from repositories.errors import NotFoundError
from repositories.events import ChangeAction, ChangeEvent, ChangeNotifier, EntityKind
from repositories.ports import ClientRepository, LeadRepository, ObjectiveRepository


class InMemoryLeadRepository(LeadRepository):
    def __init__(self, notifier: ChangeNotifier) -> None:
        self._notifier = notifier
        self._leads: Dict[UUID, Lead] = {}

    def list_leads(self, space_id: UUID, status: Optional[LeadStatus] = None) -> List[Lead]:
        return [
            lead
            for lead in self._leads.values()
            if lead.space_id == space_id and (status is None or lead.status == status)
        ]

    def get_lead(self, lead_id: UUID) -> Optional[Lead]:
        return self._leads.get(lead_id)

    def save_lead(self, lead: Lead) -> Lead:
        action = ChangeAction.UPDATED if lead.lead_id in self._leads else ChangeAction.CREATED
        self._leads[lead.lead_id] = lead
        self._notifier.publish(ChangeEvent(EntityKind.LEAD, action, lead.lead_id, lead.space_id))
        return lead

    def delete_lead(self, lead_id: UUID) -> None:
        lead = self._leads.pop(lead_id, None)
        if lead is None:
            raise NotFoundError(f"Lead not found: {lead_id}")
        self._notifier.publish(
            ChangeEvent(EntityKind.LEAD, ChangeAction.DELETED, lead_id, lead.space_id)
        )


class InMemoryClientRepository(ClientRepository):
    def __init__(self, notifier: ChangeNotifier) -> None:
        self._notifier = notifier
        self._clients: Dict[UUID, Client] = {}
        self._nps: Dict[UUID, NPSRecord] = {}

    def _with_history(self, client: Client) -> Client:
        history = tuple(r for r in self._nps.values() if r.client_id == client.client_id)
        return replace(client, nps_history=history)

    def list_clients(self, space_id: UUID) -> List[Client]:
        return [
            self._with_history(client)
            for client in self._clients.values()
            if client.space_id == space_id
        ]

    def get_client(self, client_id: UUID) -> Optional[Client]:
        client = self._clients.get(client_id)
        return self._with_history(client) if client is not None else None

    def save_client(self, client: Client) -> Client:
        exists = client.client_id in self._clients
        # NPS history lives in its own table.
        self._clients[client.client_id] = replace(client, nps_history=())
        self._notifier.publish(
            ChangeEvent(
                EntityKind.CLIENT,
                ChangeAction.UPDATED if exists else ChangeAction.CREATED,
                client.client_id,
                client.space_id,
            )
        )
        return self._with_history(client)

    def delete_client(self, client_id: UUID) -> None:
        client = self._clients.pop(client_id, None)
        if client is None:
            raise NotFoundError(f"Client not found: {client_id}")
        for record_id in [r.record_id for r in self._nps.values() if r.client_id == client_id]:
            del self._nps[record_id]
        self._notifier.publish(
            ChangeEvent(EntityKind.CLIENT, ChangeAction.DELETED, client_id, client.space_id)
        )

    def insert_nps_record(self, record: NPSRecord) -> NPSRecord:
        if record.client_id not in self._clients:
            raise NotFoundError(f"Client not found: {record.client_id}")
        self._nps[record.record_id] = record
        self._notifier.publish(
            ChangeEvent(EntityKind.NPS_RECORD, ChangeAction.CREATED, record.record_id, record.space_id)
        )
        return record

    def delete_nps_record(self, record_id: UUID) -> None:
        record = self._nps.pop(record_id, None)
        if record is None:
            raise NotFoundError(f"NPS record not found: {record_id}")
        self._notifier.publish(
            ChangeEvent(EntityKind.NPS_RECORD, ChangeAction.DELETED, record_id, record.space_id)
        )


class InMemoryObjectiveRepository(ObjectiveRepository):
    def __init__(self, notifier: ChangeNotifier) -> None:
        self._notifier = notifier
        self._objectives: Dict[UUID, Objective] = {}
        # dicts preserve insertion order, which is the ledger's tie-break order
        self._entries: Dict[UUID, ProgressEntry] = {}

    def list_objectives(self, space_id: UUID) -> List[Objective]:
        return [o for o in self._objectives.values() if o.space_id == space_id]

    def get_objective(self, objective_id: UUID) -> Optional[Objective]:
        return self._objectives.get(objective_id)

    def save_objective(self, objective: Objective) -> Objective:
        exists = objective.objective_id in self._objectives
        stored = replace(objective, progress_entries=())
        self._objectives[objective.objective_id] = stored
        self._notifier.publish(
            ChangeEvent(
                EntityKind.OBJECTIVE,
                ChangeAction.UPDATED if exists else ChangeAction.CREATED,
                objective.objective_id,
                objective.space_id,
            )
        )
        return stored

    def delete_objective(self, objective_id: UUID) -> None:
        objective = self._objectives.pop(objective_id, None)
        if objective is None:
            raise NotFoundError(f"Objective not found: {objective_id}")
        for entry_id in [e.entry_id for e in self._entries.values() if e.objective_id == objective_id]:
            del self._entries[entry_id]
        self._notifier.publish(
            ChangeEvent(EntityKind.OBJECTIVE, ChangeAction.DELETED, objective_id, objective.space_id)
        )

    def list_progress_entries(self, objective_id: UUID) -> List[ProgressEntry]:
        return [e for e in self._entries.values() if e.objective_id == objective_id]

    def _space_of(self, objective_id: UUID) -> Optional[UUID]:
        objective = self._objectives.get(objective_id)
        return objective.space_id if objective is not None else None

    def insert_progress_entry(self, entry: ProgressEntry) -> ProgressEntry:
        if entry.objective_id not in self._objectives:
            raise NotFoundError(f"Objective not found: {entry.objective_id}")
        self._entries[entry.entry_id] = entry
        self._notifier.publish(
            ChangeEvent(
                EntityKind.PROGRESS_ENTRY,
                ChangeAction.CREATED,
                entry.entry_id,
                self._space_of(entry.objective_id),
            )
        )
        return entry

    def delete_progress_entry(self, entry_id: UUID) -> None:
        entry = self._entries.pop(entry_id, None)
        if entry is None:
            raise NotFoundError(f"Progress entry not found: {entry_id}")
        self._notifier.publish(
            ChangeEvent(
                EntityKind.PROGRESS_ENTRY,
                ChangeAction.DELETED,
                entry_id,
                self._space_of(entry.objective_id),
            )
        )


__all__ = [
    "InMemoryClientRepository",
    "InMemoryLeadRepository",
    "InMemoryObjectiveRepository",
]
