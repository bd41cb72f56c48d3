"""
Repository interfaces.

Two implementations exist: `repositories.memory_store` (demo / tests) and the
Supabase-backed modules. Services depend only on these interfaces; the concrete
backend is chosen by `repositories.factory` from configuration.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from domain.client import Client, NPSRecord
from domain.lead import Lead, LeadStatus
from domain.objective import Objective, ProgressEntry


class LeadRepository(ABC):
    @abstractmethod
    def list_leads(self, space_id: UUID, status: Optional[LeadStatus] = None) -> List[Lead]:
        """Leads of a space, optionally filtered by status."""

    @abstractmethod
    def get_lead(self, lead_id: UUID) -> Optional[Lead]:
        pass

    @abstractmethod
    def save_lead(self, lead: Lead) -> Lead:
        """Insert or replace a lead (upsert by lead_id)."""

    @abstractmethod
    def delete_lead(self, lead_id: UUID) -> None:
        pass


class ClientRepository(ABC):
    @abstractmethod
    def list_clients(self, space_id: UUID) -> List[Client]:
        """Clients of a space, each with its NPS history attached."""

    @abstractmethod
    def get_client(self, client_id: UUID) -> Optional[Client]:
        pass

    @abstractmethod
    def save_client(self, client: Client) -> Client:
        pass

    @abstractmethod
    def delete_client(self, client_id: UUID) -> None:
        """Delete a client together with its NPS records."""

    @abstractmethod
    def insert_nps_record(self, record: NPSRecord) -> NPSRecord:
        pass

    @abstractmethod
    def delete_nps_record(self, record_id: UUID) -> None:
        pass


class ObjectiveRepository(ABC):
    @abstractmethod
    def list_objectives(self, space_id: UUID) -> List[Objective]:
        pass

    @abstractmethod
    def get_objective(self, objective_id: UUID) -> Optional[Objective]:
        pass

    @abstractmethod
    def save_objective(self, objective: Objective) -> Objective:
        """Insert or replace an objective row (progress entries are not written here)."""

    @abstractmethod
    def delete_objective(self, objective_id: UUID) -> None:
        """Delete an objective together with its progress entries."""

    @abstractmethod
    def list_progress_entries(self, objective_id: UUID) -> List[ProgressEntry]:
        """Entries in insertion order."""

    @abstractmethod
    def insert_progress_entry(self, entry: ProgressEntry) -> ProgressEntry:
        pass

    @abstractmethod
    def delete_progress_entry(self, entry_id: UUID) -> None:
        pass
