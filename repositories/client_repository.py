"""
Client repository (Supabase persistence).

Manages client rows (`clients`) and their NPS survey answers (`nps_records`).
Aggregates such as MRR or average NPS are computed by the services layer.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from supabase import Client as SupabaseClient  # type: ignore[import-not-found]

from domain.client import Client, ClientStatus, NPSRecord
from domain.numbers import decimal_to_json, optional_decimal
from domain.time import parse_utc_datetime, to_iso_utc
from repositories.errors import NotFoundError
from repositories.events import ChangeAction, ChangeEvent, ChangeNotifier, EntityKind
from repositories.ports import ClientRepository
from repositories.rows import optional_uuid, uuid_to_str

_CLIENTS_TABLE: str = "clients"
_NPS_TABLE: str = "nps_records"


def _client_to_row(client: Client) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": str(client.client_id),
        "space_id": str(client.space_id),
        "name": client.name,
        "status": client.status.value,
        "monthly_value": decimal_to_json(client.monthly_value),
        "company": client.company,
        "email": client.email,
        "phone": client.phone,
        "segment": client.segment,
        "contract_start": client.contract_start,
        "package": client.package,
        "notes": client.notes,
        "created_by": uuid_to_str(client.created_by),
    }
    if client.created_at is not None:
        row["created_at"] = to_iso_utc(client.created_at, name="created_at")
    if client.updated_at is not None:
        row["updated_at"] = to_iso_utc(client.updated_at, name="updated_at")
    return row


def _row_to_client(row: Mapping[str, Any], history: tuple[NPSRecord, ...] = ()) -> Client:
    return Client(
        client_id=UUID(str(row["id"])),
        space_id=UUID(str(row["space_id"])),
        name=str(row["name"]),
        status=ClientStatus.parse(str(row.get("status") or ClientStatus.ATIVO.value)),
        monthly_value=optional_decimal(row.get("monthly_value")),
        company=row.get("company"),
        email=row.get("email"),
        phone=row.get("phone"),
        segment=row.get("segment"),
        contract_start=row.get("contract_start"),
        package=row.get("package"),
        notes=row.get("notes"),
        created_by=optional_uuid(row.get("created_by")),
        created_at=parse_utc_datetime(row["created_at"]) if row.get("created_at") else None,
        updated_at=parse_utc_datetime(row["updated_at"]) if row.get("updated_at") else None,
        nps_history=history,
    )


def _nps_to_row(record: NPSRecord) -> dict[str, Any]:
    return {
        "id": str(record.record_id),
        "client_id": str(record.client_id),
        "space_id": str(record.space_id),
        "score": record.score,
        "feedback": record.feedback,
        "recorded_at": to_iso_utc(record.recorded_at, name="recorded_at"),
        "created_by": uuid_to_str(record.created_by),
    }


def _row_to_nps(row: Mapping[str, Any]) -> NPSRecord:
    score = row.get("score")
    return NPSRecord(
        record_id=UUID(str(row["id"])),
        client_id=UUID(str(row["client_id"])),
        space_id=UUID(str(row["space_id"])),
        score=int(score) if score is not None else None,
        feedback=row.get("feedback"),
        recorded_at=parse_utc_datetime(row["recorded_at"]),
        created_by=optional_uuid(row.get("created_by")),
    )


class SupabaseClientRepository(ClientRepository):
    def __init__(self, supabase: SupabaseClient, notifier: ChangeNotifier) -> None:
        self._supabase = supabase
        self._notifier = notifier

    def _fetch_history(self, column: str, value: UUID) -> Dict[UUID, List[NPSRecord]]:
        response = (
            self._supabase.table(_NPS_TABLE)
            .select("*")
            .eq(column, str(value))
            .order("recorded_at")
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to fetch NPS records: {error}")

        history: Dict[UUID, List[NPSRecord]] = defaultdict(list)
        for row in getattr(response, "data", None) or []:
            record = _row_to_nps(row)
            history[record.client_id].append(record)
        return history

    def list_clients(self, space_id: UUID) -> List[Client]:
        response = (
            self._supabase.table(_CLIENTS_TABLE)
            .select("*")
            .eq("space_id", str(space_id))
            .order("name")
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to list clients: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            return []
        history = self._fetch_history("space_id", space_id)
        return [
            _row_to_client(row, tuple(history.get(UUID(str(row["id"])), ())))
            for row in rows
        ]

    def get_client(self, client_id: UUID) -> Optional[Client]:
        """
        Get a client by its ID, with NPS history attached.

        Returns:
            Client domain model or None if not found
        """
        response = (
            self._supabase.table(_CLIENTS_TABLE)
            .select("*")
            .eq("id", str(client_id))
            .limit(1)
            .execute()
        )

        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to fetch client: {error}")

        rows = getattr(response, "data", None) or []

        if not rows:
            return None

        history = self._fetch_history("client_id", client_id)
        return _row_to_client(rows[0], tuple(history.get(client_id, ())))

    def save_client(self, client: Client) -> Client:
        existed = self.get_client(client.client_id) is not None
        response = self._supabase.table(_CLIENTS_TABLE).upsert(_client_to_row(client)).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to save client: {error}")

        self._notifier.publish(
            ChangeEvent(
                EntityKind.CLIENT,
                ChangeAction.UPDATED if existed else ChangeAction.CREATED,
                client.client_id,
                client.space_id,
            )
        )
        saved = self.get_client(client.client_id)
        return saved if saved is not None else client

    def delete_client(self, client_id: UUID) -> None:
        response = self._supabase.table(_NPS_TABLE).delete().eq("client_id", str(client_id)).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to delete NPS records: {error}")

        response = self._supabase.table(_CLIENTS_TABLE).delete().eq("id", str(client_id)).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to delete client: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            raise NotFoundError(f"Client not found: {client_id}")
        self._notifier.publish(
            ChangeEvent(
                EntityKind.CLIENT,
                ChangeAction.DELETED,
                client_id,
                optional_uuid(rows[0].get("space_id")),
            )
        )

    def insert_nps_record(self, record: NPSRecord) -> NPSRecord:
        response = self._supabase.table(_NPS_TABLE).insert(_nps_to_row(record)).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to insert NPS record: {error}")

        self._notifier.publish(
            ChangeEvent(EntityKind.NPS_RECORD, ChangeAction.CREATED, record.record_id, record.space_id)
        )
        return record

    def delete_nps_record(self, record_id: UUID) -> None:
        response = self._supabase.table(_NPS_TABLE).delete().eq("id", str(record_id)).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to delete NPS record: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            raise NotFoundError(f"NPS record not found: {record_id}")
        self._notifier.publish(
            ChangeEvent(
                EntityKind.NPS_RECORD,
                ChangeAction.DELETED,
                record_id,
                optional_uuid(rows[0].get("space_id")),
            )
        )


__all__ = ["SupabaseClientRepository"]
