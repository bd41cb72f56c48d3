"""
Objective repository (Supabase persistence).

Persists objectives (`objectives`) and their progress ledger (`progress_logs`).
It does not compute values or statuses; it only stores what the objective
service hands over.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID

from supabase import Client  # type: ignore[import-not-found]

from domain.numbers import decimal_or_zero, decimal_to_json, optional_decimal
from domain.objective import Objective, ObjectiveStatus, ObjectiveUnit, ProgressEntry
from domain.time import parse_optional_date, parse_utc_datetime, to_iso_utc
from repositories.errors import NotFoundError
from repositories.events import ChangeAction, ChangeEvent, ChangeNotifier, EntityKind
from repositories.ports import ObjectiveRepository
from repositories.rows import optional_uuid, uuid_to_str

_OBJECTIVES_TABLE: str = "objectives"
_PROGRESS_TABLE: str = "progress_logs"


def _objective_to_row(objective: Objective) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": str(objective.objective_id),
        "space_id": str(objective.space_id),
        "title": objective.title,
        "description": objective.description,
        "category": objective.category,
        "unit": objective.unit.value,
        "target_value": decimal_to_json(objective.target_value),
        "current_value": decimal_to_json(objective.current_value),
        "status": objective.status.value,
        "start_date": objective.start_date.isoformat() if objective.start_date else None,
        "end_date": objective.end_date.isoformat() if objective.end_date else None,
        "is_commercial": objective.is_commercial,
        "value_type": objective.value_type,
        "created_by": uuid_to_str(objective.created_by),
    }
    if objective.created_at is not None:
        row["created_at"] = to_iso_utc(objective.created_at, name="created_at")
    if objective.updated_at is not None:
        row["updated_at"] = to_iso_utc(objective.updated_at, name="updated_at")
    return row


def _row_to_objective(row: Mapping[str, Any]) -> Objective:
    return Objective(
        objective_id=UUID(str(row["id"])),
        space_id=UUID(str(row["space_id"])),
        title=str(row["title"]),
        description=row.get("description"),
        category=row.get("category"),
        unit=ObjectiveUnit(str(row.get("unit") or ObjectiveUnit.COUNT.value)),
        target_value=optional_decimal(row.get("target_value")),
        current_value=decimal_or_zero(row.get("current_value")),
        status=ObjectiveStatus(str(row.get("status") or ObjectiveStatus.EM_ANDAMENTO.value)),
        start_date=parse_optional_date(row.get("start_date")),
        end_date=parse_optional_date(row.get("end_date")),
        is_commercial=bool(row.get("is_commercial", False)),
        value_type=row.get("value_type"),
        created_by=optional_uuid(row.get("created_by")),
        created_at=parse_utc_datetime(row["created_at"]) if row.get("created_at") else None,
        updated_at=parse_utc_datetime(row["updated_at"]) if row.get("updated_at") else None,
    )


def _entry_to_row(entry: ProgressEntry) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": str(entry.entry_id),
        "objective_id": str(entry.objective_id),
        "value": decimal_to_json(entry.value),
        "notes": entry.notes,
        "logged_at": to_iso_utc(entry.logged_at, name="logged_at"),
        "created_by": uuid_to_str(entry.created_by),
    }
    if entry.created_at is not None:
        row["created_at"] = to_iso_utc(entry.created_at, name="created_at")
    return row


def _row_to_entry(row: Mapping[str, Any]) -> ProgressEntry:
    return ProgressEntry(
        entry_id=UUID(str(row["id"])),
        objective_id=UUID(str(row["objective_id"])),
        value=decimal_or_zero(row.get("value")),
        notes=row.get("notes"),
        logged_at=parse_utc_datetime(row["logged_at"]),
        created_by=optional_uuid(row.get("created_by")),
        created_at=parse_utc_datetime(row["created_at"]) if row.get("created_at") else None,
    )


class SupabaseObjectiveRepository(ObjectiveRepository):
    def __init__(self, supabase: Client, notifier: ChangeNotifier) -> None:
        self._supabase = supabase
        self._notifier = notifier

    def list_objectives(self, space_id: UUID) -> List[Objective]:
        response = (
            self._supabase.table(_OBJECTIVES_TABLE)
            .select("*")
            .eq("space_id", str(space_id))
            .order("created_at")
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to list objectives: {error}")

        rows = getattr(response, "data", None) or []
        return [_row_to_objective(row) for row in rows]

    def get_objective(self, objective_id: UUID) -> Optional[Objective]:
        response = (
            self._supabase.table(_OBJECTIVES_TABLE)
            .select("*")
            .eq("id", str(objective_id))
            .limit(1)
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to fetch objective: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            return None
        return _row_to_objective(rows[0])

    def save_objective(self, objective: Objective) -> Objective:
        existed = self.get_objective(objective.objective_id) is not None
        response = (
            self._supabase.table(_OBJECTIVES_TABLE)
            .upsert(_objective_to_row(objective))
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to save objective: {error}")

        rows = getattr(response, "data", None) or []
        saved = _row_to_objective(rows[0]) if rows else objective
        self._notifier.publish(
            ChangeEvent(
                EntityKind.OBJECTIVE,
                ChangeAction.UPDATED if existed else ChangeAction.CREATED,
                saved.objective_id,
                saved.space_id,
            )
        )
        return saved

    def delete_objective(self, objective_id: UUID) -> None:
        response = (
            self._supabase.table(_PROGRESS_TABLE)
            .delete()
            .eq("objective_id", str(objective_id))
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to delete progress logs: {error}")

        response = (
            self._supabase.table(_OBJECTIVES_TABLE)
            .delete()
            .eq("id", str(objective_id))
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to delete objective: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            raise NotFoundError(f"Objective not found: {objective_id}")
        self._notifier.publish(
            ChangeEvent(
                EntityKind.OBJECTIVE,
                ChangeAction.DELETED,
                objective_id,
                optional_uuid(rows[0].get("space_id")),
            )
        )

    def list_progress_entries(self, objective_id: UUID) -> List[ProgressEntry]:
        response = (
            self._supabase.table(_PROGRESS_TABLE)
            .select("*")
            .eq("objective_id", str(objective_id))
            .order("logged_at")
            .order("created_at")
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to list progress logs: {error}")

        rows = getattr(response, "data", None) or []
        return [_row_to_entry(row) for row in rows]

    def insert_progress_entry(self, entry: ProgressEntry) -> ProgressEntry:
        response = self._supabase.table(_PROGRESS_TABLE).insert(_entry_to_row(entry)).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to insert progress log: {error}")

        self._notifier.publish(
            ChangeEvent(EntityKind.PROGRESS_ENTRY, ChangeAction.CREATED, entry.entry_id)
        )
        return entry

    def delete_progress_entry(self, entry_id: UUID) -> None:
        response = self._supabase.table(_PROGRESS_TABLE).delete().eq("id", str(entry_id)).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to delete progress log: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            raise NotFoundError(f"Progress entry not found: {entry_id}")
        self._notifier.publish(
            ChangeEvent(EntityKind.PROGRESS_ENTRY, ChangeAction.DELETED, entry_id)
        )


__all__ = ["SupabaseObjectiveRepository"]
