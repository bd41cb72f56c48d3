"""
Lead repository (Supabase persistence).

This module provides *only* persistence operations for the Lead domain entity.
No business rules (pipeline statistics, status transitions) belong here.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID

from supabase import Client  # type: ignore[import-not-found]

from domain.lead import Lead, LeadStatus, LeadTemperature
from domain.numbers import decimal_to_json, optional_decimal
from domain.time import parse_utc_datetime, to_iso_utc
from repositories.errors import NotFoundError
from repositories.events import ChangeAction, ChangeEvent, ChangeNotifier, EntityKind
from repositories.ports import LeadRepository
from repositories.rows import optional_uuid, uuid_to_str

# Supabase table name for Lead records.
# Keep this aligned with your database schema.
_LEADS_TABLE: str = "leads"


def _lead_to_row(lead: Lead) -> dict[str, Any]:
    """Convert a domain Lead to a Supabase row payload."""

    row: dict[str, Any] = {
        "id": str(lead.lead_id),
        "space_id": str(lead.space_id),
        "name": lead.name,
        "status": lead.status.value,
        "value": decimal_to_json(lead.value),
        "temperature": lead.temperature.value,

        # Contact information
        "company": lead.company,
        "email": lead.email,
        "phone": lead.phone,

        "source": lead.source,
        "notes": lead.notes,
        "created_by": uuid_to_str(lead.created_by),
    }
    if lead.created_at is not None:
        row["created_at"] = to_iso_utc(lead.created_at, name="created_at")
    if lead.updated_at is not None:
        row["updated_at"] = to_iso_utc(lead.updated_at, name="updated_at")
    return row


def _row_to_lead(row: Mapping[str, Any]) -> Lead:
    """Convert a Supabase row into a domain Lead."""

    return Lead(
        lead_id=UUID(str(row["id"])),
        space_id=UUID(str(row["space_id"])),
        name=str(row["name"]),
        status=LeadStatus.parse(str(row.get("status") or LeadStatus.NOVO.value)),
        value=optional_decimal(row.get("value")),
        temperature=LeadTemperature(str(row.get("temperature") or LeadTemperature.COLD.value)),
        company=row.get("company"),
        email=row.get("email"),
        phone=row.get("phone"),
        source=row.get("source"),
        notes=row.get("notes"),
        created_by=optional_uuid(row.get("created_by")),
        created_at=parse_utc_datetime(row["created_at"]) if row.get("created_at") else None,
        updated_at=parse_utc_datetime(row["updated_at"]) if row.get("updated_at") else None,
    )


class SupabaseLeadRepository(LeadRepository):
    def __init__(self, supabase: Client, notifier: ChangeNotifier) -> None:
        self._supabase = supabase
        self._notifier = notifier

    def list_leads(self, space_id: UUID, status: Optional[LeadStatus] = None) -> List[Lead]:
        """
        List the Leads of a space, optionally filtered by status.

        Raises:
        - RuntimeError if Supabase returns an error response.
        """

        query = self._supabase.table(_LEADS_TABLE).select("*").eq("space_id", str(space_id))
        if status is not None:
            query = query.eq("status", status.value)

        response = query.order("created_at", desc=True).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to list leads: {error}")

        rows = getattr(response, "data", None) or []
        return [_row_to_lead(row) for row in rows]

    def get_lead(self, lead_id: UUID) -> Optional[Lead]:
        """
        Fetch a Lead by ID.

        Returns:
        - Lead if found
        - None if no record exists for the given ID
        """

        response = (
            self._supabase.table(_LEADS_TABLE)
            .select("*")
            .eq("id", str(lead_id))
            .limit(1)
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to fetch lead: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            return None
        return _row_to_lead(rows[0])

    def save_lead(self, lead: Lead) -> Lead:
        existed = self.get_lead(lead.lead_id) is not None
        response = self._supabase.table(_LEADS_TABLE).upsert(_lead_to_row(lead)).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to save lead: {error}")

        rows = getattr(response, "data", None) or []
        saved = _row_to_lead(rows[0]) if rows else lead
        self._notifier.publish(
            ChangeEvent(
                EntityKind.LEAD,
                ChangeAction.UPDATED if existed else ChangeAction.CREATED,
                saved.lead_id,
                saved.space_id,
            )
        )
        return saved

    def delete_lead(self, lead_id: UUID) -> None:
        response = self._supabase.table(_LEADS_TABLE).delete().eq("id", str(lead_id)).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to delete lead: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            raise NotFoundError(f"Lead not found: {lead_id}")
        self._notifier.publish(
            ChangeEvent(
                EntityKind.LEAD,
                ChangeAction.DELETED,
                lead_id,
                optional_uuid(rows[0].get("space_id")),
            )
        )


__all__ = ["SupabaseLeadRepository"]
