"""
Objective service: strategic objectives and their progress ledger.

Handles:
- Objective lifecycle (create, update, delete)
- Progress ledger mutations, each followed by recomputation of the objective's
  current value and status
- Read-time resolution of auto-linked (commercial) objectives from the space's
  leads and clients
- Space level statistics and the monthly progress grid

Recomputation is part of every ledger mutation: `add_entry` and `remove_entry`
persist the new current_value/status together with the ledger change and
return the freshly classified objective.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import UUID, uuid4

from domain.auto_metric import needs_clients, needs_leads, resolve_auto_value
from domain.client import Client
from domain.lead import Lead
from domain.ledger import MonthTotal, ledger_total, monthly_totals, newest_first
from domain.objective import (
    AutoMetricSource,
    Objective,
    ObjectiveStatus,
    ObjectiveUnit,
    ProgressEntry,
)
from domain.objective_status import classify
from domain.time import require_utc_timestamp, utc_now
from repositories.errors import NotFoundError
from repositories.ports import ClientRepository, LeadRepository, ObjectiveRepository

logger = logging.getLogger(__name__)

# Fields a caller may change through update_objective().
UPDATABLE_FIELDS = frozenset({
    "title",
    "description",
    "category",
    "unit",
    "target_value",
    "current_value",
    "start_date",
    "end_date",
    "status",
    "is_commercial",
    "value_type",
})

# Changing any of these re-runs the classifier.
_CLASSIFIER_INPUTS = frozenset({"current_value", "target_value", "end_date", "is_commercial", "value_type"})

# Changing any of these re-derives current_value from the auto source or the ledger.
_LINK_INPUTS = frozenset({"is_commercial", "value_type"})


@dataclass(frozen=True, slots=True)
class LedgerResult:
    """Outcome of adding a progress entry: the entry and the recomputed objective."""

    entry: ProgressEntry
    objective: Objective


@dataclass(frozen=True, slots=True)
class ObjectiveStats:
    total: int
    em_andamento: int
    concluido: int
    atrasado: int
    pausado: int


@dataclass(frozen=True, slots=True)
class RecomputeOutcome:
    objective_id: UUID
    title: str
    previous_value: Decimal
    current_value: Decimal
    previous_status: ObjectiveStatus
    status: ObjectiveStatus

    @property
    def changed(self) -> bool:
        return (
            self.previous_value != self.current_value
            or self.previous_status != self.status
        )


class _SpaceSnapshot:
    """Leads/clients of one space, fetched lazily and at most once per operation."""

    def __init__(self, space_id: UUID, leads: LeadRepository, clients: ClientRepository) -> None:
        self.space_id = space_id
        self._lead_repo = leads
        self._client_repo = clients
        self._leads: Optional[List[Lead]] = None
        self._clients: Optional[List[Client]] = None

    def auto_value(self, source: AutoMetricSource) -> Decimal:
        leads: List[Lead] = []
        clients: List[Client] = []
        if needs_leads(source):
            if self._leads is None:
                self._leads = self._lead_repo.list_leads(self.space_id)
            leads = self._leads
        if needs_clients(source):
            if self._clients is None:
                self._clients = self._client_repo.list_clients(self.space_id)
            clients = self._clients
        return resolve_auto_value(source, self.space_id, leads, clients)


class ObjectiveService:
    def __init__(
        self,
        objectives: ObjectiveRepository,
        leads: LeadRepository,
        clients: ClientRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._objectives = objectives
        self._leads = leads
        self._clients = clients
        self._clock = clock

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _snapshot(self, space_id: UUID) -> _SpaceSnapshot:
        return _SpaceSnapshot(space_id, self._leads, self._clients)

    def _load(self, objective_id: UUID) -> Objective:
        objective = self._objectives.get_objective(objective_id)
        if objective is None:
            raise NotFoundError(f"Objective not found: {objective_id}")
        return objective

    def _classified(self, objective: Objective, current_value: Decimal, now: datetime) -> Objective:
        status = classify(current_value, objective.target_value, objective.end_date, now)
        return replace(objective, current_value=current_value, status=status)

    def _resolve(self, objective: Objective, snapshot: _SpaceSnapshot, now: datetime) -> Objective:
        """Auto-linked objectives get a fresh value and status; others are returned unchanged."""

        if not objective.is_auto_linked:
            return objective
        value = snapshot.auto_value(objective.auto_metric_source)
        return self._classified(objective, value, now)

    def _with_entries(self, objective: Objective) -> Objective:
        entries = self._objectives.list_progress_entries(objective.objective_id)
        return replace(objective, progress_entries=newest_first(entries))

    def _persist_recomputed(self, objective: Objective, now: datetime) -> Objective:
        """Recompute from the ledger (or auto source) and persist value and status."""

        if objective.is_auto_linked:
            return self._resolve(objective, self._snapshot(objective.space_id), now)

        entries = self._objectives.list_progress_entries(objective.objective_id)
        recomputed = self._classified(objective, ledger_total(entries), now)
        saved = self._objectives.save_objective(replace(recomputed, updated_at=now))
        return replace(saved, progress_entries=newest_first(entries))

    # ------------------------------------------------------------------
    # Objectives
    # ------------------------------------------------------------------

    def create_objective(
        self,
        space_id: UUID,
        title: str,
        *,
        unit: ObjectiveUnit = ObjectiveUnit.COUNT,
        target_value: Optional[Decimal] = None,
        description: Optional[str] = None,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_commercial: bool = False,
        value_type: Optional[str] = None,
        created_by: Optional[UUID] = None,
    ) -> Objective:
        """
        Create an objective with its initial value and status.

        The initial value is the resolved auto-metric for auto-linked
        objectives and 0 otherwise.
        """

        if not title or not title.strip():
            raise ValueError("title must not be empty")

        now = self._clock()
        objective = Objective(
            objective_id=uuid4(),
            space_id=space_id,
            title=title.strip(),
            unit=unit,
            target_value=target_value,
            description=description,
            category=category,
            start_date=start_date,
            end_date=end_date,
            is_commercial=is_commercial,
            value_type=value_type,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        initial = Decimal("0")
        if objective.is_auto_linked:
            initial = self._snapshot(space_id).auto_value(objective.auto_metric_source)
        objective = self._classified(objective, initial, now)

        saved = self._objectives.save_objective(objective)
        logger.info(
            "Created objective %s in space %s (value=%s, status=%s)",
            saved.objective_id,
            space_id,
            saved.current_value,
            saved.status.value,
        )
        return saved

    def get_objective(self, objective_id: UUID) -> Objective:
        """Load an objective with its ledger; auto-linked values are resolved at read time."""

        objective = self._load(objective_id)
        resolved = self._resolve(objective, self._snapshot(objective.space_id), self._clock())
        return self._with_entries(resolved)

    def list_objectives(self, space_id: UUID) -> List[Objective]:
        now = self._clock()
        snapshot = self._snapshot(space_id)
        return [
            self._with_entries(self._resolve(objective, snapshot, now))
            for objective in self._objectives.list_objectives(space_id)
        ]

    def update_objective(self, objective_id: UUID, changes: Mapping[str, Any]) -> Objective:
        """
        Apply a partial update.

        The status is re-classified only when current_value, target_value,
        end_date or the auto-link settings change; other edits keep the stored
        status, so an explicitly paused objective stays paused. Changing
        is_commercial or value_type re-derives current_value from the auto
        source, or from the ledger once the objective is no longer auto-linked.
        """

        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown objective fields: {', '.join(sorted(unknown))}")
        if "title" in changes and not str(changes["title"] or "").strip():
            raise ValueError("title must not be empty")
        for required in ("unit", "status", "current_value", "is_commercial"):
            if required in changes and changes[required] is None:
                raise ValueError(f"{required} cannot be cleared")

        now = self._clock()
        objective = self._load(objective_id)
        updated = replace(objective, **dict(changes), updated_at=now)
        if _LINK_INPUTS & set(changes) and "current_value" not in changes:
            if updated.is_auto_linked:
                value = self._snapshot(updated.space_id).auto_value(updated.auto_metric_source)
            else:
                value = ledger_total(self._objectives.list_progress_entries(objective_id))
            updated = replace(updated, current_value=value)
        if _CLASSIFIER_INPUTS & set(changes):
            updated = replace(
                updated,
                status=classify(updated.current_value, updated.target_value, updated.end_date, now),
            )

        saved = self._objectives.save_objective(updated)
        logger.info("Updated objective %s (%s)", objective_id, ", ".join(sorted(changes)))
        resolved = self._resolve(saved, self._snapshot(saved.space_id), now)
        return self._with_entries(resolved)

    def delete_objective(self, objective_id: UUID) -> None:
        self._objectives.delete_objective(objective_id)
        logger.info("Deleted objective %s", objective_id)

    # ------------------------------------------------------------------
    # Progress ledger
    # ------------------------------------------------------------------

    def add_entry(
        self,
        objective_id: UUID,
        value: Decimal,
        notes: Optional[str] = None,
        logged_at: Optional[datetime] = None,
        created_by: Optional[UUID] = None,
    ) -> LedgerResult:
        """
        Append a progress entry and recompute the objective.

        For auto-linked objectives the entry is stored as an annotation and the
        returned objective carries the resolved auto value instead.
        """

        if not value.is_finite():
            raise ValueError("value must be a finite number")
        if logged_at is not None:
            require_utc_timestamp("logged_at", logged_at)

        now = self._clock()
        objective = self._load(objective_id)
        entry = self._objectives.insert_progress_entry(
            ProgressEntry(
                entry_id=uuid4(),
                objective_id=objective_id,
                value=value,
                notes=notes or None,
                logged_at=logged_at or now,
                created_by=created_by,
                created_at=now,
            )
        )
        recomputed = self._persist_recomputed(objective, now)
        if objective.is_auto_linked:
            recomputed = self._with_entries(recomputed)

        logger.info(
            "Logged %s on objective %s (value=%s, status=%s)",
            value,
            objective_id,
            recomputed.current_value,
            recomputed.status.value,
        )
        return LedgerResult(entry=entry, objective=recomputed)

    def remove_entry(self, objective_id: UUID, entry_id: UUID) -> Objective:
        """Delete a progress entry of the objective and return the recomputed objective."""

        now = self._clock()
        objective = self._load(objective_id)
        entries = self._objectives.list_progress_entries(objective_id)
        if not any(entry.entry_id == entry_id for entry in entries):
            raise NotFoundError(f"Progress entry {entry_id} not found on objective {objective_id}")

        self._objectives.delete_progress_entry(entry_id)
        recomputed = self._persist_recomputed(objective, now)
        if objective.is_auto_linked:
            recomputed = self._with_entries(recomputed)

        logger.info(
            "Removed entry %s from objective %s (value=%s, status=%s)",
            entry_id,
            objective_id,
            recomputed.current_value,
            recomputed.status.value,
        )
        return recomputed

    def monthly_progress(self, objective_id: UUID, year: int) -> List[MonthTotal]:
        self._load(objective_id)
        return monthly_totals(self._objectives.list_progress_entries(objective_id), year)

    # ------------------------------------------------------------------
    # Space level
    # ------------------------------------------------------------------

    def objective_stats(self, space_id: UUID) -> ObjectiveStats:
        objectives = self.list_objectives(space_id)
        counts: Dict[ObjectiveStatus, int] = {status: 0 for status in ObjectiveStatus}
        for objective in objectives:
            counts[objective.status] += 1
        return ObjectiveStats(
            total=len(objectives),
            em_andamento=counts[ObjectiveStatus.EM_ANDAMENTO],
            concluido=counts[ObjectiveStatus.CONCLUIDO],
            atrasado=counts[ObjectiveStatus.ATRASADO],
            pausado=counts[ObjectiveStatus.PAUSADO],
        )

    def recompute_space(self, space_id: UUID, *, persist: bool = True) -> List[RecomputeOutcome]:
        """
        Recompute value and status of every objective of a space.

        Paused objectives are skipped: their status is only changed explicitly.
        With persist=False nothing is written (dry run).
        """

        now = self._clock()
        snapshot = self._snapshot(space_id)
        outcomes: List[RecomputeOutcome] = []
        for objective in self._objectives.list_objectives(space_id):
            if objective.status == ObjectiveStatus.PAUSADO:
                continue
            if objective.is_auto_linked:
                value = snapshot.auto_value(objective.auto_metric_source)
            else:
                value = ledger_total(self._objectives.list_progress_entries(objective.objective_id))
            recomputed = self._classified(objective, value, now)

            outcome = RecomputeOutcome(
                objective_id=objective.objective_id,
                title=objective.title,
                previous_value=objective.current_value,
                current_value=recomputed.current_value,
                previous_status=objective.status,
                status=recomputed.status,
            )
            if persist and outcome.changed:
                self._objectives.save_objective(replace(recomputed, updated_at=now))
            outcomes.append(outcome)

        changed = sum(1 for outcome in outcomes if outcome.changed)
        logger.info(
            "Recomputed %d objectives in space %s (%d changed%s)",
            len(outcomes),
            space_id,
            changed,
            "" if persist else ", dry run",
        )
        return outcomes


__all__ = [
    "LedgerResult",
    "ObjectiveService",
    "ObjectiveStats",
    "RecomputeOutcome",
]
