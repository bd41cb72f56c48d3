"""
Tests for `services/objective_service.py` on the in-memory backend.

Covers contract rules:
- Ledger mutations always return the recomputed, classified objective.
- For objectives that are not auto-linked, current_value equals the ledger sum.
- Auto-linked objectives are resolved from the space's leads/clients on read.
- Paused survives edits that do not touch the classifier inputs.
- Space recomputation is idempotent and skips paused objectives.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from domain.client import ClientStatus
from domain.lead import LeadStatus
from domain.objective import ObjectiveStatus, ObjectiveUnit
from domain.objective_status import classify
from domain.time import month_anchor
from repositories.errors import NotFoundError

# Same instant and spaces as the fixtures in conftest.py
FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
SPACE_ID = UUID("00000000-0000-0000-0000-0000000000a1")
OTHER_SPACE_ID = UUID("00000000-0000-0000-0000-0000000000b2")

END = date(2025, 12, 31)


@pytest.fixture
def objective(services):
    return services.objectives.create_objective(
        SPACE_ID, "Novos contratos", unit=ObjectiveUnit.COUNT, target_value=Decimal("10"), end_date=END
    )


def test_create_starts_at_zero_and_classifies(services, objective) -> None:
    assert objective.current_value == Decimal("0")
    assert objective.status == classify(Decimal("0"), Decimal("10"), END, FIXED_NOW)
    assert objective.created_at == FIXED_NOW


def test_create_rejects_blank_title(services) -> None:
    with pytest.raises(ValueError):
        services.objectives.create_objective(SPACE_ID, "   ")


def test_add_then_remove_entry_recomputes(services, objective) -> None:
    """Verify entries {2,2} + 2 give 6, and removing one 2 gives 4 with a fresh status."""

    svc = services.objectives
    svc.add_entry(objective.objective_id, Decimal("2"))
    svc.add_entry(objective.objective_id, Decimal("2"))
    result = svc.add_entry(objective.objective_id, Decimal("2"), notes="Terceiro contrato")

    assert result.objective.current_value == Decimal("6")
    assert result.entry.value == Decimal("2")
    assert result.entry.notes == "Terceiro contrato"
    assert len(result.objective.progress_entries) == 3

    updated = svc.remove_entry(objective.objective_id, result.entry.entry_id)

    assert updated.current_value == Decimal("4")
    assert updated.status == classify(Decimal("4"), Decimal("10"), END, FIXED_NOW)
    assert len(updated.progress_entries) == 2
    assert svc.get_objective(objective.objective_id).current_value == Decimal("4")


def test_reaching_target_completes(services, objective) -> None:
    result = services.objectives.add_entry(objective.objective_id, Decimal("10"))

    assert result.objective.status == ObjectiveStatus.CONCLUIDO


def test_current_value_always_equals_ledger_sum(services, objective) -> None:
    svc = services.objectives
    values = ["1.5", "-0.5", "3", "0.25"]
    for value in values:
        latest = svc.add_entry(objective.objective_id, Decimal(value)).objective
        entries = latest.progress_entries
        assert latest.current_value == sum((e.value for e in entries), Decimal("0"))

    assert latest.current_value == Decimal("4.25")


def test_backdated_entry_and_ledger_order(services, objective) -> None:
    svc = services.objectives
    march = svc.add_entry(objective.objective_id, Decimal("1"), logged_at=month_anchor(2025, 3)).entry
    now_entry = svc.add_entry(objective.objective_id, Decimal("1")).entry

    loaded = svc.get_objective(objective.objective_id)

    assert march.logged_at == datetime(2025, 3, 1, 12, tzinfo=timezone.utc)
    assert now_entry.logged_at == FIXED_NOW
    assert [e.entry_id for e in loaded.progress_entries] == [now_entry.entry_id, march.entry_id]


def test_add_entry_rejects_non_finite_and_naive(services, objective) -> None:
    with pytest.raises(ValueError):
        services.objectives.add_entry(objective.objective_id, Decimal("NaN"))
    with pytest.raises(ValueError):
        services.objectives.add_entry(objective.objective_id, Decimal("1"), logged_at=datetime(2025, 3, 1))


def test_ledger_operations_on_missing_objective(services, objective) -> None:
    with pytest.raises(NotFoundError):
        services.objectives.add_entry(uuid4(), Decimal("1"))
    with pytest.raises(NotFoundError):
        services.objectives.remove_entry(objective.objective_id, uuid4())


def test_remove_entry_of_another_objective_is_not_found(services, objective) -> None:
    other = services.objectives.create_objective(SPACE_ID, "Outro", target_value=Decimal("5"))
    entry = services.objectives.add_entry(other.objective_id, Decimal("1")).entry

    with pytest.raises(NotFoundError):
        services.objectives.remove_entry(objective.objective_id, entry.entry_id)


def test_monthly_progress(services, objective) -> None:
    svc = services.objectives
    svc.add_entry(objective.objective_id, Decimal("2"), logged_at=month_anchor(2025, 3))
    svc.add_entry(objective.objective_id, Decimal("1"), logged_at=month_anchor(2025, 3))
    svc.add_entry(objective.objective_id, Decimal("4"), logged_at=month_anchor(2024, 3))

    months = svc.monthly_progress(objective.objective_id, 2025)

    assert months[2].total == Decimal("3")
    assert months[2].entry_count == 2
    assert sum(m.entry_count for m in months) == 2


def test_paused_survives_unrelated_edits(services, objective) -> None:
    svc = services.objectives
    paused = svc.update_objective(objective.objective_id, {"status": ObjectiveStatus.PAUSADO})
    assert paused.status == ObjectiveStatus.PAUSADO

    renamed = svc.update_objective(objective.objective_id, {"title": "Contratos novos"})
    assert renamed.status == ObjectiveStatus.PAUSADO
    assert renamed.title == "Contratos novos"

    retargeted = svc.update_objective(objective.objective_id, {"target_value": Decimal("20")})
    assert retargeted.status == classify(Decimal("0"), Decimal("20"), END, FIXED_NOW)
    assert retargeted.status != ObjectiveStatus.PAUSADO


def test_update_rejects_unknown_and_cleared_fields(services, objective) -> None:
    with pytest.raises(ValueError):
        services.objectives.update_objective(objective.objective_id, {"space_id": OTHER_SPACE_ID})
    with pytest.raises(ValueError):
        services.objectives.update_objective(objective.objective_id, {"unit": None})


def test_delete_objective_removes_it(services, objective) -> None:
    services.objectives.add_entry(objective.objective_id, Decimal("1"))
    services.objectives.delete_objective(objective.objective_id)

    with pytest.raises(NotFoundError):
        services.objectives.get_objective(objective.objective_id)
    assert services.objectives.list_objectives(SPACE_ID) == []


def test_auto_linked_objective_follows_won_leads(services) -> None:
    pipeline = services.pipeline
    pipeline.create_lead(SPACE_ID, "Ana", status=LeadStatus.GANHO, value=Decimal("4000"))
    pipeline.create_lead(SPACE_ID, "Bia", status=LeadStatus.PROPOSTA, value=Decimal("2500"))
    pipeline.create_lead(OTHER_SPACE_ID, "Caio", status=LeadStatus.GANHO, value=Decimal("9000"))

    objective = services.objectives.create_objective(
        SPACE_ID,
        "Faturamento",
        unit=ObjectiveUnit.CURRENCY,
        target_value=Decimal("10000"),
        end_date=END,
        is_commercial=True,
        value_type="crm_won",
    )
    assert objective.is_auto_linked
    assert objective.current_value == Decimal("4000")

    pipeline.create_lead(SPACE_ID, "Duda", status=LeadStatus.GANHO, value=Decimal("6000"))

    loaded = services.objectives.get_objective(objective.objective_id)
    assert loaded.current_value == Decimal("10000")
    assert loaded.status == ObjectiveStatus.CONCLUIDO


def test_ledger_entry_on_auto_linked_objective_keeps_auto_value(services) -> None:
    client = services.clients.create_client(SPACE_ID, "Acme", monthly_value=Decimal("1500"))
    services.clients.create_client(SPACE_ID, "Globex", status=ClientStatus.CHURN, monthly_value=Decimal("900"))

    objective = services.objectives.create_objective(
        SPACE_ID,
        "Clientes ativos",
        target_value=Decimal("5"),
        end_date=END,
        is_commercial=True,
        value_type="clients_count",
    )
    result = services.objectives.add_entry(objective.objective_id, Decimal("3"), notes="Ajuste manual")

    assert client.is_active()
    assert result.objective.current_value == Decimal("1")
    assert [e.value for e in result.objective.progress_entries] == [Decimal("3")]


def test_commercial_objective_without_source_uses_ledger(services) -> None:
    objective = services.objectives.create_objective(
        SPACE_ID, "Meta comercial", target_value=Decimal("10"), is_commercial=True, value_type="none"
    )
    result = services.objectives.add_entry(objective.objective_id, Decimal("2"))

    assert not objective.is_auto_linked
    assert result.objective.current_value == Decimal("2")


@pytest.mark.parametrize(
    "changes",
    [
        {"is_commercial": False},
        {"value_type": "none"},
        {"value_type": "origem_desconhecida"},
    ],
)
def test_unlinking_auto_metric_falls_back_to_ledger(services, repos, changes) -> None:
    services.pipeline.create_lead(SPACE_ID, "Ana", status=LeadStatus.GANHO, value=Decimal("5000"))
    objective = services.objectives.create_objective(
        SPACE_ID,
        "Faturamento",
        unit=ObjectiveUnit.CURRENCY,
        target_value=Decimal("10000"),
        end_date=END,
        is_commercial=True,
        value_type="crm_won",
    )
    services.objectives.add_entry(objective.objective_id, Decimal("1"))

    updated = services.objectives.update_objective(objective.objective_id, changes)
    stored = repos.objectives.get_objective(objective.objective_id)

    assert not updated.is_auto_linked
    assert updated.current_value == Decimal("1")
    assert stored.current_value == Decimal("1")
    assert updated.status == classify(Decimal("1"), Decimal("10000"), END, FIXED_NOW)


def test_linking_auto_metric_takes_auto_value(services, repos, objective) -> None:
    services.pipeline.create_lead(SPACE_ID, "Ana", status=LeadStatus.GANHO, value=Decimal("7"))
    services.objectives.add_entry(objective.objective_id, Decimal("2"))

    updated = services.objectives.update_objective(
        objective.objective_id, {"is_commercial": True, "value_type": "crm_won"}
    )

    assert updated.current_value == Decimal("7")
    assert repos.objectives.get_objective(objective.objective_id).current_value == Decimal("7")


def test_objective_stats(services, objective) -> None:
    svc = services.objectives
    svc.add_entry(objective.objective_id, Decimal("5"))
    done = svc.create_objective(SPACE_ID, "Feito", target_value=Decimal("1"), end_date=END)
    svc.add_entry(done.objective_id, Decimal("1"))
    late = svc.create_objective(SPACE_ID, "Atrasado", target_value=Decimal("10"), end_date=date(2025, 3, 31))
    paused = svc.create_objective(SPACE_ID, "Pausado", target_value=Decimal("10"))
    svc.update_objective(paused.objective_id, {"status": ObjectiveStatus.PAUSADO})
    svc.create_objective(OTHER_SPACE_ID, "Outro espaço", target_value=Decimal("10"))

    stats = svc.objective_stats(SPACE_ID)

    assert late.status == ObjectiveStatus.ATRASADO
    assert stats.total == 4
    assert stats.concluido == 1
    assert stats.atrasado == 1
    assert stats.pausado == 1
    assert stats.em_andamento == 1


def test_recompute_space_repairs_stale_values(services, repos, objective) -> None:
    svc = services.objectives
    svc.add_entry(objective.objective_id, Decimal("3"))
    stored = repos.objectives.get_objective(objective.objective_id)
    repos.objectives.save_objective(replace(stored, current_value=Decimal("99"), status=ObjectiveStatus.CONCLUIDO))

    outcomes = svc.recompute_space(SPACE_ID)

    assert len(outcomes) == 1
    assert outcomes[0].changed
    assert outcomes[0].previous_value == Decimal("99")
    assert outcomes[0].current_value == Decimal("3")
    assert repos.objectives.get_objective(objective.objective_id).current_value == Decimal("3")

    again = svc.recompute_space(SPACE_ID)
    assert not any(outcome.changed for outcome in again)


def test_recompute_space_dry_run_and_paused(services, repos, objective) -> None:
    svc = services.objectives
    stored = repos.objectives.get_objective(objective.objective_id)
    repos.objectives.save_objective(replace(stored, current_value=Decimal("7")))
    paused = svc.create_objective(SPACE_ID, "Pausado", target_value=Decimal("10"))
    svc.update_objective(paused.objective_id, {"status": ObjectiveStatus.PAUSADO})

    outcomes = svc.recompute_space(SPACE_ID, persist=False)

    assert [o.objective_id for o in outcomes] == [objective.objective_id]
    assert outcomes[0].current_value == Decimal("0")
    assert repos.objectives.get_objective(objective.objective_id).current_value == Decimal("7")
