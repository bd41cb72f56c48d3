"""
Database validation tests.

This module tests the Supabase connection and verifies that:
1. Connection credentials work
2. Required tables exist
3. Basic CRUD operations work through the repositories

They run only when SUPABASE_URL and SUPABASE_KEY are configured (environment
or `.env`); otherwise the whole module is skipped.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from repositories.settings import BACKEND_SUPABASE, Settings, load_settings

settings = load_settings()

pytestmark = pytest.mark.skipif(
    not (settings.supabase_url and settings.supabase_key),
    reason="SUPABASE_URL / SUPABASE_KEY not configured",
)

REQUIRED_TABLES = ["leads", "clients", "nps_records", "objectives", "progress_logs"]


@pytest.fixture(scope="module")
def supabase():
    from repositories.client import create_supabase_client

    return create_supabase_client(settings)


def test_supabase_url_looks_valid() -> None:
    assert settings.supabase_url.startswith("https://"), "SUPABASE_URL should start with https://"


@pytest.mark.parametrize("table", REQUIRED_TABLES)
def test_required_table_exists(supabase, table) -> None:
    """Verify each table exists and can be queried."""

    try:
        supabase.table(table).select("*").limit(0).execute()
    except Exception as e:
        pytest.fail(
            f"'{table}' table does not exist or cannot be accessed: {e}\n"
            f"You need to create this table in Supabase."
        )


def test_objective_ledger_round_trip() -> None:
    """Create an objective, log progress, read it back and clean up."""

    from repositories.factory import build_repositories
    from services.objective_service import ObjectiveService

    repos = build_repositories(
        Settings(
            data_backend=BACKEND_SUPABASE,
            supabase_url=settings.supabase_url,
            supabase_key=settings.supabase_key,
        )
    )
    service = ObjectiveService(repos.objectives, repos.leads, repos.clients)
    space_id = uuid4()

    objective = service.create_objective(space_id, "Validation objective", target_value=Decimal("10"))
    try:
        result = service.add_entry(
            objective.objective_id,
            Decimal("4"),
            logged_at=datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
        )
        assert result.objective.current_value == Decimal("4")

        loaded = service.get_objective(objective.objective_id)
        assert loaded.current_value == Decimal("4")
        assert len(loaded.progress_entries) == 1
    finally:
        service.delete_objective(objective.objective_id)
