"""
Repository wiring.

Builds the repository bundle for the configured backend. Every repository in a
bundle shares one ChangeNotifier so consumers can observe all mutations from a
single channel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from repositories.events import ChangeNotifier, log_change
from repositories.memory_store import (
    InMemoryClientRepository,
    InMemoryLeadRepository,
    InMemoryObjectiveRepository,
)
from repositories.ports import ClientRepository, LeadRepository, ObjectiveRepository
from repositories.settings import BACKEND_MEMORY, Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Repositories:
    leads: LeadRepository
    clients: ClientRepository
    objectives: ObjectiveRepository
    notifier: ChangeNotifier


def build_memory_repositories(notifier: Optional[ChangeNotifier] = None) -> Repositories:
    notifier = notifier or ChangeNotifier()
    return Repositories(
        leads=InMemoryLeadRepository(notifier),
        clients=InMemoryClientRepository(notifier),
        objectives=InMemoryObjectiveRepository(notifier),
        notifier=notifier,
    )


def build_supabase_repositories(
    settings: Settings, notifier: Optional[ChangeNotifier] = None
) -> Repositories:
    from repositories.client import create_supabase_client
    from repositories.client_repository import SupabaseClientRepository
    from repositories.lead_repository import SupabaseLeadRepository
    from repositories.objective_repository import SupabaseObjectiveRepository

    notifier = notifier or ChangeNotifier()
    supabase = create_supabase_client(settings)
    return Repositories(
        leads=SupabaseLeadRepository(supabase, notifier),
        clients=SupabaseClientRepository(supabase, notifier),
        objectives=SupabaseObjectiveRepository(supabase, notifier),
        notifier=notifier,
    )


def build_repositories(settings: Settings) -> Repositories:
    """Select the backend from settings and attach the audit listener."""

    if settings.data_backend == BACKEND_MEMORY:
        repos = build_memory_repositories()
    else:
        repos = build_supabase_repositories(settings)
    repos.notifier.subscribe(log_change)
    logger.info("Using %s data backend", settings.data_backend)
    return repos


__all__ = [
    "Repositories",
    "build_memory_repositories",
    "build_repositories",
    "build_supabase_repositories",
]
