"""
Service wiring for the API.

Routers receive a `Services` bundle through FastAPI's dependency injection.
Tests replace it with `app.dependency_overrides[get_services]`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Callable

from domain.time import utc_now
from repositories.factory import Repositories, build_repositories
from repositories.settings import load_settings
from services.client_service import ClientService
from services.objective_service import ObjectiveService
from services.pipeline_service import PipelineService


@dataclass(frozen=True)
class Services:
    objectives: ObjectiveService
    pipeline: PipelineService
    clients: ClientService


def build_services(repos: Repositories, clock: Callable[[], datetime] = utc_now) -> Services:
    return Services(
        objectives=ObjectiveService(repos.objectives, repos.leads, repos.clients, clock=clock),
        pipeline=PipelineService(repos.leads, clock=clock),
        clients=ClientService(repos.clients, clock=clock),
    )


@lru_cache(maxsize=1)
def get_services() -> Services:
    return build_services(build_repositories(load_settings()))
