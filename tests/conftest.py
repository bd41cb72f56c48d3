"""
Pytest configuration.

Adds the project root to the Python path so tests can import domain,
repositories, services and api, and provides in-memory repository and service
fixtures with a fixed clock.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from repositories.events import ChangeNotifier  # noqa: E402
from repositories.factory import build_memory_repositories  # noqa: E402

FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0, tzinfo=timezone.utc)
SPACE_ID = UUID("00000000-0000-0000-0000-0000000000a1")
OTHER_SPACE_ID = UUID("00000000-0000-0000-0000-0000000000b2")


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture
def notifier():
    return ChangeNotifier()


@pytest.fixture
def repos(notifier):
    return build_memory_repositories(notifier)


@pytest.fixture
def services(repos):
    from api.dependencies import build_services

    return build_services(repos, clock=fixed_clock)
