"""
Change notification channel for repositories.

Each repository publishes a ChangeEvent after every successful mutation.
Consumers subscribe on the notifier instance they were given; there is no
module-level registry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional
from uuid import UUID

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    LEAD = "lead"
    CLIENT = "client"
    NPS_RECORD = "nps_record"
    OBJECTIVE = "objective"
    PROGRESS_ENTRY = "progress_entry"


class ChangeAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    entity: EntityKind
    action: ChangeAction
    entity_id: UUID
    space_id: Optional[UUID] = None


Listener = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """Synchronous publish/subscribe channel."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        # Iterate over a copy so listeners may unsubscribe while being notified.
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # The mutation is already persisted.
                logger.exception(
                    "Change listener failed for %s %s %s",
                    event.entity.value,
                    event.action.value,
                    event.entity_id,
                )


def log_change(event: ChangeEvent) -> None:
    """Audit listener: records every repository change at DEBUG level."""

    logger.debug(
        "%s %s id=%s space=%s",
        event.entity.value,
        event.action.value,
        event.entity_id,
        event.space_id,
    )
