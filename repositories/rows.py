"""Column conversion helpers shared by the Supabase repositories."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID


def optional_uuid(value: Any) -> Optional[UUID]:
    return UUID(str(value)) if value else None


def uuid_to_str(value: Optional[UUID]) -> Optional[str]:
    return str(value) if value is not None else None
