"""Repository-level errors shared by every backend."""

from __future__ import annotations


class NotFoundError(LookupError):
    """Raised when a referenced row does not exist (or belongs to another objective/client)."""

    pass
