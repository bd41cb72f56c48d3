"""
Application settings.

Values are read from the process environment after loading the project's
`.env` file (if any). Nothing here talks to the network.

Environment variables:
- DATA_BACKEND: "supabase" (default) or "memory"
- SUPABASE_URL / SUPABASE_KEY: required for the supabase backend
- LOG_LEVEL: logging level name (default INFO)
- CORS_ORIGINS: comma-separated list of allowed origins (default "*")
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

BACKEND_SUPABASE = "supabase"
BACKEND_MEMORY = "memory"
_BACKENDS = (BACKEND_SUPABASE, BACKEND_MEMORY)

# Look for .env in the project root
_ENV_PATH = Path(__file__).parent.parent / ".env"


@dataclass(frozen=True, slots=True)
class Settings:
    data_backend: str = BACKEND_SUPABASE
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    log_level: str = "INFO"
    cors_origins: Tuple[str, ...] = ("*",)

    def __post_init__(self) -> None:
        if self.data_backend not in _BACKENDS:
            raise ValueError(
                f"DATA_BACKEND must be one of {', '.join(_BACKENDS)}, got {self.data_backend!r}"
            )


def load_settings(env_path: Optional[Path] = None) -> Settings:
    load_dotenv(dotenv_path=env_path or _ENV_PATH)

    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        data_backend=os.getenv("DATA_BACKEND", BACKEND_SUPABASE).strip().lower(),
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_KEY"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=tuple(origin.strip() for origin in origins.split(",") if origin.strip()),
    )


__all__ = ["BACKEND_MEMORY", "BACKEND_SUPABASE", "Settings", "load_settings"]
