"""Environment configuration.

Values come from the process environment, after loading a local ``.env``
file with python-dotenv. In production the variables are set directly on the
platform instead.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

BACKENDS = ("mongo", "memory")


@dataclass(frozen=True)
class Settings:
    database_backend: str = "mongo"
    mongodb_uri: str | None = None
    mongodb_db: str = "devevent"
    mongodb_timeout_ms: int = 5000
    page_revalidate_seconds: int = 60
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment, falling back to defaults."""
    backend = os.environ.get("DATABASE_BACKEND", "mongo").strip().lower()
    if backend not in BACKENDS:
        logging.warning(
            "DATABASE_BACKEND %r is invalid; expected one of %s. Using 'mongo'.",
            backend,
            ", ".join(BACKENDS),
        )
        backend = "mongo"

    return Settings(
        database_backend=backend,
        mongodb_uri=os.environ.get("MONGODB_URI") or None,
        mongodb_db=os.environ.get("MONGODB_DB", "devevent"),
        mongodb_timeout_ms=int(os.environ.get("MONGODB_TIMEOUT_MS", "5000")),
        page_revalidate_seconds=int(os.environ.get("PAGE_REVALIDATE_SECONDS", "60")),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )
