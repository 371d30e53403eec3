"""Runtime settings read from the environment.

Variables:
- APP_DATA: data root (staged uploads, stored files, SQLite database)
- DATABASE_URL: optional SQLAlchemy URL; defaults to SQLite under APP_DATA
- HOST / PORT: bind address for the uvicorn entry point
- LOG_LEVEL: logger level name
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_APP_DATA = ".rgb-proxy-server"
DATABASE_FILE = "app.db"


def normalize_database_url(url: str) -> str:
    """Map libpq-style URL schemes onto the psycopg2 SQLAlchemy driver."""
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = "postgresql+psycopg2://" + url[len("postgresql://"):]
    return url


@dataclass(frozen=True)
class Settings:
    """Resolved service settings."""

    app_data: Path
    database_url: str
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def staging_dir(self) -> Path:
        return self.app_data / "tmp"

    @property
    def consignment_dir(self) -> Path:
        return self.app_data / "consignments"

    @property
    def media_dir(self) -> Path:
        return self.app_data / "media"

    @classmethod
    def for_data_root(cls, app_data: Path | str, **overrides) -> "Settings":
        """Build settings for an explicit data root (SQLite inside it)."""
        root = Path(app_data)
        database_url = overrides.pop("database_url", None)
        if not database_url:
            database_url = f"sqlite:///{root / DATABASE_FILE}"
        return cls(app_data=root, database_url=database_url, **overrides)

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from environment variables.

        Raises:
            ValueError: If PORT is not an integer.
        """
        app_data = os.environ.get("APP_DATA") or str(Path.home() / DEFAULT_APP_DATA)
        database_url = os.environ.get("DATABASE_URL")
        port = os.environ.get("PORT", "3000")
        try:
            port_number = int(port)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {port!r}") from None

        return cls.for_data_root(
            app_data,
            database_url=normalize_database_url(database_url) if database_url else None,
            host=os.environ.get("HOST", "0.0.0.0"),
            port=port_number,
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )
