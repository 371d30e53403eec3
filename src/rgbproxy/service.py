"""Relay service: the resources every RPC handler works against."""

from __future__ import annotations

import time

from sqlalchemy.engine import Engine

from rgbproxy.config import Settings
from rgbproxy.infra.content_store import ContentStore, StagingArea
from rgbproxy.infra.db import create_db_engine, migrate
from rgbproxy.observability.logging import get_logger

logger = get_logger(__name__)


class RelayService:
    """Owns the database engine, the staging area and both content stores.

    Built once at startup and handed to every handler, so tests can build
    isolated instances over a temporary data root.
    """

    def __init__(
        self,
        engine: Engine,
        staging: StagingArea,
        consignments: ContentStore,
        media: ContentStore,
    ):
        self.engine = engine
        self.staging = staging
        self.consignments = consignments
        self.media = media
        self._started = time.monotonic()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelayService":
        """Create directories, connect and migrate the database."""
        settings.app_data.mkdir(parents=True, exist_ok=True)
        engine = create_db_engine(settings.database_url)
        migrate(engine)
        logger.info(
            "Relay service ready",
            extra={
                "extra_fields": {
                    "app_data": str(settings.app_data),
                    "database": engine.url.render_as_string(hide_password=True),
                }
            },
        )
        return cls(
            engine=engine,
            staging=StagingArea(settings.staging_dir),
            consignments=ContentStore(settings.consignment_dir),
            media=ContentStore(settings.media_dir),
        )

    def uptime(self) -> int:
        """Whole seconds since the service was built."""
        return int(time.monotonic() - self._started)

    def close(self) -> None:
        self.engine.dispose()
