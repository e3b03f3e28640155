"""
Incubate - Application Container
================================

Wires configuration, storage, analysis and the reflection session
together and owns their lifecycle.

Usage::

    async with open_app() as app:
        await app.store.save_new_raw("Morning", "Feeling great today")
        session = app.new_reflection_session()
        await session.start()
"""

import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from incubate.config import Settings, get_settings
from incubate.db.session import close_db, create_engine, create_session_factory, init_db
from incubate.services.db_worker import DatabaseWorker
from incubate.services.insights import InsightEngine
from incubate.services.journal_store import JournalStore
from incubate.services.profile import ProfileStore
from incubate.services.reflection_session import ReflectionSession, ResponsePacer
from incubate.services.sentiment import SentimentAnalyzer

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure the root logger (it defaults to WARNING)."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
    )


class IncubateApp:
    """
    One instance per process.

    Construction is cheap and does no I/O; ``start()`` opens the database
    and starts the worker, ``stop()`` drains the worker and closes it.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

        self.engine = create_engine(self.settings)
        self.session_factory = create_session_factory(self.engine)
        self.worker = DatabaseWorker(self.session_factory, maxsize=self.settings.DB_QUEUE_MAXSIZE)
        self.store = JournalStore(self.worker, self.settings)
        self.profiles = ProfileStore(self.settings.profile_path, self.settings.USER_FIRST_NAME)

        self.analyzer = SentimentAnalyzer(
            backend=self.settings.SENTIMENT_BACKEND,
            auto_download=self.settings.NLTK_AUTO_DOWNLOAD,
        )
        self.insight_engine = InsightEngine(
            self.analyzer,
            window_days=self.settings.INSIGHT_WINDOW_DAYS,
        )

    async def start(self) -> None:
        """
        Open the database and start the storage worker.

        Raises:
            StorageOpenError: If the database can't be opened
        """
        logger.info("Starting Incubate (%s)...", self.settings.ENVIRONMENT)
        await init_db(self.engine)
        await self.worker.start()

    async def stop(self) -> None:
        logger.info("Shutting down Incubate...")
        await self.worker.stop()
        await close_db(self.engine)

    def new_reflection_session(
        self,
        rng: Optional[random.Random] = None,
        pacer: Optional[ResponsePacer] = None,
    ) -> ReflectionSession:
        """Create a fresh reflection for today."""
        return ReflectionSession(
            store=self.store,
            analyzer=self.analyzer,
            insight_engine=self.insight_engine,
            settings=self.settings,
            pacer=pacer,
            rng=rng,
        )


@asynccontextmanager
async def open_app(settings: Optional[Settings] = None) -> AsyncGenerator[IncubateApp, None]:
    """
    Application lifespan manager.

    Starts the container on entry and always stops it on exit.
    """
    app = IncubateApp(settings)
    configure_logging(app.settings)
    await app.start()
    try:
        yield app
    finally:
        await app.stop()
