"""
Shared Test Fixtures
====================

Every fixture that touches storage gets its own SQLite file under
pytest's ``tmp_path``.
"""

import random

import pytest
import pytest_asyncio

from incubate.config import Settings
from incubate.main import IncubateApp
from incubate.services.reflection_session import ResponsePacer


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATA_DIR=tmp_path,
        THINKING_DELAY_MIN_SECS=0.0,
        THINKING_DELAY_MAX_SECS=0.0,
        SENTIMENT_BACKEND="keywords",
        NLTK_AUTO_DOWNLOAD=False,
    )


@pytest_asyncio.fixture
async def app(settings):
    incubate_app = IncubateApp(settings)
    await incubate_app.start()
    try:
        yield incubate_app
    finally:
        await incubate_app.stop()


@pytest_asyncio.fixture
async def store(app):
    return app.store


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def instant_pacer(rng) -> ResponsePacer:
    return ResponsePacer(0.0, 0.0, rng=rng)
