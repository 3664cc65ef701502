"""Shared fixtures: bundle roots under tmp_path, in-memory and SQLite indexes."""

import pytest

from translatable.config import Settings
from translatable.core.locale import LocaleContext
from translatable.engine import TranslationEngine
from translatable.storage import (
    InMemoryTranslationIndex,
    LocalBundleStore,
    SqlTranslationIndex,
    StorageProvider,
)
from translatable.storage.session import create_index_engine
from translatable.storage.tables import create_schema


@pytest.fixture
def bundles(tmp_path):
    """Bundle store rooted in a fresh temp directory, rejecting rename collisions."""
    return LocalBundleStore(tmp_path / "lang", extension="yaml", rename_conflict="reject")


@pytest.fixture
def sql_engine(tmp_path):
    """File-backed SQLite engine (shared across threads) with the schema created."""
    engine = create_index_engine(f"sqlite:///{tmp_path / 'index.db'}")
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def index(request):
    """Each index-level test runs against both implementations."""
    if request.param == "memory":
        return InMemoryTranslationIndex(case_sensitive=False)
    return SqlTranslationIndex(request.getfixturevalue("sql_engine"), case_sensitive=False)


@pytest.fixture
def storage(bundles, index):
    return StorageProvider(bundles=bundles, index=index)


@pytest.fixture
def settings():
    return Settings(reconcile_attempts=3, default_locale="en", fallback_locale="en")


@pytest.fixture
def engine(storage, settings):
    return TranslationEngine(
        storage,
        context=LocaleContext(active="en", fallback="en"),
        settings=settings,
    )
