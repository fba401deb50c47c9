import pytest

from metacache.cache import MetadataCache
from metacache.config import Settings, get_settings
from metacache.store import SqliteRecordStore
from tests.tools import StubRecordStore


@pytest.fixture(autouse=True)
def clean_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        env_file=tmp_path / ".env",
        db_name=str(tmp_path / "metacache.db"),
        uploads_dir=tmp_path / "uploads",
    )


@pytest.fixture()
def sqlite_store(settings):
    store = SqliteRecordStore(settings.db_name)
    yield store
    store.close()


@pytest.fixture()
def stub_store() -> StubRecordStore:
    return StubRecordStore()


@pytest.fixture()
def cache(stub_store) -> MetadataCache:
    return MetadataCache(stub_store)


@pytest.fixture()
def uploads_dir(tmp_path):
    directory = tmp_path / "uploads"
    directory.mkdir()
    return directory
