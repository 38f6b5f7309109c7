import pytest
from fastapi.testclient import TestClient

from drive_service.config import Settings
from drive_service.main import create_app
from drive_service.services.storage import StorageEngine

from tests.utils import MIB


@pytest.fixture
def settings() -> Settings:
    test_settings = Settings()
    test_settings.METRICS_ENABLED = False
    test_settings.MAX_UPLOAD_SIZE = 10 * MIB
    test_settings.DEFAULT_STORAGE_LIMIT = 104857600
    test_settings.DEFAULT_RECENT_LIMIT = 4
    test_settings.DEMO_USERNAME = "demo"
    test_settings.DEMO_PASSWORD = "password"
    return test_settings


@pytest.fixture
def engine() -> StorageEngine:
    """Fresh, empty storage engine"""
    return StorageEngine()


@pytest.fixture
def user(engine: StorageEngine):
    return engine.create_user("alice", "secret")


@pytest.fixture
def client(settings: Settings, engine: StorageEngine):
    """Client bound to an app that owns ``engine``; the demo user gets ID 1"""
    app = create_app(settings=settings, engine=engine)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def demo_user(client: TestClient, engine: StorageEngine, settings: Settings):
    return engine.get_user_by_username(settings.DEMO_USERNAME)
