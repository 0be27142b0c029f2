"""
Shared fixtures: in-memory storage, temp blob dir, a notifier that
records instead of sending, and an app + TestClient wired to them.
"""

import pytest
from fastapi.testclient import TestClient

from blogapi.api.app import create_app
from blogapi.api.state import AppState
from blogapi.auth.tokens import TokenIssuer
from blogapi.config import Settings
from blogapi.storage import InMemoryMetadataStorage, LocalBlobStorage, StorageProvider

from tests.helpers import PNG_BYTES, RecordingNotifier


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        environment="test",
        jwt_secret_key="test-secret",
        upload_dir=str(tmp_path / "uploads"),
        blob_local_path=str(tmp_path / "images"),
        sentry_dsn="",
    )


@pytest.fixture
def blobs(settings):
    return LocalBlobStorage(settings.blob_local_path)


@pytest.fixture
def storage(blobs):
    return StorageProvider(metadata=InMemoryMetadataStorage(), blobs=blobs)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def state(settings, storage, notifier):
    return AppState.build(settings, storage=storage, notifier=notifier)


@pytest.fixture
def tokens(settings):
    return TokenIssuer(settings.token_config())


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "photo.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def app(settings, storage, notifier):
    return create_app(settings, storage=storage, notifier=notifier)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
