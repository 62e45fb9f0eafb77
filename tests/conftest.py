from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from poolladder.core.config import settings
from poolladder.core.security import hash_password
from poolladder.main import create_app
from poolladder.services.ladder import LadderStore
from poolladder.storage.json_files import JsonFileStorage
from poolladder.storage.repository import LadderRepository

from tests.testkit import ADMIN_PASSWORD, FakeClock, login

# bcrypt is slow on purpose; hash once per session.
_ADMIN_HASH = hash_password(ADMIN_PASSWORD)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> LadderStore:
    return LadderStore(clock=clock)


@pytest.fixture
def auth_settings(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET", "test-secret")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", _ADMIN_HASH)
    monkeypatch.setattr(settings, "ENV", "dev")
    return settings


@pytest.fixture
def repository(tmp_path) -> LadderRepository:
    return LadderRepository([JsonFileStorage(tmp_path / "data")])


@pytest.fixture
def publisher():
    return None


@pytest.fixture
def client(auth_settings, repository, publisher):
    factory = (lambda: publisher) if publisher is not None else None
    app = create_app(repository=repository, publisher_factory=factory)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers(client) -> dict:
    return login(client)
