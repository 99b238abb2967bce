from __future__ import annotations

import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from image_service.main import create_app
from tests.helpers.media import DummyServiceAuth, build_config

# keep load_config() away from a developer database during tests
os.environ.setdefault("DATABASE_URL", "")


@pytest.fixture()
def service_auth() -> DummyServiceAuth:
    return DummyServiceAuth()


@pytest.fixture()
def app_factory(tmp_path: Path, service_auth: DummyServiceAuth):
    """Build an application rooted in ``tmp_path``; keyword overrides go to the config."""

    def _factory(**overrides):
        return create_app(build_config(tmp_path, **overrides), service_auth=service_auth)

    return _factory


@pytest.fixture()
def client(app_factory) -> TestClient:
    return TestClient(app_factory())
