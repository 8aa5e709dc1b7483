"""Fixtures for HTTP API tests."""

import pytest
from fastapi.testclient import TestClient

from storehub.app.main import create_app


@pytest.fixture
def app(settings, driver):
    return create_app(settings, driver=driver)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def hub(app):
    return app.state.hub


@pytest.fixture
def token(hub, signer) -> str:
    return signer.v1_token(hub.challenge_text)
