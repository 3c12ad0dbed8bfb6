"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient

from notezero.app import app
from notezero.config import get_settings
from notezero.document.tree import PageTree
from notezero.persistence.memory import InMemoryGateway
from notezero.persistence.pipeline import PersistencePipeline
from notezero.workspace import Workspace


def make_pipeline(**overrides) -> PersistencePipeline:
    """Pipeline that never sleeps between retries and only drains on flush()."""
    options = {"auto_flush": False, "wait_initial": 0, "wait_max": 0, "max_attempts": 3}
    options.update(overrides)
    return PersistencePipeline(**options)


@pytest.fixture
def client():
    """TestClient with the lifespan running, so every test gets a fresh seeded workspace."""
    get_settings.cache_clear()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def tree() -> PageTree:
    return PageTree()


@pytest.fixture
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture
def workspace(gateway: InMemoryGateway) -> Workspace:
    """Workspace over the in-memory gateway with a manual-flush pipeline."""
    return Workspace(gateway, workspace_id="ws-1", user_id="user-1", pipeline=make_pipeline())
