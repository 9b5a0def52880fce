import os

import pytest

# Ensure JWT_SECRET is set for tests
os.environ["JWT_SECRET"] = "test_secret"

from eventboard.database.json_store import MemoryStore  # noqa: E402
from eventboard.gateway.server import create_app  # noqa: E402
from eventboard.tests.factories import ALICE, ALICE_ORG, BOB, CAROL  # noqa: E402


@pytest.fixture
def store():
    return MemoryStore({
        "users": [ALICE, BOB, CAROL],
        "organizations": [ALICE_ORG],
        "events": [],
    })


@pytest.fixture
def app(store):
    app = create_app({"TESTING": True, "STORE": store})
    return app


@pytest.fixture
def client(app):
    return app.test_client()
