"""Shared test fixtures for the component library tests."""

import sys
from pathlib import Path

import pytest

# Add the repo root to path so tests can import the top-level modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from auth import AuthManager  # noqa: E402
from database import ComponentLibraryDB  # noqa: E402
from library_app import LibraryContext, Notifier  # noqa: E402


class RecordingNotifier(Notifier):
    def __init__(self):
        self.messages = []

    def alert(self, message):
        self.messages.append(message)


class FakeView:
    def __init__(self, store=None):
        self.store = store
        self.renders = 0

    def render_components(self):
        self.renders += 1


@pytest.fixture
def store():
    db = ComponentLibraryDB(":memory:")
    yield db
    db.close()


@pytest.fixture
def auth(store):
    manager = AuthManager(store)
    manager.initialize()
    return manager


@pytest.fixture
def user(auth):
    auth.register("ada@example.com", "Ada", "secret1", "secret1")
    return auth.login("ada@example.com", "secret1")


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def ctx(store, auth, user, notifier):
    return LibraryContext(auth=auth, store=store, view=FakeView(store), notifier=notifier)


@pytest.fixture
def record():
    return {
        "name": "NE555",
        "category": "semiconductors",
        "package": "DIP-8",
        "value": "NE555P",
        "description": "Precision timer",
        "manufacturer": "Texas Instruments",
        "datasheet": "https://www.ti.com/product/NE555",
        "tags": ["timer", "classic"],
        "specifications": [
            {"parameter": "Supply Voltage", "value": "4.5-16", "unit": "V"},
            {"parameter": "Timing", "value": "us to hours", "unit": ""},
        ],
    }
