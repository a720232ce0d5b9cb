"""
Pytest configuration and fixtures for bot tests
"""
import pytest
from unittest.mock import AsyncMock

import config as cfg
from fetchers.sheets import SheetsClient
from fsm.machine import ConversationMachine
from fsm.state_manager import MemoryStateStore

ALLOWED = 4242


@pytest.fixture(autouse=True)
def allowed_chat(monkeypatch):
    monkeypatch.setattr(cfg, "ALLOWED_CHAT_ID", str(ALLOWED))
    return ALLOWED


@pytest.fixture
def store():
    return MemoryStateStore()


@pytest.fixture
def storage():
    """SheetsClient stand-in; every call succeeds unless a test says otherwise."""
    fake = AsyncMock(spec=SheetsClient)
    fake.get_categories.return_value = ["Foo", "Bar"]
    fake.add_category.return_value = None
    fake.save_reel.return_value = None
    return fake


@pytest.fixture
def machine(store, storage):
    return ConversationMachine(store, storage)
