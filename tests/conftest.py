"""Shared fixtures for PocketLedger tests."""

import itertools

import pytest

from pocketledger.config import get_settings
from pocketledger.notices import LedgerNotifier
from pocketledger.orchestrator import LedgerBook
from pocketledger.services.storage import InMemoryStore


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; start every test from a clean cache."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def storage():
    return InMemoryStore()


@pytest.fixture
def notices():
    """List collecting every notice emitted during a test."""
    return []


@pytest.fixture
def notifier(notices):
    return LedgerNotifier(sink=notices.append)


@pytest.fixture
def sequential_ids():
    """Deterministic id factory: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def book(storage, notifier):
    return LedgerBook(storage, notifier=notifier)
