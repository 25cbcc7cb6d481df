"""Shared fixtures for the PennyWise test suite."""

import pytest

from pennywise.services.notifications import NotificationQueue, RouteState
from pennywise.services.storage import InMemoryAuditStorage, InMemoryTransactionService
from tests.helpers import sample_records


@pytest.fixture
def notifications():
    return NotificationQueue()


@pytest.fixture
def routes():
    return RouteState()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def data_service():
    return InMemoryTransactionService(sample_records())
