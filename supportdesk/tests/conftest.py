"""
pytest configuration and shared fixtures
"""
import pytest
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock


def make_ticket_row(**overrides) -> Dict[str, Any]:
    """Ticket row as returned by Supabase"""
    row = {
        "id": "ticket-001",
        "title": "My invoice payment failed, this is urgent...",
        "description": "My invoice payment failed, this is urgent",
        "priority": "high",
        "status": "open",
        "category": "billing",
        "created_at": "2026-10-18T09:00:00+00:00",
        "updated_at": "2026-10-18T09:00:00+00:00",
        "user_id": "user-001",
        "agent_id": None,
        "channel": "web",
        "sentiment_score": -0.12,
        "attachments": None,
    }
    row.update(overrides)
    return row


class FakeClock:
    """Monotonic clock that only moves when told to"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def mock_supabase():
    """Fixture for mock Supabase client (query builder calls chain back to it)"""
    client = MagicMock()
    client.table.return_value = client
    client.select.return_value = client
    client.insert.return_value = client
    client.update.return_value = client
    client.eq.return_value = client
    client.order.return_value = client
    client.limit.return_value = client
    client.single.return_value = client
    client.execute.return_value = MagicMock(data=[], count=0)
    return client


@pytest.fixture
def connected_guard():
    """Connection guard that always reports a reachable backend"""
    guard = MagicMock()
    guard.ensure_connection = AsyncMock(return_value=True)
    return guard


@pytest.fixture
def disconnected_guard():
    """Connection guard whose probe always fails"""
    guard = MagicMock()
    guard.ensure_connection = AsyncMock(return_value=False)
    return guard


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ticket_row():
    return make_ticket_row
