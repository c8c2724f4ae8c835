import pytest
from unittest.mock import MagicMock, patch

from app.models import ItemType, ParticipantShare, Receipt
from app.services.allocation import compute_debts, find_payer


@pytest.fixture
def three_way_shares():
    """Alice paid; thirds with the rounding cent on Alice."""
    return [
        ParticipantShare(name="Alice", percent=33.34, is_payer=True),
        ParticipantShare(name="Bob", percent=33.33),
        ParticipantShare(name="Carol", percent=33.33),
    ]


@pytest.fixture
def four_quarter_shares():
    """Four equal quarters, first person pays."""
    return [
        ParticipantShare(name=f"Person {i + 1}", percent=25.0, is_payer=i == 0)
        for i in range(4)
    ]


@pytest.fixture
def make_receipt():
    """Factory building a stored receipt with debts computed from its shares."""

    def _make(receipt_id, persons, total, item_type=ItemType.BUDGET, item_name="Hotel"):
        payer = find_payer(persons)
        return Receipt(
            id=receipt_id,
            trip_id="trip1",
            item_type=item_type,
            item_name=item_name,
            total=total,
            payer=payer.name if payer else "",
            persons=persons,
            debts=compute_debts(persons, total),
        )

    return _make


@pytest.fixture
def receipt_row():
    """A cost_sharing_receipts row as returned by Supabase."""
    return {
        "id": 7,
        "trip_id": 1,
        "item_type": "activity",
        "item_name": "Boat tour",
        "total": "90.00",
        "payer": "Alice",
        "persons": [
            {"name": "Alice", "percent": 50, "isPayer": True},
            {"name": "Bob", "percent": 50, "isPayer": False},
        ],
        "debts": [{"from": "Bob", "to": "Alice", "amount": 45.0}],
        "created_at": "2024-05-01T12:00:00+00:00",
        "updated_at": "2024-05-01T12:00:00+00:00",
    }


@pytest.fixture
def mock_settings():
    """Mock settings with valid Supabase config."""
    settings = MagicMock()
    settings.supabase_url = "https://test.supabase.co"
    settings.supabase_service_key = "test-service-key"
    settings.supabase_configured = True
    with patch("app.services.supabase.get_settings", return_value=settings):
        yield settings
