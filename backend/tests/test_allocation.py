"""Tests for turning a share table into debts."""

import pytest

from app.models import Debt, ParticipantShare
from app.services.allocation import compute_debts, find_payer, person_amounts
from app.services.shares import initialize_shares, set_payer, set_share_percent


class TestComputeDebts:
    """Tests for the compute_debts function."""

    def test_thirds_owed_to_payer(self, three_way_shares):
        """3 people, 90 total, Alice paid -> Bob and Carol owe 29.997 each."""
        debts = compute_debts(three_way_shares, 90.0)

        assert len(debts) == 2
        assert debts[0].from_person == "Bob"
        assert debts[0].to_person == "Alice"
        assert debts[0].amount == pytest.approx(29.997)
        assert debts[1].from_person == "Carol"
        assert debts[1].amount == pytest.approx(29.997)

    def test_amounts_are_not_rounded(self, three_way_shares):
        debts = compute_debts(three_way_shares, 90.0)

        assert debts[0].amount != 30.0
        assert debts[0].amount != 29.99

    def test_single_participant_owes_nothing(self):
        assert compute_debts(initialize_shares(1), 250.0) == []

    def test_no_payer_returns_empty(self):
        shares = [ParticipantShare(name="A", percent=50), ParticipantShare(name="B", percent=50)]

        assert compute_debts(shares, 100.0) == []

    def test_payer_never_owes(self, four_quarter_shares):
        shares = set_payer(four_quarter_shares, 2)

        debts = compute_debts(shares, 200.0)

        assert "Person 3" not in {d.from_person for d in debts}
        assert {d.to_person for d in debts} == {"Person 3"}

    def test_order_follows_shares(self, four_quarter_shares):
        shares = set_payer(four_quarter_shares, 1)

        debts = compute_debts(shares, 100.0)

        assert [d.from_person for d in debts] == ["Person 1", "Person 3", "Person 4"]

    def test_zero_share_produces_no_debt(self, three_way_shares):
        shares = set_share_percent(three_way_shares, 1, 0)

        debts = compute_debts(shares, 100.0)

        assert [d.from_person for d in debts] == ["Carol"]

    def test_zero_total_produces_no_debts(self, three_way_shares):
        assert compute_debts(three_way_shares, 0.0) == []

    def test_participant_named_like_payer_is_skipped(self):
        shares = [
            ParticipantShare(name="Sam", percent=50, is_payer=True),
            ParticipantShare(name="Sam", percent=25),
            ParticipantShare(name="Kim", percent=25),
        ]

        debts = compute_debts(shares, 100.0)

        assert debts == [Debt(from_person="Kim", to_person="Sam", amount=25.0)]

    @pytest.mark.parametrize("total", [0.0, 1.0, 19.99, 90.0, 1234.56])
    @pytest.mark.parametrize("count", [1, 2, 3, 7])
    def test_debts_plus_payer_share_equal_total(self, count, total):
        shares = set_payer(initialize_shares(count), count - 1)

        debts = compute_debts(shares, total)
        payer = find_payer(shares)
        payer_share = (payer.percent / 100) * total

        assert sum(d.amount for d in debts) + payer_share == pytest.approx(total, abs=0.01)

    def test_does_not_mutate_shares(self, three_way_shares):
        before = [s.model_copy() for s in three_way_shares]

        compute_debts(three_way_shares, 90.0)

        assert three_way_shares == before


class TestPersonAmounts:

    def test_includes_payer(self, three_way_shares):
        amounts = person_amounts(three_way_shares, 300.0)

        assert amounts["Alice"] == pytest.approx(100.02)
        assert amounts["Bob"] == pytest.approx(99.99)
        assert sum(amounts.values()) == pytest.approx(300.0)


class TestFindPayer:

    def test_returns_flagged_participant(self, three_way_shares):
        assert find_payer(three_way_shares).name == "Alice"

    def test_returns_none_without_payer(self):
        assert find_payer([ParticipantShare(name="A", percent=100)]) is None
