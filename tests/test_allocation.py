"""Tests for the allocation engine helpers."""

from datetime import datetime
from decimal import Decimal

from profitshare.domain.allocation import (
    build_allocation_rows,
    pick_adjust_index,
    participant_key,
    scale_account_contributions,
    split_by_ratio,
    sum_previous_allocations,
)
from profitshare.domain.entities import Participant, SettlementAllocation

NOW = datetime(2026, 2, 1, 0, 0, 0)


def _participant(participant_id, name, ratio, bill_account=None):
    return Participant(
        id=participant_id,
        name=name,
        bill_account=bill_account,
        ratio=Decimal(ratio),
        note="",
        created_at=NOW,
        updated_at=NOW,
    )


def _allocation(participant_id, name, amount, held, bill_account=None):
    return SettlementAllocation(
        participant_id=participant_id,
        participant_name=name,
        participant_bill_account=bill_account,
        ratio=Decimal("0.5"),
        amount=Decimal(amount),
        account_held_amount=Decimal(held),
        actual_transfer_amount=Decimal(amount) - Decimal(held),
        note="",
    )


def test_split_by_ratio_exact():
    amounts = split_by_ratio([Decimal("0.6"), Decimal("0.4")], Decimal("46.00"))

    assert amounts == [Decimal("27.60"), Decimal("18.40")]
    assert sum(amounts) == Decimal("46.00")


def test_split_by_ratio_remainder_goes_to_largest_ratio():
    ratios = [Decimal("0.333333"), Decimal("0.333333"), Decimal("0.333334")]
    amounts = split_by_ratio(ratios, Decimal("100.00"))

    assert amounts == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]


def test_split_by_ratio_tie_adjusts_first():
    amounts = split_by_ratio([Decimal("0.5"), Decimal("0.5")], Decimal("0.01"))

    assert amounts == [Decimal("0.00"), Decimal("0.01")]


def test_split_by_ratio_empty():
    assert split_by_ratio([], Decimal("10")) == []


def test_pick_adjust_index_uses_absolute_weight():
    assert pick_adjust_index([Decimal("10"), Decimal("-30"), Decimal("30")]) == 1
    assert pick_adjust_index([]) == -1


def test_scale_account_contributions():
    held = scale_account_contributions(
        {"shop-a": Decimal("300"), "shop-b": Decimal("100")}, Decimal("100.00")
    )

    assert held == {"shop-a": Decimal("75.00"), "shop-b": Decimal("25.00")}


def test_scale_account_contributions_remainder():
    held = scale_account_contributions(
        {"a": Decimal("1"), "b": Decimal("1"), "c": Decimal("1")}, Decimal("10.00")
    )

    assert held == {"a": Decimal("3.34"), "b": Decimal("3.33"), "c": Decimal("3.33")}
    assert sum(held.values()) == Decimal("10.00")


def test_scale_account_contributions_zero_net():
    held = scale_account_contributions(
        {"a": Decimal("50"), "b": Decimal("-50")}, Decimal("10.00")
    )

    assert held == {"a": Decimal("0.00"), "b": Decimal("0.00")}


def test_participant_key():
    assert participant_key(3, "Alice", "shop-a") == "id:3"
    assert participant_key(None, "Alice", "shop-a") == "Alice|shop-a"
    assert participant_key(None, "Bob", None) == "Bob|"


def test_sum_previous_allocations():
    sums = sum_previous_allocations(
        [
            _allocation(1, "Alice", "10.00", "12.00", "shop-a"),
            _allocation(1, "Alice", "5.00", "4.50", "shop-a"),
            _allocation(None, "Ghost", "1.00", "0.00"),
        ]
    )

    assert sums["id:1"] == (Decimal("15.00"), Decimal("16.50"))
    assert sums["Ghost|"] == (Decimal("1.00"), Decimal("0.00"))


def test_bound_and_unbound_participants():
    participants = [
        _participant(1, "Alice", "0.5", "shop-a"),
        _participant(2, "Bob", "0.5"),
    ]

    rows = build_allocation_rows(
        participants, Decimal("100.00"), {"shop-a": Decimal("100.00")}, {}
    )

    alice, bob = rows
    assert alice.amount == Decimal("50.00")
    assert alice.account_held_amount == Decimal("100.00")
    assert alice.actual_transfer_amount == Decimal("-50.00")
    assert bob.amount == Decimal("50.00")
    assert bob.account_held_amount == Decimal("0.00")
    assert bob.actual_transfer_amount == bob.amount


def test_previous_held_amounts_are_subtracted():
    participants = [_participant(1, "Alice", "1", "shop-a")]

    rows = build_allocation_rows(
        participants,
        Decimal("50.00"),
        {"shop-a": Decimal("150.00")},
        {"id:1": (Decimal("100.00"), Decimal("100.00"))},
    )

    assert rows[0].account_held_amount == Decimal("50.00")
    assert rows[0].actual_transfer_amount == Decimal("0.00")


def test_small_held_gap_is_nudged_onto_largest_row():
    participants = [
        _participant(1, "Alice", "0.5", "shop-a"),
        _participant(2, "Carol", "0.5", "shop-b"),
    ]

    rows = build_allocation_rows(
        participants,
        Decimal("10.00"),
        {"shop-a": Decimal("6.00"), "shop-b": Decimal("3.97")},
        {},
    )

    assert rows[0].account_held_amount == Decimal("6.03")
    assert rows[0].actual_transfer_amount == Decimal("-1.03")
    assert rows[1].account_held_amount == Decimal("3.97")
    assert sum(row.account_held_amount for row in rows) == Decimal("10.00")


def test_large_held_gap_is_left_visible():
    participants = [
        _participant(1, "Alice", "0.5", "shop-a"),
        _participant(2, "Carol", "0.5", "shop-b"),
    ]

    rows = build_allocation_rows(
        participants,
        Decimal("10.00"),
        {"shop-a": Decimal("6.00"), "shop-b": Decimal("3.00")},
        {},
    )

    assert rows[0].account_held_amount == Decimal("6.00")
    assert rows[1].account_held_amount == Decimal("3.00")


def test_no_participants_no_rows():
    assert build_allocation_rows([], Decimal("10.00"), {}, {}) == []


def test_small_held_gap_is_not_nudged_onto_unbound_rows():
    participants = [
        _participant(1, "Carol", "0.5"),
        _participant(2, "Dave", "0.5"),
    ]

    rows = build_allocation_rows(participants, Decimal("0.03"), {}, {})

    assert [row.account_held_amount for row in rows] == [Decimal("0.00"), Decimal("0.00")]
    assert [row.actual_transfer_amount for row in rows] == [row.amount for row in rows]


def test_small_held_gap_skips_unbound_row_with_zero_held():
    participants = [
        _participant(1, "Bob", "0.5"),
        _participant(2, "Alice", "0.5", "shop-a"),
    ]

    rows = build_allocation_rows(participants, Decimal("0.03"), {"shop-a": Decimal("0.00")}, {})

    bob, alice = rows
    assert bob.account_held_amount == Decimal("0.00")
    assert alice.account_held_amount == Decimal("0.03")
