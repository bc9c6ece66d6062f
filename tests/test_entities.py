"""Tests for domain entities."""

import pytest
from dataclasses import FrozenInstanceError
from datetime import datetime
from decimal import Decimal

from profitshare.domain.entities import (
    Category,
    Direction,
    ProfitSummary,
    SettlementPreview,
    SettlementStrategy,
    Transaction,
)

NOW = datetime(2026, 2, 16, 10, 0, 0)


def _transaction(**overrides):
    values = dict(
        id=1,
        transaction_time=NOW,
        bill_account="shop-a",
        category=Category.MAIN_BUSINESS,
        direction=Direction.INCOME,
        status="交易成功",
        amount=Decimal("10.00"),
        internal_transfer=False,
        order_id="",
        description="",
        incremental_settled_at=None,
        incremental_settlement_batch_id=None,
        created_at=NOW,
    )
    values.update(overrides)
    return Transaction(**values)


class TestTransaction:
    """Tests for Transaction entity."""

    def test_unsettled_transaction_is_deletable(self):
        txn = _transaction()

        assert not txn.is_settled
        assert txn.deletable

    def test_stamp_time_marks_settled(self):
        txn = _transaction(incremental_settled_at=NOW)

        assert txn.is_settled
        assert not txn.deletable

    def test_batch_id_alone_marks_settled(self):
        assert _transaction(incremental_settlement_batch_id=3).is_settled

    def test_transaction_is_immutable(self):
        txn = _transaction()

        with pytest.raises(FrozenInstanceError):
            txn.amount = Decimal("0")


def test_enums_are_strings():
    assert Category("traffic_cost") is Category.TRAFFIC_COST
    assert Direction.EXPENSE == "expense"
    assert SettlementStrategy.INCREMENTAL.value == "incremental"


def test_profit_summary_defaults_to_zero():
    assert ProfitSummary().settlement_net == Decimal("0.00")


def test_preview_hides_candidates_from_repr():
    zero = Decimal("0.00")
    preview = SettlementPreview(
        strategy=SettlementStrategy.INCREMENTAL,
        bill_account="",
        settlement_time=NOW,
        carry_ratio=zero,
        period_net_amount=zero,
        previous_carry_forward_amount=zero,
        cumulative_net_amount=zero,
        settled_base_amount=zero,
        distributable_amount=zero,
        paid_amount=zero,
        carry_forward_amount=zero,
        cumulative_settled_amount=zero,
        effective_batch_id=None,
        effective_batch_no=None,
        allocation_base_amount=zero,
        candidate_ids=(1, 2),
    )

    assert preview.candidate_ids == (1, 2)
    assert "candidate_ids" not in repr(preview)
