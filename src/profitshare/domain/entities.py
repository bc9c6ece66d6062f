"""Domain model entities for profitshare.

These are pure data classes representing ledger and settlement concepts,
independent of the database schema. Enumerated columns are converted to
their enum types once, when a row leaves the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from profitshare.utils.money import ZERO


class Category(str, Enum):
    """Ledger transaction category."""

    MAIN_BUSINESS = "main_business"
    MANUAL_ADD = "manual_add"
    TRAFFIC_COST = "traffic_cost"
    PLATFORM_COMMISSION = "platform_commission"
    CLOSED = "closed"
    BUSINESS_REFUND_EXPENSE = "business_refund_expense"
    INTERNAL_TRANSFER = "internal_transfer"
    OTHER_REFUND = "other_refund"
    OTHER = "other"


class Direction(str, Enum):
    """Money flow direction of a ledger transaction."""

    INCOME = "income"
    EXPENSE = "expense"
    NEUTRAL = "neutral"


class SettlementStrategy(str, Enum):
    """Temporal strategy used to compute a settlement base."""

    CUMULATIVE = "cumulative"
    INCREMENTAL = "incremental"


MAIN_CATEGORIES = frozenset({Category.MAIN_BUSINESS, Category.MANUAL_ADD})

PROFIT_CATEGORIES = frozenset(
    {
        Category.MAIN_BUSINESS,
        Category.MANUAL_ADD,
        Category.TRAFFIC_COST,
        Category.PLATFORM_COMMISSION,
        Category.CLOSED,
        Category.BUSINESS_REFUND_EXPENSE,
    }
)

SETTLED_STATUS = "交易成功"

PENDING_STATUSES = frozenset(
    {
        "等待对方确认收货",
        "等待发货",
        "等待对方付款",
        "等待确认收货",
    }
)


@dataclass(frozen=True)
class Transaction:
    """Classified ledger transaction."""

    id: int
    transaction_time: datetime
    bill_account: str
    category: Category
    direction: Direction
    status: str
    amount: Decimal
    internal_transfer: bool
    order_id: str
    description: str
    incremental_settled_at: Optional[datetime]
    incremental_settlement_batch_id: Optional[int]
    created_at: datetime

    @property
    def is_settled(self) -> bool:
        """Whether an incremental settlement already consumed this record."""
        return (
            self.incremental_settled_at is not None
            or self.incremental_settlement_batch_id is not None
        )

    @property
    def deletable(self) -> bool:
        return not self.is_settled


@dataclass(frozen=True)
class TransactionFilter:
    """Query filter for the ledger store.

    Time bounds are inclusive. ``categories`` restricts to a set of
    categories; ``unsettled_only`` keeps records without an incremental
    settlement stamp.
    """

    start: Optional[datetime] = None
    end: Optional[datetime] = None
    bill_account: Optional[str] = None
    categories: Optional[frozenset[Category]] = None
    direction: Optional[Direction] = None
    status: Optional[str] = None
    unsettled_only: bool = False
    exclude_internal_transfers: bool = False


@dataclass(frozen=True)
class ProfitSummary:
    """Net-amount buckets computed from a transaction slice."""

    settled_income: Decimal = ZERO
    pending_income: Decimal = ZERO
    expense: Decimal = ZERO
    traffic_cost: Decimal = ZERO
    platform_commission: Decimal = ZERO
    closed_amount: Decimal = ZERO
    closed_income: Decimal = ZERO
    closed_expense: Decimal = ZERO
    closed_neutral: Decimal = ZERO
    refund_expense: Decimal = ZERO
    closed_net_contribution: Decimal = ZERO
    pure_profit_settled: Decimal = ZERO
    pure_profit_with_pending: Decimal = ZERO
    settlement_net: Decimal = ZERO


@dataclass(frozen=True)
class Participant:
    """Profit participant."""

    id: int
    name: str
    bill_account: Optional[str]
    ratio: Decimal
    note: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ParticipantInput:
    """One entry of a full-replace participant save."""

    name: str
    ratio: Decimal
    bill_account: Optional[str] = None
    note: str = ""
    id: Optional[int] = None


@dataclass(frozen=True)
class SettlementAllocation:
    """Per-participant allocation row of a settlement batch.

    ``id`` and ``settlement_batch_id`` are ``None`` for preview rows that
    have not been persisted.
    """

    participant_id: Optional[int]
    participant_name: str
    participant_bill_account: Optional[str]
    ratio: Decimal
    amount: Decimal
    account_held_amount: Decimal
    actual_transfer_amount: Decimal
    note: str
    id: Optional[int] = None
    settlement_batch_id: Optional[int] = None


@dataclass(frozen=True)
class SettlementBatch:
    """Persisted, immutable settlement batch."""

    id: int
    batch_no: str
    strategy: SettlementStrategy
    bill_account: str
    settlement_time: datetime
    carry_ratio: Decimal
    period_net_amount: Decimal
    previous_carry_forward_amount: Decimal
    cumulative_net_amount: Decimal
    settled_base_amount: Decimal
    distributable_amount: Decimal
    paid_amount: Decimal
    carry_forward_amount: Decimal
    cumulative_settled_amount: Decimal
    note: str
    is_effective: bool
    created_at: datetime
    allocations: tuple[SettlementAllocation, ...] = ()


@dataclass(frozen=True)
class PayoutAmounts:
    """Result of the payout calculation."""

    distributable_amount: Decimal
    paid_amount: Decimal
    carry_forward_amount: Decimal
    cumulative_settled_amount: Decimal


@dataclass(frozen=True)
class StrategyResolution:
    """Period and cumulative nets resolved for one settlement scope."""

    strategy: SettlementStrategy
    bill_account: str
    settlement_time: datetime
    period_net_amount: Decimal
    cumulative_net_amount: Decimal
    previous_cumulative_net_amount: Decimal
    settled_base_amount: Decimal
    previous_carry_forward_amount: Decimal
    effective_batch_id: Optional[int]
    effective_batch_no: Optional[str]
    candidate_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class SettlementPreview:
    """Computed, not yet persisted settlement."""

    strategy: SettlementStrategy
    bill_account: str
    settlement_time: datetime
    carry_ratio: Decimal
    period_net_amount: Decimal
    previous_carry_forward_amount: Decimal
    cumulative_net_amount: Decimal
    settled_base_amount: Decimal
    distributable_amount: Decimal
    paid_amount: Decimal
    carry_forward_amount: Decimal
    cumulative_settled_amount: Decimal
    effective_batch_id: Optional[int]
    effective_batch_no: Optional[str]
    allocation_base_amount: Decimal
    allocations: tuple[SettlementAllocation, ...] = ()
    candidate_ids: tuple[int, ...] = field(default=(), repr=False)
