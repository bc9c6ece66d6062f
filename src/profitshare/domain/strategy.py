"""Settlement strategy resolution."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional, Union

from profitshare.domain.entities import (
    Category,
    Direction,
    MAIN_CATEGORIES,
    PROFIT_CATEGORIES,
    SETTLED_STATUS,
    SettlementStrategy,
    StrategyResolution,
    Transaction,
    TransactionFilter,
)
from profitshare.domain.errors import ValidationError, invalid_strategy
from profitshare.domain.profit import compute_profit_summary
from profitshare.settings import ProfitPolicy
from profitshare.utils.money import round2

if TYPE_CHECKING:
    from profitshare.database.base import Database

logger = logging.getLogger(__name__)

DIRECT_COST_CATEGORIES = frozenset(
    {
        Category.TRAFFIC_COST,
        Category.PLATFORM_COMMISSION,
        Category.BUSINESS_REFUND_EXPENSE,
    }
)


def normalize_strategy(value: Union[SettlementStrategy, str, None]) -> SettlementStrategy:
    """Resolve a strategy input; a missing value means cumulative."""
    if value is None:
        return SettlementStrategy.CUMULATIVE
    if isinstance(value, SettlementStrategy):
        return value
    normalized = value.strip().lower()
    if not normalized:
        return SettlementStrategy.CUMULATIVE
    try:
        return SettlementStrategy(normalized)
    except ValueError:
        raise ValidationError(invalid_strategy(value))


def normalize_bill_account(value: Optional[str]) -> str:
    """Trim a bill account scope; empty string means all accounts."""
    return (value or "").strip()


def is_incremental_candidate(record: Transaction, include_closed_in_profit: bool) -> bool:
    """Whether a record takes part in an incremental settlement scan."""
    if record.internal_transfer:
        return False
    if record.category in MAIN_CATEGORIES:
        if record.direction == Direction.INCOME:
            return record.status == SETTLED_STATUS
        return record.direction == Direction.EXPENSE
    if record.category in DIRECT_COST_CATEGORIES:
        return True
    if record.category == Category.CLOSED:
        return include_closed_in_profit and record.direction in (
            Direction.INCOME,
            Direction.EXPENSE,
        )
    return False


def incremental_net(
    records: Iterable[Transaction], policy: ProfitPolicy
) -> tuple[Decimal, tuple[int, ...]]:
    """Net amount and ids of the incremental candidates in a slice."""
    candidates = [
        record
        for record in records
        if is_incremental_candidate(record, policy.include_closed_in_profit)
    ]
    summary = compute_profit_summary(candidates, policy)
    return summary.settlement_net, tuple(record.id for record in candidates)


class SettlementStrategyResolver:
    """Resolve period and cumulative nets for a settlement scope."""

    def __init__(self, db: "Database", policy: ProfitPolicy):
        """Initialize the resolver.

        Args:
            db: Database instance
            policy: Aggregation policy applied to every scan
        """
        self.db = db
        self.policy = policy

    def _scan(
        self, settlement_time: datetime, bill_account: str, unsettled_only: bool = False
    ) -> list[Transaction]:
        return self.db.list_transactions(
            TransactionFilter(
                end=settlement_time,
                bill_account=bill_account or None,
                categories=PROFIT_CATEGORIES,
                unsettled_only=unsettled_only,
                exclude_internal_transfers=True,
            )
        )

    def cumulative_net(
        self, strategy: SettlementStrategy, settlement_time: datetime, bill_account: str
    ) -> Decimal:
        """Life-to-date settlement net for an account scope as of a time."""
        records = self._scan(settlement_time, bill_account)
        if strategy == SettlementStrategy.INCREMENTAL:
            net, _ = incremental_net(records, self.policy)
            return net
        return compute_profit_summary(records, self.policy).settlement_net

    def resolve(
        self,
        settlement_time: datetime,
        strategy: SettlementStrategy,
        bill_account: str = "",
    ) -> StrategyResolution:
        """Resolve nets, settled base and incremental candidates for a scope."""
        effective_batch = self.db.get_effective_batch(strategy, bill_account)
        previous_cumulative_net = round2(0)
        settled_base = round2(0)
        if effective_batch is not None:
            previous_cumulative_net = round2(effective_batch.cumulative_net_amount)
            settled_base = round2(effective_batch.cumulative_settled_amount)

        candidate_ids: tuple[int, ...] = ()
        if strategy == SettlementStrategy.INCREMENTAL:
            period_net, candidate_ids = incremental_net(
                self._scan(settlement_time, bill_account, unsettled_only=True), self.policy
            )
            cumulative_net = self.cumulative_net(strategy, settlement_time, bill_account)
        else:
            cumulative_net = self.cumulative_net(strategy, settlement_time, bill_account)
            period_net = round2(cumulative_net - previous_cumulative_net)

        logger.debug(
            "Resolved %s scope %r at %s: period %s, cumulative %s, %d candidates",
            strategy.value,
            bill_account,
            settlement_time,
            period_net,
            cumulative_net,
            len(candidate_ids),
        )
        return StrategyResolution(
            strategy=strategy,
            bill_account=bill_account,
            settlement_time=settlement_time,
            period_net_amount=period_net,
            cumulative_net_amount=cumulative_net,
            previous_cumulative_net_amount=previous_cumulative_net,
            settled_base_amount=settled_base,
            previous_carry_forward_amount=round2(previous_cumulative_net - settled_base),
            effective_batch_id=effective_batch.id if effective_batch else None,
            effective_batch_no=effective_batch.batch_no if effective_batch else None,
            candidate_ids=candidate_ids,
        )
