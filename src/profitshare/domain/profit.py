"""Profit aggregation domain service."""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional

from profitshare.domain.entities import (
    Category,
    Direction,
    MAIN_CATEGORIES,
    PENDING_STATUSES,
    PROFIT_CATEGORIES,
    SETTLED_STATUS,
    ProfitSummary,
    Transaction,
    TransactionFilter,
)
from profitshare.settings import ProfitPolicy
from profitshare.utils.money import round2

if TYPE_CHECKING:
    from profitshare.database.base import Database

SETTLED_INCOME = "settled_income"
PENDING_INCOME = "pending_income"
EXPENSE = "expense"
TRAFFIC_COST = "traffic_cost"
PLATFORM_COMMISSION = "platform_commission"
CLOSED_INCOME = "closed_income"
CLOSED_EXPENSE = "closed_expense"
CLOSED_NEUTRAL = "closed_neutral"
REFUND_EXPENSE = "refund_expense"


def classify_bucket(record: Transaction) -> Optional[str]:
    """Route a record to the single bucket it feeds, or None.

    Internal transfers and categories outside the profit set never feed
    a bucket. Main-category income with a status that is neither settled
    nor pending is ignored as well.
    """
    if record.internal_transfer:
        return None

    if record.category in MAIN_CATEGORIES:
        if record.direction == Direction.INCOME:
            if record.status == SETTLED_STATUS:
                return SETTLED_INCOME
            if record.status in PENDING_STATUSES:
                return PENDING_INCOME
            return None
        if record.direction == Direction.EXPENSE:
            return EXPENSE
        return None

    if record.category == Category.TRAFFIC_COST:
        return TRAFFIC_COST
    if record.category == Category.PLATFORM_COMMISSION:
        return PLATFORM_COMMISSION
    if record.category == Category.BUSINESS_REFUND_EXPENSE:
        return REFUND_EXPENSE
    if record.category == Category.CLOSED:
        if record.direction == Direction.INCOME:
            return CLOSED_INCOME
        if record.direction == Direction.EXPENSE:
            return CLOSED_EXPENSE
        return CLOSED_NEUTRAL
    return None


def filter_records(
    records: Iterable[Transaction],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    bill_account: Optional[str] = None,
) -> list[Transaction]:
    """Apply an inclusive time range and bill account filter to a slice."""
    result = []
    for record in records:
        if start is not None and record.transaction_time < start:
            continue
        if end is not None and record.transaction_time > end:
            continue
        if bill_account and record.bill_account != bill_account:
            continue
        result.append(record)
    return result


def compute_profit_summary(
    records: Iterable[Transaction],
    policy: ProfitPolicy,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    bill_account: Optional[str] = None,
) -> ProfitSummary:
    """Reduce a transaction slice to the profit summary buckets.

    The policy is applied once, uniformly, to the whole computation. The
    optional time range and bill account narrow the slice first.
    """
    if start is not None or end is not None or bill_account:
        records = filter_records(records, start, end, bill_account)

    totals: dict[str, Decimal] = defaultdict(Decimal)
    for record in records:
        bucket = classify_bucket(record)
        if bucket is not None:
            totals[bucket] += record.amount

    settled_income = round2(totals[SETTLED_INCOME])
    pending_income = round2(totals[PENDING_INCOME])
    expense = round2(totals[EXPENSE])
    traffic_cost = round2(totals[TRAFFIC_COST])
    platform_commission = round2(totals[PLATFORM_COMMISSION])
    closed_income = round2(totals[CLOSED_INCOME])
    closed_expense = round2(totals[CLOSED_EXPENSE])
    closed_neutral = round2(totals[CLOSED_NEUTRAL])
    refund_expense = round2(totals[REFUND_EXPENSE])
    closed_amount = round2(closed_income + closed_expense + closed_neutral)

    closed_net_contribution = round2(0)
    if policy.include_closed_in_profit:
        closed_net_contribution = round2(closed_income - closed_expense)

    operating_costs = round2(expense + traffic_cost + platform_commission)
    report_refund = refund_expense if policy.deduct_refund_in_report else round2(0)

    pure_profit_settled = round2(
        settled_income - operating_costs - report_refund + closed_net_contribution
    )
    pure_profit_with_pending = round2(pure_profit_settled + pending_income)
    settlement_net = round2(
        settled_income - operating_costs - refund_expense + closed_net_contribution
    )

    return ProfitSummary(
        settled_income=settled_income,
        pending_income=pending_income,
        expense=expense,
        traffic_cost=traffic_cost,
        platform_commission=platform_commission,
        closed_amount=closed_amount,
        closed_income=closed_income,
        closed_expense=closed_expense,
        closed_neutral=closed_neutral,
        refund_expense=refund_expense,
        closed_net_contribution=closed_net_contribution,
        pure_profit_settled=pure_profit_settled,
        pure_profit_with_pending=pure_profit_with_pending,
        settlement_net=settlement_net,
    )


class ProfitService:
    """Service for querying profit summaries from the ledger."""

    def __init__(
        self,
        db: "Database",
        policy: Optional[ProfitPolicy] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize profit service.

        Args:
            db: Database instance
            policy: Aggregation policy; defaults to ProfitPolicy()
            logger: Optional logger; defaults to the module logger
        """
        self.db = db
        self.policy = policy or ProfitPolicy()
        self._logger = logger or logging.getLogger(__name__)

    def get_transactions(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        bill_account: Optional[str] = None,
    ) -> list[Transaction]:
        """Get the profit-relevant transactions in a time range and account."""
        return self.db.list_transactions(
            TransactionFilter(
                start=start,
                end=end,
                bill_account=bill_account or None,
                categories=PROFIT_CATEGORIES,
                exclude_internal_transfers=True,
            )
        )

    def get_summary(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        bill_account: Optional[str] = None,
    ) -> ProfitSummary:
        """Compute the profit summary for a time range and account.

        Args:
            start: Optional inclusive start time
            end: Optional inclusive end time
            bill_account: Optional bill account; empty means all accounts

        Returns:
            ProfitSummary for the matching transactions
        """
        records = self.get_transactions(start=start, end=end, bill_account=bill_account)
        summary = compute_profit_summary(records, self.policy)
        self._logger.debug(
            "Profit summary over %d records (account=%r): settlement net %s",
            len(records),
            bill_account or "",
            summary.settlement_net,
        )
        return summary
