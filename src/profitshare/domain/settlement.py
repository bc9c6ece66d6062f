"""Settlement batch domain service.

A preview resolves the strategy, computes the payout and builds the
allocations without writing anything. Creating a batch re-runs the same
pipeline inside one unit of work, scoped per (strategy, bill account), then
demotes the previous effective batch, inserts the new batch and its
allocation snapshot, and for the incremental strategy stamps the consumed
transactions.
"""

import logging
import random
import string
import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Iterator, Optional, Union

from profitshare.domain.allocation import AllocationEngine
from profitshare.domain.entities import (
    SettlementBatch,
    SettlementPreview,
    SettlementStrategy,
)
from profitshare.domain.errors import (
    ConflictError,
    NotFoundError,
    UnsupportedOperationError,
    batch_delete_rejected,
    settlement_batch_not_found,
)
from profitshare.domain.payout import calculate_payout, clamp_carry_ratio
from profitshare.domain.serialization import preview_to_dict, validate_preview_payload
from profitshare.domain.strategy import (
    SettlementStrategyResolver,
    normalize_bill_account,
    normalize_strategy,
)
from profitshare.settings import ProfitPolicy

if TYPE_CHECKING:
    from profitshare.database.base import Database

BATCH_NO_PREFIX = "SB"
BATCH_NO_ALPHABET = string.digits + string.ascii_uppercase
BATCH_NO_SUFFIX_LENGTH = 4
BATCH_NO_ATTEMPTS = 5
STAMP_CHUNK_SIZE = 500

_scope_locks: dict[tuple[str, str], threading.Lock] = {}
_scope_locks_guard = threading.Lock()


@contextmanager
def scope_lock(strategy: SettlementStrategy, bill_account: str) -> Iterator[None]:
    """Serialize batch creation within one (strategy, bill account) scope."""
    key = (strategy.value, bill_account)
    with _scope_locks_guard:
        lock = _scope_locks.setdefault(key, threading.Lock())
    with lock:
        yield


def generate_batch_no(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """Generate ``SB`` + ``YYYYMMDDHHMMSS`` + four base-36 characters."""
    now = now or datetime.now()
    rng = rng or random.SystemRandom()
    suffix = "".join(rng.choice(BATCH_NO_ALPHABET) for _ in range(BATCH_NO_SUFFIX_LENGTH))
    return f"{BATCH_NO_PREFIX}{now:%Y%m%d%H%M%S}{suffix}"


class SettlementService:
    """Service for previewing, creating and listing settlement batches."""

    def __init__(
        self,
        db: "Database",
        policy: Optional[ProfitPolicy] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize settlement service.

        Args:
            db: Database instance
            policy: Aggregation policy; defaults to ProfitPolicy()
            logger: Optional logger; defaults to the module logger
        """
        self.db = db
        self.policy = policy or ProfitPolicy()
        self._logger = logger or logging.getLogger(__name__)
        self.resolver = SettlementStrategyResolver(db, self.policy)
        self.allocation_engine = AllocationEngine(db, self.resolver.cumulative_net)

    def _compute(
        self,
        settlement_time: datetime,
        strategy: SettlementStrategy,
        bill_account: str,
        carry_ratio: Decimal,
    ) -> SettlementPreview:
        resolution = self.resolver.resolve(settlement_time, strategy, bill_account)
        payout = calculate_payout(
            resolution.cumulative_net_amount, resolution.settled_base_amount, carry_ratio
        )
        allocations = self.allocation_engine.build_allocations(
            self.db.list_participants(),
            cumulative_base_amount=payout.cumulative_settled_amount,
            batch_base_amount=payout.paid_amount,
            settlement_time=settlement_time,
            strategy=strategy,
            bill_account=bill_account,
        )
        return SettlementPreview(
            strategy=strategy,
            bill_account=bill_account,
            settlement_time=settlement_time,
            carry_ratio=carry_ratio,
            period_net_amount=resolution.period_net_amount,
            previous_carry_forward_amount=resolution.previous_carry_forward_amount,
            cumulative_net_amount=resolution.cumulative_net_amount,
            settled_base_amount=resolution.settled_base_amount,
            distributable_amount=payout.distributable_amount,
            paid_amount=payout.paid_amount,
            carry_forward_amount=payout.carry_forward_amount,
            cumulative_settled_amount=payout.cumulative_settled_amount,
            effective_batch_id=resolution.effective_batch_id,
            effective_batch_no=resolution.effective_batch_no,
            allocation_base_amount=payout.paid_amount,
            allocations=allocations,
            candidate_ids=resolution.candidate_ids,
        )

    def preview(
        self,
        settlement_time: datetime,
        strategy: Union[SettlementStrategy, str, None] = None,
        bill_account: Optional[str] = None,
        carry_ratio: Any = None,
    ) -> SettlementPreview:
        """Compute a settlement without persisting anything.

        Args:
            settlement_time: Settlement cut-off time
            strategy: "cumulative" (default) or "incremental"
            bill_account: Scope account; empty means all accounts
            carry_ratio: Share of a positive distributable amount to withhold;
                clamped to [0, 1] and truncated to two decimals

        Raises:
            ValidationError: If the strategy is unknown
        """
        safe_strategy = normalize_strategy(strategy)
        safe_bill_account = normalize_bill_account(bill_account)
        preview = self._compute(
            settlement_time, safe_strategy, safe_bill_account, clamp_carry_ratio(carry_ratio)
        )
        self._logger.debug(
            "Previewed %s settlement for %r at %s: paid %s",
            safe_strategy.value,
            safe_bill_account,
            settlement_time,
            preview.paid_amount,
        )
        return preview

    def preview_payload(
        self,
        settlement_time: datetime,
        strategy: Union[SettlementStrategy, str, None] = None,
        bill_account: Optional[str] = None,
        carry_ratio: Any = None,
    ) -> dict[str, Any]:
        """Preview serialized for the boundary, with required fields checked."""
        preview = self.preview(settlement_time, strategy, bill_account, carry_ratio)
        return validate_preview_payload(preview_to_dict(preview))

    def _next_batch_no(self) -> str:
        for _ in range(BATCH_NO_ATTEMPTS):
            batch_no = generate_batch_no()
            if not self.db.batch_no_exists(batch_no):
                return batch_no
            self._logger.warning("Batch number %s already taken, regenerating", batch_no)
        raise ConflictError("Could not generate a unique settlement batch number")

    def create(
        self,
        settlement_time: datetime,
        strategy: Union[SettlementStrategy, str, None] = None,
        bill_account: Optional[str] = None,
        carry_ratio: Any = None,
        note: Optional[str] = None,
    ) -> SettlementBatch:
        """Create and persist a new effective settlement batch.

        All writes happen in one unit of work; on any failure nothing is
        persisted and no transaction is stamped.

        Returns:
            The persisted batch with its allocations

        Raises:
            ValidationError: If the strategy is unknown
            ConflictError: If candidate transactions were stamped concurrently
                or no unique batch number could be generated
        """
        safe_strategy = normalize_strategy(strategy)
        safe_bill_account = normalize_bill_account(bill_account)
        safe_carry_ratio = clamp_carry_ratio(carry_ratio)

        with scope_lock(safe_strategy, safe_bill_account):
            try:
                with self.db.unit_of_work():
                    computed = self._compute(
                        settlement_time, safe_strategy, safe_bill_account, safe_carry_ratio
                    )
                    self.db.demote_batches(safe_strategy, safe_bill_account)
                    batch_id = self.db.create_settlement_batch(
                        batch_no=self._next_batch_no(),
                        strategy=safe_strategy,
                        bill_account=safe_bill_account,
                        settlement_time=settlement_time,
                        carry_ratio=safe_carry_ratio,
                        period_net_amount=computed.period_net_amount,
                        previous_carry_forward_amount=computed.previous_carry_forward_amount,
                        cumulative_net_amount=computed.cumulative_net_amount,
                        settled_base_amount=computed.settled_base_amount,
                        distributable_amount=computed.distributable_amount,
                        paid_amount=computed.paid_amount,
                        carry_forward_amount=computed.carry_forward_amount,
                        cumulative_settled_amount=computed.cumulative_settled_amount,
                        note=(note or "").strip(),
                        is_effective=True,
                    )
                    if computed.allocations:
                        self.db.create_allocations(batch_id, computed.allocations)
                    stamped = 0
                    if safe_strategy == SettlementStrategy.INCREMENTAL and computed.candidate_ids:
                        stamped = self.db.mark_transactions_settled(
                            computed.candidate_ids,
                            settled_at=settlement_time,
                            batch_id=batch_id,
                            chunk_size=STAMP_CHUNK_SIZE,
                        )
            except Exception as e:
                self._logger.warning(
                    "Settlement batch creation failed for %s scope %r: %s",
                    safe_strategy.value,
                    safe_bill_account,
                    e,
                )
                raise

        batch = self.get_batch(batch_id)
        self._logger.info(
            "Created settlement batch %s (%s, scope %r): paid %s, stamped %d transactions",
            batch.batch_no,
            batch.strategy.value,
            batch.bill_account,
            batch.paid_amount,
            stamped,
        )
        return batch

    def list_batches(
        self,
        strategy: Union[SettlementStrategy, str, None] = None,
        bill_account: Optional[str] = None,
    ) -> list[SettlementBatch]:
        """List settlement batches newest first, with allocations."""
        safe_strategy = normalize_strategy(strategy) if strategy else None
        return self.db.list_settlement_batches(safe_strategy, normalize_bill_account(bill_account))

    def get_batch(self, batch_id: int) -> SettlementBatch:
        """Get a settlement batch by ID.

        Raises:
            NotFoundError: If the batch doesn't exist
        """
        batch = self.db.get_settlement_batch(batch_id)
        if batch is None:
            raise NotFoundError(settlement_batch_not_found(batch_id))
        return batch

    def delete_batch(self, batch_id: int) -> None:
        """Reject deletion of a settlement batch.

        Historical batches are append-only; corrections go through a new
        batch.

        Raises:
            UnsupportedOperationError: Always
        """
        self._logger.warning("Rejected deletion of settlement batch %s", batch_id)
        raise UnsupportedOperationError(batch_delete_rejected(batch_id))
