"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

# Import entities directly to avoid circular import through domain services
from profitshare.domain.entities import (
    Participant,
    ParticipantInput,
    SettlementAllocation,
    SettlementBatch,
    SettlementStrategy,
    Transaction,
    TransactionFilter,
)


class Database(ABC):
    """Abstract ledger store and settlement persistence interface."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Run the enclosed operations as one atomic unit.

        Commits when the block exits normally and rolls back everything
        written inside the block when it raises.
        """
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        transaction_time: datetime,
        bill_account: str,
        category: str,
        direction: str,
        amount: Decimal,
        status: str = "",
        internal_transfer: bool = False,
        order_id: str = "",
        description: str = "",
    ) -> int:
        """Create a ledger transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(self, filters: Optional[TransactionFilter] = None) -> list[Transaction]:
        """List transactions matching the filter, newest first."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        status: Optional[str] = None,
        category: Optional[str] = None,
        direction: Optional[str] = None,
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
        internal_transfer: Optional[bool] = None,
    ) -> None:
        """Update transaction fields that are not None."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def mark_transactions_settled(
        self,
        transaction_ids: Sequence[int],
        settled_at: datetime,
        batch_id: int,
        chunk_size: int = 500,
    ) -> int:
        """Stamp transactions as consumed by an incremental settlement.

        Returns the number of stamped rows.
        """
        pass

    # Participant operations
    @abstractmethod
    def list_participants(self) -> list[Participant]:
        """List participants in creation order."""
        pass

    @abstractmethod
    def replace_participants(self, inputs: Sequence[ParticipantInput]) -> list[Participant]:
        """Replace the whole participant set.

        Inputs with a known ``id`` update that participant, the others are
        created, and every participant not mentioned is deleted.
        """
        pass

    # Settlement batch operations
    @abstractmethod
    def get_effective_batch(
        self, strategy: SettlementStrategy, bill_account: str
    ) -> Optional[SettlementBatch]:
        """Get the effective batch for a scope, or None."""
        pass

    @abstractmethod
    def batch_no_exists(self, batch_no: str) -> bool:
        """Check whether a batch number is already taken."""
        pass

    @abstractmethod
    def demote_batches(self, strategy: SettlementStrategy, bill_account: str) -> int:
        """Mark every batch in a scope as non-effective. Returns affected rows."""
        pass

    @abstractmethod
    def create_settlement_batch(
        self,
        batch_no: str,
        strategy: SettlementStrategy,
        bill_account: str,
        settlement_time: datetime,
        carry_ratio: Decimal,
        period_net_amount: Decimal,
        previous_carry_forward_amount: Decimal,
        cumulative_net_amount: Decimal,
        settled_base_amount: Decimal,
        distributable_amount: Decimal,
        paid_amount: Decimal,
        carry_forward_amount: Decimal,
        cumulative_settled_amount: Decimal,
        note: str = "",
        is_effective: bool = True,
    ) -> int:
        """Insert a settlement batch. Returns batch ID."""
        pass

    @abstractmethod
    def create_allocations(
        self, batch_id: int, allocations: Iterable[SettlementAllocation]
    ) -> None:
        """Insert the allocation rows of a batch."""
        pass

    @abstractmethod
    def get_settlement_batch(self, batch_id: int) -> Optional[SettlementBatch]:
        """Get a settlement batch with its allocations."""
        pass

    @abstractmethod
    def list_settlement_batches(
        self,
        strategy: Optional[SettlementStrategy] = None,
        bill_account: Optional[str] = None,
    ) -> list[SettlementBatch]:
        """List batches newest first, with allocations."""
        pass

    @abstractmethod
    def list_scope_allocations(
        self, strategy: SettlementStrategy, bill_account: str
    ) -> list[SettlementAllocation]:
        """List every allocation row of every batch in a scope."""
        pass
