"""Ledger transaction domain service."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Sequence

from profitshare.domain.entities import (
    Category,
    Direction,
    SETTLED_STATUS,
    Transaction as TransactionEntity,
    TransactionFilter,
)
from profitshare.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    transaction_already_settled,
    transaction_not_found,
)
from profitshare.utils.money import round2

if TYPE_CHECKING:
    from profitshare.database.base import Database


def parse_category(value) -> Category:
    """Convert a category value, raising ValidationError when unknown."""
    try:
        return Category(value)
    except ValueError:
        allowed = ", ".join(c.value for c in Category)
        raise ValidationError(f"Unknown category '{value}' (expected one of: {allowed})")


def parse_direction(value) -> Direction:
    """Convert a direction value, raising ValidationError when unknown."""
    try:
        return Direction(value)
    except ValueError:
        raise ValidationError(f"Unknown direction '{value}' (expected income, expense or neutral)")


class TransactionService:
    """Service for managing ledger transactions."""

    def __init__(self, db: "Database", logger: Optional[logging.Logger] = None):
        """Initialize transaction service.

        Args:
            db: Database instance
            logger: Optional logger; defaults to the module logger
        """
        self.db = db
        self._logger = logger or logging.getLogger(__name__)

    def add_transaction(
        self,
        transaction_time: datetime,
        bill_account: str,
        amount: Decimal,
        direction: Direction | str,
        category: Category | str = Category.MANUAL_ADD,
        status: str = SETTLED_STATUS,
        order_id: str = "",
        description: str = "",
    ) -> int:
        """Add a ledger transaction.

        Amounts are magnitudes; the direction carries the sign.

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the account is blank, the amount negative, or
                category/direction unknown
        """
        bill_account = (bill_account or "").strip()
        if not bill_account:
            raise ValidationError("Bill account cannot be empty")
        if amount < 0:
            raise ValidationError("Amount must not be negative; use the direction for sign")

        category = parse_category(category)
        direction = parse_direction(direction)
        return self.db.create_transaction(
            transaction_time=transaction_time,
            bill_account=bill_account,
            category=category.value,
            direction=direction.value,
            amount=round2(amount),
            status=(status or "").strip(),
            internal_transfer=category == Category.INTERNAL_TRANSFER,
            order_id=order_id,
            description=description,
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID."""
        return self.db.get_transaction(transaction_id)

    def list_transactions(self, filters: Optional[TransactionFilter] = None) -> list[TransactionEntity]:
        """List transactions with optional filters, newest first."""
        return self.db.list_transactions(filters)

    def _require_unsettled(self, transaction_id: int, action: str) -> TransactionEntity:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if txn.is_settled:
            self._logger.warning("Rejected %s of settled transaction %s", action, transaction_id)
            raise ConflictError(transaction_already_settled(transaction_id, action))
        return txn

    def update_transaction(
        self,
        transaction_id: int,
        status: Optional[str] = None,
        category: Optional[Category | str] = None,
        direction: Optional[Direction | str] = None,
        amount: Optional[Decimal] = None,
        description: Optional[str] = None,
    ) -> None:
        """Update a transaction that has not been incrementally settled.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ConflictError: If the transaction was consumed by a settlement
        """
        if amount is not None and amount < 0:
            raise ValidationError("Amount must not be negative; use the direction for sign")
        internal_transfer = None
        if category is not None:
            category = parse_category(category)
            internal_transfer = category == Category.INTERNAL_TRANSFER
        if direction is not None:
            direction = parse_direction(direction)
        with self.db.unit_of_work():
            self._require_unsettled(transaction_id, "edit")
            self.db.update_transaction(
                transaction_id,
                status=status,
                category=category.value if category is not None else None,
                internal_transfer=internal_transfer,
                direction=direction.value if direction is not None else None,
                amount=amount,
                description=description,
            )

    def recategorize_transactions(self, transaction_ids: Sequence[int], category: Category | str) -> int:
        """Change the category of several transactions, all or nothing.

        Raises:
            NotFoundError: If any transaction doesn't exist
            ConflictError: If any transaction was consumed by a settlement
        """
        category = parse_category(category)
        with self.db.unit_of_work():
            for transaction_id in transaction_ids:
                self._require_unsettled(transaction_id, "edit")
                self.db.update_transaction(
                    transaction_id,
                    category=category.value,
                    internal_transfer=category == Category.INTERNAL_TRANSFER,
                )
        return len(transaction_ids)

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction that has not been incrementally settled.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ConflictError: If the transaction was consumed by a settlement
        """
        with self.db.unit_of_work():
            self._require_unsettled(transaction_id, "delete")
            self.db.delete_transaction(transaction_id)
        self._logger.info("Deleted transaction %s", transaction_id)
