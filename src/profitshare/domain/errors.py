"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as touching already settled ledger records."""


class UnsupportedOperationError(DomainError):
    """Operation that is permanently rejected."""


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def settlement_batch_not_found(batch_id: int) -> str:
    """Return message for missing settlement batch."""
    return f"Settlement batch {batch_id} not found"


def transaction_already_settled(transaction_id: int, action: str) -> str:
    """Return message when a transaction was consumed by an incremental settlement."""
    return (
        f"Cannot {action} transaction {transaction_id}: it has already been "
        "marked by an incremental settlement"
    )


def invalid_strategy(value: str) -> str:
    """Return message for an unknown settlement strategy."""
    return f"Unknown settlement strategy '{value}' (expected 'cumulative' or 'incremental')"


def duplicate_bill_account(bill_account: str) -> str:
    """Return message when a bill account is bound to more than one participant."""
    return f"Bill account '{bill_account}' can only be bound to one participant"


def ratio_sum_mismatch(total: str) -> str:
    """Return message when participant ratios do not add up to 100%."""
    return f"Participant ratios must sum to 1.000000 (got {total})"


def batch_delete_rejected(batch_id: int) -> str:
    """Return message for the permanent settlement batch deletion rejection."""
    return (
        f"Settlement batch {batch_id} cannot be deleted: "
        "historical settlement batches are append-only"
    )
