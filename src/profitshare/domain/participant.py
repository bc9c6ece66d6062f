"""Profit participant domain service."""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from profitshare.domain.entities import Participant, ParticipantInput
from profitshare.domain.errors import (
    ValidationError,
    duplicate_bill_account,
    ratio_sum_mismatch,
)
from profitshare.utils.money import format_ratio, round6, to_decimal

if TYPE_CHECKING:
    from profitshare.database.base import Database

RATIO_TOLERANCE = Decimal("0.000001")
ONE = Decimal("1")


def normalize_bill_account(value: Optional[str]) -> Optional[str]:
    """Trim a participant bill account; blank becomes None."""
    normalized = (value or "").strip()
    return normalized or None


def total_ratio(participants: Iterable[Participant]) -> str:
    """Sum of participant ratios formatted to six decimals."""
    return format_ratio(sum((p.ratio for p in participants), Decimal("0")))


def validate_participant_inputs(inputs: Sequence[ParticipantInput]) -> list[ParticipantInput]:
    """Validate and normalize a full participant set.

    Raises:
        ValidationError: If the set is empty, a name is blank, a ratio is out
            of range, a bill account is bound twice, or the ratios do not sum
            to 1.000000
    """
    if not inputs:
        raise ValidationError("At least one participant is required")

    normalized: list[ParticipantInput] = []
    seen_accounts: set[str] = set()
    total = Decimal("0")
    for item in inputs:
        name = (item.name or "").strip()
        if not name:
            raise ValidationError("Participant name cannot be empty")

        try:
            ratio = round6(to_decimal(item.ratio))
        except ArithmeticError:
            raise ValidationError(f"Invalid ratio for participant '{name}': {item.ratio!r}")
        if not ratio.is_finite() or ratio < 0 or ratio > 1:
            raise ValidationError(f"Ratio for participant '{name}' must be between 0 and 1")
        total += ratio

        bill_account = normalize_bill_account(item.bill_account)
        if bill_account is not None:
            if bill_account in seen_accounts:
                raise ValidationError(duplicate_bill_account(bill_account))
            seen_accounts.add(bill_account)

        normalized.append(
            ParticipantInput(
                id=item.id,
                name=name,
                bill_account=bill_account,
                ratio=ratio,
                note=(item.note or "").strip(),
            )
        )

    total = round6(total)
    if abs(total - ONE) >= RATIO_TOLERANCE:
        raise ValidationError(ratio_sum_mismatch(format_ratio(total)))
    return normalized


class ParticipantService:
    """Service for managing the profit participant set."""

    def __init__(self, db: "Database", logger: Optional[logging.Logger] = None):
        """Initialize participant service.

        Args:
            db: Database instance
            logger: Optional logger; defaults to the module logger
        """
        self.db = db
        self._logger = logger or logging.getLogger(__name__)

    def list_participants(self) -> list[Participant]:
        """List participants in creation order."""
        return self.db.list_participants()

    def save_participants(self, inputs: Sequence[ParticipantInput]) -> list[Participant]:
        """Replace the whole participant set atomically.

        Args:
            inputs: The complete new participant set

        Returns:
            The saved participants

        Raises:
            ValidationError: If the set violates a participant invariant
        """
        try:
            normalized = validate_participant_inputs(inputs)
        except ValidationError as e:
            self._logger.warning("Rejected participant save: %s", e)
            raise

        with self.db.unit_of_work():
            self.db.replace_participants(normalized)
        saved = self.db.list_participants()
        self._logger.info("Saved %d profit participants", len(saved))
        return saved
