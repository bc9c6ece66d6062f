"""Allocation of settlement payouts across profit participants.

Rounding slack is always assigned to the single entry with the largest
absolute weight (first one on ties). Account-held amounts spread the
cumulative settled total across bound bill accounts in proportion to each
account's own net contribution, minus what earlier batches in the same
scope already recorded as held.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from profitshare.domain.entities import (
    Participant,
    SettlementAllocation,
    SettlementStrategy,
)
from profitshare.utils.money import round2

if TYPE_CHECKING:
    from profitshare.database.base import Database

logger = logging.getLogger(__name__)

HELD_NUDGE_LIMIT = Decimal("0.05")

AccountNetResolver = Callable[[SettlementStrategy, datetime, str], Decimal]


def pick_adjust_index(weights: Sequence[Decimal]) -> int:
    """Index of the largest absolute weight, first on ties; -1 when empty."""
    picked_index = -1
    picked_weight: Optional[Decimal] = None
    for index, weight in enumerate(weights):
        current = abs(weight)
        if picked_weight is None or current > picked_weight:
            picked_index = index
            picked_weight = current
    return picked_index


def split_by_ratio(ratios: Sequence[Decimal], base_amount: Decimal) -> list[Decimal]:
    """Split ``base_amount`` by ratio so the parts sum exactly to it."""
    if not ratios:
        return []

    base_amount = round2(base_amount)
    amounts = [round2(base_amount * ratio) for ratio in ratios]
    delta = round2(base_amount - sum(amounts, Decimal("0")))
    if delta != 0:
        adjust_index = pick_adjust_index(ratios)
        amounts[adjust_index] = round2(amounts[adjust_index] + delta)
    return amounts


def scale_account_contributions(
    contributions: dict[str, Decimal], base_amount: Decimal
) -> dict[str, Decimal]:
    """Scale account contributions so they sum to ``base_amount``.

    When the contributions net to zero every account gets zero.
    """
    if not contributions:
        return {}

    accounts = list(contributions)
    nets = [round2(contributions[account]) for account in accounts]
    total_net = round2(sum(nets, Decimal("0")))
    if total_net == 0:
        return {account: round2(0) for account in accounts}

    base_amount = round2(base_amount)
    held = [round2(net * base_amount / total_net) for net in nets]
    delta = round2(base_amount - sum(held, Decimal("0")))
    if delta != 0:
        adjust_index = pick_adjust_index(nets)
        held[adjust_index] = round2(held[adjust_index] + delta)
    return dict(zip(accounts, held))


def participant_key(
    participant_id: Optional[int], name: str, bill_account: Optional[str]
) -> str:
    """Key used to match allocation history to participants."""
    if participant_id is not None:
        return f"id:{participant_id}"
    return f"{name}|{bill_account or ''}"


def sum_previous_allocations(
    allocations: Sequence[SettlementAllocation],
) -> dict[str, tuple[Decimal, Decimal]]:
    """Sum (amount, account-held) per participant key."""
    sums: dict[str, tuple[Decimal, Decimal]] = {}
    for row in allocations:
        key = participant_key(row.participant_id, row.participant_name, row.participant_bill_account)
        amount, held = sums.get(key, (round2(0), round2(0)))
        sums[key] = (round2(amount + row.amount), round2(held + row.account_held_amount))
    return sums


def bound_accounts(participants: Sequence[Participant]) -> list[str]:
    """Distinct non-empty bill accounts, in participant order."""
    accounts: list[str] = []
    for participant in participants:
        account = (participant.bill_account or "").strip()
        if account and account not in accounts:
            accounts.append(account)
    return accounts


def build_allocation_rows(
    participants: Sequence[Participant],
    batch_base_amount: Decimal,
    held_targets: dict[str, Decimal],
    previous_sums: dict[str, tuple[Decimal, Decimal]],
) -> list[SettlementAllocation]:
    """Combine the batch-owed split with the account-held reconciliation."""
    if not participants:
        return []

    amounts = split_by_ratio([p.ratio for p in participants], batch_base_amount)
    rows: list[SettlementAllocation] = []
    for participant, amount in zip(participants, amounts):
        account = (participant.bill_account or "").strip()
        _, previous_held = previous_sums.get(
            participant_key(participant.id, participant.name, participant.bill_account),
            (round2(0), round2(0)),
        )
        account_held = round2(0)
        if account:
            account_held = round2(held_targets.get(account, round2(0)) - previous_held)
        rows.append(
            SettlementAllocation(
                participant_id=participant.id,
                participant_name=participant.name,
                participant_bill_account=participant.bill_account,
                ratio=participant.ratio,
                amount=amount,
                account_held_amount=account_held,
                actual_transfer_amount=round2(amount - account_held),
                note=participant.note,
            )
        )

    held_delta = round2(
        round2(batch_base_amount) - sum((row.account_held_amount for row in rows), Decimal("0"))
    )
    # Only bound participants hold money in an account.
    bound_indexes = [
        index for index, row in enumerate(rows) if (row.participant_bill_account or "").strip()
    ]
    # Larger gaps are expected when unbound participants exist.
    if bound_indexes and held_delta != 0 and abs(held_delta) <= HELD_NUDGE_LIMIT:
        adjust_index = bound_indexes[
            pick_adjust_index([rows[index].account_held_amount for index in bound_indexes])
        ]
        row = rows[adjust_index]
        account_held = round2(row.account_held_amount + held_delta)
        rows[adjust_index] = SettlementAllocation(
            participant_id=row.participant_id,
            participant_name=row.participant_name,
            participant_bill_account=row.participant_bill_account,
            ratio=row.ratio,
            amount=row.amount,
            account_held_amount=account_held,
            actual_transfer_amount=round2(row.amount - account_held),
            note=row.note,
        )
    return rows


class AllocationEngine:
    """Build per-participant allocations for a settlement."""

    def __init__(self, db: "Database", account_net: AccountNetResolver):
        """Initialize the allocation engine.

        Args:
            db: Database instance
            account_net: Callable returning the life-to-date settlement net of
                a single bill account for a strategy and settlement time
        """
        self.db = db
        self.account_net = account_net

    def build_allocations(
        self,
        participants: Sequence[Participant],
        cumulative_base_amount: Decimal,
        batch_base_amount: Decimal,
        settlement_time: datetime,
        strategy: SettlementStrategy,
        bill_account: str,
    ) -> tuple[SettlementAllocation, ...]:
        """Build allocation rows for one batch.

        Args:
            participants: Participants in stable order
            cumulative_base_amount: Cumulative settled total after this batch
            batch_base_amount: Amount paid out by this batch
            settlement_time: Settlement cut-off time
            strategy: Settlement strategy of the batch
            bill_account: Batch scope ("" for all accounts)
        """
        if not participants:
            return ()

        contributions = {
            account: self.account_net(strategy, settlement_time, account)
            for account in bound_accounts(participants)
        }
        held_targets = scale_account_contributions(contributions, cumulative_base_amount)
        previous_sums = sum_previous_allocations(
            self.db.list_scope_allocations(strategy, bill_account)
        )
        rows = build_allocation_rows(participants, batch_base_amount, held_targets, previous_sums)
        logger.debug(
            "Allocated %s across %d participants (%d bound accounts)",
            batch_base_amount,
            len(rows),
            len(contributions),
        )
        return tuple(rows)
