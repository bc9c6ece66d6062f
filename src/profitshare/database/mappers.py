"""Mapper functions to convert between domain models and SQLAlchemy models.

Enumerated string columns are validated here, once, so that domain code
only ever sees typed records.
"""

from profitshare.domain import entities as domain
from profitshare.database.models import (
    Transaction as ORMTransaction,
    ProfitParticipant as ORMParticipant,
    SettlementBatch as ORMSettlementBatch,
    SettlementAllocation as ORMSettlementAllocation,
)
from profitshare.utils.money import round2, round6


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        transaction_time=orm_transaction.transaction_time,
        bill_account=orm_transaction.bill_account,
        category=domain.Category(orm_transaction.category),
        direction=domain.Direction(orm_transaction.direction),
        status=orm_transaction.status or "",
        amount=round2(orm_transaction.amount),
        internal_transfer=bool(orm_transaction.internal_transfer),
        order_id=orm_transaction.order_id or "",
        description=orm_transaction.description or "",
        incremental_settled_at=orm_transaction.incremental_settled_at,
        incremental_settlement_batch_id=orm_transaction.incremental_settlement_batch_id,
        created_at=orm_transaction.created_at,
    )


def participant_to_domain(orm_participant: ORMParticipant) -> domain.Participant:
    """Convert SQLAlchemy ProfitParticipant model to domain Participant entity."""
    return domain.Participant(
        id=orm_participant.id,
        name=orm_participant.name,
        bill_account=orm_participant.bill_account,
        ratio=round6(orm_participant.ratio),
        note=orm_participant.note or "",
        created_at=orm_participant.created_at,
        updated_at=orm_participant.updated_at,
    )


def allocation_to_domain(orm_allocation: ORMSettlementAllocation) -> domain.SettlementAllocation:
    """Convert SQLAlchemy SettlementAllocation model to domain entity."""
    return domain.SettlementAllocation(
        id=orm_allocation.id,
        settlement_batch_id=orm_allocation.settlement_batch_id,
        participant_id=orm_allocation.participant_id,
        participant_name=orm_allocation.participant_name,
        participant_bill_account=orm_allocation.participant_bill_account,
        ratio=round6(orm_allocation.ratio),
        amount=round2(orm_allocation.amount),
        account_held_amount=round2(orm_allocation.account_held_amount),
        actual_transfer_amount=round2(orm_allocation.actual_transfer_amount),
        note=orm_allocation.note or "",
    )


def settlement_batch_to_domain(
    orm_batch: ORMSettlementBatch, include_allocations: bool = True
) -> domain.SettlementBatch:
    """Convert SQLAlchemy SettlementBatch model to domain entity."""
    allocations: tuple[domain.SettlementAllocation, ...] = ()
    if include_allocations:
        allocations = tuple(allocation_to_domain(a) for a in orm_batch.allocations)
    return domain.SettlementBatch(
        id=orm_batch.id,
        batch_no=orm_batch.batch_no,
        strategy=domain.SettlementStrategy(orm_batch.strategy),
        bill_account=orm_batch.bill_account,
        settlement_time=orm_batch.settlement_time,
        carry_ratio=round2(orm_batch.carry_ratio),
        period_net_amount=round2(orm_batch.period_net_amount),
        previous_carry_forward_amount=round2(orm_batch.previous_carry_forward_amount),
        cumulative_net_amount=round2(orm_batch.cumulative_net_amount),
        settled_base_amount=round2(orm_batch.settled_base_amount),
        distributable_amount=round2(orm_batch.distributable_amount),
        paid_amount=round2(orm_batch.paid_amount),
        carry_forward_amount=round2(orm_batch.carry_forward_amount),
        cumulative_settled_amount=round2(orm_batch.cumulative_settled_amount),
        note=orm_batch.note or "",
        is_effective=bool(orm_batch.is_effective),
        created_at=orm_batch.created_at,
        allocations=allocations,
    )
