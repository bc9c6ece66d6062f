"""Boundary serialization for settlement results.

Amounts are rendered as strings with exactly two decimals, ratios with six,
timestamps as ISO-8601 strings. Floats never cross the boundary.
"""

from typing import Any

from profitshare.domain.entities import (
    ProfitSummary,
    SettlementAllocation,
    SettlementBatch,
    SettlementPreview,
)
from profitshare.domain.errors import ValidationError
from profitshare.utils.money import format_amount, format_ratio

REQUIRED_PREVIEW_FIELDS = (
    "strategy",
    "billAccount",
    "settlementTime",
    "carryRatio",
    "periodNetAmount",
    "previousCarryForwardAmount",
    "cumulativeNetAmount",
    "settledBaseAmount",
    "distributableAmount",
    "paidAmount",
    "carryForwardAmount",
    "cumulativeSettledAmount",
    "allocationBaseAmount",
    "allocations",
)


def allocation_to_dict(allocation: SettlementAllocation) -> dict[str, Any]:
    """Serialize one allocation row."""
    return {
        "participantId": allocation.participant_id,
        "participantName": allocation.participant_name,
        "participantBillAccount": allocation.participant_bill_account,
        "ratio": format_ratio(allocation.ratio),
        "amount": format_amount(allocation.amount),
        "accountHeldAmount": format_amount(allocation.account_held_amount),
        "actualTransferAmount": format_amount(allocation.actual_transfer_amount),
        "note": allocation.note,
    }


def preview_to_dict(preview: SettlementPreview) -> dict[str, Any]:
    """Serialize a settlement preview."""
    return {
        "strategy": preview.strategy.value,
        "billAccount": preview.bill_account,
        "settlementTime": preview.settlement_time.isoformat(),
        "carryRatio": format_amount(preview.carry_ratio),
        "periodNetAmount": format_amount(preview.period_net_amount),
        "previousCarryForwardAmount": format_amount(preview.previous_carry_forward_amount),
        "cumulativeNetAmount": format_amount(preview.cumulative_net_amount),
        "settledBaseAmount": format_amount(preview.settled_base_amount),
        "distributableAmount": format_amount(preview.distributable_amount),
        "paidAmount": format_amount(preview.paid_amount),
        "carryForwardAmount": format_amount(preview.carry_forward_amount),
        "cumulativeSettledAmount": format_amount(preview.cumulative_settled_amount),
        "effectiveBatchId": preview.effective_batch_id,
        "effectiveBatchNo": preview.effective_batch_no,
        "allocationBaseAmount": format_amount(preview.allocation_base_amount),
        "allocations": [allocation_to_dict(a) for a in preview.allocations],
    }


def batch_to_dict(batch: SettlementBatch, include_allocations: bool = True) -> dict[str, Any]:
    """Serialize a persisted settlement batch."""
    payload: dict[str, Any] = {
        "id": batch.id,
        "batchNo": batch.batch_no,
        "strategy": batch.strategy.value,
        "billAccount": batch.bill_account,
        "settlementTime": batch.settlement_time.isoformat(),
        "carryRatio": format_amount(batch.carry_ratio),
        "periodNetAmount": format_amount(batch.period_net_amount),
        "previousCarryForwardAmount": format_amount(batch.previous_carry_forward_amount),
        "cumulativeNetAmount": format_amount(batch.cumulative_net_amount),
        "settledBaseAmount": format_amount(batch.settled_base_amount),
        "distributableAmount": format_amount(batch.distributable_amount),
        "paidAmount": format_amount(batch.paid_amount),
        "carryForwardAmount": format_amount(batch.carry_forward_amount),
        "cumulativeSettledAmount": format_amount(batch.cumulative_settled_amount),
        "note": batch.note,
        "isEffective": batch.is_effective,
        "createdAt": batch.created_at.isoformat(),
    }
    if include_allocations:
        payload["allocations"] = [allocation_to_dict(a) for a in batch.allocations]
    return payload


def profit_summary_to_dict(summary: ProfitSummary) -> dict[str, str]:
    """Serialize a profit summary."""
    return {
        "settledIncome": format_amount(summary.settled_income),
        "pendingIncome": format_amount(summary.pending_income),
        "expense": format_amount(summary.expense),
        "trafficCost": format_amount(summary.traffic_cost),
        "platformCommission": format_amount(summary.platform_commission),
        "closedAmount": format_amount(summary.closed_amount),
        "closedIncome": format_amount(summary.closed_income),
        "closedExpense": format_amount(summary.closed_expense),
        "closedNeutral": format_amount(summary.closed_neutral),
        "refundExpense": format_amount(summary.refund_expense),
        "pureProfitSettled": format_amount(summary.pure_profit_settled),
        "pureProfitWithPending": format_amount(summary.pure_profit_with_pending),
        "settlementNet": format_amount(summary.settlement_net),
    }


def validate_preview_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Reject a preview payload that lacks a required field."""
    missing = [key for key in REQUIRED_PREVIEW_FIELDS if payload.get(key) is None]
    if missing:
        raise ValidationError(f"Settlement preview is missing fields: {', '.join(missing)}")
    return payload
