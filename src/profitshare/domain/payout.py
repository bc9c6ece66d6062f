"""Payout calculation for settlement batches."""

from decimal import Decimal
from typing import Optional

from profitshare.domain.entities import PayoutAmounts
from profitshare.utils.money import round2, to_decimal, truncate2

CARRY_RATIO_MIN = Decimal("0.00")
CARRY_RATIO_MAX = Decimal("1.00")


def clamp_carry_ratio(value=None) -> Decimal:
    """Clamp a carry ratio into [0, 1] and truncate it to two decimals.

    Missing or non-numeric input becomes 0. Out-of-range input is
    corrected, never rejected.
    """
    if value is None:
        return CARRY_RATIO_MIN
    try:
        ratio = to_decimal(value)
    except ArithmeticError:
        return CARRY_RATIO_MIN
    if ratio.is_nan():
        return CARRY_RATIO_MIN
    if ratio < 0:
        return CARRY_RATIO_MIN
    if ratio > 1:
        return CARRY_RATIO_MAX
    return truncate2(ratio)


def calculate_payout(
    cumulative_net_amount: Decimal,
    settled_base_amount: Decimal,
    carry_ratio: Optional[Decimal] = None,
) -> PayoutAmounts:
    """Turn a cumulative net and the settled base into payout figures.

    A positive distributable amount is split into a withheld carry and a
    paid remainder. A negative distributable amount is a deficit: nothing
    is paid and its magnitude is carried forward.
    """
    safe_carry_ratio = clamp_carry_ratio(carry_ratio)
    settled_base_amount = round2(settled_base_amount)
    distributable_amount = round2(round2(cumulative_net_amount) - settled_base_amount)

    paid_amount = round2(0)
    carry_forward_amount = round2(0)
    if distributable_amount > 0:
        carry_forward_amount = round2(distributable_amount * safe_carry_ratio)
        paid_amount = round2(distributable_amount - carry_forward_amount)
    elif distributable_amount < 0:
        carry_forward_amount = round2(abs(distributable_amount))

    return PayoutAmounts(
        distributable_amount=distributable_amount,
        paid_amount=paid_amount,
        carry_forward_amount=carry_forward_amount,
        cumulative_settled_amount=round2(settled_base_amount + paid_amount),
    )
