"""Profit policy settings."""

import os
from dataclasses import dataclass
from typing import Optional

INCLUDE_CLOSED_ENV = "PROFITSHARE_INCLUDE_CLOSED_IN_PROFIT"
DEDUCT_REFUND_ENV = "PROFITSHARE_DEDUCT_REFUND_IN_REPORT"

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def parse_bool(value: Optional[str], default: bool) -> bool:
    """Parse a boolean flag, falling back to ``default`` for unknown input."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    return default


@dataclass(frozen=True)
class ProfitPolicy:
    """Aggregation policy threaded through every profit computation.

    Attributes:
        include_closed_in_profit: Fold the closed-category net (income minus
            expense) into pure profit and settlement nets.
        deduct_refund_in_report: Subtract refund expense from the report
            pure-profit figures. Settlement nets always subtract it.
    """

    include_closed_in_profit: bool = True
    deduct_refund_in_report: bool = False

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ProfitPolicy":
        """Build the policy from environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            include_closed_in_profit=parse_bool(env.get(INCLUDE_CLOSED_ENV), True),
            deduct_refund_in_report=parse_bool(env.get(DEDUCT_REFUND_ENV), False),
        )


__all__ = ["ProfitPolicy", "parse_bool"]
