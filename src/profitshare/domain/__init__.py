"""Domain layer for profitshare."""

from profitshare.domain.transaction import TransactionService
from profitshare.domain.participant import ParticipantService
from profitshare.domain.profit import ProfitService
from profitshare.domain.settlement import SettlementService

__all__ = [
    "TransactionService",
    "ParticipantService",
    "ProfitService",
    "SettlementService",
]
