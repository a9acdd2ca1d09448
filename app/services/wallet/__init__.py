"""
Wallet services.

Balance mutation primitive and withdrawal pool allocation.
"""

from app.services.wallet.allocation import (
    WithdrawalAllocation,
    allocate_withdrawal,
)
from app.services.wallet.ledger import WalletLedger, WithdrawalDebit

__all__ = [
    "WalletLedger",
    "WithdrawalAllocation",
    "WithdrawalDebit",
    "allocate_withdrawal",
]
