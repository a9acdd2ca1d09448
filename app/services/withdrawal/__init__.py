"""
Withdrawal services package.

- withdrawal_service: Request, processing and rejection of withdrawals

Pool allocation lives in app.services.wallet.allocation.
"""

from app.services.withdrawal.withdrawal_service import WithdrawalService


__all__ = [
    "WithdrawalService",
]
