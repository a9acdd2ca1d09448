"""
Model enums.

String enums stored in String columns across the schema.
"""

from enum import StrEnum


class TransactionType(StrEnum):
    """Balance-affecting event types recorded in the audit trail."""

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    REFERRAL_BONUS = "REFERRAL_BONUS"
    WALLET_GROWTH = "WALLET_GROWTH"
    VIP_EARNINGS = "VIP_EARNINGS"
    VIP_PAYMENT = "VIP_PAYMENT"
    ADMIN_ADJUSTMENT = "ADMIN_ADJUSTMENT"


class SessionStatus(StrEnum):
    """Earning session status."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class DepositStatus(StrEnum):
    """Deposit status."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"


class WithdrawalStatus(StrEnum):
    """Withdrawal request status."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
