"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.base import Base
from app.models.deposit import Deposit

# Reward Models
from app.models.earnings_session import EarningsSession
from app.models.enums import (
    DepositStatus,
    SessionStatus,
    TransactionType,
    WithdrawalStatus,
)
from app.models.referral_bonus import ReferralBonus
from app.models.transaction import Transaction

# Core Models
from app.models.user import User
from app.models.user_vip import UserVip
from app.models.vip_level import VipLevel
from app.models.wallet import Wallet
from app.models.withdrawal import Withdrawal

__all__ = [
    # Base
    "Base",
    # Enums
    "DepositStatus",
    "SessionStatus",
    "TransactionType",
    "WithdrawalStatus",
    # Core Models
    "User",
    "Wallet",
    "Transaction",
    "Deposit",
    "Withdrawal",
    # VIP Models
    "VipLevel",
    "UserVip",
    # Reward Models
    "EarningsSession",
    "ReferralBonus",
]
