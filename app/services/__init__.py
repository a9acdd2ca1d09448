"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from app.services.base_service import (
    BaseService,
    ServiceResult,
    log_operation,
    service_result,
    transaction,
)

# Core Engines
from app.services.deposit import DepositDetectionWorker, DepositService
from app.services.earnings import (
    EarningSessionService,
    SessionCompletionScheduler,
    SessionProfile,
)
from app.services.notification import (
    NotificationDispatcher,
    TelegramNotificationSender,
)
from app.services.oracle import ExplorerTransactionOracle
from app.services.referral import (
    ReferralChainManager,
    ReferralRewardProcessor,
    ReferralStatisticsManager,
)
from app.services.vip import VipService
from app.services.wallet import WalletLedger
from app.services.withdrawal import WithdrawalService

# Boundary Facade
from app.services.platform_service import PlatformService


__all__ = [
    # Base Infrastructure
    "BaseService",
    "ServiceResult",
    "log_operation",
    "service_result",
    "transaction",
    # Engines
    "DepositDetectionWorker",
    "DepositService",
    "EarningSessionService",
    "ExplorerTransactionOracle",
    "NotificationDispatcher",
    "ReferralChainManager",
    "ReferralRewardProcessor",
    "ReferralStatisticsManager",
    "SessionCompletionScheduler",
    "SessionProfile",
    "TelegramNotificationSender",
    "VipService",
    "WalletLedger",
    "WithdrawalService",
    # Facade
    "PlatformService",
]
