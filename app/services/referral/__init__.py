"""
Referral services package.

Contains modular services for referral processing:
- config: Configuration constants (REFERRAL_DEPTH, REFERRAL_RATES)
- chain_manager: Bounded referral chain walk and referrer assignment
- statistics: Referral counts and bonus totals
- query_manager: Bonus history and downline tree views
- referral_reward_processor: Multi-level bonus engine
- referral_notifications: Handles notifications
"""

from app.services.referral.chain_manager import ChainLink, ReferralChainManager
from app.services.referral.config import (
    REFERRAL_DEPTH,
    REFERRAL_RATES,
    calculate_level_bonus,
)
from app.services.referral.query_manager import (
    ReferralQueryManager,
    ReferralTreeNode,
)
from app.services.referral.referral_reward_processor import (
    BonusResult,
    ReferralRewardProcessor,
    SourceKind,
)
from app.services.referral.statistics import ReferralStatisticsManager


__all__ = [
    # Configuration
    "REFERRAL_DEPTH",
    "REFERRAL_RATES",
    "calculate_level_bonus",
    # Managers
    "ChainLink",
    "ReferralChainManager",
    "ReferralQueryManager",
    "ReferralStatisticsManager",
    "ReferralTreeNode",
    # Reward processing
    "BonusResult",
    "ReferralRewardProcessor",
    "SourceKind",
]
