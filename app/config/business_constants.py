"""
Business logic constants.

Central location for business rules and constants used across the application.
This module can be imported by both app.services and jobs without circular dependencies.
"""

from datetime import timedelta
from decimal import Decimal

from app.models.enums import TransactionType


# Money precision: 8 decimal places, same as DECIMAL(18, 8) columns
MONEY_QUANT = Decimal("0.00000001")

# Referral program: three levels above the paying user
REFERRAL_DEPTH = 3
REFERRAL_RATES = {
    1: Decimal("0.10"),  # 10% for level 1 (direct referrer)
    2: Decimal("0.05"),  # 5% for level 2
    3: Decimal("0.02"),  # 2% for level 3
}

# Referral views: downline depth is separate from the bonus depth
REFERRAL_TREE_DEFAULT_DEPTH = 3
REFERRAL_TREE_MAX_DEPTH = 5
REFERRAL_BONUS_PAGE_LIMIT = 50

# Earning sessions
TASK_SESSION_DURATION = timedelta(hours=1)
VIP_SESSION_DURATION = timedelta(hours=24)
SESSION_COOLDOWN = timedelta(hours=24)
EARNING_HISTORY_LIMIT = 30

# Ledger: types allowed to absorb a shortfall by clamping balance at zero
CLAMPING_TRANSACTION_TYPES = frozenset({TransactionType.WITHDRAWAL})

# Transaction types that make up the withdrawable pools
WITHDRAWABLE_TRANSACTION_TYPES = (
    TransactionType.VIP_EARNINGS,
    TransactionType.REFERRAL_BONUS,
)

# Deposit verification tolerance (absolute, in token units)
DEPOSIT_AMOUNT_TOLERANCE = Decimal("0.01")

# Supported currencies / networks
SUPPORTED_CURRENCIES = ("USDT", "USDC", "BTC", "USDT_USDC")
SUPPORTED_NETWORKS = ("BEP20", "ERC20", "POLYGON", "TRC20", "ARBITRUM", "OPTIMISM")


# Default VIP catalog (name, entry price, daily earning)
DEFAULT_VIP_LEVELS = [
    {
        "name": "Starter",
        "amount": Decimal("30"),
        "daily_earning": Decimal("2"),
        "bicycle_model": "City Cruiser Basic",
        "bicycle_color": "Blue",
        "bicycle_features": "Comfortable seat, basic gears, city tires",
    },
    {
        "name": "Bronze",
        "amount": Decimal("180"),
        "daily_earning": Decimal("10"),
        "bicycle_model": "Mountain Explorer",
        "bicycle_color": "Green",
        "bicycle_features": "Shock absorbers, 21-speed gears, off-road tires",
    },
    {
        "name": "Silver",
        "amount": Decimal("400"),
        "daily_earning": Decimal("24"),
        "bicycle_model": "Road Racer Pro",
        "bicycle_color": "Red",
        "bicycle_features": "Lightweight frame, racing gears, performance tires",
    },
    {
        "name": "Gold",
        "amount": Decimal("1000"),
        "daily_earning": Decimal("50"),
        "bicycle_model": "Electric Commuter",
        "bicycle_color": "Black",
        "bicycle_features": "Electric motor, battery pack, LED lights, GPS tracker",
    },
    {
        "name": "Platinum",
        "amount": Decimal("1500"),
        "daily_earning": Decimal("65"),
        "bicycle_model": "Hybrid Adventure",
        "bicycle_color": "Silver",
        "bicycle_features": "Electric assist, suspension, cargo rack, smartphone holder",
    },
    {
        "name": "Diamond",
        "amount": Decimal("2000"),
        "daily_earning": Decimal("75"),
        "bicycle_model": "Carbon Fiber Elite",
        "bicycle_color": "Carbon Black",
        "bicycle_features": "Carbon fiber frame, wireless shifting, power meter",
    },
    {
        "name": "Elite",
        "amount": Decimal("5000"),
        "daily_earning": Decimal("200"),
        "bicycle_model": "Smart E-Bike Premium",
        "bicycle_color": "Titanium",
        "bicycle_features": "AI navigation, solar charging, biometric sensors",
    },
    {
        "name": "Master",
        "amount": Decimal("6000"),
        "daily_earning": Decimal("250"),
        "bicycle_model": "Custom Performance",
        "bicycle_color": "Custom Paint",
        "bicycle_features": "Handcrafted frame, premium components, professional fitting",
    },
    {
        "name": "Legend",
        "amount": Decimal("12000"),
        "daily_earning": Decimal("500"),
        "bicycle_model": "Luxury Touring",
        "bicycle_color": "Gold Plated",
        "bicycle_features": "Luxury materials, built-in entertainment, climate control",
    },
    {
        "name": "Supreme",
        "amount": Decimal("25000"),
        "daily_earning": Decimal("800"),
        "bicycle_model": "Ultimate Dream Bike",
        "bicycle_color": "Diamond Encrusted",
        "bicycle_features": "Exclusive design, rare materials, lifetime warranty",
    },
]


def quantize_money(amount: Decimal) -> Decimal:
    """
    Round amount to the money precision used by the ledger.

    Args:
        amount: Raw amount

    Returns:
        Amount rounded to 8 decimal places
    """
    return Decimal(amount).quantize(MONEY_QUANT)
