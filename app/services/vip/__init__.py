"""
VIP services package.
"""

from app.services.vip.pricing import calculate_upgrade_payment
from app.services.vip.vip_service import PurchaseResult, VipService

__all__ = ["PurchaseResult", "VipService", "calculate_upgrade_payment"]
