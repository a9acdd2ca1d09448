"""
Deposit services module.

- service: Deposit creation, confirmation, rejection and oracle verification
- detection: Lifecycle-managed automatic deposit detection
"""

from app.services.deposit.detection import (
    DepositDetectionWorker,
    DetectionResult,
)
from app.services.deposit.service import DepositService, DepositVerification


__all__ = [
    "DepositDetectionWorker",
    "DepositService",
    "DepositVerification",
    "DetectionResult",
]
