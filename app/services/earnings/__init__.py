"""
Earning session services package.

- calculator: Pure progress, proration and cooldown calculations
- session_service: Session lifecycle (start, complete, stop, status)
- scheduler: In-process timers and periodic sweep
"""

from app.services.earnings.calculator import (
    SessionProgress,
    calculate_progress,
    calculate_prorated_earnings,
    cooldown_remaining,
)
from app.services.earnings.scheduler import SessionCompletionScheduler
from app.services.earnings.session_service import (
    CompletionResult,
    EarningSessionService,
    SessionProfile,
    SessionStatusView,
    SweepResult,
)

__all__ = [
    "CompletionResult",
    "EarningSessionService",
    "SessionCompletionScheduler",
    "SessionProfile",
    "SessionProgress",
    "SessionStatusView",
    "SweepResult",
    "calculate_progress",
    "calculate_prorated_earnings",
    "cooldown_remaining",
]
