"""
Earning session calculator.

Pure time and amount calculations for earning sessions. No database access,
every function takes the reference time explicitly.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

from app.config.business_constants import SESSION_COOLDOWN, quantize_money


@dataclass(frozen=True)
class SessionProgress:
    """Display-only progress of an ACTIVE session."""

    elapsed: timedelta
    remaining: timedelta
    progress: Decimal
    current_earnings: Decimal


def _fraction(elapsed: timedelta, duration: timedelta) -> Decimal:
    if duration.total_seconds() <= 0:
        return Decimal("1")
    ratio = Decimal(str(elapsed.total_seconds())) / Decimal(
        str(duration.total_seconds())
    )
    return min(Decimal("1"), max(Decimal("0"), ratio))


def calculate_progress(
    start_time: datetime,
    expected_end_time: datetime,
    rate: Decimal,
    now: datetime,
) -> SessionProgress:
    """
    Linear progress of a session at `now`.

    current_earnings = (elapsed / duration) * rate, capped at rate. This is
    what the status view shows; completion always credits the full rate.

    Args:
        start_time: Session start
        expected_end_time: Planned end
        rate: Rate snapshot taken at start
        now: Reference time

    Returns:
        SessionProgress
    """
    duration = expected_end_time - start_time
    elapsed = min(max(now - start_time, timedelta(0)), duration)
    remaining = max(expected_end_time - now, timedelta(0))
    fraction = _fraction(elapsed, duration)

    return SessionProgress(
        elapsed=elapsed,
        remaining=remaining,
        progress=fraction,
        current_earnings=quantize_money(fraction * Decimal(rate)),
    )


def calculate_prorated_earnings(
    start_time: datetime,
    expected_end_time: datetime,
    rate: Decimal,
    stopped_at: datetime,
) -> Decimal:
    """
    Amount credited when a session is stopped before its planned end.

    Args:
        start_time: Session start
        expected_end_time: Planned end
        rate: Rate snapshot taken at start
        stopped_at: When the session was stopped

    Returns:
        (elapsed / duration) * rate, between 0 and rate
    """
    return calculate_progress(
        start_time, expected_end_time, rate, stopped_at
    ).current_earnings


def cooldown_remaining(
    last_completed_at: datetime | None,
    now: datetime,
    cooldown: timedelta = SESSION_COOLDOWN,
) -> timedelta:
    """
    Time left before a new session may start.

    A session may start once now - last_completed_at >= cooldown.

    Args:
        last_completed_at: actual_end_time of the last COMPLETED session
        now: Reference time
        cooldown: Cooldown window

    Returns:
        Remaining cooldown, timedelta(0) when a session may start
    """
    if last_completed_at is None:
        return timedelta(0)
    return max(last_completed_at + cooldown - now, timedelta(0))
