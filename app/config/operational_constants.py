"""
Operational constants.

Technical/operational constants used across the application.
Includes timeouts, polling intervals and Dramatiq time limits.
"""

# =============================================================================
# EXTERNAL HTTP (seconds)
# =============================================================================

# Block explorer / RPC lookups. A timed-out lookup counts as "not found".
EXPLORER_TIMEOUT_SECONDS = 10.0

# Telegram send timeout for notifications
NOTIFICATION_SEND_TIMEOUT_SECONDS = 10.0


# =============================================================================
# BACKGROUND INTERVALS (seconds)
# =============================================================================

# Sweep for ACTIVE sessions past their expected end time
SESSION_SWEEP_INTERVAL_SECONDS = 300

# Automatic deposit detection pass over PENDING deposits
DEPOSIT_DETECTION_INTERVAL_SECONDS = 60

# Maximum pending deposits verified per detection pass
DEPOSIT_DETECTION_BATCH_SIZE = 50


# =============================================================================
# DRAMATIQ TASK TIME LIMITS (milliseconds)
# =============================================================================

# Short tasks (1 minute) - session sweep
DRAMATIQ_TIME_LIMIT_SHORT = 60_000

# Medium tasks (2 minutes) - deposit detection with explorer lookups
DRAMATIQ_TIME_LIMIT_MEDIUM = 120_000

# Default retry count for background jobs
DEFAULT_MAX_RETRIES = 3


# =============================================================================
# DISTRIBUTED LOCKS (seconds)
# =============================================================================

# Redis lock expiry, matching the task time limits above
SESSION_SWEEP_LOCK_SECONDS = DRAMATIQ_TIME_LIMIT_SHORT // 1000
DEPOSIT_DETECTION_LOCK_SECONDS = DRAMATIQ_TIME_LIMIT_MEDIUM // 1000
