"""
Exponential backoff between fetch attempts.

Attempt ``n`` (1-based, counting failures so far) waits
``base_seconds * 2 ** (n - 1)``: with the default 60 second base that is
1, 2 and 4 minutes for attempts 1, 2 and 3.
"""

from typing import List, Optional

from core.config import settings


def compute_backoff(attempt: int, base_seconds: Optional[float] = None) -> float:
    """Return the delay in seconds before retrying after failed attempt ``attempt``."""
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")

    base = settings.RETRY_BACKOFF_BASE_SECONDS if base_seconds is None else base_seconds
    return base * (2 ** (attempt - 1))


def backoff_schedule(max_retries: int, base_seconds: Optional[float] = None) -> List[float]:
    """All delays a job with ``max_retries`` may sleep through, in order."""
    return [compute_backoff(attempt, base_seconds) for attempt in range(1, max_retries + 1)]
