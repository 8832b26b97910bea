"""Retry delay used while no media player can be found."""

# Number of attempts after which the delay stops growing
MAX_TRIES = 16


def retry_delay(min_delay: float, max_delay: float, tries: int) -> float:
    """Linear ramp from *min_delay* (0 tries) to *max_delay* (MAX_TRIES and up)."""
    t = min(max(tries, 0), MAX_TRIES) / MAX_TRIES
    return min_delay + t * (max_delay - min_delay)
