"""
Backoff utility.

Exponential retry delay used by the router's primary retry loop.
"""


def backoff_delay(attempt: int, base: float = 1.0) -> float:
    """
    Compute the delay to wait after a failed retry attempt.

    Args:
        attempt: 1-indexed attempt number that just failed
        base: Delay after the first attempt, in seconds

    Returns:
        base * 2^(attempt - 1) seconds (1s, 2s, 4s, ... for base=1.0)
    """
    if attempt < 1:
        raise ValueError(f"Invalid attempt: {attempt}. Attempts are 1-indexed")
    return base * (2 ** (attempt - 1))
