"""Exponential backoff helpers.

The submission pipeline retries with an explicit loop and attempt counter;
this module only computes the delays so every caller shares one policy.
"""


def backoff_delay(
    attempt: int,
    base_delay: float = 1.0,
    factor: float = 2.0,
    max_delay: float = 5.0,
) -> float:
    """Delay to wait after failed attempt number ``attempt`` (1-based).

    Example:
        >>> [backoff_delay(n) for n in (1, 2, 3, 4)]
        [1.0, 2.0, 4.0, 5.0]
    """
    if attempt < 1:
        raise ValueError("attempt is 1-based")
    return min(base_delay * (factor ** (attempt - 1)), max_delay)

