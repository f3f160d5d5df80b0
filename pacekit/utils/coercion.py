import math
from numbers import Real


def to_int_non_neg(value: Real) -> int:
    """Coerce a real number to a non-negative integer.

    Truncates toward zero, clamps negatives to 0 and maps NaN/infinity to 0.

    Args:
        value: Any real number (int, float, Fraction, ...).

    Returns:
        int: Normalized value, always >= 0.
    """
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    n = int(value)
    return n if n > 0 else 0
