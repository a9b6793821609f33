import math
import re
import time
from numbers import Real
from typing import Any


def slugify_label(label: str) -> str:
    """Derive a stat id from its label.

    Args:
        label: Human readable stat label

    Returns:
        Lower-cased label with whitespace runs replaced by underscores
    """
    return re.sub(r"\s+", "_", label.strip().lower())


def new_entity_id(prefix: str = "new") -> str:
    """Build a placeholder id for an entity created through the admin path."""
    return f"{prefix}-{int(time.time() * 1000)}"


def is_number(value: Any) -> bool:
    """Check for a real number, excluding booleans."""
    return isinstance(value, Real) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    """Check for a real number that is neither NaN nor infinite."""
    return is_number(value) and math.isfinite(value)


def coerce_number(value: Any, default: float = 0) -> float:
    """Read a stored numeric value, keeping ints as ints.

    Args:
        value: Raw value from the shared document
        default: Value used when the input cannot be read as a finite number

    Returns:
        The number, or ``default``
    """
    if is_finite_number(value):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default
