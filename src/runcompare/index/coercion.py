"""
Numeric coercion of record fields.

Both helpers return ``None`` when the text is not a usable number. Callers
must treat ``None`` as "drop this row"; it is never substituted with zero.
"""

import math
from typing import Optional, Union

Step = Union[int, float]


def _parse_float(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    s = text.strip()
    # float() accepts digit separators such as "1_000"; table exports never mean that
    if not s or '_' in s:
        return None
    try:
        result = float(s)
    except ValueError:
        return None
    if not math.isfinite(result):
        return None
    return result


def coerce_value(text: Optional[str]) -> Optional[float]:
    """
    Coerce a value cell to ``float``.

    Returns:
        The parsed value, or ``None`` for blank, non-numeric, NaN or
        infinite text

    Example:
        >>> coerce_value(" 0.5 ")
        0.5
        >>> coerce_value("n/a") is None
        True
    """
    return _parse_float(text)


def coerce_step(text: Optional[str], integer_steps: bool = True) -> Optional[Step]:
    """
    Coerce a step cell to a number.

    Integral text (``"3"``, ``"3.0"``, ``"1e3"``) becomes ``int``. Text with a
    fractional part is rejected when ``integer_steps`` is True and kept as
    ``float`` otherwise.

    Args:
        text: Raw step cell
        integer_steps: Whether fractional steps are invalid

    Returns:
        The parsed step, or ``None`` when the row must be dropped
    """
    if text is None:
        return None
    s = text.strip()
    if s and '_' not in s:
        try:
            # Exact for integers beyond float precision
            return int(s)
        except ValueError:
            pass

    result = _parse_float(text)
    if result is None:
        return None
    if result.is_integer():
        return int(result)
    if integer_steps:
        return None
    return result


__all__ = ["Step", "coerce_step", "coerce_value"]
