"""
Lenient numeric coercion for raw form input.

parse_float/parse_int read the leading number of the input ('24 months' -> 24) and fall back
to 0 when there is none; real numeric validation happens earlier, in the validation engine.
The strict variants are for drafts, where input that is not a clean number must stay blank.
"""
import math
import re
from typing import Any, Optional

_FLOAT_PREFIX_RE = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INT_PREFIX_RE = re.compile(r"^[+-]?[0-9]+")


def _text(raw: Any) -> str:
    return str(raw).strip() if raw is not None else ""


def parse_float(raw: Any) -> float:
    """'12500.50' -> 12500.5, '12abc' -> 12.0, '' -> 0.0, 'abc' -> 0.0."""
    match = _FLOAT_PREFIX_RE.match(_text(raw))
    if not match:
        return 0.0
    value = float(match.group())
    return value if math.isfinite(value) else 0.0


def parse_int(raw: Any) -> int:
    """'24' -> 24, '24.9' -> 24, '24 months' -> 24, '' -> 0, 'abc' -> 0."""
    match = _INT_PREFIX_RE.match(_text(raw))
    return int(match.group()) if match else 0


def strict_float(raw: Any) -> Optional[float]:
    """The number when the whole input is one ('12500.50' -> 12500.5), else None."""
    text = _text(raw)
    if not text.isascii():
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def strict_int(raw: Any) -> Optional[int]:
    """The integer when the whole input is one ('24' -> 24), else None ('24.9', '')."""
    text = _text(raw)
    if not _INT_PREFIX_RE.fullmatch(text):
        return None
    return int(text)


def format_number(value: Any) -> str:
    """Render a stored number back into form input ('12500.5', '24', '0'); NULL is blank."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
