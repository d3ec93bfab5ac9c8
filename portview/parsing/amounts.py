"""
Amount parsing for broker ledger cells and statement tokens.
"""
import math
import numbers
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

# Regular whitespace plus figure space and narrow no-break space, which the
# broker export uses to pad blank cells.
_BLANK_CHARS = re.compile(r"[\s\u2007\u202f]")
_PUNCTUATION = re.compile(r"[(),]")


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parses a raw cell/token into a signed Decimal.

    Examples:
        "(1,234.56)" -> Decimal("-1234.56")
        "1,000"      -> Decimal("1000")
        1000         -> Decimal("1000")
        "-", "", None -> None

    Never raises; None is the only failure signal.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        return value if value.is_finite() else None

    if isinstance(value, numbers.Integral):
        return Decimal(int(value))

    if isinstance(value, numbers.Real):
        if not math.isfinite(value):
            return None
        return Decimal(str(float(value)))

    raw = str(value).strip()
    if not raw:
        return None

    compact = _BLANK_CHARS.sub("", raw)
    if not compact or compact == "-":
        return None

    is_paren_negative = compact.startswith("(") and compact.endswith(")")
    stripped = _PUNCTUATION.sub("", compact)
    if not stripped:
        return None

    try:
        number = Decimal(stripped)
    except InvalidOperation:
        return None

    if not number.is_finite():
        return None

    return -number if is_paren_negative else number
