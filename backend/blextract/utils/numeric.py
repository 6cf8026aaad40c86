import math
import re

# 25.000,50 -> thousands with ".", decimals with ","
EUROPEAN_NUMBER = re.compile(r"^\d{1,3}(?:\.\d{3})+,\d+$")

# Larger than any plausible shipment, and well under the int() digit limit
MAX_COUNT_DIGITS = 12


def parse_numeric(raw: str) -> float:
    """
    Parse a number written with either locale convention.

    "25,000.50", "25.000,50" and "25 000.50" all give 25000.5. Anything that
    is not a finite, non-negative number gives 0.

    Args:
        raw: The numeral as captured from the transcript.

    Returns:
        float: The parsed value, or 0.
    """
    cleaned = re.sub(r"\s", "", raw or "")

    if EUROPEAN_NUMBER.match(cleaned):
        cleaned = cleaned.replace(".", "").replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")

    try:
        value = float(cleaned)
    except ValueError:
        return 0.0

    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def parse_count(raw: str) -> int:
    """Parse a package count such as "1140", "1,140" or "1.140"; 0 when absent or implausibly long."""
    digits = re.sub(r"[\s,.]", "", raw or "")
    if not digits.isdecimal() or len(digits) > MAX_COUNT_DIGITS:
        return 0
    return int(digits)
