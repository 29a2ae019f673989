"""
Number Parsing Utility

Converts marketplace text (Brazilian currency and stock labels) to numbers,
e.g. "R$ 1.234,56" -> 1234.56 and "Estoque: 3 unidades" -> 3.
"""

import logging
import re

from monitoring.errors import ParseError

logger = logging.getLogger(__name__)

# Anything that is not a digit, a separator or a sign (currency symbols, spaces, nbsp)
_NON_NUMERIC = re.compile(r"[^0-9.,\-]")


def convert_brl_to_float(text):
    """
    Convert a Brazilian-formatted amount to a float.

    Thousands separators ('.') are dropped and the decimal comma becomes a point.

    Args:
        text (str): Amount such as "R$ 1.234,56"

    Returns:
        float: The parsed, non-negative amount

    Raises:
        ParseError: If the text does not hold a non-negative amount
    """
    cleaned = _NON_NUMERIC.sub("", text or "")
    cleaned = cleaned.replace(".", "").replace(",", ".")
    try:
        value = float(cleaned)
    except ValueError as e:
        raise ParseError(f"Invalid price text '{text}'") from e
    if value < 0:
        raise ParseError(f"Negative price text '{text}'")
    return value


def parse_price(text):
    """Parse a price label, falling back to 0.0 when it cannot be read."""
    try:
        return convert_brl_to_float(text)
    except ParseError as e:
        logger.debug(f"{e}; using 0.0")
        return 0.0


def parse_quantity(text):
    """
    Parse a stock label, returning the first whitespace-separated integer token.

    Falls back to 0 when no token is a non-negative integer.
    """
    for token in (text or "").split():
        try:
            value = int(token)
        except ValueError:
            continue
        if value >= 0:
            return value
    logger.debug(f"Invalid quantity text '{text}'; using 0")
    return 0
